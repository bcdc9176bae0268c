"""Low level Google Drive HTTP client."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ...errors import ParseError
from ..categorize import GOOGLE_DOCUMENT_MIME_TYPE
from .fallback import failure_from_response, failure_from_transport

logger = logging.getLogger(__name__)

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"
DRIVE_FILES_ENDPOINT = "/files"
GOOGLE_SHEETS_MIME_TYPE = "application/vnd.google-apps.spreadsheet"
GOOGLE_SLIDES_MIME_TYPE = "application/vnd.google-apps.presentation"

LIST_FIELDS = "files(id,name,mimeType,webViewLink,thumbnailLink,createdTime,size)"
METADATA_FIELDS = "id,name,mimeType,webViewLink,createdTime,modifiedTime"

EXPORT_MIME_TYPES: Dict[str, str] = {
    GOOGLE_DOCUMENT_MIME_TYPE: "text/plain",
    GOOGLE_SHEETS_MIME_TYPE: "text/csv",
    GOOGLE_SLIDES_MIME_TYPE: "text/plain",
}


def is_downloadable_text(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type == "application/json"


@dataclass(frozen=True)
class DriveFileContent:
    content: Optional[str]
    mime_type: str


class GoogleDriveClient:
    """Single-shot Drive v3 calls authorised by a bearer access token.

    Calls are never retried. Failures surface as ``DriveError`` subclasses
    chosen from the response status.
    """

    def __init__(self, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    # HTTP plumbing -----------------------------------------------------
    async def drive_request(
        self,
        access_token: str,
        *,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        operation: str,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            async with httpx.AsyncClient(
                timeout=10.0, base_url=DRIVE_API_BASE, transport=self._transport
            ) as client:
                response = await client.get(path, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Google Drive %s request failed: %s", operation, exc)
            raise failure_from_transport(exc, operation=operation) from exc

        if response.is_error:
            logger.error(
                "Google Drive %s failed: %s -> %s",
                operation,
                response.status_code,
                response.text[:300],
            )
            raise failure_from_response(response, operation=operation)

        return response

    async def drive_json(
        self,
        access_token: str,
        *,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        operation: str,
    ) -> Dict[str, Any]:
        response = await self.drive_request(
            access_token, path=path, params=params, operation=operation
        )
        try:
            payload = response.json() if response.text else {}
        except ValueError as exc:
            logger.error("Google Drive %s returned a non-JSON body: %s", operation, response.text[:300])
            raise ParseError(f"{operation} returned a body that is not JSON.") from exc

        if not isinstance(payload, dict):
            logger.error("Unexpected Google Drive response type for %s: %s", operation, payload)
            raise ParseError(f"{operation} returned an unexpected response shape.")
        return payload

    # Listing -----------------------------------------------------------
    async def list_files(self, access_token: str, *, folder_id: str) -> List[Dict[str, Any]]:
        params = {
            "q": f"'{folder_id}' in parents and trashed = false",
            "fields": LIST_FIELDS,
            "orderBy": "createdTime desc",
            "pageSize": 1000,
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        data = await self.drive_json(
            access_token,
            path=DRIVE_FILES_ENDPOINT,
            params=params,
            operation="files.list",
        )

        files = data.get("files", [])
        if not isinstance(files, list):
            raise ParseError("files.list returned a 'files' value that is not a list.")
        return [entry for entry in files if isinstance(entry, dict)]

    async def get_file_metadata(self, access_token: str, *, file_id: str) -> Dict[str, Any]:
        data = await self.drive_json(
            access_token,
            path=f"{DRIVE_FILES_ENDPOINT}/{file_id}",
            params={"fields": METADATA_FIELDS, "supportsAllDrives": "true"},
            operation="files.get",
        )
        if not data.get("id"):
            raise ParseError("files.get returned metadata without an id.")
        return data

    # Content -----------------------------------------------------------
    async def export_file(self, access_token: str, *, file_id: str, export_mime_type: str) -> str:
        response = await self.drive_request(
            access_token,
            path=f"{DRIVE_FILES_ENDPOINT}/{file_id}/export",
            params={"mimeType": export_mime_type},
            operation="files.export",
        )
        return response.text

    async def download_file(self, access_token: str, *, file_id: str) -> str:
        response = await self.drive_request(
            access_token,
            path=f"{DRIVE_FILES_ENDPOINT}/{file_id}",
            params={"alt": "media", "supportsAllDrives": "true"},
            operation="files.download",
        )
        return response.text

    async def get_file_content(
        self,
        access_token: str,
        *,
        file_id: str,
        mime_type: str,
    ) -> DriveFileContent:
        """Fetch a file's text.

        Google native files are exported, text and JSON files are downloaded,
        and every other type yields ``content=None`` without a request.
        """

        export_mime_type = EXPORT_MIME_TYPES.get(mime_type)
        if export_mime_type:
            content = await self.export_file(
                access_token, file_id=file_id, export_mime_type=export_mime_type
            )
            return DriveFileContent(content=content, mime_type=export_mime_type)

        if is_downloadable_text(mime_type):
            content = await self.download_file(access_token, file_id=file_id)
            return DriveFileContent(content=content, mime_type=mime_type)

        return DriveFileContent(content=None, mime_type=mime_type)
