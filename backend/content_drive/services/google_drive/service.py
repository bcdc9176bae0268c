from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...config import Settings
from ...drive_store import DRIVE_FOLDER_URL, DriveFile, DriveStore
from ...errors import AuthError, DriveError, ErrorKind, InvalidReference
from ..backend_mode import BackendMode, extract_bearer_token, probe_backend_mode
from ..categorize import CategorizedFile, CategorizedFileSet, FileSource, build_file_set
from ..folder_reference import resolve_file_reference, resolve_folder_reference
from .client import GoogleDriveClient
from .fallback import permission_hint, should_fall_back
from .service_account import ServiceAccountCredentials

logger = logging.getLogger(__name__)

DRIVE_FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
NO_CREDENTIALS_REASON = "GOOGLE_SERVICE_ACCOUNT_EMAIL または GOOGLE_PRIVATE_KEY が未設定"


@dataclass
class DriveOutcome:
    """Result of one resolution request.

    ``source`` records provenance: live data, simulation data (optionally
    with the failure that caused the fallback), or an error.
    """

    mode: BackendMode
    source: FileSource
    body: Dict[str, Any] = field(default_factory=dict)
    error: Optional[DriveError] = None
    fallback_reason: Optional[str] = None
    success_status: int = 200

    @property
    def status_code(self) -> int:
        if self.source is FileSource.ERROR and self.error is not None:
            return self.error.status_code
        return self.success_status

    def to_dict(self) -> Dict[str, Any]:
        payload = dict(self.body)
        payload["source"] = self.source.value
        if self.fallback_reason:
            payload["fallback_reason"] = self.fallback_reason
        if self.error is not None:
            payload.update(self.error.to_dict())
        return payload


def _simulated_file(item: DriveFile) -> CategorizedFile:
    return CategorizedFile(
        id=item.id,
        name=item.name,
        mime_type=item.mime_type,
        category=item.category,
        web_view_link=item.url or None,
        created_time=item.created_at,
    )


class GoogleDriveService:
    """High level folder and file resolution across the three backend modes."""

    def __init__(
        self,
        settings: Settings,
        drive_store: DriveStore,
        *,
        client: Optional[GoogleDriveClient] = None,
        service_account: Optional[ServiceAccountCredentials] = None,
    ) -> None:
        self._settings = settings
        self._drive_store = drive_store
        self._client = client or GoogleDriveClient()
        self._service_account = service_account or ServiceAccountCredentials(settings)

    # Helpers -----------------------------------------------------------
    async def _access_token(self, mode: BackendMode, authorization: Optional[str]) -> str:
        if mode is BackendMode.OAUTH:
            token = extract_bearer_token(authorization)
            if not token:
                raise AuthError("Authorization header required", hint="Googleアカウントでログインしてください。")
            return token
        return await self._service_account.fetch_access_token()

    def _annotate(self, mode: BackendMode, exc: DriveError) -> DriveError:
        if exc.kind is ErrorKind.PERMISSION:
            exc.hint = permission_hint(mode, self._settings.service_account_email)
        return exc

    def _failed(self, mode: BackendMode, exc: DriveError) -> DriveOutcome:
        logger.error("Drive request in %s mode failed with %s: %s", mode.value, exc.kind.value, exc.message)
        return DriveOutcome(mode=mode, source=FileSource.ERROR, error=self._annotate(mode, exc))

    def simulated_file_set(self, folder_reference: str) -> CategorizedFileSet:
        folder = self._drive_store.find_folder(folder_reference)
        items: List[DriveFile] = self._drive_store.list_files(folder.id) if folder else []
        return CategorizedFileSet(
            files=[_simulated_file(item) for item in items],
            source=FileSource.SIMULATION,
        )

    # Listing -----------------------------------------------------------
    async def list_folder_files(
        self,
        *,
        folder_id: Optional[str] = None,
        folder_url: Optional[str] = None,
        authorization: Optional[str] = None,
    ) -> DriveOutcome:
        resolved = resolve_folder_reference(folder_id or folder_url)
        mode = probe_backend_mode(self._settings, authorization)
        logger.info("Listing folder %s via %s", resolved, mode.value)

        if mode is BackendMode.MOCK:
            return DriveOutcome(
                mode=mode,
                source=FileSource.SIMULATION,
                body=self.simulated_file_set(resolved).to_dict(),
                fallback_reason=NO_CREDENTIALS_REASON,
            )

        try:
            token = await self._access_token(mode, authorization)
            records = await self._client.list_files(token, folder_id=resolved)
        except DriveError as exc:
            if not should_fall_back(mode, exc.kind):
                return self._failed(mode, exc)
            logger.warning("Falling back to simulation data for folder %s: %s", resolved, exc.message)
            return DriveOutcome(
                mode=mode,
                source=FileSource.SIMULATION,
                body=self.simulated_file_set(resolved).to_dict(),
                error=self._annotate(mode, exc),
                fallback_reason=f"API呼び出し失敗: {exc.message}",
            )

        file_set = build_file_set(records, FileSource.GOOGLE_DRIVE)
        return DriveOutcome(mode=mode, source=FileSource.GOOGLE_DRIVE, body=file_set.to_dict())

    # Content -----------------------------------------------------------
    async def get_file_content(self, file_id: str, mime_type: Optional[str] = None) -> DriveOutcome:
        resolved = resolve_file_reference(file_id)
        requested_mime = mime_type or "text/plain"
        mode = probe_backend_mode(self._settings)

        def simulated(reason: str, error: Optional[DriveError] = None) -> DriveOutcome:
            return DriveOutcome(
                mode=mode,
                source=FileSource.SIMULATION,
                body={
                    "fileId": resolved,
                    "content": self._drive_store.mock_content(resolved, requested_mime),
                    "mimeType": "text/plain",
                },
                error=error,
                fallback_reason=reason,
            )

        if mode is BackendMode.MOCK:
            return simulated(NO_CREDENTIALS_REASON)

        try:
            token = await self._access_token(mode, None)
            result = await self._client.get_file_content(
                token, file_id=resolved, mime_type=requested_mime
            )
        except DriveError as exc:
            if not should_fall_back(mode, exc.kind):
                return self._failed(mode, exc)
            logger.warning("Falling back to simulation content for file %s: %s", resolved, exc.message)
            return simulated(f"API呼び出し失敗: {exc.message}", self._annotate(mode, exc))

        return DriveOutcome(
            mode=mode,
            source=FileSource.GOOGLE_DRIVE,
            body={"fileId": resolved, "content": result.content, "mimeType": result.mime_type},
        )

    async def get_user_file_content(self, file_id: str, authorization: Optional[str]) -> DriveOutcome:
        """Read a file with the caller's delegated token; failures are never masked."""

        resolved = resolve_file_reference(file_id)
        mode = BackendMode.OAUTH
        try:
            token = await self._access_token(mode, authorization)
            metadata = await self._client.get_file_metadata(token, file_id=resolved)
            result = await self._client.get_file_content(
                token,
                file_id=resolved,
                mime_type=str(metadata.get("mimeType") or ""),
            )
        except DriveError as exc:
            return self._failed(mode, exc)

        body: Dict[str, Any] = {
            "id": resolved,
            "name": metadata.get("name"),
            "mimeType": result.mime_type,
            "content": result.content,
        }
        if result.content is None:
            body["message"] = "Content not available for this file type"
        return DriveOutcome(mode=mode, source=FileSource.GOOGLE_DRIVE, body=body)

    # Folders -----------------------------------------------------------
    async def register_folder(
        self,
        url: Optional[str],
        name: Optional[str] = None,
        *,
        authorization: Optional[str] = None,
    ) -> DriveOutcome:
        drive_folder_id = resolve_folder_reference(url)
        folder_url = (url or "").strip()
        if folder_url == drive_folder_id:
            folder_url = DRIVE_FOLDER_URL.format(drive_folder_id)
        requested_name = (name or "").strip()
        mode = probe_backend_mode(self._settings, authorization)

        def register_simulated(reason: str, error: Optional[DriveError] = None) -> DriveOutcome:
            folder = self._drive_store.create_folder(
                requested_name or f"drive_{drive_folder_id}", folder_url
            )
            return DriveOutcome(
                mode=mode,
                source=FileSource.SIMULATION,
                body={"folder": folder.to_dict()},
                error=error,
                fallback_reason=reason,
                success_status=201,
            )

        if mode is BackendMode.MOCK:
            return register_simulated(NO_CREDENTIALS_REASON)

        try:
            token = await self._access_token(mode, authorization)
            metadata = await self._client.get_file_metadata(token, file_id=drive_folder_id)
        except DriveError as exc:
            if not should_fall_back(mode, exc.kind):
                return self._failed(mode, exc)
            logger.warning("Registering folder %s without verification: %s", drive_folder_id, exc.message)
            return register_simulated(f"API呼び出し失敗: {exc.message}", self._annotate(mode, exc))

        if metadata.get("mimeType") != DRIVE_FOLDER_MIME_TYPE:
            raise InvalidReference(
                "指定されたURLはGoogle Driveのフォルダではありません。",
                details={"mimeType": metadata.get("mimeType")},
            )

        folder = self._drive_store.create_folder(
            requested_name or str(metadata.get("name") or drive_folder_id), folder_url
        )
        logger.info("Registered Drive folder %s as %s", drive_folder_id, folder.id)
        return DriveOutcome(
            mode=mode,
            source=FileSource.GOOGLE_DRIVE,
            body={"folder": folder.to_dict(), "driveFolder": metadata},
            success_status=201,
        )

    def config_status(self) -> Dict[str, Any]:
        configured = self._settings.has_service_account
        email = self._settings.service_account_email
        return {
            "configured": configured,
            "serviceAccountEmail": email if configured else None,
            "mode": probe_backend_mode(self._settings).value,
            "message": (
                f"サービスアカウント（{email}）にフォルダを共有してください"
                if configured
                else "Google Drive連携が設定されていません（シミュレーションモードで動作中）"
            ),
        }
