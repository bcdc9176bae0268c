from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..dependencies import get_drive_service, get_drive_store
from ..drive_store import DriveStore
from ..errors import InvalidReference
from ..services.categorize import FileCategory
from ..services.google_drive import DriveOutcome, GoogleDriveService

router = APIRouter()


class FolderRegistrationRequest(BaseModel):
    url: str = Field(..., description="Google Drive フォルダのURLまたはフォルダID")
    name: Optional[str] = Field(None, description="ダッシュボードでの表示名 (任意)")


class SimulationFileRequest(BaseModel):
    folder_id: str = Field(..., alias="folderId")
    name: str
    mime_type: Optional[str] = Field(None, alias="mimeType")
    category: Optional[FileCategory] = None
    url: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


def _respond(outcome: DriveOutcome) -> JSONResponse:
    return JSONResponse(outcome.to_dict(), status_code=outcome.status_code)


@router.get("/config")
def read_drive_config(
    drive_service: GoogleDriveService = Depends(get_drive_service),
) -> Dict[str, Any]:
    return drive_service.config_status()


@router.get("/files")
async def list_folder_files(
    folder_id: Optional[str] = Query(None, alias="folderId", description="Google Drive フォルダID"),
    folder_url: Optional[str] = Query(None, alias="folderUrl", description="Google Drive フォルダURL"),
    authorization: Optional[str] = Header(None),
    drive_service: GoogleDriveService = Depends(get_drive_service),
) -> JSONResponse:
    outcome = await drive_service.list_folder_files(
        folder_id=folder_id,
        folder_url=folder_url,
        authorization=authorization,
    )
    return _respond(outcome)


@router.post("/files", status_code=201)
def create_simulation_file(
    payload: SimulationFileRequest,
    drive_store: DriveStore = Depends(get_drive_store),
) -> Dict[str, Any]:
    if drive_store.get_folder(payload.folder_id) is None:
        raise InvalidReference(
            "指定されたフォルダが見つかりません。",
            hint="GET /folders で登録済みのフォルダIDを確認してください。",
            details={"folderId": payload.folder_id},
        )

    created = drive_store.create_file(
        folder_id=payload.folder_id,
        name=payload.name,
        mime_type=payload.mime_type,
        category=payload.category,
        url=payload.url,
    )
    return created.to_dict()


@router.get("/files/{file_id}/content")
async def read_file_content(
    file_id: str,
    mime_type: Optional[str] = Query(None, alias="mimeType", description="ファイルのMIMEタイプ"),
    drive_service: GoogleDriveService = Depends(get_drive_service),
) -> JSONResponse:
    outcome = await drive_service.get_file_content(file_id, mime_type)
    return _respond(outcome)


@router.get("/oauth/content")
async def read_user_file_content(
    file_id: str = Query(..., alias="fileId", description="Google Drive ファイルID"),
    authorization: Optional[str] = Header(None),
    drive_service: GoogleDriveService = Depends(get_drive_service),
) -> JSONResponse:
    outcome = await drive_service.get_user_file_content(file_id, authorization)
    return _respond(outcome)


@router.get("/folders")
def list_folders(
    drive_store: DriveStore = Depends(get_drive_store),
) -> List[Dict[str, Any]]:
    return [folder.to_dict() for folder in drive_store.list_folders()]


@router.post("/folders")
async def register_folder(
    payload: FolderRegistrationRequest,
    authorization: Optional[str] = Header(None),
    drive_service: GoogleDriveService = Depends(get_drive_service),
) -> JSONResponse:
    outcome = await drive_service.register_folder(
        payload.url,
        payload.name,
        authorization=authorization,
    )
    return _respond(outcome)
