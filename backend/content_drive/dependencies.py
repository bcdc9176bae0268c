from __future__ import annotations

from fastapi import Depends, Request

from .container import Container
from .drive_store import DriveStore
from .services.google_drive import GoogleDriveService
from .services.oauth import GoogleOAuthService


def get_container(request: Request) -> Container:
    container = getattr(request.app.state, "container", None)
    if not isinstance(container, Container):
        raise RuntimeError("Application container is not configured on FastAPI app state.")
    return container


def get_drive_store(container: Container = Depends(get_container)) -> DriveStore:
    return container.drive_store


def get_oauth_service(container: Container = Depends(get_container)) -> GoogleOAuthService:
    return container.oauth_service


def get_drive_service(container: Container = Depends(get_container)) -> GoogleDriveService:
    return container.drive_service
