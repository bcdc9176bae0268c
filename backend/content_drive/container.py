from __future__ import annotations

from .config import Settings, load_settings
from .drive_store import DriveStore
from .services.google_drive import GoogleDriveService
from .services.oauth import GoogleOAuthService


class Container:
    """Application service container for dependency management."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or load_settings()
        self._drive_store = DriveStore()
        self._oauth_service = GoogleOAuthService(self._settings)
        self._drive_service = GoogleDriveService(self._settings, self._drive_store)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def drive_store(self) -> DriveStore:
        return self._drive_store

    @property
    def oauth_service(self) -> GoogleOAuthService:
        return self._oauth_service

    @property
    def drive_service(self) -> GoogleDriveService:
        return self._drive_service
