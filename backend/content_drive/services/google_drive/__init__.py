from .client import DriveFileContent, GoogleDriveClient
from .service import DriveOutcome, GoogleDriveService
from .service_account import ServiceAccountCredentials

__all__ = [
    "DriveFileContent",
    "DriveOutcome",
    "GoogleDriveClient",
    "GoogleDriveService",
    "ServiceAccountCredentials",
]
