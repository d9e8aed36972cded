"""
Google Drive Module - read-only file metadata.
"""

from app.environments.google.drive.client import GoogleDriveClient
from app.environments.google.drive.schemas import DriveFile, DriveFilesPage

__all__ = [
    "GoogleDriveClient",
    "DriveFile",
    "DriveFilesPage",
]
