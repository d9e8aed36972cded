"""
Google Drive API Client - lists file metadata (no content download).

API Reference:
==============
- files.list: https://developers.google.com/drive/api/reference/rest/v3/files/list
"""

import logging
from typing import Optional

from app.environments.google.api_client import GoogleAPIClient
from app.environments.google.auth.schemas import DRIVE_SCOPES
from app.environments.google.drive.schemas import DriveFilesPage


logger = logging.getLogger("pulse.environments.google.drive")

FILE_FIELDS = "nextPageToken, files(id, name, mimeType, iconLink, webViewLink, modifiedTime)"


class GoogleDriveClient(GoogleAPIClient):
    """
    Drive API client.

    Example:
        client = GoogleDriveClient(access_token="ya29.xxx")
        page = await client.list_files(page_size=50)
    """

    service_name = "drive"
    required_scopes = DRIVE_SCOPES

    BASE_URL = "https://www.googleapis.com/drive/v3"

    async def list_files(
        self,
        page_size: int = 100,
        page_token: Optional[str] = None,
    ) -> DriveFilesPage:
        """
        List the user's most recently modified files, trashed files excluded.

        Args:
            page_size: Files per page (1-1000)
            page_token: nextPageToken from a previous page

        Raises:
            APIError: If the Drive call fails
        """
        params = {
            "pageSize": max(1, min(page_size, 1000)),
            "fields": FILE_FIELDS,
            "orderBy": "modifiedTime desc",
            "q": "trashed = false",
        }
        if page_token:
            params["pageToken"] = page_token

        data = await self._make_request("GET", "/files", params=params)
        page = DriveFilesPage(**data)

        logger.info(f"Fetched {len(page.files)} Drive files")
        return page
