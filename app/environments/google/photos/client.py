"""
Google Photos Library API Client.

API Reference:
==============
- mediaItems.list: https://developers.google.com/photos/library/reference/rest/v1/mediaItems/list
"""

import logging
from typing import Optional

from app.environments.google.api_client import GoogleAPIClient
from app.environments.google.auth.schemas import PHOTOS_SCOPES
from app.environments.google.photos.schemas import MediaItemsPage


logger = logging.getLogger("pulse.environments.google.photos")


class GooglePhotosClient(GoogleAPIClient):
    """
    Photos Library API client.

    Example:
        client = GooglePhotosClient(access_token="ya29.xxx")
        page = await client.list_media_items(page_size=50)
    """

    service_name = "photos"
    required_scopes = PHOTOS_SCOPES

    BASE_URL = "https://photoslibrary.googleapis.com/v1"

    async def list_media_items(
        self,
        page_size: int = 100,
        page_token: Optional[str] = None,
    ) -> MediaItemsPage:
        """
        List the user's media items, newest first.

        Args:
            page_size: Items per page (1-100)
            page_token: nextPageToken from a previous page

        Raises:
            APIError: If the Photos call fails
        """
        params = {"pageSize": max(1, min(page_size, 100))}
        if page_token:
            params["pageToken"] = page_token

        data = await self._make_request("GET", "/mediaItems", params=params)
        page = MediaItemsPage(**data)

        logger.info(f"Fetched {len(page.media_items)} media items")
        return page
