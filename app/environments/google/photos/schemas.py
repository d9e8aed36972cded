"""
Google Photos Schemas - media items from the Photos Library API.

Reference: https://developers.google.com/photos/library/reference/rest/v1/mediaItems
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    creation_time: Optional[datetime] = Field(None, alias="creationTime")
    width: Optional[str] = None
    height: Optional[str] = None


class MediaItem(BaseModel):
    """
    One photo or video.

    base_url expires after about an hour; clients must not store it.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    filename: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")
    base_url: Optional[str] = Field(None, alias="baseUrl")
    product_url: Optional[str] = Field(None, alias="productUrl")
    media_metadata: Optional[MediaMetadata] = Field(None, alias="mediaMetadata")


class MediaItemsPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    media_items: List[MediaItem] = Field(default_factory=list, alias="mediaItems")
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")
