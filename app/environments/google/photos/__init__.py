"""
Google Photos Module - read-only media library access.
"""

from app.environments.google.photos.client import GooglePhotosClient
from app.environments.google.photos.schemas import MediaItem, MediaItemsPage

__all__ = [
    "GooglePhotosClient",
    "MediaItem",
    "MediaItemsPage",
]
