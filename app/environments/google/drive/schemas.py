"""
Google Drive Schemas - file metadata.

Reference: https://developers.google.com/drive/api/reference/rest/v3/files
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DriveFile(BaseModel):
    """File metadata as returned by files.list (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")
    icon_link: Optional[str] = Field(None, alias="iconLink")
    web_view_link: Optional[str] = Field(None, alias="webViewLink")
    modified_time: Optional[datetime] = Field(None, alias="modifiedTime")

    def is_folder(self) -> bool:
        return self.mime_type == "application/vnd.google-apps.folder"


class DriveFilesPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    files: List[DriveFile] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")
