"""
User schemas - Pydantic models for profile and preference endpoints.
These control what user data is exposed in API responses (never tokens!).
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationPreferences(BaseModel):
    """
    Both notification switches.

    Example request/response body:
    {
        "email_notifications": true,
        "push_notifications": false
    }
    """
    model_config = ConfigDict(from_attributes=True)

    email_notifications: bool
    push_notifications: bool


class UserOut(BaseModel):
    """
    Profile of the signed-in user.

    Intentionally EXCLUDES access_token, refresh_token and token_version.
    google_connected tells the frontend whether Google APIs can be called
    without sending the user through login again.

    Example response:
    {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "email": "jane@gmail.com",
        "display_name": "Jane Doe",
        "avatar_url": "https://lh3.googleusercontent.com/a/...",
        "email_notifications": true,
        "push_notifications": false,
        "google_connected": true,
        "created_at": "2025-12-02T10:30:00Z"
    }
    """
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: Optional[str]
    display_name: Optional[str]
    avatar_url: Optional[str]
    email_notifications: bool
    push_notifications: bool
    google_connected: bool = Field(validation_alias="is_connected")
    created_at: datetime


class ProfileUpdate(BaseModel):
    """
    Example request body:
    {
        "display_name": "Jane"
    }
    """
    display_name: Optional[str] = Field(None, max_length=255)
