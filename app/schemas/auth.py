"""
Authentication schemas - response bodies of the /auth endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """
    Example response:
    {
        "status": "ok",
        "message": "Logged out"
    }
    """
    status: str = "ok"
    message: str


class DisconnectResponse(BaseModel):
    """
    Result of revoking the user's Google tokens.

    status is "partial" when Google could not confirm every revocation; the
    tokens are cleared locally either way, so this is a warning only.

    Example response:
    {
        "status": "partial",
        "message": "Google account disconnected",
        "warnings": ["Google did not confirm revocation of refresh_token"]
    }
    """
    status: str = Field(..., description="ok | partial")
    message: str
    warnings: List[str] = Field(default_factory=list)


class GoogleConnectionStatus(BaseModel):
    """
    Example response:
    {
        "connected": true,
        "expires_at": "2025-12-02T11:30:00Z",
        "has_refresh_token": true
    }
    """
    connected: bool
    expires_at: Optional[datetime] = None
    has_refresh_token: bool = False
