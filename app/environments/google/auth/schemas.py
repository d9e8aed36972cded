"""
Google OAuth Schemas - Data structures for Google authentication.

This module defines the scope sets requested at login and the pydantic
models for Google's token endpoint responses and id_token claims.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# OAUTH SCOPE CONSTANTS
# ---------------------------------------------------------------------------
# Reference: https://developers.google.com/identity/protocols/oauth2/scopes

# Profile scopes - always requested, they produce the id_token claims
PROFILE_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]

CONTACTS_SCOPES = [
    "https://www.googleapis.com/auth/contacts.readonly",
    "https://www.googleapis.com/auth/contacts.other.readonly",
]

GMAIL_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
]

DRIVE_SCOPES = [
    "https://www.googleapis.com/auth/drive.metadata.readonly",
]

PHOTOS_SCOPES = [
    "https://www.googleapis.com/auth/photoslibrary.readonly",
]

# Deployment-selectable groups (Settings.GOOGLE_SCOPE_SETS)
SCOPE_SETS: Dict[str, List[str]] = {
    "contacts": CONTACTS_SCOPES,
    "gmail": GMAIL_SCOPES,
    "drive": DRIVE_SCOPES,
    "photos": PHOTOS_SCOPES,
}

# Used when the token endpoint omits expires_in
DEFAULT_EXPIRES_IN_SECONDS = 3600


def resolve_scopes(scope_sets: Iterable[str]) -> List[str]:
    """
    Expand scope group names into the full scope list.

    Profile scopes always come first; duplicates are dropped.

    Raises:
        ValueError: If a group name is unknown
    """
    scopes = list(PROFILE_SCOPES)
    for name in scope_sets:
        if name not in SCOPE_SETS:
            raise ValueError(f"Unknown Google scope set: {name}")
        for scope in SCOPE_SETS[name]:
            if scope not in scopes:
                scopes.append(scope)
    return scopes


# ---------------------------------------------------------------------------
# TOKEN RESPONSES
# ---------------------------------------------------------------------------

class GoogleTokenResponse(BaseModel):
    """
    Response from Google's token endpoint (code exchange and refresh).

    Example response from Google:
    {
        "access_token": "ya29.a0AfB_byC...",
        "expires_in": 3599,
        "refresh_token": "1//0eXyz...",
        "scope": "openid https://www.googleapis.com/auth/gmail.readonly",
        "token_type": "Bearer",
        "id_token": "eyJhbGciOiJSUzI1NiIs..."
    }
    """
    access_token: str = Field(..., description="OAuth access token")
    token_type: str = Field(default="Bearer", description="Token type (usually Bearer)")
    expires_in: Optional[int] = Field(None, description="Seconds until expiration")
    refresh_token: Optional[str] = Field(None, description="Refresh token, only on some responses")
    scope: Optional[str] = Field(None, description="Space-separated scopes granted")
    id_token: Optional[str] = Field(None, description="OpenID Connect identity token")

    def get_scopes_list(self) -> List[str]:
        """Convert space-separated scope string to list."""
        if self.scope:
            return self.scope.split()
        return []

    def get_expires_at(self, now: Optional[datetime] = None) -> datetime:
        """Absolute expiry computed from expires_in (defaults to one hour)."""
        current = now or datetime.now(timezone.utc)
        seconds = DEFAULT_EXPIRES_IN_SECONDS if self.expires_in is None else self.expires_in
        return current + timedelta(seconds=seconds)


class GoogleTokenError(BaseModel):
    """
    Error body from the token or revoke endpoint.

    Example: {"error": "invalid_grant", "error_description": "Token has been expired or revoked."}
    """
    error: Optional[str] = None
    error_description: Optional[str] = None


# ---------------------------------------------------------------------------
# IDENTITY
# ---------------------------------------------------------------------------

class GoogleIdTokenClaims(BaseModel):
    """
    Claims of a verified Google id_token.

    Example:
    {
        "iss": "https://accounts.google.com",
        "aud": "1234.apps.googleusercontent.com",
        "sub": "110169484474386276334",
        "email": "user@gmail.com",
        "email_verified": true,
        "name": "Jane Doe",
        "picture": "https://lh3.googleusercontent.com/a/..."
    }
    """
    sub: str = Field(..., min_length=1, description="Unique Google user ID")
    email: Optional[str] = Field(None, description="User's email address")
    email_verified: Optional[bool] = Field(None, description="Is email verified?")
    name: Optional[str] = Field(None, description="User's display name")
    given_name: Optional[str] = Field(None, description="First name")
    family_name: Optional[str] = Field(None, description="Last name")
    picture: Optional[str] = Field(None, description="Profile picture URL")
    locale: Optional[str] = Field(None, description="User's locale (e.g., 'en')")
