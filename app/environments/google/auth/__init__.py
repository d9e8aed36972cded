"""
Google Auth Module - OAuth 2.0 Authentication for Google Services

This module handles the OAuth 2.0 flow for Google APIs and the verification
of the id_token that identifies the user.

OAuth 2.0 Flow Overview:
========================
1. User opens /auth/login
2. Backend generates authorization URL with the configured scopes
3. User grants permissions on Google's consent screen
4. Google redirects back to /auth/callback with an authorization code
5. Backend exchanges the code for access + refresh + id tokens
6. id_token is verified, the user row is upserted, a session is issued

Scope Management:
=================
Profile scopes are always requested. API scope groups (contacts, gmail,
drive, photos) are selected per deployment with GOOGLE_SCOPE_SETS.
"""

from app.environments.google.auth.client import GoogleAuthClient
from app.environments.google.auth.id_token import GoogleIdTokenVerifier
from app.environments.google.auth.schemas import (
    GoogleIdTokenClaims,
    GoogleTokenResponse,
    CONTACTS_SCOPES,
    DRIVE_SCOPES,
    GMAIL_SCOPES,
    PHOTOS_SCOPES,
    PROFILE_SCOPES,
    SCOPE_SETS,
    resolve_scopes,
)

__all__ = [
    "GoogleAuthClient",
    "GoogleIdTokenVerifier",
    "GoogleIdTokenClaims",
    "GoogleTokenResponse",
    "CONTACTS_SCOPES",
    "DRIVE_SCOPES",
    "GMAIL_SCOPES",
    "PHOTOS_SCOPES",
    "PROFILE_SCOPES",
    "SCOPE_SETS",
    "resolve_scopes",
]
