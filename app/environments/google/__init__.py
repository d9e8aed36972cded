"""
Google Environment Module - Google Workspace Integration

This module provides integration with Google services:
- OAuth 2.0 + OpenID Connect login (auth/)
- People API contacts (contacts/)
- Gmail inbox (gmail/)
- Drive file metadata (drive/)
- Photos Library media (photos/)

Architecture:
=============
google/
├── __init__.py           # Module exports
├── api_client.py         # Shared request/error handling for resource APIs
├── auth/                 # Shared OAuth authentication
│   ├── client.py         # Authorization URL, code exchange, refresh, revoke
│   ├── id_token.py       # id_token signature/audience verification
│   └── schemas.py        # Scopes and token endpoint models
├── contacts/             # People API
├── gmail/                # Gmail API
├── drive/                # Drive API
└── photos/               # Photos Library API

Key Design Decisions:
=====================
1. Shared Auth: all services use the same Google grant
2. No refresh inside services: resource clients take an access token that the
   Token Guard just handed out and surface 401/403 as APIError
3. Service Independence: each API is its own package

Usage:
======
    from app.environments.google import GoogleAuthClient, GoogleGmailClient

    auth_client = GoogleAuthClient(client_id=..., client_secret=..., redirect_uri=...)
    tokens = await auth_client.exchange_code_for_tokens(code)

    gmail = GoogleGmailClient(access_token=live_token)
    emails = await gmail.list_inbox()
"""

from app.environments.google.auth import (
    GoogleAuthClient,
    GoogleIdTokenVerifier,
    SCOPE_SETS,
    resolve_scopes,
)
from app.environments.google.contacts import GoogleContactsClient, Contact, ContactsPage
from app.environments.google.drive import GoogleDriveClient, DriveFile, DriveFilesPage
from app.environments.google.gmail import GoogleGmailClient, EmailSummary
from app.environments.google.photos import GooglePhotosClient, MediaItem, MediaItemsPage

__all__ = [
    "GoogleAuthClient",
    "GoogleIdTokenVerifier",
    "GoogleContactsClient",
    "GoogleDriveClient",
    "GoogleGmailClient",
    "GooglePhotosClient",
    "Contact",
    "ContactsPage",
    "DriveFile",
    "DriveFilesPage",
    "EmailSummary",
    "MediaItem",
    "MediaItemsPage",
    "SCOPE_SETS",
    "resolve_scopes",
]
