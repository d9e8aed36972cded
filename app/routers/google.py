"""
Google Router - read-only proxies to the user's Google data.

Endpoints:
==========
- GET /api/contacts     → People API connections
- GET /api/emails       → Newest Gmail inbox messages
- GET /api/drive/files  → Recently modified Drive files
- GET /api/photos       → Photos Library media items

Every handler asks the Token Guard for a live access token first and uses
it for exactly one upstream call sequence. Errors the frontend can act on:

- 401 {"code": "GOOGLE_REAUTH_REQUIRED"} → send the user through /auth/login
- 503 {"code": "TRANSIENT_ERROR"}        → retry later
- 502 {"code": "GOOGLE_API_ERROR"}       → Google failed the request
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.deps import AuthContext, get_auth_context, get_google_http_timeout, get_token_guard
from app.environments.base import APIError
from app.environments.google import (
    ContactsPage,
    DriveFilesPage,
    EmailSummary,
    GoogleContactsClient,
    GoogleDriveClient,
    GoogleGmailClient,
    GooglePhotosClient,
    MediaItemsPage,
)
from app.services.token_guard import TokenGuard, TokenResultType


logger = logging.getLogger("pulse.routers.google")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/api", tags=["google"])


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------

def _reauth_required(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": "GOOGLE_REAUTH_REQUIRED", "message": message},
    )


async def _get_live_token(ctx: AuthContext, guard: TokenGuard) -> str:
    """
    Get a live Google access token or raise the matching HTTP error.

    Raises:
        401 GOOGLE_REAUTH_REQUIRED: No usable grant for this user
        503 TRANSIENT_ERROR: Credentials could not be read or written
    """
    result = await guard.get_live_access_token(ctx.user_id)

    if result.type == TokenResultType.OK:
        return result.access_token

    if result.type == TokenResultType.TRANSIENT_ERROR:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "TRANSIENT_ERROR", "message": "Please try again shortly"},
        )

    raise _reauth_required("Google access expired, please sign in again")


def _api_error_to_http(e: APIError, service: str) -> HTTPException:
    if e.is_auth_failure:
        # Google rejected a token we believed valid: revoked outside the app,
        # or a scope the user did not grant
        logger.warning(f"{service} rejected the access token ({e.status_code})")
        return _reauth_required(f"Google denied access to {service}, please sign in again")

    logger.error(f"{service} request failed: {e}")
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"code": "GOOGLE_API_ERROR", "message": f"Failed to fetch {service} data"},
    )


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------


@router.get("/contacts", response_model=ContactsPage)
async def list_contacts(
    page_size: int = Query(100, ge=1, le=1000),
    page_token: Optional[str] = Query(None),
    ctx: AuthContext = Depends(get_auth_context),
    guard: TokenGuard = Depends(get_token_guard),
    timeout: float = Depends(get_google_http_timeout),
):
    """List one page of the user's Google contacts."""
    access_token = await _get_live_token(ctx, guard)
    client = GoogleContactsClient(access_token=access_token, timeout=timeout)

    try:
        return await client.list_connections(page_size=page_size, page_token=page_token)
    except APIError as e:
        raise _api_error_to_http(e, "contacts")


@router.get("/emails", response_model=List[EmailSummary])
async def list_emails(
    max_results: int = Query(20, ge=1, le=100),
    ctx: AuthContext = Depends(get_auth_context),
    guard: TokenGuard = Depends(get_token_guard),
    timeout: float = Depends(get_google_http_timeout),
):
    """List the newest messages in the user's Gmail inbox."""
    access_token = await _get_live_token(ctx, guard)
    client = GoogleGmailClient(access_token=access_token, timeout=timeout)

    try:
        return await client.list_inbox(max_results=max_results)
    except APIError as e:
        raise _api_error_to_http(e, "gmail")


@router.get("/drive/files", response_model=DriveFilesPage)
async def list_drive_files(
    page_size: int = Query(100, ge=1, le=1000),
    page_token: Optional[str] = Query(None),
    ctx: AuthContext = Depends(get_auth_context),
    guard: TokenGuard = Depends(get_token_guard),
    timeout: float = Depends(get_google_http_timeout),
):
    """List the user's most recently modified Drive files."""
    access_token = await _get_live_token(ctx, guard)
    client = GoogleDriveClient(access_token=access_token, timeout=timeout)

    try:
        return await client.list_files(page_size=page_size, page_token=page_token)
    except APIError as e:
        raise _api_error_to_http(e, "drive")


@router.get("/photos", response_model=MediaItemsPage)
async def list_photos(
    page_size: int = Query(50, ge=1, le=100),
    page_token: Optional[str] = Query(None),
    ctx: AuthContext = Depends(get_auth_context),
    guard: TokenGuard = Depends(get_token_guard),
    timeout: float = Depends(get_google_http_timeout),
):
    """List the user's Google Photos media items."""
    access_token = await _get_live_token(ctx, guard)
    client = GooglePhotosClient(access_token=access_token, timeout=timeout)

    try:
        return await client.list_media_items(page_size=page_size, page_token=page_token)
    except APIError as e:
        raise _api_error_to_http(e, "photos")
