"""
Auth Router - Google sign-in, sign-out, disconnect and account deletion.

Endpoints:
==========
- GET    /auth/login      → Redirect to Google's consent screen
- GET    /auth/callback   → Exchange the code, set the session cookie, redirect to the app
- POST   /auth/logout     → Clear the session cookie (tokens stay stored)
- POST   /auth/disconnect → Revoke Google tokens (locally always, remotely best-effort)
- DELETE /auth/account    → Revoke, then delete the user with notes and reminders
- GET    /auth/status     → Whether Google tokens are currently stored

Login Flow:
===========
1. Browser opens /auth/login
2. Backend stores a CSRF state and redirects to Google (offline access, forced consent)
3. Google redirects to /auth/callback?code=...&state=...
4. CodeExchanger exchanges the code, verifies the id_token, upserts the user
5. Session assertion is set as an httpOnly cookie
6. Browser is redirected to {FRONTEND_URL}/dashboard

Failures in steps 3-4 redirect to {FRONTEND_URL}/login?error=<code> so the
frontend can restart the flow.
"""

import logging
import time
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.security import SessionAuthenticator
from app.deps import (
    AuthContext,
    auth_error,
    get_auth_context,
    get_code_exchanger,
    get_credential_store,
    get_current_user,
    get_google_auth_client,
    get_revoker,
    get_session_authenticator,
)
from app.environments.base import IdentityVerificationFailed, ProviderExchangeFailed
from app.environments.google.auth import GoogleAuthClient, resolve_scopes
from app.models.user import UserCredential
from app.schemas.auth import DisconnectResponse, GoogleConnectionStatus, MessageResponse
from app.services.code_exchanger import CodeExchanger
from app.services.credential_store import CredentialStore, UserNotFound
from app.services.revoker import RevokeResult, Revoker


logger = logging.getLogger("pulse.routers.auth")


router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# STATE STORAGE (In-memory, single instance)
# ---------------------------------------------------------------------------
# state → expiry (monotonic seconds). Multi-instance deployments need a
# shared store for this; the callback may land on a different instance.
STATE_TTL_SECONDS = 600
_oauth_states: dict[str, float] = {}


def _store_state(state: str) -> None:
    now = time.monotonic()
    # Drop abandoned logins so the dict cannot grow without bound
    for key in [key for key, expires in _oauth_states.items() if expires < now]:
        del _oauth_states[key]
    _oauth_states[state] = now + STATE_TTL_SECONDS


def _consume_state(state: str) -> bool:
    """Remove a state; True if it existed and had not expired."""
    expires = _oauth_states.pop(state, None)
    return expires is not None and expires >= time.monotonic()


# ---------------------------------------------------------------------------
# COOKIE & REDIRECT HELPERS
# ---------------------------------------------------------------------------

def _set_session_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_COOKIE_SAMESITE,
        domain=settings.SESSION_COOKIE_DOMAIN,
        path="/",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_COOKIE_SAMESITE,
        domain=settings.SESSION_COOKIE_DOMAIN,
        path="/",
    )


def _login_error_redirect(error: str) -> RedirectResponse:
    url = f"{settings.FRONTEND_URL}/login?{urlencode({'error': error})}"
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


def _revoke_warnings(result: RevokeResult) -> list[str]:
    return [f"Google did not confirm revocation of {name}" for name in result.failed]


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------


@router.get("/login")
async def login(auth_client: GoogleAuthClient = Depends(get_google_auth_client)):
    """
    Start the Google login flow.

    Returns:
        RedirectResponse to Google's OAuth consent screen

    Raises:
        503: If Google OAuth credentials are not configured
    """
    if not auth_client.is_configured:
        logger.error("Google OAuth not configured - missing GOOGLE_CLIENT_ID/SECRET")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google OAuth is not configured",
        )

    state = auth_client.generate_state()
    _store_state(state)

    auth_url = auth_client.get_authorization_url(
        scopes=resolve_scopes(settings.GOOGLE_SCOPE_SETS),
        state=state,
    )

    logger.info("Initiating Google OAuth login")
    return RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)


@router.get("/callback")
async def callback(
    code: Optional[str] = Query(None, description="Authorization code from Google"),
    state: Optional[str] = Query(None, description="CSRF state token"),
    error: Optional[str] = Query(None, description="Error from Google"),
    exchanger: CodeExchanger = Depends(get_code_exchanger),
    authenticator: SessionAuthenticator = Depends(get_session_authenticator),
):
    """
    Handle Google's redirect after consent.

    Always answers with a redirect to the frontend: the dashboard on
    success, the login page with an error code otherwise.
    """
    if error:
        logger.warning(f"Google OAuth error: {error}")
        return _login_error_redirect(error)

    if not code or not state:
        logger.warning("Missing code or state in OAuth callback")
        return _login_error_redirect("missing_code")

    if not _consume_state(state):
        logger.warning("Invalid or expired OAuth state")
        return _login_error_redirect("invalid_state")

    try:
        result = await exchanger.exchange(code)
    except IdentityVerificationFailed as e:
        logger.warning(f"Identity verification failed: {e}")
        return _login_error_redirect("identity_verification_failed")
    except ProviderExchangeFailed as e:
        logger.warning(f"Code exchange failed: {e}")
        return _login_error_redirect("exchange_failed")
    except SQLAlchemyError:
        logger.exception("Database error while completing login")
        return _login_error_redirect("server_error")

    response = RedirectResponse(
        url=f"{settings.FRONTEND_URL}/dashboard",
        status_code=status.HTTP_302_FOUND,
    )
    _set_session_cookie(response, result.session_token, authenticator.max_age_seconds)
    return response


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """
    Clear the session cookie.

    Stored Google tokens are untouched; the next login reuses the row.
    """
    _clear_session_cookie(response)
    return MessageResponse(message="Logged out")


@router.post("/disconnect", response_model=DisconnectResponse)
async def disconnect(
    ctx: AuthContext = Depends(get_auth_context),
    revoker: Revoker = Depends(get_revoker),
):
    """
    Revoke the user's Google tokens.

    Local tokens are always cleared. If Google could not confirm a
    revocation the status is "partial" with warnings, never an error.
    """
    try:
        result = await revoker.revoke(ctx.user_id)
    except UserNotFound:
        raise auth_error("UNAUTHENTICATED", "Account no longer exists")

    return DisconnectResponse(
        status="ok" if result.is_ack else "partial",
        message="Google account disconnected",
        warnings=_revoke_warnings(result),
    )


@router.delete("/account", response_model=DisconnectResponse)
async def delete_account(
    response: Response,
    ctx: AuthContext = Depends(get_auth_context),
    revoker: Revoker = Depends(get_revoker),
    store: CredentialStore = Depends(get_credential_store),
):
    """
    Delete the user's account.

    Revokes Google tokens first, then deletes the user row; notes and
    reminders go with it. The session cookie is cleared.

    Raises:
        404: If the account was already deleted
    """
    try:
        result = await revoker.revoke(ctx.user_id)
        store.delete(ctx.user_id)
    except UserNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    _clear_session_cookie(response)
    logger.info(f"Account deleted for user {ctx.user_id}")

    return DisconnectResponse(
        status="ok" if result.is_ack else "partial",
        message="Account deleted",
        warnings=_revoke_warnings(result),
    )


@router.get("/status", response_model=GoogleConnectionStatus)
async def connection_status(current_user: UserCredential = Depends(get_current_user)):
    """
    Report whether Google tokens are stored for the user.

    Does not refresh anything; proxy endpoints go through the Token Guard.
    """
    return GoogleConnectionStatus(
        connected=current_user.is_connected,
        expires_at=current_user.access_token_expires_at,
        has_refresh_token=current_user.refresh_token is not None,
    )
