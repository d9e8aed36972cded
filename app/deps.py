"""
Dependencies module - reusable FastAPI dependencies for route handlers.

This is the wiring layer: it is the only place that reads `settings` to build
the token lifecycle components. Each component receives its collaborators as
constructor arguments, so tests can swap any of them with
`app.dependency_overrides`.

Request context:
================
get_auth_context verifies the session assertion and returns an immutable
AuthContext. Handlers pass it (or its user_id) explicitly to services; the
request object is never mutated.
"""

import uuid
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import InvalidCredential, SessionAuthenticator, Unauthenticated
from app.db.session import get_db
from app.environments.google.auth import GoogleAuthClient, GoogleIdTokenVerifier
from app.models.user import UserCredential
from app.services.code_exchanger import CodeExchanger
from app.services.credential_store import CredentialStore
from app.services.revoker import Revoker
from app.services.token_guard import TokenGuard
from app.services.token_refresher import TokenRefresher

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# auto_error=False: the session cookie is the primary transport, the
# Authorization header is a fallback for non-browser clients
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, resolved from their session assertion."""
    user_id: uuid.UUID


def auth_error(code: str, message: str) -> HTTPException:
    """401 with a machine-readable code the frontend can branch on."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": code, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


# ---------------------------------------------------------------------------
# PROCESS-WIDE COMPONENTS
# ---------------------------------------------------------------------------

@lru_cache
def get_session_authenticator() -> SessionAuthenticator:
    return SessionAuthenticator(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_minutes=settings.SESSION_TOKEN_EXPIRE_MINUTES,
    )


@lru_cache
def get_google_auth_client() -> GoogleAuthClient:
    return GoogleAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_REDIRECT_URI,
        timeout=settings.GOOGLE_HTTP_TIMEOUT_SECONDS,
    )


@lru_cache
def get_id_token_verifier() -> GoogleIdTokenVerifier:
    # Shared so the downloaded Google certs are cached across requests
    return GoogleIdTokenVerifier(
        client_id=settings.GOOGLE_CLIENT_ID,
        timeout=settings.GOOGLE_HTTP_TIMEOUT_SECONDS,
    )


def get_google_http_timeout() -> float:
    return settings.GOOGLE_HTTP_TIMEOUT_SECONDS


# ---------------------------------------------------------------------------
# REQUEST-SCOPED COMPONENTS
# ---------------------------------------------------------------------------

def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_token_guard(
    store: CredentialStore = Depends(get_credential_store),
    provider: GoogleAuthClient = Depends(get_google_auth_client),
) -> TokenGuard:
    return TokenGuard(
        store=store,
        refresher=TokenRefresher(provider=provider, store=store),
        refresh_skew=timedelta(seconds=settings.TOKEN_REFRESH_SKEW_SECONDS),
    )


def get_code_exchanger(
    store: CredentialStore = Depends(get_credential_store),
    provider: GoogleAuthClient = Depends(get_google_auth_client),
    verifier: GoogleIdTokenVerifier = Depends(get_id_token_verifier),
    authenticator: SessionAuthenticator = Depends(get_session_authenticator),
) -> CodeExchanger:
    return CodeExchanger(
        provider=provider,
        verifier=verifier,
        store=store,
        authenticator=authenticator,
    )


def get_revoker(
    store: CredentialStore = Depends(get_credential_store),
    provider: GoogleAuthClient = Depends(get_google_auth_client),
) -> Revoker:
    return Revoker(provider=provider, store=store)


# ---------------------------------------------------------------------------
# AUTHENTICATION
# ---------------------------------------------------------------------------

def get_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authenticator: SessionAuthenticator = Depends(get_session_authenticator),
) -> AuthContext:
    """
    Resolve the caller's session assertion to an AuthContext.

    The session cookie wins over the Authorization header.

    Raises:
        401 UNAUTHENTICATED: Nothing presented
        401 INVALID_CREDENTIAL: Bad signature, expired or malformed
    """
    raw = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not raw and credentials is not None:
        raw = credentials.credentials

    try:
        user_id = authenticator.authenticate(raw)
    except Unauthenticated:
        raise auth_error("UNAUTHENTICATED", "Authentication required")
    except InvalidCredential:
        raise auth_error("INVALID_CREDENTIAL", "Session is invalid or expired")

    return AuthContext(user_id=user_id)


def get_current_user(
    ctx: AuthContext = Depends(get_auth_context),
    store: CredentialStore = Depends(get_credential_store),
) -> UserCredential:
    """
    Load the caller's row.

    Raises:
        401 UNAUTHENTICATED: The session outlived the account
    """
    user = store.get(ctx.user_id)
    if user is None:
        raise auth_error("UNAUTHENTICATED", "Account no longer exists")
    return user
