"""
Google OAuth Client - Handles the OAuth 2.0 flow with Google.

Key Features:
=============
1. Authorization URL generation (offline access, forced consent)
2. Code-to-token exchange
3. Token refresh
4. Token revocation for disconnect / account deletion

OAuth 2.0 Flow Implementation:
==============================
1. get_authorization_url()   → user redirected to Google
2. exchange_code_for_tokens() → called in the callback
3. refresh_access_token()     → renew access tokens near expiry
4. revoke_token()             → tell Google to stop honoring a token

Every outbound call uses a finite timeout; httpx.RequestError (which
includes timeouts) is translated into the domain exception of the operation.

References:
===========
- OAuth 2.0: https://developers.google.com/identity/protocols/oauth2/web-server
- Token endpoint: https://oauth2.googleapis.com/token
- Revoke endpoint: https://oauth2.googleapis.com/revoke
"""

import logging
import secrets
from typing import List, Optional
from urllib.parse import urlencode

import httpx

from app.environments.base import (
    EnvironmentProvider,
    OAuthTokens,
    ProviderExchangeFailed,
    RefreshError,
)
from app.environments.google.auth.schemas import (
    GoogleTokenError,
    GoogleTokenResponse,
    PROFILE_SCOPES,
)


logger = logging.getLogger("pulse.environments.google.auth")


def _error_detail(response: httpx.Response) -> GoogleTokenError:
    """Parse Google's error body; tolerate non-JSON bodies."""
    try:
        return GoogleTokenError.model_validate(response.json())
    except ValueError:
        return GoogleTokenError(error_description=response.text or None)


class GoogleAuthClient(EnvironmentProvider):
    """
    Google OAuth 2.0 Client implementation.

    Example Usage:
        client = GoogleAuthClient(
            client_id="...apps.googleusercontent.com",
            client_secret="...",
            redirect_uri="http://localhost:8000/auth/callback",
        )
        auth_url = client.get_authorization_url(scopes=resolve_scopes(["gmail"]), state=state)
        tokens = await client.exchange_code_for_tokens(code="4/0Ab...")
    """

    provider_name = "google"

    # Google OAuth endpoints
    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    REVOKE_URL = "https://oauth2.googleapis.com/revoke"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Google OAuth client.

        Args:
            client_id: Google OAuth Client ID
            client_secret: Google OAuth Client Secret
            redirect_uri: OAuth callback URL registered with Google
            timeout: Seconds before an outbound call is abandoned
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout)

    # -------------------------------------------------------------------------
    # AUTHORIZATION URL
    # -------------------------------------------------------------------------

    def get_authorization_url(
        self,
        scopes: List[str],
        state: str,
        access_type: str = "offline",
        prompt: str = "consent",
    ) -> str:
        """
        Generate the Google OAuth authorization URL.

        Args:
            scopes: OAuth scopes to request (profile scopes are always added)
            state: CSRF protection token
            access_type: "offline" asks Google for a refresh token
            prompt: "consent" forces the consent screen so a refresh token is
                    issued on every login, not only the first

        Returns:
            Full authorization URL to redirect the user to
        """
        all_scopes = list(scopes)
        for scope in PROFILE_SCOPES:
            if scope not in all_scopes:
                all_scopes.append(scope)

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(all_scopes),
            "state": state,
            "access_type": access_type,
            "prompt": prompt,
            "include_granted_scopes": "true",
        }

        logger.info(
            f"Generated Google auth URL with {len(all_scopes)} scopes",
            extra={"scopes": all_scopes},
        )

        return f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

    # -------------------------------------------------------------------------
    # TOKEN EXCHANGE
    # -------------------------------------------------------------------------

    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for the initial token pair.

        Args:
            code: One-time authorization code from the callback

        Returns:
            OAuthTokens including the id_token

        Raises:
            ProviderExchangeFailed: On any non-200 response, malformed body,
                                    network error or timeout
        """
        token_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }

        logger.info("Exchanging authorization code for tokens")

        async with self._http_client() as client:
            try:
                response = await client.post(self.TOKEN_URL, data=token_data)
            except httpx.RequestError as e:
                logger.error(f"Network error during token exchange: {e}")
                raise ProviderExchangeFailed(f"Network error: {e}") from e

        if response.status_code != 200:
            detail = _error_detail(response)
            logger.error(
                f"Token exchange failed: {response.status_code} {detail.error}",
                extra={"error_description": detail.error_description},
            )
            raise ProviderExchangeFailed(f"Token exchange failed: {detail.error or response.status_code}")

        try:
            token_response = GoogleTokenResponse.model_validate(response.json())
        except ValueError as e:
            logger.error(f"Malformed token exchange response: {e}")
            raise ProviderExchangeFailed("Malformed token response") from e

        logger.info(
            "Successfully obtained Google tokens",
            extra={
                "has_refresh_token": token_response.refresh_token is not None,
                "expires_in": token_response.expires_in,
            },
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token,
            expires_at=token_response.get_expires_at(),
            id_token=token_response.id_token,
            scopes=token_response.get_scopes_list(),
        )

    # -------------------------------------------------------------------------
    # TOKEN REFRESH
    # -------------------------------------------------------------------------

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Use a refresh token to mint a new access token.

        Args:
            refresh_token: The stored refresh token

        Returns:
            OAuthTokens; refresh_token is set only if Google rotated it

        Raises:
            RefreshError: On any non-200 response, malformed body, network
                          error or timeout
        """
        refresh_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        logger.info("Refreshing access token")

        async with self._http_client() as client:
            try:
                response = await client.post(self.TOKEN_URL, data=refresh_data)
            except httpx.RequestError as e:
                logger.error(f"Network error during token refresh: {e}")
                raise RefreshError(f"Network error: {e}") from e

        if response.status_code != 200:
            detail = _error_detail(response)
            logger.warning(f"Token refresh failed: {response.status_code} {detail.error}")
            raise RefreshError(
                f"Token refresh failed: {detail.error or response.status_code}",
                provider_body=response.text,
            )

        try:
            token_response = GoogleTokenResponse.model_validate(response.json())
        except ValueError as e:
            logger.error(f"Malformed token refresh response: {e}")
            raise RefreshError("Malformed token response", provider_body=response.text) from e

        logger.info(
            "Successfully refreshed access token",
            extra={"expires_in": token_response.expires_in},
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
        )

    # -------------------------------------------------------------------------
    # TOKEN REVOCATION
    # -------------------------------------------------------------------------

    async def revoke_token(self, token: str) -> bool:
        """
        Revoke an access or refresh token.

        Google revokes the whole grant when either token is revoked, so the
        second call of a pair usually answers 400 invalid_token. That still
        means the token is no longer honored and counts as success.

        Args:
            token: Access token or refresh token to revoke

        Returns:
            True if Google no longer honors the token
        """
        logger.info("Revoking Google token")

        async with self._http_client() as client:
            try:
                response = await client.post(
                    self.REVOKE_URL,
                    data={"token": token},
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
            except httpx.RequestError as e:
                logger.error(f"Network error during token revocation: {e}")
                return False

        if response.status_code == 200:
            logger.info("Successfully revoked Google token")
            return True

        detail = _error_detail(response)
        if response.status_code == 400 and detail.error == "invalid_token":
            logger.info("Google token was already invalid")
            return True

        logger.warning(f"Token revocation returned status {response.status_code}")
        return False

    # -------------------------------------------------------------------------
    # UTILITY METHODS
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_state() -> str:
        """
        Generate a cryptographically secure state parameter for CSRF protection.
        """
        return secrets.token_urlsafe(32)
