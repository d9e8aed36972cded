"""
Google id_token verification.

The id_token returned by the code exchange is the only trusted source of the
user's identity. Before any database write it must pass:

1. RS256 signature check against Google's published JWKS
2. Audience == our OAuth client id
3. Issuer == accounts.google.com (with or without scheme)
4. Expiry (exp) and issued-at sanity (python-jose)
5. at_hash matches the access token issued alongside it

Google's signing keys rotate; the JWKS is cached for CERTS_CACHE_SECONDS and
re-fetched early when a token names a key id we have not seen.

Reference: https://developers.google.com/identity/openid-connect/openid-connect#validatinganidtoken
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx
from jose import JWTError, jwt

from app.environments.base import (
    IdentityVerificationFailed,
    ProviderExchangeFailed,
    UserInfo,
)
from app.environments.google.auth.schemas import GoogleIdTokenClaims


logger = logging.getLogger("pulse.environments.google.id_token")


GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("https://accounts.google.com", "accounts.google.com")
CERTS_CACHE_SECONDS = 3600


class GoogleIdTokenVerifier:
    """
    Verify Google id_tokens and extract identity claims.

    Example:
        verifier = GoogleIdTokenVerifier(client_id=settings.GOOGLE_CLIENT_ID)
        user_info = await verifier.verify(tokens.id_token, access_token=tokens.access_token)
    """

    def __init__(
        self,
        client_id: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        jwks: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            client_id: Expected audience of the id_token
            timeout: Seconds before the certs download is abandoned
            transport: Optional httpx transport (tests use httpx.MockTransport)
            jwks: Fixed key set; when given, Google's certs are never fetched
        """
        self.client_id = client_id
        self.timeout = timeout
        self._transport = transport
        self._static_jwks = jwks is not None
        self._jwks: Optional[Dict[str, Any]] = jwks
        self._fetched_at = 0.0

    # -------------------------------------------------------------------------
    # KEY SET
    # -------------------------------------------------------------------------

    def _knows_key(self, kid: Optional[str]) -> bool:
        if not self._jwks:
            return False
        if kid is None:
            return True
        return any(key.get("kid") == kid for key in self._jwks.get("keys", []))

    async def _fetch_jwks(self) -> Dict[str, Any]:
        """
        Download Google's signing keys.

        Raises:
            ProviderExchangeFailed: If the key set cannot be downloaded
        """
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.get(GOOGLE_CERTS_URL)
            except httpx.RequestError as e:
                logger.error(f"Network error fetching Google certs: {e}")
                raise ProviderExchangeFailed(f"Could not fetch Google certs: {e}") from e

        if response.status_code != 200:
            logger.error(f"Fetching Google certs returned status {response.status_code}")
            raise ProviderExchangeFailed("Could not fetch Google certs")

        try:
            jwks = response.json()
        except ValueError as e:
            raise ProviderExchangeFailed("Malformed Google certs response") from e

        logger.info(f"Fetched {len(jwks.get('keys', []))} Google signing keys")
        return jwks

    async def _get_jwks(self, kid: Optional[str]) -> Dict[str, Any]:
        if self._static_jwks:
            return self._jwks

        expired = time.monotonic() - self._fetched_at > CERTS_CACHE_SECONDS
        if expired or not self._knows_key(kid):
            self._jwks = await self._fetch_jwks()
            self._fetched_at = time.monotonic()
        return self._jwks

    # -------------------------------------------------------------------------
    # VERIFICATION
    # -------------------------------------------------------------------------

    async def verify(self, id_token: Optional[str], access_token: Optional[str] = None) -> UserInfo:
        """
        Verify an id_token and return the identity it asserts.

        Args:
            id_token: Raw id_token from the token endpoint
            access_token: Access token issued with it (checked against at_hash)

        Returns:
            UserInfo built from the verified claims

        Raises:
            IdentityVerificationFailed: Missing token, bad signature, wrong
                                        audience/issuer, expired, no subject
            ProviderExchangeFailed: Google's certs could not be downloaded
        """
        if not id_token:
            raise IdentityVerificationFailed("Token response has no id_token")

        try:
            header = jwt.get_unverified_header(id_token)
        except JWTError as e:
            raise IdentityVerificationFailed(f"Malformed id_token: {e}") from e

        jwks = await self._get_jwks(header.get("kid"))

        try:
            payload = jwt.decode(
                id_token,
                jwks,
                algorithms=["RS256"],
                audience=self.client_id,
                issuer=GOOGLE_ISSUERS,
                access_token=access_token,
            )
        except JWTError as e:
            logger.warning(f"id_token verification failed: {e}")
            raise IdentityVerificationFailed(f"id_token verification failed: {e}") from e

        try:
            claims = GoogleIdTokenClaims(**payload)
        except ValueError as e:
            raise IdentityVerificationFailed("id_token is missing the subject claim") from e

        return UserInfo(
            provider_user_id=claims.sub,
            email=claims.email,
            name=claims.name,
            picture_url=claims.picture,
            extra_data={
                "email_verified": claims.email_verified,
                "given_name": claims.given_name,
                "family_name": claims.family_name,
                "locale": claims.locale,
            },
        )
