"""
Token Refresher - mints a new access token from a stored refresh token.
"""

import logging
from typing import Optional

from app.environments.base import EnvironmentProvider, OAuthTokens
from app.models.user import UserCredential
from app.services.credential_store import CredentialStore


logger = logging.getLogger("pulse.services.token_refresher")


class TokenRefresher:
    """
    Calls the provider's refresh grant and writes the result back.

    Not safe to run concurrently for the same user without coordination;
    TokenGuard serializes callers per user and the store's compare-and-set
    rejects results that raced with another write.
    """

    def __init__(self, provider: EnvironmentProvider, store: CredentialStore):
        """
        Args:
            provider: OAuth provider client (GoogleAuthClient)
            store: Credential Store bound to the current session
        """
        self.provider = provider
        self.store = store

    async def refresh(self, refresh_token: str) -> OAuthTokens:
        """
        Exchange a refresh token for a new access token.

        Raises:
            RefreshError: Non-2xx response, network failure or timeout
        """
        return await self.provider.refresh_access_token(refresh_token)

    async def refresh_and_store(self, credential: UserCredential) -> Optional[OAuthTokens]:
        """
        Refresh the credential's access token and persist the result.

        The refresh token and version are read from the row as it was loaded
        by this caller, never from shared state.

        Args:
            credential: Freshly loaded row with a refresh token

        Returns:
            The new tokens, or None if the row changed while Google was
            answering and the result was discarded

        Raises:
            RefreshError: If the provider rejected the refresh
            SQLAlchemyError: If the result could not be written
        """
        user_id = credential.id
        expected_version = credential.token_version
        refresh_token = credential.refresh_token

        tokens = await self.refresh(refresh_token)

        if not self.store.save_refreshed_tokens(user_id, tokens, expected_version):
            return None

        logger.info(
            f"Refreshed Google token for user {user_id}",
            extra={"rotated_refresh_token": tokens.refresh_token is not None},
        )
        return tokens
