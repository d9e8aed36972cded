"""
Authorization Code Exchanger - turns a Google callback into a signed-in user.

Steps:
======
1. Exchange the one-time code for {access_token, refresh_token?, id_token}
2. Verify the id_token (signature, audience, issuer, expiry, at_hash)
3. Upsert the users row by Google subject id (refresh token kept if absent)
4. Issue this system's session assertion

Nothing is written before step 2 succeeds. Errors are terminal for the call
and never retried: the authorization code is single-use, so the user has to
restart the login.
"""

import logging
import uuid
from dataclasses import dataclass

from app.core.security import SessionAuthenticator
from app.environments.base import EnvironmentProvider
from app.environments.google.auth.id_token import GoogleIdTokenVerifier
from app.services.credential_store import CredentialStore


logger = logging.getLogger("pulse.services.code_exchanger")


@dataclass(frozen=True)
class ExchangeResult:
    """
    Attributes:
        user_id: Internal id of the signed-in user
        session_token: Signed session assertion for the caller
        created: True if this login created the user
    """
    user_id: uuid.UUID
    session_token: str
    created: bool


class CodeExchanger:
    """
    One-shot login flow component.

    Example:
        exchanger = CodeExchanger(provider, verifier, store, authenticator)
        result = await exchanger.exchange(code)
    """

    def __init__(
        self,
        provider: EnvironmentProvider,
        verifier: GoogleIdTokenVerifier,
        store: CredentialStore,
        authenticator: SessionAuthenticator,
    ):
        self.provider = provider
        self.verifier = verifier
        self.store = store
        self.authenticator = authenticator

    async def exchange(self, code: str) -> ExchangeResult:
        """
        Complete a login from an authorization code.

        Args:
            code: Authorization code from the callback query string

        Returns:
            ExchangeResult

        Raises:
            ProviderExchangeFailed: Token endpoint or certs unreachable / rejected the code
            IdentityVerificationFailed: id_token missing or invalid (no database write)
        """
        tokens = await self.provider.exchange_code_for_tokens(code)

        identity = await self.verifier.verify(tokens.id_token, access_token=tokens.access_token)

        user, created = self.store.upsert_from_login(identity, tokens)

        if tokens.refresh_token is None:
            logger.warning(
                f"Google issued no refresh token for user {user.id}",
                extra={"new_user": created, "has_stored_refresh_token": user.refresh_token is not None},
            )

        session_token = self.authenticator.issue(user.id)

        logger.info(
            f"Login completed for user {user.id}",
            extra={"new_user": created},
        )

        return ExchangeResult(user_id=user.id, session_token=session_token, created=created)
