"""
Tests for the Authorization Code Exchanger.

The provider is mocked; the id_token verifier is real and checks tokens
signed with the test RSA key.

These tests verify:
- A valid code creates the user and returns a working session assertion
- Logging in again updates the same row and keeps the refresh token
- An id_token for another audience fails with no database write
- Provider failures propagate unchanged
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.orm import Session

from app.core.security import SessionAuthenticator
from app.environments.base import IdentityVerificationFailed, OAuthTokens, ProviderExchangeFailed
from app.environments.google.auth import GoogleIdTokenVerifier
from app.models.user import UserCredential
from app.services.code_exchanger import CodeExchanger
from app.services.credential_store import CredentialStore


AUTHENTICATOR = SessionAuthenticator(secret_key="exchanger-test-secret")


def token_response(id_token, access_token: str = "A1", refresh_token="R1") -> OAuthTokens:
    return OAuthTokens(
        access_token=access_token,
        refresh_token=refresh_token,
        id_token=id_token,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=3599),
    )


@pytest.fixture
def verifier(signing_keys: dict, google_client_id: str) -> GoogleIdTokenVerifier:
    return GoogleIdTokenVerifier(client_id=google_client_id, jwks=signing_keys["jwks"])


def build_exchanger(db: Session, verifier: GoogleIdTokenVerifier, tokens: OAuthTokens):
    provider = MagicMock()
    provider.exchange_code_for_tokens = AsyncMock(return_value=tokens)
    exchanger = CodeExchanger(
        provider=provider,
        verifier=verifier,
        store=CredentialStore(db),
        authenticator=AUTHENTICATOR,
    )
    return exchanger, provider


class TestExchange:
    """Tests for CodeExchanger.exchange()."""

    @pytest.mark.asyncio
    async def test_first_login(self, db: Session, verifier, make_id_token):
        """Should create the user and issue a session for it."""
        exchanger, provider = build_exchanger(db, verifier, token_response(make_id_token()))

        result = await exchanger.exchange("4/0Ab-code")

        provider.exchange_code_for_tokens.assert_awaited_once_with("4/0Ab-code")
        assert result.created is True
        assert AUTHENTICATOR.authenticate(result.session_token) == result.user_id

        user = db.get(UserCredential, result.user_id)
        assert user.google_id == "google-sub-123"
        assert user.email == "jane@gmail.com"
        assert user.display_name == "Jane Doe"
        assert user.access_token == "A1"
        assert user.refresh_token == "R1"

    @pytest.mark.asyncio
    async def test_repeat_login_keeps_refresh_token(self, db: Session, verifier, make_id_token):
        """Should update the same row and keep R1 when Google sends no refresh token."""
        first_exchanger, _ = build_exchanger(db, verifier, token_response(make_id_token()))
        first = await first_exchanger.exchange("code-1")

        second_exchanger, _ = build_exchanger(
            db, verifier, token_response(make_id_token(), access_token="A2", refresh_token=None)
        )
        second = await second_exchanger.exchange("code-2")

        assert second.created is False
        assert second.user_id == first.user_id
        assert db.query(UserCredential).count() == 1

        user = db.get(UserCredential, second.user_id)
        assert user.access_token == "A2"
        assert user.refresh_token == "R1"

    @pytest.mark.asyncio
    async def test_wrong_audience_writes_nothing(self, db: Session, verifier, make_id_token):
        """Should fail identity verification before touching the database."""
        id_token = make_id_token(aud="someone-else.apps.googleusercontent.com")
        exchanger, _ = build_exchanger(db, verifier, token_response(id_token))

        with pytest.raises(IdentityVerificationFailed):
            await exchanger.exchange("code")

        assert db.query(UserCredential).count() == 0

    @pytest.mark.asyncio
    async def test_missing_id_token(self, db: Session, verifier):
        """Should fail identity verification when Google sent no id_token."""
        exchanger, _ = build_exchanger(db, verifier, token_response(None))

        with pytest.raises(IdentityVerificationFailed):
            await exchanger.exchange("code")

        assert db.query(UserCredential).count() == 0

    @pytest.mark.asyncio
    async def test_forged_id_token(self, db: Session, verifier, make_id_token, foreign_private_pem):
        """Should reject an id_token not signed by a published key."""
        id_token = make_id_token(private_pem=foreign_private_pem)
        exchanger, _ = build_exchanger(db, verifier, token_response(id_token))

        with pytest.raises(IdentityVerificationFailed):
            await exchanger.exchange("code")

        assert db.query(UserCredential).count() == 0

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self, db: Session, verifier):
        """Should surface ProviderExchangeFailed without writing."""
        provider = MagicMock()
        provider.exchange_code_for_tokens = AsyncMock(
            side_effect=ProviderExchangeFailed("invalid_grant")
        )
        exchanger = CodeExchanger(provider, verifier, CredentialStore(db), AUTHENTICATOR)

        with pytest.raises(ProviderExchangeFailed):
            await exchanger.exchange("used-code")

        assert db.query(UserCredential).count() == 0
