"""
Tests for the /auth endpoints.

Google is replaced by a GoogleAuthClient on an httpx.MockTransport, or the
Code Exchanger is overridden entirely. These tests verify:
- /auth/login redirects to Google with a stored state
- /auth/callback sets the session cookie or redirects with an error code
- Session assertions are read from the cookie or the Authorization header
- /auth/disconnect and /auth/account revoke tokens and report partial failures
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.config import settings
from app.deps import get_code_exchanger, get_google_auth_client, get_session_authenticator
from app.environments.base import IdentityVerificationFailed, ProviderExchangeFailed
from app.environments.google.auth import GoogleAuthClient
from app.main import app
from app.models.note import Note
from app.models.user import UserCredential
from app.services.code_exchanger import ExchangeResult


def google_client(handler=None) -> GoogleAuthClient:
    return GoogleAuthClient(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://testserver/auth/callback",
        transport=httpx.MockTransport(handler or (lambda request: httpx.Response(200))),
    )


class FakeExchanger:
    """Stands in for CodeExchanger; returns a result or raises."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.codes = []

    async def exchange(self, code: str) -> ExchangeResult:
        self.codes.append(code)
        if self.error is not None:
            raise self.error
        return self.result


def start_login(client: TestClient) -> str:
    """Run /auth/login and return the state Google would echo back."""
    response = client.get("/auth/login", follow_redirects=False)
    assert response.status_code == 302
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


def login_error(response) -> str:
    location = urlparse(response.headers["location"])
    assert location.path == "/login"
    return parse_qs(location.query)["error"][0]


@pytest.fixture
def configured_google():
    app.dependency_overrides[get_google_auth_client] = lambda: google_client()
    yield


class TestLogin:
    """Tests for GET /auth/login."""

    def test_redirects_to_google(self, client: TestClient, configured_google):
        """Should redirect to the consent screen with offline access."""
        response = client.get("/auth/login", follow_redirects=False)

        assert response.status_code == 302
        location = urlparse(response.headers["location"])
        params = parse_qs(location.query)
        assert location.netloc == "accounts.google.com"
        assert params["access_type"] == ["offline"]
        assert params["prompt"] == ["consent"]
        assert "https://www.googleapis.com/auth/contacts.readonly" in params["scope"][0]

    def test_not_configured(self, client: TestClient):
        """Should return 503 when Google credentials are missing."""
        app.dependency_overrides[get_google_auth_client] = lambda: GoogleAuthClient(
            "", "", "http://testserver/auth/callback"
        )

        response = client.get("/auth/login", follow_redirects=False)

        assert response.status_code == 503


class TestCallback:
    """Tests for GET /auth/callback."""

    def test_success_sets_cookie(
        self, client: TestClient, configured_google, test_user: UserCredential, test_user_token: str
    ):
        """Should set the session cookie and redirect to the dashboard."""
        exchanger = FakeExchanger(
            ExchangeResult(user_id=test_user.id, session_token=test_user_token, created=False)
        )
        app.dependency_overrides[get_code_exchanger] = lambda: exchanger
        state = start_login(client)

        response = client.get(
            "/auth/callback", params={"code": "4/0Ab", "state": state}, follow_redirects=False
        )

        assert response.status_code == 302
        assert response.headers["location"] == f"{settings.FRONTEND_URL}/dashboard"
        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"{settings.SESSION_COOKIE_NAME}={test_user_token}")
        assert "HttpOnly" in cookie
        assert exchanger.codes == ["4/0Ab"]

    def test_state_is_single_use(self, client: TestClient, configured_google, test_user, test_user_token):
        """Should reject a replayed state."""
        app.dependency_overrides[get_code_exchanger] = lambda: FakeExchanger(
            ExchangeResult(user_id=test_user.id, session_token=test_user_token, created=False)
        )
        state = start_login(client)
        client.get("/auth/callback", params={"code": "c", "state": state}, follow_redirects=False)

        response = client.get(
            "/auth/callback", params={"code": "c", "state": state}, follow_redirects=False
        )

        assert login_error(response) == "invalid_state"

    def test_unknown_state(self, client: TestClient):
        """Should redirect with invalid_state for a state we never issued."""
        exchanger = FakeExchanger()
        app.dependency_overrides[get_code_exchanger] = lambda: exchanger

        response = client.get(
            "/auth/callback", params={"code": "c", "state": "forged"}, follow_redirects=False
        )

        assert login_error(response) == "invalid_state"
        assert exchanger.codes == []

    def test_user_denied_consent(self, client: TestClient):
        """Should pass Google's error code to the frontend."""
        response = client.get(
            "/auth/callback", params={"error": "access_denied"}, follow_redirects=False
        )

        assert login_error(response) == "access_denied"

    def test_missing_code(self, client: TestClient):
        """Should redirect with missing_code when Google sent nothing."""
        response = client.get("/auth/callback", follow_redirects=False)

        assert login_error(response) == "missing_code"

    @pytest.mark.parametrize(
        "error, code",
        [
            (IdentityVerificationFailed("bad audience"), "identity_verification_failed"),
            (ProviderExchangeFailed("invalid_grant"), "exchange_failed"),
        ],
    )
    def test_exchange_failures(self, client: TestClient, configured_google, error, code):
        """Should map exchanger failures to login error codes without a cookie."""
        app.dependency_overrides[get_code_exchanger] = lambda: FakeExchanger(error=error)
        state = start_login(client)

        response = client.get(
            "/auth/callback", params={"code": "c", "state": state}, follow_redirects=False
        )

        assert login_error(response) == code
        assert "set-cookie" not in response.headers


class TestSessionTransport:
    """Tests for reading the session assertion."""

    def test_cookie(self, client: TestClient, test_user_token: str):
        """Should accept the session cookie."""
        client.cookies.set(settings.SESSION_COOKIE_NAME, test_user_token)

        response = client.get("/auth/status")

        assert response.status_code == 200

    def test_missing(self, client: TestClient):
        """Should return 401 UNAUTHENTICATED without a session."""
        response = client.get("/auth/status")

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHENTICATED"

    def test_invalid(self, client: TestClient):
        """Should return 401 INVALID_CREDENTIAL for a bad assertion."""
        response = client.get("/auth/status", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "INVALID_CREDENTIAL"

    def test_deleted_account(self, client: TestClient, db: Session, test_user, auth_headers):
        """Should return 401 when the session outlived the account."""
        db.delete(test_user)
        db.commit()

        response = client.get("/auth/status", headers=auth_headers)

        assert response.status_code == 401


class TestStatusAndLogout:
    """Tests for GET /auth/status and POST /auth/logout."""

    def test_status(self, client: TestClient, auth_headers: dict):
        """Should report the stored Google connection."""
        response = client.get("/auth/status", headers=auth_headers)

        data = response.json()
        assert data["connected"] is True
        assert data["has_refresh_token"] is True
        assert data["expires_at"] is not None

    def test_logout_clears_cookie_only(
        self, client: TestClient, db: Session, test_user: UserCredential, auth_headers: dict
    ):
        """Should expire the cookie and leave stored tokens alone."""
        response = client.post("/auth/logout", headers=auth_headers)

        assert response.status_code == 200
        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
        assert "Max-Age=0" in cookie
        db.refresh(test_user)
        assert test_user.refresh_token == "R1"


class TestDisconnect:
    """Tests for POST /auth/disconnect."""

    def test_disconnect(self, client: TestClient, db: Session, test_user, auth_headers):
        """Should revoke both tokens and report ok."""
        revoked = []

        def handler(request: httpx.Request) -> httpx.Response:
            revoked.append(parse_qs(request.content.decode())["token"][0])
            return httpx.Response(200)

        app.dependency_overrides[get_google_auth_client] = lambda: google_client(handler)

        response = client.post("/auth/disconnect", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["warnings"] == []
        assert sorted(revoked) == ["A1", "R1"]
        db.refresh(test_user)
        assert test_user.access_token is None
        assert test_user.refresh_token is None

    def test_disconnect_google_down(self, client: TestClient, db: Session, test_user, auth_headers):
        """Should clear tokens locally and warn when Google cannot confirm."""
        app.dependency_overrides[get_google_auth_client] = lambda: google_client(
            lambda request: httpx.Response(503)
        )

        response = client.post("/auth/disconnect", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "partial"
        assert len(response.json()["warnings"]) == 2
        db.refresh(test_user)
        assert test_user.is_connected is False

    def test_disconnect_requires_session(self, client: TestClient):
        """Should reject anonymous callers."""
        assert client.post("/auth/disconnect").status_code == 401


class TestDeleteAccount:
    """Tests for DELETE /auth/account."""

    def test_delete_account(
        self, client: TestClient, db: Session, test_user, test_note: Note, auth_headers
    ):
        """Should revoke, delete the user with their notes, and clear the cookie."""
        app.dependency_overrides[get_google_auth_client] = lambda: google_client()
        user_id = test_user.id

        response = client.delete("/auth/account", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Account deleted"
        assert "Max-Age=0" in response.headers["set-cookie"]
        db.expire_all()
        assert db.get(UserCredential, user_id) is None
        assert db.query(Note).count() == 0

    def test_delete_account_twice(self, client: TestClient, db: Session, test_user):
        """Should answer 404 once the account is gone."""
        app.dependency_overrides[get_google_auth_client] = lambda: google_client()
        headers = {"Authorization": f"Bearer {get_session_authenticator().issue(test_user.id)}"}
        client.delete("/auth/account", headers=headers)

        response = client.delete("/auth/account", headers=headers)

        assert response.status_code == 404
