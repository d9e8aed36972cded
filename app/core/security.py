"""
Session Authenticator - issues and verifies this system's own session assertions.

A session assertion is a signed JWT carrying the internal user id. It is
independent of Google's tokens: verifying it needs only the server secret,
no database lookup and no network call.

JWT Structure:
==============
    Header:  {"alg": "HS256", "typ": "JWT"}
    Payload: {"sub": "<user uuid>", "type": "session", "iat": ..., "exp": ...}

Errors:
=======
- Unauthenticated:   nothing was presented
- InvalidCredential: bad signature, expired, wrong type or malformed subject
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt


# Value of the "type" claim; keeps other JWTs signed with the same key out
SESSION_TOKEN_TYPE = "session"


class SessionError(Exception):
    """Base exception for session assertion failures."""
    pass


class Unauthenticated(SessionError):
    """Raised when no session credential was presented."""
    pass


class InvalidCredential(SessionError):
    """Raised when the session credential fails verification."""
    pass


class SessionAuthenticator:
    """
    Issue and verify session assertions.

    Example:
        authenticator = SessionAuthenticator(secret_key="...", expire_minutes=60)
        raw = authenticator.issue(user.id)
        user_id = authenticator.authenticate(raw)
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ):
        """
        Args:
            secret_key: Server-held signing secret
            algorithm: JWT signing algorithm
            expire_minutes: Validity window of issued assertions
        """
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @property
    def max_age_seconds(self) -> int:
        """Validity window in seconds (used for the cookie max-age)."""
        return self.expire_minutes * 60

    def issue(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> str:
        """
        Create a signed session assertion for a user.

        Args:
            user_id: Internal user id to encode in the "sub" claim
            now: Issue time (defaults to current UTC time)

        Returns:
            Signed JWT string
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "type": SESSION_TOKEN_TYPE,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def authenticate(self, raw: Optional[str]) -> uuid.UUID:
        """
        Verify a session assertion and return the user id it carries.

        Pure verification: signature and expiry only.

        Args:
            raw: The session assertion as presented by the caller

        Returns:
            The internal user id encoded at issuance time

        Raises:
            Unauthenticated: If raw is missing or empty
            InvalidCredential: If the assertion fails verification
        """
        if not raw:
            raise Unauthenticated("No session credential presented")

        try:
            # jwt.decode checks the signature and the "exp" claim
            payload = jwt.decode(raw, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidCredential(f"Session verification failed: {e}") from e

        if payload.get("type") != SESSION_TOKEN_TYPE:
            raise InvalidCredential("Not a session assertion")

        subject = payload.get("sub")
        if not subject:
            raise InvalidCredential("Session assertion has no subject")

        try:
            return uuid.UUID(subject)
        except (TypeError, ValueError) as e:
            raise InvalidCredential("Session subject is not a valid user id") from e
