"""
Token Guard - the single gate in front of every Google API call.

Given an internal user id, returns a Google access token that is valid right
now, refreshing it first when it is missing or close to expiry. Expected
outcomes are values, not exceptions:

    TokenResult.ok(token)      → use token for exactly this outbound call
    TokenResult.reauth(reason) → user must go through /auth/login again
    TokenResult.transient(...) → temporary failure on our side, retry later

Decision Flow:
==============
1. Load the row                       (missing → REAUTH_REQUIRED)
2. Token present and not within skew  → OK, no further I/O
3. No refresh token                   → REAUTH_REQUIRED, no outbound call
4. Take the per-user lock, re-read the row
   - another request already refreshed → OK with that token
   - refresh + compare-and-set write   → OK with the new token
   - RefreshError                      → REAUTH_REQUIRED (never retried)
   - write lost the race               → re-read; fresh token → OK, else REAUTH_REQUIRED
   - database failure                  → TRANSIENT_ERROR

Concurrency:
============
RefreshLocks serializes refreshes of the same user inside one process; the
store's compare-and-set covers several processes. Either way only a token
pair actually issued by Google is ever persisted.
"""

import asyncio
import logging
import uuid
import weakref
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.environments.base import RefreshError
from app.services.credential_store import CredentialStore
from app.services.token_refresher import TokenRefresher


logger = logging.getLogger("pulse.services.token_guard")


DEFAULT_REFRESH_SKEW = timedelta(minutes=5)


class TokenResultType(str, Enum):
    """Outcome of asking for a live access token."""
    OK = "ok"
    REAUTH_REQUIRED = "reauth_required"
    TRANSIENT_ERROR = "transient_error"


@dataclass(frozen=True)
class TokenResult:
    """
    Result of TokenGuard.get_live_access_token.

    Attributes:
        type: Outcome kind
        access_token: Set only when type is OK
        reason: Short machine-readable cause for the other outcomes
    """
    type: TokenResultType
    access_token: Optional[str] = None
    reason: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.type == TokenResultType.OK

    @classmethod
    def ok(cls, access_token: str) -> "TokenResult":
        return cls(TokenResultType.OK, access_token=access_token)

    @classmethod
    def reauth(cls, reason: str) -> "TokenResult":
        return cls(TokenResultType.REAUTH_REQUIRED, reason=reason)

    @classmethod
    def transient(cls, reason: str) -> "TokenResult":
        return cls(TokenResultType.TRANSIENT_ERROR, reason=reason)


class RefreshLocks:
    """
    Per-user asyncio locks, created on demand.

    Entries disappear once no coroutine holds or waits on the lock.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = weakref.WeakValueDictionary()

    def for_user(self, user_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock


# Process-wide registry shared by every request's TokenGuard
refresh_locks = RefreshLocks()


class TokenGuard:
    """
    Hand out live Google access tokens.

    Example:
        guard = TokenGuard(store, refresher, refresh_skew=timedelta(minutes=5))
        result = await guard.get_live_access_token(ctx.user_id)
        if result.is_ok:
            client = GoogleGmailClient(access_token=result.access_token)
    """

    def __init__(
        self,
        store: CredentialStore,
        refresher: TokenRefresher,
        refresh_skew: timedelta = DEFAULT_REFRESH_SKEW,
        locks: Optional[RefreshLocks] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            store: Credential Store bound to the current session
            refresher: Token Refresher writing through the same store
            refresh_skew: Refresh this long before the real expiry
            locks: Per-user lock registry (defaults to the process-wide one)
            clock: Returns the current UTC time (tests pin it)
        """
        self.store = store
        self.refresher = refresher
        self.refresh_skew = refresh_skew
        self.locks = locks if locks is not None else refresh_locks
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_live_access_token(self, user_id: uuid.UUID) -> TokenResult:
        """
        Return a currently valid access token for a user.

        Args:
            user_id: Internal user id from the session context

        Returns:
            TokenResult (OK, REAUTH_REQUIRED or TRANSIENT_ERROR)
        """
        try:
            credential = self.store.get(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Could not load credentials for user {user_id}: {e}")
            return TokenResult.transient("store_unavailable")

        if credential is None:
            logger.warning(f"No user row for {user_id}")
            return TokenResult.reauth("user_not_found")

        if not credential.needs_refresh(self.refresh_skew, self._clock()):
            return TokenResult.ok(credential.access_token)

        if not credential.refresh_token:
            logger.info(f"Access token unusable and no refresh token for user {user_id}")
            return TokenResult.reauth("no_refresh_token")

        async with self.locks.for_user(user_id):
            return await self._refresh_locked(user_id)

    async def _refresh_locked(self, user_id: uuid.UUID) -> TokenResult:
        try:
            credential = self.store.reload(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Could not reload credentials for user {user_id}: {e}")
            return TokenResult.transient("store_unavailable")

        if credential is None:
            return TokenResult.reauth("user_not_found")

        # Another request refreshed while this one waited for the lock
        if not credential.needs_refresh(self.refresh_skew, self._clock()):
            return TokenResult.ok(credential.access_token)

        if not credential.refresh_token:
            return TokenResult.reauth("no_refresh_token")

        try:
            tokens = await self.refresher.refresh_and_store(credential)
        except RefreshError as e:
            logger.warning(
                f"Refresh failed for user {user_id}, re-authentication required: {e}",
                extra={"provider_body": e.provider_body},
            )
            return TokenResult.reauth("refresh_failed")
        except SQLAlchemyError as e:
            logger.error(f"Could not persist refreshed token for user {user_id}: {e}")
            return TokenResult.transient("store_unavailable")

        if tokens is not None:
            return TokenResult.ok(tokens.access_token)

        # The row changed during the refresh: revoked, re-login, or another worker
        try:
            credential = self.store.reload(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Could not reload credentials for user {user_id}: {e}")
            return TokenResult.transient("store_unavailable")
        if credential is not None and not credential.needs_refresh(self.refresh_skew, self._clock()):
            return TokenResult.ok(credential.access_token)
        return TokenResult.reauth("credentials_changed")
