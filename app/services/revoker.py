"""
Revoker - disconnects a user's Google account.

Local state is cleared first, before any network call: once revoke() has
started, the stored tokens can no longer be handed out, even if Google is
unreachable. Remote revocation of the access token and the refresh token is
then attempted independently; one failing does not skip the other.

Results:
========
- ACK:             nothing to revoke, or every remote revocation succeeded
- PARTIAL_FAILURE: local state cleared, at least one remote revocation failed
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from app.environments.base import EnvironmentProvider
from app.services.credential_store import CredentialStore


logger = logging.getLogger("pulse.services.revoker")


class RevokeStatus(str, Enum):
    ACK = "ack"
    PARTIAL_FAILURE = "partial_failure"


@dataclass
class RevokeResult:
    """
    Attributes:
        status: ACK or PARTIAL_FAILURE
        failed: Names of the tokens Google may still honor
    """
    status: RevokeStatus
    failed: List[str] = field(default_factory=list)

    @property
    def is_ack(self) -> bool:
        return self.status == RevokeStatus.ACK


class Revoker:
    """
    Example:
        result = await Revoker(provider, store).revoke(ctx.user_id)
        if not result.is_ack:
            warn_user(result.failed)
    """

    def __init__(self, provider: EnvironmentProvider, store: CredentialStore):
        self.provider = provider
        self.store = store

    async def revoke(self, user_id: uuid.UUID) -> RevokeResult:
        """
        Invalidate a user's Google tokens locally and at Google.

        Args:
            user_id: Internal user id

        Returns:
            RevokeResult

        Raises:
            UserNotFound: If the user row does not exist
        """
        credential = self.store.require(user_id)

        pending = [
            (name, token)
            for name, token in (
                ("access_token", credential.access_token),
                ("refresh_token", credential.refresh_token),
            )
            if token
        ]

        if not pending and credential.access_token_expires_at is None:
            logger.info(f"No Google tokens stored for user {user_id}; nothing to revoke")
            return RevokeResult(status=RevokeStatus.ACK)

        self.store.clear_tokens(user_id)

        failed: List[str] = []
        for name, token in pending:
            try:
                revoked = await self.provider.revoke_token(token)
            except Exception as e:
                logger.warning(f"Failed to revoke {name} for user {user_id}: {e}")
                revoked = False
            if not revoked:
                failed.append(name)

        if failed:
            logger.warning(
                f"Partial revocation for user {user_id}",
                extra={"failed": failed},
            )
            return RevokeResult(status=RevokeStatus.PARTIAL_FAILURE, failed=failed)

        logger.info(f"Revoked Google tokens for user {user_id}")
        return RevokeResult(status=RevokeStatus.ACK)
