"""
Credential Store - persistence layer for the users table.

Every read and write of a user's Google tokens goes through this class. It
owns the two rules that keep the stored token pair trustworthy:

Refresh-token preservation:
    Google does not always return a refresh token (repeat consent, most
    refresh responses). A missing value never overwrites the stored one:
    refresh_token = new_value or existing_value.

Compare-and-set on token_version:
    Every token write bumps token_version. A refresh result is written only
    if the row still has the version that was read before the refresh
    started, so a slow refresh can never resurrect tokens that a concurrent
    revoke cleared, nor overwrite a newer pair.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.environments.base import OAuthTokens, UserInfo
from app.models.user import UserCredential


logger = logging.getLogger("pulse.services.credential_store")


class UserNotFound(Exception):
    """Raised when no users row exists for an internal id."""

    def __init__(self, user_id: uuid.UUID):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class CredentialStore:
    """
    Access layer for UserCredential rows, bound to one database session.

    Example:
        store = CredentialStore(db)
        user, created = store.upsert_from_login(identity, tokens)
    """

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # READS
    # -------------------------------------------------------------------------

    def get(self, user_id: uuid.UUID) -> Optional[UserCredential]:
        """Load a user by internal id (identity map first)."""
        return self.db.get(UserCredential, user_id)

    def reload(self, user_id: uuid.UUID) -> Optional[UserCredential]:
        """Load a user straight from the database, overwriting cached state."""
        return self.db.get(UserCredential, user_id, populate_existing=True)

    def require(self, user_id: uuid.UUID) -> UserCredential:
        """
        Raises:
            UserNotFound: If the row does not exist
        """
        user = self.get(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    def get_by_google_id(self, google_id: str) -> Optional[UserCredential]:
        return self.db.query(UserCredential).filter(
            UserCredential.google_id == google_id
        ).first()

    # -------------------------------------------------------------------------
    # LOGIN
    # -------------------------------------------------------------------------

    def upsert_from_login(
        self,
        identity: UserInfo,
        tokens: OAuthTokens,
    ) -> Tuple[UserCredential, bool]:
        """
        Create or update the row for a verified Google identity.

        Args:
            identity: Verified id_token claims
            tokens: Token pair from the code exchange

        Returns:
            (user, created) where created is True for a first login
        """
        user = self.get_by_google_id(identity.provider_user_id)
        if user is not None:
            self._apply_login(user, identity, tokens)
            self._commit()
            logger.info(f"Updated credentials for user {user.id} on login")
            return user, False

        user = UserCredential(google_id=identity.provider_user_id, token_version=0)
        self._apply_login(user, identity, tokens)
        self.db.add(user)

        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent first login for the same Google account won the insert
            self.db.rollback()
            user = self.get_by_google_id(identity.provider_user_id)
            if user is None:
                raise
            self._apply_login(user, identity, tokens)
            self._commit()
            logger.info(f"Updated credentials for user {user.id} after concurrent first login")
            return user, False

        self.db.refresh(user)
        logger.info(f"Created user {user.id} on first login")
        return user, True

    @staticmethod
    def _apply_login(user: UserCredential, identity: UserInfo, tokens: OAuthTokens) -> None:
        user.email = identity.email
        user.display_name = identity.name
        user.avatar_url = identity.picture_url
        user.access_token = tokens.access_token
        user.access_token_expires_at = tokens.expires_at
        if tokens.refresh_token:
            user.refresh_token = tokens.refresh_token
        user.token_version = (user.token_version or 0) + 1

    # -------------------------------------------------------------------------
    # TOKEN WRITES
    # -------------------------------------------------------------------------

    def save_refreshed_tokens(
        self,
        user_id: uuid.UUID,
        tokens: OAuthTokens,
        expected_version: int,
    ) -> bool:
        """
        Persist a refresh result if the row is unchanged since it was read.

        Args:
            user_id: Internal user id
            tokens: Result of a successful refresh
            expected_version: token_version read before the refresh started

        Returns:
            True if written, False if the row changed meanwhile (result discarded)
        """
        values = {
            "access_token": tokens.access_token,
            "access_token_expires_at": tokens.expires_at,
            "token_version": UserCredential.token_version + 1,
            "updated_at": datetime.now(timezone.utc),
        }
        if tokens.refresh_token:
            values["refresh_token"] = tokens.refresh_token

        statement = (
            update(UserCredential)
            .where(
                UserCredential.id == user_id,
                UserCredential.token_version == expected_version,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(statement)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        written = result.rowcount == 1
        if not written:
            logger.warning(f"Discarded refresh result for user {user_id}: credentials changed")
        return written

    def clear_tokens(self, user_id: uuid.UUID) -> UserCredential:
        """
        Null out the token fields (disconnect / revoke).

        Raises:
            UserNotFound: If the row does not exist
        """
        user = self.require(user_id)
        user.access_token = None
        user.refresh_token = None
        user.access_token_expires_at = None
        user.token_version = (user.token_version or 0) + 1
        self._commit()
        logger.info(f"Cleared stored Google tokens for user {user_id}")
        return user

    # -------------------------------------------------------------------------
    # PROFILE & PREFERENCES
    # -------------------------------------------------------------------------

    def update_profile(self, user_id: uuid.UUID, display_name: Optional[str]) -> UserCredential:
        user = self.require(user_id)
        user.display_name = display_name
        self._commit()
        return user

    def update_notification_preferences(
        self,
        user_id: uuid.UUID,
        email_notifications: bool,
        push_notifications: bool,
    ) -> UserCredential:
        user = self.require(user_id)
        user.email_notifications = email_notifications
        user.push_notifications = push_notifications
        self._commit()
        return user

    # -------------------------------------------------------------------------
    # DELETION
    # -------------------------------------------------------------------------

    def delete(self, user_id: uuid.UUID) -> None:
        """
        Delete the row together with the user's notes and reminders.

        Raises:
            UserNotFound: If the row does not exist
        """
        user = self.require(user_id)
        self.db.delete(user)
        self._commit()
        logger.info(f"Deleted user {user_id}")

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
