"""
UserCredential model - one row per person who signed in with Google.

The row holds both the user's profile snapshot and their Google token pair.
It is the only shared mutable resource of the token lifecycle: the
authorization code exchange creates it, refreshes and revocations mutate the
token fields, and account deletion removes it together with the user's notes
and reminders.

Token Fields:
=============
- access_token:            short-lived bearer credential (encrypted at rest)
- refresh_token:           long-lived credential, used only to mint access tokens
- access_token_expires_at: absolute expiry; NULL exactly when access_token is NULL
- token_version:           incremented on every token write (compare-and-set)
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.types import EncryptedText

if TYPE_CHECKING:
    from app.models.note import Note
    from app.models.reminder import Reminder


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes.

    SQLite drops tzinfo on DateTime(timezone=True) columns; PostgreSQL keeps it.
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class UserCredential(Base):
    """
    SQLAlchemy ORM model for the 'users' table.
    """

    __tablename__ = "users"

    # ---------------------------------------------------------------------------
    # IDENTITY
    # ---------------------------------------------------------------------------
    # id: internal user id, referenced by notes/reminders and session assertions
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # google_id: Google's immutable "sub" claim; login finds the row by it
    google_id: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )

    # ---------------------------------------------------------------------------
    # PROFILE SNAPSHOT (refreshed on every login)
    # ---------------------------------------------------------------------------
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # ---------------------------------------------------------------------------
    # GOOGLE TOKENS
    # ---------------------------------------------------------------------------
    access_token: Mapped[Optional[str]] = mapped_column(EncryptedText, nullable=True)
    refresh_token: Mapped[Optional[str]] = mapped_column(EncryptedText, nullable=True)
    access_token_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    token_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # ---------------------------------------------------------------------------
    # NOTIFICATION PREFERENCES
    # ---------------------------------------------------------------------------
    email_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    push_notifications: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ---------------------------------------------------------------------------
    # RELATIONSHIPS
    # ---------------------------------------------------------------------------
    # Deleting the user deletes their notes and reminders. The FK also has
    # ON DELETE CASCADE for deletes that bypass the ORM.
    notes: Mapped[list["Note"]] = relationship(
        "Note", back_populates="owner", cascade="all, delete-orphan"
    )
    reminders: Mapped[list["Reminder"]] = relationship(
        "Reminder", back_populates="owner", cascade="all, delete-orphan"
    )

    # ---------------------------------------------------------------------------
    # HELPER METHODS
    # ---------------------------------------------------------------------------
    def needs_refresh(self, skew: timedelta, now: Optional[datetime] = None) -> bool:
        """
        Check whether the access token must be refreshed before use.

        Args:
            skew: Safety margin subtracted from the true expiry
            now: Current time (defaults to UTC now)

        Returns:
            True if the token is absent, has no expiry, or expires within skew
        """
        if self.access_token is None or self.access_token_expires_at is None:
            return True
        current = now or datetime.now(timezone.utc)
        return ensure_utc(self.access_token_expires_at) - current < skew

    @property
    def is_connected(self) -> bool:
        """True while some Google credential is stored."""
        return self.access_token is not None or self.refresh_token is not None

    def __repr__(self) -> str:
        return f"<UserCredential(id={self.id}, google_id='{self.google_id}')>"
