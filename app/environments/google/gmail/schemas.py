"""
Gmail Schemas - inbox message summaries.

Reference: https://developers.google.com/gmail/api/reference/rest/v1/users.messages
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class EmailSummary(BaseModel):
    """
    Header-level view of one Gmail message.

    Serialized as {"id", "from", "subject", "date", "snippet"}.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    sender: Optional[str] = Field(None, alias="from")
    subject: Optional[str] = None
    date: Optional[str] = None
    snippet: Optional[str] = None

    @classmethod
    def from_message(cls, message: Dict[str, Any]) -> "EmailSummary":
        """Build a summary from a users.messages.get (format=metadata) response."""
        headers = {
            header.get("name", "").lower(): header.get("value")
            for header in message.get("payload", {}).get("headers", [])
        }
        return cls(
            id=message["id"],
            sender=headers.get("from"),
            subject=headers.get("subject"),
            date=headers.get("date"),
            snippet=message.get("snippet"),
        )
