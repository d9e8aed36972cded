"""
Note schemas - request/response formats for the notes endpoints.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# REQUEST SCHEMAS
# ---------------------------------------------------------------------------

class NoteCreate(BaseModel):
    """
    Example request body:
    {
        "title": "Call Sam",
        "content": "About the Q3 renewal"
    }
    """
    title: str = Field(..., max_length=255)
    content: str

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class NoteUpdate(BaseModel):
    """Only provided fields are changed."""
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v.strip() if v is not None else v


# ---------------------------------------------------------------------------
# RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class NoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
