"""
ORM models.

Importing any model module runs this file first, so every mapped class is
registered before relationships are configured.
"""

from app.models.user import UserCredential
from app.models.note import Note
from app.models.reminder import Reminder

__all__ = [
    "UserCredential",
    "Note",
    "Reminder",
]
