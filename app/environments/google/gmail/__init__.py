"""
Gmail Module - read-only inbox access.
"""

from app.environments.google.gmail.client import GoogleGmailClient
from app.environments.google.gmail.schemas import EmailSummary

__all__ = [
    "GoogleGmailClient",
    "EmailSummary",
]
