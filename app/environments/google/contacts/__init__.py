"""
Google Contacts Module - People API connections.
"""

from app.environments.google.contacts.client import GoogleContactsClient
from app.environments.google.contacts.schemas import Contact, ContactsPage

__all__ = [
    "GoogleContactsClient",
    "Contact",
    "ContactsPage",
]
