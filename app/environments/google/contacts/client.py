"""
Google Contacts API Client - reads the user's connections via the People API.

API Reference:
==============
- people.connections.list: https://developers.google.com/people/api/rest/v1/people.connections/list
"""

import logging
from typing import Optional

from app.environments.google.api_client import GoogleAPIClient
from app.environments.google.auth.schemas import CONTACTS_SCOPES
from app.environments.google.contacts.schemas import Contact, ContactsPage


logger = logging.getLogger("pulse.environments.google.contacts")

PERSON_FIELDS = "names,emailAddresses,phoneNumbers,photos,organizations,biographies"

# People API hard limit for connections.list
MAX_PAGE_SIZE = 1000


class GoogleContactsClient(GoogleAPIClient):
    """
    People API client.

    Example:
        client = GoogleContactsClient(access_token="ya29.xxx")
        page = await client.list_connections(page_size=100)
    """

    service_name = "contacts"
    required_scopes = CONTACTS_SCOPES

    BASE_URL = "https://people.googleapis.com/v1"

    async def list_connections(
        self,
        page_size: int = 100,
        page_token: Optional[str] = None,
    ) -> ContactsPage:
        """
        List one page of the user's contacts.

        Args:
            page_size: Contacts per page (1-1000)
            page_token: nextPageToken from a previous page

        Returns:
            ContactsPage

        Raises:
            APIError: If the People API call fails
        """
        params = {
            "personFields": PERSON_FIELDS,
            "pageSize": max(1, min(page_size, MAX_PAGE_SIZE)),
            "sortOrder": "LAST_MODIFIED_DESCENDING",
        }
        if page_token:
            params["pageToken"] = page_token

        data = await self._make_request("GET", "/people/me/connections", params=params)

        contacts = [Contact.from_person(person) for person in data.get("connections", [])]

        logger.info(f"Fetched {len(contacts)} contacts")

        return ContactsPage(
            contacts=contacts,
            next_page_token=data.get("nextPageToken"),
            total=data.get("totalPeople"),
        )
