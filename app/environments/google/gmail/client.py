"""
Gmail API Client - inbox summaries.

Listing messages only returns ids, so each message is fetched again with
format=metadata for its From/Subject/Date headers. The detail calls run
concurrently over one connection pool.

API Reference:
==============
- users.messages.list: https://developers.google.com/gmail/api/reference/rest/v1/users.messages/list
- users.messages.get:  https://developers.google.com/gmail/api/reference/rest/v1/users.messages/get
"""

import asyncio
import logging
from typing import List

import httpx

from app.environments.google.api_client import GoogleAPIClient
from app.environments.google.auth.schemas import GMAIL_SCOPES
from app.environments.google.gmail.schemas import EmailSummary


logger = logging.getLogger("pulse.environments.google.gmail")

METADATA_HEADERS = ["From", "Subject", "Date"]


class GoogleGmailClient(GoogleAPIClient):
    """
    Gmail API client.

    Example:
        client = GoogleGmailClient(access_token="ya29.xxx")
        emails = await client.list_inbox(max_results=20)
    """

    service_name = "gmail"
    required_scopes = GMAIL_SCOPES

    BASE_URL = "https://gmail.googleapis.com/gmail/v1"

    async def list_inbox(self, max_results: int = 20) -> List[EmailSummary]:
        """
        List the newest inbox messages.

        Args:
            max_results: Number of messages (1-100)

        Returns:
            EmailSummary list, newest first

        Raises:
            APIError: If any Gmail call fails
        """
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            listing = await self._make_request(
                "GET",
                "/users/me/messages",
                params={"labelIds": "INBOX", "maxResults": max(1, min(max_results, 100))},
                client=client,
            )

            message_ids = [message["id"] for message in listing.get("messages", [])]
            if not message_ids:
                return []

            messages = await asyncio.gather(
                *(
                    self._make_request(
                        "GET",
                        f"/users/me/messages/{message_id}",
                        params={"format": "metadata", "metadataHeaders": METADATA_HEADERS},
                        client=client,
                    )
                    for message_id in message_ids
                )
            )

        logger.info(f"Fetched {len(messages)} inbox messages")
        return [EmailSummary.from_message(message) for message in messages]
