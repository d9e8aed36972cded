"""
Tests for the Google resource API clients (Contacts, Gmail, Drive, Photos).

Google is replaced with httpx.MockTransport handlers. These tests verify:
- Requests carry the access token as a Bearer header
- Responses are mapped to the API schemas
- 401/403 become auth-failure APIErrors, other failures plain APIErrors
"""

import httpx
import pytest

from app.environments.base import APIError
from app.environments.google import (
    GoogleContactsClient,
    GoogleDriveClient,
    GoogleGmailClient,
    GooglePhotosClient,
)


def transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


class TestContactsClient:
    """Tests for GoogleContactsClient.list_connections()."""

    @pytest.mark.asyncio
    async def test_list_connections(self):
        """Should flatten People API persons into contacts."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["path"] = request.url.path
            seen["page_token"] = request.url.params.get("pageToken")
            return httpx.Response(200, json={
                "connections": [
                    {
                        "resourceName": "people/c1",
                        "names": [{"displayName": "Sam Lee"}],
                        "emailAddresses": [{"value": "sam@example.com"}, {"value": "old@example.com"}],
                        "phoneNumbers": [{"value": "+1 555 0100"}],
                        "organizations": [{"name": "Acme", "title": "CTO"}],
                    },
                    {"resourceName": "people/c2"},
                ],
                "nextPageToken": "page-2",
                "totalPeople": 2,
            })

        client = GoogleContactsClient("A1", transport=transport(handler))
        page = await client.list_connections(page_size=50, page_token="page-1")

        assert seen == {"auth": "Bearer A1", "path": "/v1/people/me/connections", "page_token": "page-1"}
        assert page.next_page_token == "page-2"
        assert page.total == 2
        sam = page.contacts[0]
        assert sam.google_contact_id == "people/c1"
        assert sam.name == "Sam Lee"
        assert sam.email == "sam@example.com"
        assert sam.company == "Acme"
        assert sam.job_title == "CTO"
        assert page.contacts[1].name is None

    @pytest.mark.asyncio
    async def test_serializes_camel_case(self):
        """Should emit camelCase keys for the frontend."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"connections": [{"resourceName": "people/c1"}]})

        page = await GoogleContactsClient("A1", transport=transport(handler)).list_connections()
        data = page.model_dump(by_alias=True)

        assert data["contacts"][0]["googleContactId"] == "people/c1"
        assert "nextPageToken" in data

    @pytest.mark.asyncio
    async def test_unauthorized(self):
        """Should raise an auth-failure APIError on 401."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": {"status": "UNAUTHENTICATED"}})

        with pytest.raises(APIError) as exc_info:
            await GoogleContactsClient("A1", transport=transport(handler)).list_connections()

        assert exc_info.value.status_code == 401
        assert exc_info.value.is_auth_failure is True


class TestGmailClient:
    """Tests for GoogleGmailClient.list_inbox()."""

    @pytest.mark.asyncio
    async def test_list_inbox(self):
        """Should list inbox ids and fetch each message's headers."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/gmail/v1/users/me/messages":
                assert request.url.params["labelIds"] == "INBOX"
                return httpx.Response(200, json={"messages": [{"id": "m1"}, {"id": "m2"}]})
            message_id = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={
                "id": message_id,
                "snippet": f"snippet {message_id}",
                "payload": {"headers": [
                    {"name": "From", "value": "Sam <sam@example.com>"},
                    {"name": "Subject", "value": f"Subject {message_id}"},
                    {"name": "Date", "value": "Tue, 2 Dec 2025 10:00:00 +0000"},
                ]},
            })

        emails = await GoogleGmailClient("A1", transport=transport(handler)).list_inbox(max_results=2)

        assert [email.id for email in emails] == ["m1", "m2"]
        assert emails[0].sender == "Sam <sam@example.com>"
        assert emails[1].subject == "Subject m2"
        assert emails[0].model_dump(by_alias=True)["from"] == "Sam <sam@example.com>"

    @pytest.mark.asyncio
    async def test_empty_inbox(self):
        """Should return an empty list without fetching details."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"resultSizeEstimate": 0})

        assert await GoogleGmailClient("A1", transport=transport(handler)).list_inbox() == []

    @pytest.mark.asyncio
    async def test_scope_missing(self):
        """Should raise an auth-failure APIError on 403."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403)

        with pytest.raises(APIError) as exc_info:
            await GoogleGmailClient("A1", transport=transport(handler)).list_inbox()

        assert exc_info.value.status_code == 403
        assert exc_info.value.is_auth_failure is True


class TestDriveClient:
    """Tests for GoogleDriveClient.list_files()."""

    @pytest.mark.asyncio
    async def test_list_files(self):
        """Should parse file metadata and the next page token."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["q"] == "trashed = false"
            return httpx.Response(200, json={
                "files": [
                    {
                        "id": "f1",
                        "name": "Q3 plan",
                        "mimeType": "application/vnd.google-apps.document",
                        "modifiedTime": "2025-12-01T09:30:00.000Z",
                    },
                    {"id": "f2", "name": "Clients", "mimeType": "application/vnd.google-apps.folder"},
                ],
                "nextPageToken": "next",
            })

        page = await GoogleDriveClient("A1", transport=transport(handler)).list_files()

        assert [f.id for f in page.files] == ["f1", "f2"]
        assert page.files[0].modified_time.year == 2025
        assert page.files[0].is_folder() is False
        assert page.files[1].is_folder() is True
        assert page.next_page_token == "next"

    @pytest.mark.asyncio
    async def test_server_error(self):
        """Should raise a non-auth APIError on 500."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="backend error")

        with pytest.raises(APIError) as exc_info:
            await GoogleDriveClient("A1", transport=transport(handler)).list_files()

        assert exc_info.value.status_code == 500
        assert exc_info.value.is_auth_failure is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>maintenance</html>"),
            httpx.Response(200, json=["not", "an", "object"]),
        ],
    )
    async def test_malformed_body(self, response):
        """Should raise a non-auth APIError when a 200 body is not a JSON object."""
        with pytest.raises(APIError) as exc_info:
            await GoogleDriveClient("A1", transport=transport(lambda request: response)).list_files()

        assert exc_info.value.status_code == 200
        assert exc_info.value.is_auth_failure is False


class TestPhotosClient:
    """Tests for GooglePhotosClient.list_media_items()."""

    @pytest.mark.asyncio
    async def test_list_media_items(self):
        """Should parse media items."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["pageSize"] == "25"
            return httpx.Response(200, json={
                "mediaItems": [{
                    "id": "p1",
                    "filename": "IMG_0001.jpg",
                    "mimeType": "image/jpeg",
                    "baseUrl": "https://lh3.googleusercontent.com/p1",
                    "mediaMetadata": {"creationTime": "2025-11-30T18:00:00Z", "width": "4032"},
                }],
            })

        page = await GooglePhotosClient("A1", transport=transport(handler)).list_media_items(page_size=25)

        assert page.media_items[0].filename == "IMG_0001.jpg"
        assert page.media_items[0].media_metadata.width == "4032"
        assert page.next_page_token is None

    @pytest.mark.asyncio
    async def test_network_error(self):
        """Should raise an APIError without status when Google is unreachable."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(APIError) as exc_info:
            await GooglePhotosClient("A1", transport=transport(handler)).list_media_items()

        assert exc_info.value.status_code is None
        assert exc_info.value.is_auth_failure is False
