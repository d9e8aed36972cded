"""
Shared HTTP plumbing for Google resource API clients.

Each service client (Contacts, Gmail, Drive, Photos) subclasses
GoogleAPIClient, sets BASE_URL and calls _make_request. Status handling is
uniform:

- 200          → parsed JSON object (anything else is an APIError)
- 401 / 403    → APIError with that status (grant expired, revoked, or scope missing)
- other        → APIError with the upstream status
- network/timeout → APIError with status_code=None
"""

import logging
from typing import Optional

import httpx

from app.environments.base import APIError, EnvironmentService


logger = logging.getLogger("pulse.environments.google.api")


class GoogleAPIClient(EnvironmentService):
    """
    Base class for Google resource API clients.

    Attributes:
        access_token: Access token just obtained from the Token Guard
    """

    BASE_URL = ""

    def __init__(
        self,
        access_token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            access_token: Valid Google OAuth access token
            timeout: Seconds before a request is abandoned
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.access_token = access_token
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> dict:
        """Get authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> dict:
        """
        Make an authenticated request to the service.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Path below BASE_URL (e.g., "/people/me/connections")
            params: Query parameters
            client: Reuse an open client for batches of calls

        Returns:
            Parsed JSON response

        Raises:
            APIError: If the request fails
        """
        if client is None:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as own_client:
                return await self._make_request(method, endpoint, params, own_client)

        url = f"{self.BASE_URL}{endpoint}"

        try:
            response = await client.request(
                method=method,
                url=url,
                headers=self._get_headers(),
                params=params,
            )
        except httpx.RequestError as e:
            logger.error(f"Network error in {self.service_name} API: {e}")
            raise APIError(f"Network error: {e}") from e

        if response.status_code == 401:
            logger.warning(f"{self.service_name} API: Unauthorized (token expired or revoked)")
            raise APIError(
                "Unauthorized - access token may be expired",
                status_code=401,
                response=response.text,
            )

        if response.status_code == 403:
            logger.warning(f"{self.service_name} API: Forbidden (scope may be missing)")
            raise APIError(
                f"Forbidden - {self.service_name} scope may not be granted",
                status_code=403,
                response=response.text,
            )

        if response.status_code != 200:
            logger.error(f"{self.service_name} API error: {response.status_code}")
            raise APIError(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
                response=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"{self.service_name} API returned a non-JSON body")
            raise APIError(
                "Malformed response body",
                status_code=response.status_code,
                response=response.text,
            ) from e

        if not isinstance(data, dict):
            logger.error(f"{self.service_name} API returned a non-object body")
            raise APIError(
                "Malformed response body",
                status_code=response.status_code,
                response=response.text,
            )

        return data
