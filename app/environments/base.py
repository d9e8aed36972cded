"""
Base classes and interfaces for provider integrations.

This module defines the contracts shared by the OAuth provider client and the
resource API clients built on top of it.

Design Pattern: Strategy
========================
- EnvironmentProvider: OAuth provider (authorization URL, code exchange,
  refresh, revoke)
- EnvironmentService: one resource API (Contacts, Gmail, Drive, Photos)
  called with a bearer access token

Error Taxonomy:
===============
Provider I/O never raises raw httpx errors past the client boundary; it is
translated into one of the exceptions below. None of them is retried inside
the core: the only recovery is sending the user through login again.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------


class ProviderError(Exception):
    """Base exception for all provider-related errors."""
    pass


class ProviderExchangeFailed(ProviderError):
    """Raised when the authorization code exchange fails (network or provider)."""
    pass


class IdentityVerificationFailed(ProviderError):
    """Raised when an id_token fails signature, audience or issuer checks."""
    pass


class RefreshError(ProviderError):
    """
    Raised when a refresh token could not be used to mint an access token.

    Attributes:
        provider_body: Raw provider response, for logs only
    """

    def __init__(self, message: str, provider_body: Optional[str] = None):
        super().__init__(message)
        self.provider_body = provider_body


class APIError(ProviderError):
    """Raised when a resource API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response

    @property
    def is_auth_failure(self) -> bool:
        """401/403 from a resource API means the grant no longer covers the call."""
        return self.status_code in (401, 403)


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass
class OAuthTokens:
    """
    Token data returned by the provider's token endpoint.

    refresh_token is None when the provider did not issue one in this
    response; callers keep the stored value in that case.
    """
    access_token: str
    expires_at: datetime
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    scopes: Optional[List[str]] = None


@dataclass
class UserInfo:
    """
    Verified identity claims of the person who completed the login.
    """
    provider_user_id: str  # Google's 'sub'
    email: Optional[str] = None
    name: Optional[str] = None
    picture_url: Optional[str] = None
    extra_data: Optional[Dict[str, Any]] = None


# ---------------------------------------------------------------------------
# ABSTRACT BASE CLASSES
# ---------------------------------------------------------------------------


class EnvironmentProvider(ABC):
    """
    Abstract base class for OAuth providers.
    """

    # Unique identifier for this provider (e.g., "google")
    provider_name: str = ""

    @abstractmethod
    def get_authorization_url(self, scopes: List[str], state: str) -> str:
        """
        Generate the OAuth authorization URL.

        Args:
            scopes: OAuth scopes to request
            state: CSRF protection state parameter

        Returns:
            URL to redirect the user to for authorization
        """
        pass

    @abstractmethod
    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Raises:
            ProviderExchangeFailed: If the code exchange fails
        """
        pass

    @abstractmethod
    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Raises:
            RefreshError: If the refresh token is invalid, revoked or the call failed
        """
        pass

    @abstractmethod
    async def revoke_token(self, token: str) -> bool:
        """
        Returns:
            True if the provider no longer honors the token
        """
        pass


class EnvironmentService(ABC):
    """
    Abstract base class for resource APIs within a provider.

    Services never refresh tokens themselves; they are constructed with an
    access token that was just obtained from the Token Guard.
    """

    # Unique identifier for this service within the provider
    service_name: str = ""

    # OAuth scopes required for this service to function
    required_scopes: List[str] = []
