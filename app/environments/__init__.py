"""
Environments Module - External Identity Provider Integrations

Architecture Overview:
======================
environments/
├── __init__.py           # Module exports
├── base.py               # Provider interfaces, token/identity types, error taxonomy
└── google/               # Google integration
    ├── api_client.py     # Shared request handling for resource APIs
    ├── auth/             # OAuth 2.0 + OpenID Connect
    ├── contacts/         # People API
    ├── gmail/            # Gmail API
    ├── drive/            # Drive API
    └── photos/           # Photos Library API

Design Principles:
==================
1. Shared Authentication: one Google grant serves every resource API
2. Provider Isolation: services depend on EnvironmentProvider, not on Google
3. Errors as types: ProviderExchangeFailed, IdentityVerificationFailed,
   RefreshError and APIError are what callers branch on
"""

from app.environments.base import (
    APIError,
    EnvironmentProvider,
    EnvironmentService,
    IdentityVerificationFailed,
    OAuthTokens,
    ProviderError,
    ProviderExchangeFailed,
    RefreshError,
    UserInfo,
)

__all__ = [
    "APIError",
    "EnvironmentProvider",
    "EnvironmentService",
    "IdentityVerificationFailed",
    "OAuthTokens",
    "ProviderError",
    "ProviderExchangeFailed",
    "RefreshError",
    "UserInfo",
]
