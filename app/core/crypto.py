"""
Token encryption at rest.

Google access and refresh tokens are bearer credentials; anyone who reads the
users table could act as the user. Token columns are encrypted with Fernet
(AES-128-CBC + HMAC-SHA256) through the EncryptedText column type in
app.db.types, which calls get_token_cipher() on every bind/result.

Generate a key with:
    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

import logging
from functools import lru_cache
from typing import Optional

from cryptography.fernet import Fernet

from app.core.config import settings


logger = logging.getLogger("pulse.core.crypto")


class TokenCipher:
    """
    Symmetric cipher for token columns.

    With no key configured the cipher is a passthrough; this is only meant
    for local development and is announced with a warning.
    """

    def __init__(self, key: Optional[str]):
        self._fernet: Optional[Fernet] = Fernet(key.encode()) if key else None

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def encrypt(self, value: str) -> str:
        if self._fernet is None:
            return value
        return self._fernet.encrypt(value.encode()).decode()

    def decrypt(self, value: str) -> str:
        """
        Raises:
            cryptography.fernet.InvalidToken: If value was not produced by this key
        """
        if self._fernet is None:
            return value
        return self._fernet.decrypt(value.encode()).decode()


@lru_cache
def get_token_cipher() -> TokenCipher:
    """Process-wide cipher built from TOKEN_ENCRYPTION_KEY."""
    cipher = TokenCipher(settings.TOKEN_ENCRYPTION_KEY or None)
    if not cipher.enabled:
        logger.warning(
            "TOKEN_ENCRYPTION_KEY is not set - Google tokens are stored unencrypted"
        )
    return cipher
