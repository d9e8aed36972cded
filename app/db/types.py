"""
Custom column types.
"""

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

from app.core.crypto import get_token_cipher


class EncryptedText(TypeDecorator):
    """
    Text column whose values are encrypted before they reach the database.

    Ciphertext is non-deterministic, so never filter on these columns;
    compare token_version instead.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return get_token_cipher().encrypt(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return get_token_cipher().decrypt(value)
