"""Security utilities.

Re-exports all security-related functions for convenience.
"""

from src.amuta.core.security.crypto import (
    DUMMY_PASSWORD_HASH,
    TokenType,
    create_access_token,
    create_invite_token,
    decode_invite_token,
    decode_token,
    hash_password,
    verify_password,
)

__all__ = [
    "DUMMY_PASSWORD_HASH",
    "TokenType",
    "create_access_token",
    "create_invite_token",
    "decode_invite_token",
    "decode_token",
    "hash_password",
    "verify_password",
]
