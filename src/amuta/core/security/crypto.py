"""Cryptographic utilities - password hashing, access tokens, and invite tokens."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import argon2
from jose import JWTError, jwt

from src.amuta.core.config import get_settings


class TokenType:
    """Token type constants."""

    ACCESS = "access"
    INVITE = "invite"


def _create_password_hasher() -> argon2.PasswordHasher:
    """Create password hasher with settings from config."""
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


_password_hasher = _create_password_hasher()

# Verified against when the user does not exist, so lookups take the same time.
DUMMY_PASSWORD_HASH = _password_hasher.hash("dummy-password-for-timing")


def hash_password(password: str) -> str:
    """Hash password using Argon2id."""
    return _password_hasher.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    """Verify password against hash. Returns False on any error."""
    if not hashed:
        return False
    try:
        _password_hasher.verify(hashed, password)
        return True
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def _as_aware_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (database convention)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def create_access_token(
    subject: str | UUID,
    expires_delta: timedelta | None = None,
) -> str:
    """Create JWT access token for a principal."""
    settings = get_settings()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "type": TokenType.ACCESS,
    }
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate an access JWT. Returns None on any error."""
    settings = get_settings()
    try:
        return jwt.decode(  # type: ignore[no-any-return]
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None


def create_invite_token(invite_id: UUID, expires_at: datetime) -> str:
    """Mint a signed invite token (HS256) carrying {invite_id, exp}.

    ``expires_at`` is the absolute deadline; callers pass the invite row's own
    expiry so a token never outlives the row it points at.
    """
    settings = get_settings()
    to_encode = {
        "invite_id": str(invite_id),
        "exp": int(_as_aware_utc(expires_at).timestamp()),
        "type": TokenType.INVITE,
    }
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        settings.invite_jwt_secret,
        algorithm="HS256",
    )


def decode_invite_token(token: str) -> UUID | None:
    """Verify an invite token and return its invite id.

    Returns None for a bad signature, a malformed payload, or ``exp <= now``.
    Pure and stateless.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.invite_jwt_secret, algorithms=["HS256"])
    except JWTError:
        return None

    if payload.get("type") != TokenType.INVITE:
        return None

    exp = payload.get("exp")
    if not isinstance(exp, int | float) or exp <= datetime.now(UTC).timestamp():
        return None

    try:
        return UUID(str(payload.get("invite_id")))
    except ValueError:
        return None
