"""Temporary edit keys: generation, freshness, comparison and cookies.

A site created without an account gets a random key. Whoever holds the key
in the Temporary-Key cookie may read and save the site until the key is
older than MAX_TEMP_KEY_SECONDS or the site is claimed by an account.
"""

import secrets
from datetime import UTC, datetime, timedelta

from fastapi import Response

from clubhub.core.config import Settings

# 16 random bytes = 128 bits, hex encoded
_KEY_BYTES = 16

# Values the front-end sends when its cookie jar has no key
_ABSENT_COOKIE_VALUES = frozenset({"", "undefined", "null"})


def generate_temporary_key() -> str:
    """Return a new 128-bit random key as 32 hex characters."""
    return secrets.token_hex(_KEY_BYTES)


def normalize_cookie_key(value: str | None) -> str | None:
    """Map missing or placeholder cookie values to None."""
    if value is None or value.strip() in _ABSENT_COOKIE_VALUES:
        return None
    return value


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def is_expired(
    created_at: datetime | None,
    *,
    max_age_seconds: int,
    now: datetime | None = None,
) -> bool:
    """Check whether a key created at created_at is past its lifetime.

    A key exactly max_age_seconds old is still fresh. A key with no
    creation timestamp is treated as expired.
    """
    if created_at is None:
        return True
    current = now or datetime.now(UTC)
    return current - as_utc(created_at) > timedelta(seconds=max_age_seconds)


def keys_match(presented: str | None, stored: str | None) -> bool:
    """Constant-time comparison; two missing keys never match."""
    if not presented or not stored:
        return False
    return secrets.compare_digest(presented.encode(), stored.encode())


def set_temporary_key_cookie(response: Response, key: str, settings: Settings) -> None:
    """Set the Temporary-Key cookie with a max-age equal to the key lifetime.

    Args:
        response: FastAPI response object.
        key: Freshly generated temporary key.
        settings: Cookie name and flags.
    """
    response.set_cookie(
        key=settings.temp_key_cookie_name,
        value=key,
        max_age=settings.max_temp_key_seconds,
        httponly=settings.temp_key_cookie_httponly,
        secure=settings.temp_key_cookie_secure,
        samesite=settings.temp_key_cookie_samesite,
        path="/",
        domain=settings.cookie_domain or None,
    )


def clear_temporary_key_cookie(response: Response, settings: Settings) -> None:
    """Expire the Temporary-Key cookie once the site has been claimed."""
    response.delete_cookie(
        key=settings.temp_key_cookie_name,
        path="/",
        domain=settings.cookie_domain or None,
        secure=settings.temp_key_cookie_secure,
        httponly=settings.temp_key_cookie_httponly,
        samesite=settings.temp_key_cookie_samesite,
    )
