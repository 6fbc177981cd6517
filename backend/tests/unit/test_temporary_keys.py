"""Tests for temporary edit keys."""

from datetime import UTC, datetime, timedelta

from fastapi import Response

from clubhub.core.config import Settings
from clubhub.core.temporary_keys import (
    as_utc,
    clear_temporary_key_cookie,
    generate_temporary_key,
    is_expired,
    keys_match,
    normalize_cookie_key,
    set_temporary_key_cookie,
)

_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


class TestGenerateTemporaryKey:
    """Tests for generate_temporary_key()."""

    def test_key_is_32_hex_characters(self):
        key = generate_temporary_key()
        assert len(key) == 32
        int(key, 16)

    def test_keys_are_unique(self):
        keys = {generate_temporary_key() for _ in range(100)}
        assert len(keys) == 100


class TestNormalizeCookieKey:
    """Placeholder cookie values count as no key."""

    def test_none_stays_none(self):
        assert normalize_cookie_key(None) is None

    def test_placeholders_become_none(self):
        for value in ("", "  ", "undefined", "null"):
            assert normalize_cookie_key(value) is None

    def test_real_key_passes_through(self):
        assert normalize_cookie_key("abc123") == "abc123"


class TestIsExpired:
    """Tests for key freshness."""

    def test_key_younger_than_lifetime_is_fresh(self):
        created = _NOW - timedelta(seconds=10)
        assert not is_expired(created, max_age_seconds=60, now=_NOW)

    def test_key_exactly_at_lifetime_is_fresh(self):
        created = _NOW - timedelta(seconds=60)
        assert not is_expired(created, max_age_seconds=60, now=_NOW)

    def test_key_older_than_lifetime_is_expired(self):
        created = _NOW - timedelta(seconds=61)
        assert is_expired(created, max_age_seconds=60, now=_NOW)

    def test_missing_timestamp_is_expired(self):
        assert is_expired(None, max_age_seconds=60, now=_NOW)

    def test_naive_timestamp_is_read_as_utc(self):
        created = (_NOW - timedelta(seconds=10)).replace(tzinfo=None)
        assert not is_expired(created, max_age_seconds=60, now=_NOW)

    def test_as_utc_keeps_aware_datetimes(self):
        assert as_utc(_NOW) is _NOW


class TestKeysMatch:
    """Tests for key comparison."""

    def test_equal_keys_match(self):
        assert keys_match("a" * 32, "a" * 32)

    def test_different_keys_do_not_match(self):
        assert not keys_match("a" * 32, "b" * 32)

    def test_missing_keys_never_match(self):
        assert not keys_match(None, None)
        assert not keys_match(None, "a" * 32)
        assert not keys_match("a" * 32, None)
        assert not keys_match("", "")


class TestTemporaryKeyCookie:
    """Cookie is set with the key lifetime and cleared on claim."""

    def test_set_cookie_uses_lifetime_as_max_age(self):
        settings = Settings(max_temp_key_seconds=1234)
        response = Response()

        set_temporary_key_cookie(response, "k" * 32, settings)

        header = response.headers["set-cookie"]
        assert header.startswith(f"Temporary-Key={'k' * 32}")
        assert "Max-Age=1234" in header
        assert "HttpOnly" in header
        assert "Path=/" in header
        assert "SameSite=lax" in header

    def test_cookie_domain_is_applied_when_configured(self):
        settings = Settings(cookie_domain=".uvic.club")
        response = Response()

        set_temporary_key_cookie(response, "k" * 32, settings)

        assert "Domain=.uvic.club" in response.headers["set-cookie"]

    def test_clear_cookie_expires_it(self):
        settings = Settings()
        response = Response()

        clear_temporary_key_cookie(response, settings)

        header = response.headers["set-cookie"]
        assert header.startswith('Temporary-Key=""')
        assert "Max-Age=0" in header
