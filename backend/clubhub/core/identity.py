"""Identity token verification.

The identity provider is an external collaborator with a single capability:
turn an opaque token into an Identity or fail. Route handlers never see the
token itself, only the Identity attached to the request by
IdentityMiddleware.

GoogleIdentityVerifier checks Google ID tokens (RS256 JWTs) against the
published JWKS, fetched with httpx and cached in-process.
"""

import logging
import time
from dataclasses import dataclass
from typing import Protocol

import httpx
import jwt

logger = logging.getLogger(__name__)

# Issuers Google uses for ID tokens
_GOOGLE_ISSUERS = frozenset({"accounts.google.com", "https://accounts.google.com"})

# HTTP client timeout for the JWKS fetch
_CERTS_HTTP_TIMEOUT = 10.0


class IdentityVerificationError(Exception):
    """Raised when a token cannot be verified.

    Covers malformed tokens, bad signatures, expired tokens, wrong audience
    or issuer, and failures fetching the provider's signing keys.
    """


@dataclass(frozen=True)
class Identity:
    """Verified caller identity.

    Attributes:
        subject: Provider's stable user identifier (the "sub" claim).
        email: Email address reported by the provider.
        name: Display name reported by the provider.
    """

    subject: str
    email: str
    name: str | None = None


class IdentityVerifier(Protocol):
    """Anything that can verify an identity token."""

    async def verify(self, token: str) -> Identity:
        """Verify a token.

        Raises:
            IdentityVerificationError: If the token is not acceptable.
        """
        ...


class DisabledIdentityVerifier:
    """Verifier used when no identity provider is configured.

    Every token is rejected, so every caller is anonymous and only the
    public and temporary-key gates apply.
    """

    async def verify(self, token: str) -> Identity:  # noqa: ARG002
        raise IdentityVerificationError("Identity provider is not configured")


class GoogleIdentityVerifier:
    """Verify Google-issued ID tokens.

    Args:
        client_id: OAuth client id the tokens must be issued for (audience).
        certs_url: URL of Google's JWKS document.
        cache_seconds: How long fetched signing keys are reused.
        transport: Optional httpx transport (tests inject a MockTransport).
    """

    def __init__(
        self,
        *,
        client_id: str,
        certs_url: str,
        cache_seconds: int = 3600,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._certs_url = certs_url
        self._cache_seconds = cache_seconds
        self._transport = transport
        self._jwks: jwt.PyJWKSet | None = None
        self._jwks_fetched_at = 0.0

    async def _fetch_jwks(self) -> jwt.PyJWKSet:
        """Fetch Google's signing keys.

        Returns:
            Parsed key set.

        Raises:
            IdentityVerificationError: If the fetch or parse fails.
        """
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    self._certs_url, timeout=_CERTS_HTTP_TIMEOUT
                )
                response.raise_for_status()
            return jwt.PyJWKSet.from_dict(response.json())
        except (httpx.HTTPError, ValueError, jwt.PyJWTError) as exc:
            raise IdentityVerificationError("Unable to fetch signing keys") from exc

    async def _signing_key(self, kid: str | None, *, refresh: bool = False) -> jwt.PyJWK:
        now = time.monotonic()
        stale = now - self._jwks_fetched_at > self._cache_seconds
        if self._jwks is None or stale or refresh:
            self._jwks = await self._fetch_jwks()
            self._jwks_fetched_at = now

        for key in self._jwks.keys:
            if key.key_id == kid:
                return key
        raise IdentityVerificationError("Unknown signing key")

    async def verify(self, token: str) -> Identity:
        """Verify a Google ID token.

        Validation steps:
        1. Read the kid from the unverified header
        2. Find the matching key (refetching once on a miss for key rotation)
        3. Verify signature, exp, iat and aud
        4. Check the issuer is Google
        5. Require sub and email claims

        Args:
            token: Encoded ID token from the authorization cookie.

        Returns:
            Identity built from the token claims.

        Raises:
            IdentityVerificationError: For any verification failure.
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as exc:
            raise IdentityVerificationError("Malformed token") from exc

        kid = header.get("kid")
        try:
            key = await self._signing_key(kid)
        except IdentityVerificationError:
            key = await self._signing_key(kid, refresh=True)

        try:
            payload = jwt.decode(
                token,
                key.key,
                algorithms=["RS256"],
                audience=self._client_id,
                options={"require": ["exp", "iat", "iss", "sub"]},
            )
        except jwt.InvalidTokenError as exc:
            raise IdentityVerificationError("Invalid token") from exc

        if payload["iss"] not in _GOOGLE_ISSUERS:
            raise IdentityVerificationError("Unexpected issuer")

        email = payload.get("email")
        if not email:
            raise IdentityVerificationError("Token has no email claim")

        return Identity(subject=payload["sub"], email=email, name=payload.get("name"))


def build_identity_verifier(
    *,
    client_id: str,
    certs_url: str,
    cache_seconds: int,
) -> IdentityVerifier:
    """Pick the verifier for the configured provider.

    Args:
        client_id: Google OAuth client id; empty disables verification.
        certs_url: JWKS URL.
        cache_seconds: Signing key cache lifetime.

    Returns:
        GoogleIdentityVerifier, or DisabledIdentityVerifier without a client id.
    """
    if not client_id:
        logger.warning("GOOGLE_CLIENT_ID not set; all requests are anonymous")
        return DisabledIdentityVerifier()
    return GoogleIdentityVerifier(
        client_id=client_id,
        certs_url=certs_url,
        cache_seconds=cache_seconds,
    )
