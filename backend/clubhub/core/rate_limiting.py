"""Rate limiting configuration using slowapi.

Site and user creation are the only endpoints that write rows for
anonymous callers, so they are limited per client IP. Each endpoint uses a
fixed scope: every url posted to /newsite draws from one bucket per client.

Whether limits apply is read from the app's ServerContext on each request.
The limit values and counter storage belong to the process-wide limiter and
come from the environment settings.

Usage in routers:
    from clubhub.core.rate_limiting import limiter, rate_limits_disabled

    @router.post("/newsite/{url}")
    @limiter.shared_limit(
        lambda: settings.rate_limit_newsite,
        scope="newsite",
        exempt_when=rate_limits_disabled,
    )
    async def create_new_site(request: Request, ...):
        ...
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

NEWSITE_SCOPE = "newsite"
NEWUSER_SCOPE = "newuser"


def client_ip(request: Request) -> str:
    """Client address, preferring the reverse proxy's X-Real-IP header."""
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return get_remote_address(request)


def rate_limits_disabled(request: Request) -> bool:
    """True when the app serving this request has rate limiting turned off."""
    return not request.app.state.context.settings.rate_limit_enabled


# In-memory storage (single instance). For multiple instances, configure
# Redis storage via RATELIMIT_STORAGE_URL.
limiter = Limiter(key_func=client_ip)


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Return 429 with the standard error envelope and a Retry-After header."""
    # exc.detail looks like "10 per 1 hour"; fall back to 60 seconds
    try:
        retry_after = str(exc.detail.split()[-1])
        int(retry_after.rstrip("s"))
    except (ValueError, AttributeError, IndexError):
        retry_after = "60"

    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMITED",
                "message": f"Rate limit exceeded: {exc.detail}",
            }
        },
        headers={"Retry-After": retry_after},
    )
