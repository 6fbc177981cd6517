"""HTTP middleware: identity, request logging and security headers."""

import time

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from clubhub.core.identity import IdentityVerificationError
from clubhub.core.rate_limiting import client_ip

logger = structlog.get_logger()


class IdentityMiddleware(BaseHTTPMiddleware):
    """Verify the authorization cookie once and attach the result.

    Sets request.state.identity to an Identity, or None when there is no
    cookie or verification fails. Failures never abort the request: the
    caller simply continues as anonymous and the public and temporary-key
    gates still apply.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = request.app.state.context
        request.state.identity = None

        token = request.cookies.get(context.settings.auth_cookie_name)
        if token:
            try:
                request.state.identity = await context.identity_verifier.verify(token)
            except IdentityVerificationError as exc:
                logger.info(
                    "Identity verification failed",
                    reason=str(exc),
                    path=request.url.path,
                )

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request: method, path, client IP, cookies, status."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request",
            method=request.method,
            path=request.url.path,
            client_ip=client_ip(request),
            cookies=len(request.cookies),
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses.

    API responses additionally get no-store caching and a CSP that loads
    nothing; the app shell keeps a CSP loose enough for the editor bundle.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, max-age=0"
            response.headers["Content-Security-Policy"] = (
                "default-src 'none'; frame-ancestors 'none'"
            )
        else:
            # The editor is never framed by another origin
            response.headers["X-Frame-Options"] = "SAMEORIGIN"

        return response
