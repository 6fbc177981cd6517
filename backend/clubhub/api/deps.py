"""Shared dependencies for API endpoints.

Handlers get the server context, a database session, the identity the
IdentityMiddleware attached, and the temporary key cookie through these
dependencies. None of them fail: authorization decisions belong to the
services.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clubhub.core.config import Settings
from clubhub.core.context import ServerContext
from clubhub.core.database import get_db
from clubhub.core.identity import Identity
from clubhub.core.temporary_keys import normalize_cookie_key


def get_context(request: Request) -> ServerContext:
    """Server context stored on the application by create_app()."""
    return request.app.state.context


def get_settings(context: Annotated[ServerContext, Depends(get_context)]) -> Settings:
    """Settings of the running application."""
    return context.settings


def get_identity(request: Request) -> Identity | None:
    """Identity verified by IdentityMiddleware, or None if anonymous."""
    return getattr(request.state, "identity", None)


def get_temporary_key(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str | None:
    """Temporary-Key cookie value, or None when absent or a placeholder."""
    return normalize_cookie_key(request.cookies.get(settings.temp_key_cookie_name))


# Reusable type aliases for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]
OptionalIdentity = Annotated[Identity | None, Depends(get_identity)]
TemporaryKey = Annotated[str | None, Depends(get_temporary_key)]
