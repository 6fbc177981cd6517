"""Account endpoints: visibility toggle, permission listing, user signup.

All writes here need a verified identity; there is no temporary-key
fallback.
"""

from fastapi import APIRouter, Request

from clubhub.api.deps import AppSettings, DbSession, OptionalIdentity
from clubhub.core.config import settings as app_settings
from clubhub.core.errors import ValidationError
from clubhub.core.rate_limiting import (
    NEWUSER_SCOPE,
    limiter,
    rate_limits_disabled,
)
from clubhub.schemas.site import ActiveRequest, ActiveResponse, PermissionEntry
from clubhub.services.site_access import (
    get_site_active,
    list_permissions,
    set_site_active,
)
from clubhub.services.user_resolution import find_or_create_user

router = APIRouter()


@router.get("/active/{url}")
async def get_active(url: str, db: DbSession) -> ActiveResponse:
    """Whether the site is publicly visible."""
    return ActiveResponse(active=await get_site_active(db, url))


@router.post("/active/{url}")
async def update_active(
    url: str,
    body: ActiveRequest,
    db: DbSession,
    identity: OptionalIdentity,
    settings: AppSettings,
) -> ActiveResponse:
    """Publish or unpublish a site. Owners only."""
    active = await set_site_active(
        db, url=url, active=body.active, identity=identity, settings=settings
    )
    return ActiveResponse(active=active)


@router.get("/permissions")
async def get_permissions(
    db: DbSession, identity: OptionalIdentity, settings: AppSettings
) -> list[PermissionEntry]:
    """Sites the caller can edit, with their permission level."""
    return await list_permissions(db, identity=identity, settings=settings)


@router.post("/newuser")
@limiter.shared_limit(
    lambda: app_settings.rate_limit_newuser,
    scope=NEWUSER_SCOPE,
    exempt_when=rate_limits_disabled,
)
async def create_user(
    request: Request,  # noqa: ARG001 - required by slowapi
    db: DbSession,
    identity: OptionalIdentity,
    settings: AppSettings,
) -> bool:
    """Record the signed-in user.

    Returns:
        True if a user row was created, False if it already existed.
    """
    if identity is None:
        raise ValidationError("Unable to create new user without valid token")
    _, created = await find_or_create_user(
        db, identity, provider=settings.identity_provider
    )
    return created
