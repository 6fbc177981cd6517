"""Site endpoints: read, save, create, existence probe.

Paths and response shapes match what the editor front-end calls.
"""

from fastapi import APIRouter, Request, Response

from clubhub.api.deps import AppSettings, DbSession, OptionalIdentity, TemporaryKey
from clubhub.core.config import settings as app_settings
from clubhub.core.rate_limiting import (
    NEWSITE_SCOPE,
    limiter,
    rate_limits_disabled,
)
from clubhub.core.temporary_keys import (
    clear_temporary_key_cookie,
    set_temporary_key_cookie,
)
from clubhub.schemas.site import (
    NewSiteRequest,
    NewSiteResponse,
    SiteDocument,
    SiteUpdateRequest,
    SiteUpdateResponse,
)
from clubhub.services.site_access import read_site, write_site
from clubhub.services.site_lifecycle import create_site, site_exists

router = APIRouter()


@router.get("/site/{url}")
async def get_site(
    url: str,
    db: DbSession,
    identity: OptionalIdentity,
    temporary_key: TemporaryKey,
    settings: AppSettings,
) -> SiteDocument:
    """Return the site document if the caller may read it.

    A trailing extension is ignored, so /api/site/myclub.json reads myclub.
    """
    site = await read_site(
        db,
        url=url.split(".")[0],
        identity=identity,
        temporary_key=temporary_key,
        settings=settings,
    )
    return SiteDocument.model_validate(site)


@router.post("/site/{url}")
async def save_site(
    url: str,
    body: SiteUpdateRequest,
    response: Response,
    db: DbSession,
    identity: OptionalIdentity,
    temporary_key: TemporaryKey,
    settings: AppSettings,
) -> SiteUpdateResponse:
    """Replace the site's content.

    A signed-in save that presents the site's temporary key claims the
    site; the Temporary-Key cookie is cleared so it cannot be reused.
    """
    outcome = await write_site(
        db,
        url=url,
        identity=identity,
        temporary_key=temporary_key,
        content=body.content,
        settings=settings,
    )
    if outcome.claimed:
        clear_temporary_key_cookie(response, settings)
    return SiteUpdateResponse(url=outcome.site.url, claimed=outcome.claimed)


@router.get("/site_exists/{url}")
async def get_site_exists(url: str, db: DbSession, settings: AppSettings) -> bool:
    """Whether url is taken. Expired unclaimed sites count as free."""
    return await site_exists(db, url, settings)


@router.post("/newsite/{url}")
@limiter.shared_limit(
    lambda: app_settings.rate_limit_newsite,
    scope=NEWSITE_SCOPE,
    exempt_when=rate_limits_disabled,
)
async def create_new_site(
    request: Request,  # noqa: ARG001 - required by slowapi
    url: str,
    body: NewSiteRequest,
    response: Response,
    db: DbSession,
    identity: OptionalIdentity,
    settings: AppSettings,
) -> NewSiteResponse:
    """Create a site.

    Signed in: the caller becomes owner. Anonymous: a temporary key is
    issued in the Temporary-Key cookie.
    """
    site, temporary_key = await create_site(
        db,
        url=url,
        site_name=body.site_name,
        subhost=body.subhost,
        identity=identity,
        settings=settings,
    )
    if temporary_key is not None:
        set_temporary_key_cookie(response, temporary_key, settings)
    return NewSiteResponse(url=site.url, name=site.name, subhost=site.subhost)
