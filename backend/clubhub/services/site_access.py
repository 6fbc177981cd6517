"""Site authorization decisions.

Three independent trust sources can open a site:
- public: the site's active flag (read only)
- durable: a Permission row for the caller's user
- ephemeral: a matching, unexpired temporary key

read_site() evaluates them in fixed order, cheapest first, so the common
case (a public site) never touches the permission table. write_site()
decides between claiming, owner saves and anonymous temporary-key saves.
All functions raise typed APIErrors instead of returning status codes.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from clubhub.core.config import Settings
from clubhub.core.errors import AccessDeniedError, NotFoundError
from clubhub.core.identity import Identity
from clubhub.core.temporary_keys import is_expired, keys_match
from clubhub.models.base import INTERNAL_USER_ID
from clubhub.models.permission import PermissionLevel
from clubhub.models.site import Site
from clubhub.repositories.permission_repository import PermissionRepository
from clubhub.repositories.site_repository import SiteRepository
from clubhub.schemas.sections import validate_content
from clubhub.schemas.site import PermissionEntry
from clubhub.services.user_resolution import find_or_create_user, find_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteOutcome:
    """Result of a successful save.

    Attributes:
        site: The saved site.
        claimed: True when the save transferred the site to the caller; the
            temporary key is gone and the caller's cookie must be cleared.
    """

    site: Site
    claimed: bool


def temporary_key_usable(
    site: Site | None,
    presented_key: str | None,
    *,
    max_age_seconds: int,
    now: datetime | None = None,
) -> bool:
    """Whether presented_key currently unlocks site.

    True only if the site exists, still has a temporary key, the presented
    key equals it, and the key is not older than max_age_seconds.
    """
    if site is None or site.temporary_key is None:
        return False
    if not keys_match(presented_key, site.temporary_key):
        return False
    return not is_expired(
        site.temporary_key_created_at, max_age_seconds=max_age_seconds, now=now
    )


async def _has_permission(
    db: AsyncSession, identity: Identity | None, site_url: str, settings: Settings
) -> bool:
    if identity is None:
        return False
    user = await find_user(db, identity, provider=settings.identity_provider)
    if user is None:
        return False
    return await PermissionRepository.get(db, user.id, site_url) is not None


async def read_site(
    db: AsyncSession,
    *,
    url: str,
    identity: Identity | None,
    temporary_key: str | None,
    settings: Settings,
) -> Site:
    """Return the site if the caller may read it.

    Order:
    1. missing → NotFoundError
    2. active → anyone
    3. caller's user holds any permission → allowed
    4. usable temporary key → allowed
    5. otherwise → AccessDeniedError

    Reads never create users.
    """
    site = await SiteRepository.get(db, url)
    if site is None:
        raise NotFoundError("Site", url)

    if site.active:
        return site

    if await _has_permission(db, identity, url, settings):
        return site

    if temporary_key_usable(
        site, temporary_key, max_age_seconds=settings.max_temp_key_seconds
    ):
        return site

    raise AccessDeniedError()


async def write_site(
    db: AsyncSession,
    *,
    url: str,
    identity: Identity | None,
    temporary_key: str | None,
    content: dict[str, Any],
    settings: Settings,
) -> WriteOutcome:
    """Save new content if the caller may write the site.

    Paths:
    - identity + usable key: first save by a new account. Create the user,
      grant owner, save, clear the temporary key.
    - identity, no usable key: save under the user's id. Only when
      enforce_owner_on_write is on must the user hold a permission.
    - usable key only: anonymous save, the key is kept.
    - anything else, including an unknown url: AccessDeniedError.

    Raises:
        ValidationError: If content holds an unknown or malformed section.
        AccessDeniedError: If no path applies.
    """
    validate_content(content)

    site = await SiteRepository.get(db, url)
    key_ok = temporary_key_usable(
        site, temporary_key, max_age_seconds=settings.max_temp_key_seconds
    )

    if identity is not None and site is not None:
        user, _ = await find_or_create_user(
            db, identity, provider=settings.identity_provider
        )

        if key_ok:
            await PermissionRepository.grant(
                db,
                user_id=user.id,
                site_url=url,
                level=PermissionLevel.OWNER,
                granted_by=INTERNAL_USER_ID,
            )
            saved = await SiteRepository.update_content(
                db,
                site,
                content=content,
                updated_by=user.id,
                clear_temporary_key=True,
            )
            logger.info(
                "Site claimed on first save",
                extra={"site_url": url, "user_id": str(user.id)},
            )
            return WriteOutcome(site=saved, claimed=True)

        if settings.enforce_owner_on_write:
            permission = await PermissionRepository.get(db, user.id, url)
            if permission is None:
                raise AccessDeniedError()

        saved = await SiteRepository.update_content(
            db, site, content=content, updated_by=user.id
        )
        return WriteOutcome(site=saved, claimed=False)

    if key_ok and site is not None:
        saved = await SiteRepository.update_content(
            db, site, content=content, updated_by=INTERNAL_USER_ID
        )
        return WriteOutcome(site=saved, claimed=False)

    raise AccessDeniedError()


async def get_site_active(db: AsyncSession, url: str) -> bool:
    """Public visibility of a site; unknown urls are not active."""
    site = await SiteRepository.get(db, url)
    return bool(site and site.active)


async def set_site_active(
    db: AsyncSession,
    *,
    url: str,
    active: bool,
    identity: Identity | None,
    settings: Settings,
) -> bool:
    """Toggle public visibility. Owners only; no temporary-key fallback.

    Raises:
        AccessDeniedError: No identity, unknown user, or not an owner.
        NotFoundError: Unknown url.
    """
    if identity is None:
        raise AccessDeniedError()

    user = await find_user(db, identity, provider=settings.identity_provider)
    if user is None:
        raise AccessDeniedError("User not found")

    site = await SiteRepository.get(db, url)
    if site is None:
        raise NotFoundError("Site", url)

    permission = await PermissionRepository.get(db, user.id, url)
    if permission is None or permission.level != PermissionLevel.OWNER.value:
        raise AccessDeniedError()

    site = await SiteRepository.set_active(db, site, active=active)
    return site.active


async def list_permissions(
    db: AsyncSession, *, identity: Identity | None, settings: Settings
) -> list[PermissionEntry]:
    """Sites the caller holds a permission on.

    Raises:
        AccessDeniedError: No identity, or the identity has no user yet.
    """
    if identity is None:
        raise AccessDeniedError()

    user = await find_user(db, identity, provider=settings.identity_provider)
    if user is None:
        raise AccessDeniedError("User not found")

    rows = await PermissionRepository.list_for_user(db, user.id)
    return [
        PermissionEntry(site_url=site.url, site_name=site.name, level=permission.level)
        for permission, site in rows
    ]
