"""Site creation, availability and reclamation.

A url is taken while its site is claimed or its temporary key is fresh.
Once an unclaimed site's key expires the url is available again: the
existence probe reports it free, and creating over it deletes the stale
row first.
"""

import logging
import re
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clubhub.core.config import Settings
from clubhub.core.errors import ConflictError, ValidationError
from clubhub.core.identity import Identity
from clubhub.core.temporary_keys import generate_temporary_key, is_expired
from clubhub.models.base import INTERNAL_USER_ID
from clubhub.models.permission import PermissionLevel
from clubhub.models.site import Site
from clubhub.repositories.permission_repository import PermissionRepository
from clubhub.repositories.site_repository import SiteRepository
from clubhub.schemas.site import DirectoryEntry
from clubhub.services.user_resolution import find_or_create_user

logger = logging.getLogger(__name__)

# Site urls become DNS labels under a subhost
_SITE_URL_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


def validate_site_url(url: str) -> str:
    """Check url is a lowercase DNS label.

    Raises:
        ValidationError: If it is not.
    """
    if not _SITE_URL_RE.match(url):
        raise ValidationError(
            "Site url must be 1-63 lowercase letters, digits or hyphens, "
            "not starting or ending with a hyphen",
            details=[{"loc": ["path", "url"], "msg": "invalid site url"}],
        )
    return url


def is_reclaimable(site: Site, *, max_age_seconds: int, now: datetime | None = None) -> bool:
    """Unclaimed and its temporary key has expired."""
    return site.temporary_key is not None and is_expired(
        site.temporary_key_created_at, max_age_seconds=max_age_seconds, now=now
    )


async def site_exists(db: AsyncSession, url: str, settings: Settings) -> bool:
    """Whether url is taken.

    False for never-created urls and for unclaimed sites whose key expired,
    even though their row is still present.
    """
    site = await SiteRepository.get(db, url)
    if site is None:
        return False
    return not is_reclaimable(site, max_age_seconds=settings.max_temp_key_seconds)


async def create_site(
    db: AsyncSession,
    *,
    url: str,
    site_name: str,
    subhost: str | None,
    identity: Identity | None,
    settings: Settings,
) -> tuple[Site, str | None]:
    """Create a site, owned by identity or unlocked by a new temporary key.

    Args:
        db: Async database session.
        url: Requested site url.
        site_name: Club name.
        subhost: Parent host; defaults to the first configured subhost.
        identity: Caller identity, if signed in.
        settings: Application settings.

    Returns:
        Tuple of (site, temporary_key). temporary_key is None when the site
        was created for a signed-in owner.

    Raises:
        ValidationError: Bad url or unknown subhost.
        ConflictError: url is taken and not reclaimable.
    """
    validate_site_url(url)
    subhost = subhost or settings.default_subhost
    if subhost not in settings.subhosts:
        raise ValidationError(f"Unknown subhost: {subhost}")

    existing = await SiteRepository.get(db, url)
    if existing is not None:
        if not is_reclaimable(existing, max_age_seconds=settings.max_temp_key_seconds):
            raise ConflictError()
        logger.info("Reclaiming expired unclaimed site", extra={"site_url": url})
        await SiteRepository.delete(db, existing)

    if identity is not None:
        user, _ = await find_or_create_user(
            db, identity, provider=settings.identity_provider
        )
        site = await _insert_site(db, url=url, name=site_name, subhost=subhost)
        await PermissionRepository.grant(
            db,
            user_id=user.id,
            site_url=site.url,
            level=PermissionLevel.OWNER,
            granted_by=INTERNAL_USER_ID,
        )
        return site, None

    temporary_key = generate_temporary_key()
    site = await _insert_site(
        db,
        url=url,
        name=site_name,
        subhost=subhost,
        temporary_key=temporary_key,
        temporary_key_created_at=datetime.now(UTC),
    )
    return site, temporary_key


async def _insert_site(db: AsyncSession, **fields) -> Site:
    # A concurrent create of the same url loses on the primary key
    try:
        return await SiteRepository.create(db, **fields)
    except IntegrityError as exc:
        raise ConflictError() from exc


async def list_directory(db: AsyncSession, subhost: str) -> list[DirectoryEntry]:
    """Active sites under subhost as {name, url}."""
    sites = await SiteRepository.list_active_in_subhost(db, subhost)
    return [DirectoryEntry(name=site.name, url=site.url) for site in sites]


async def purge_expired_sites(
    db: AsyncSession, *, max_age_seconds: int, now: datetime | None = None
) -> list[str]:
    """Delete every unclaimed site whose temporary key has expired.

    Returns:
        The urls that were freed.
    """
    cutoff = (now or datetime.now(UTC)) - timedelta(seconds=max_age_seconds)
    stale = await SiteRepository.list_unclaimed_created_before(db, cutoff)
    freed = []
    for site in stale:
        freed.append(site.url)
        await SiteRepository.delete(db, site)
    return freed
