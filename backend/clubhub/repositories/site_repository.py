"""Repository for Site operations."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from clubhub.models.permission import Permission
from clubhub.models.site import Site


class SiteRepository:
    """Stateless repository for Site table operations.

    Methods flush but never commit; the request's session dependency owns
    the transaction.
    """

    @staticmethod
    async def get(db: AsyncSession, url: str) -> Site | None:
        """Fetch a site by url."""
        return await db.get(Site, url)

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        url: str,
        name: str,
        subhost: str,
        temporary_key: str | None = None,
        temporary_key_created_at: datetime | None = None,
    ) -> Site:
        """Create an inactive site with empty content.

        Raises:
            sqlalchemy.exc.IntegrityError: If the url is already taken.
        """
        site = Site(
            url=url,
            name=name,
            subhost=subhost,
            active=False,
            content={},
            temporary_key=temporary_key,
            temporary_key_created_at=temporary_key_created_at,
        )
        db.add(site)
        await db.flush()
        await db.refresh(site)
        return site

    @staticmethod
    async def update_content(
        db: AsyncSession,
        site: Site,
        *,
        content: dict[str, Any],
        updated_by: uuid.UUID,
        clear_temporary_key: bool = False,
    ) -> Site:
        """Replace a site's content.

        Args:
            db: Async database session.
            site: Site to update (must belong to db).
            content: New section document.
            updated_by: Editor user id or INTERNAL_USER_ID.
            clear_temporary_key: Drop the temporary key (site was claimed).

        Returns:
            The refreshed site.
        """
        site.content = dict(content)
        site.updated_by = updated_by
        if clear_temporary_key:
            site.temporary_key = None
        await db.flush()
        await db.refresh(site)
        return site

    @staticmethod
    async def set_active(db: AsyncSession, site: Site, *, active: bool) -> Site:
        """Set the public visibility flag."""
        site.active = active
        await db.flush()
        await db.refresh(site)
        return site

    @staticmethod
    async def delete(db: AsyncSession, site: Site) -> None:
        """Delete a site and any permission rows pointing at it."""
        await db.execute(delete(Permission).where(Permission.site_url == site.url))
        await db.delete(site)
        await db.flush()

    @staticmethod
    async def list_active_in_subhost(db: AsyncSession, subhost: str) -> list[Site]:
        """List active sites under a subhost, ordered by name."""
        stmt = (
            select(Site)
            .where(Site.subhost == subhost, Site.active.is_(True))
            .order_by(Site.name, Site.url)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_unclaimed_created_before(
        db: AsyncSession, cutoff: datetime
    ) -> list[Site]:
        """List sites still holding a temporary key issued before cutoff."""
        stmt = select(Site).where(
            Site.temporary_key.is_not(None),
            Site.temporary_key_created_at < cutoff,
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
