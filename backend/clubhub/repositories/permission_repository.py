"""Repository for Permission operations."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubhub.models.permission import Permission, PermissionLevel
from clubhub.models.site import Site


class PermissionRepository:
    """Stateless repository for Permission table operations."""

    @staticmethod
    async def get(
        db: AsyncSession, user_id: uuid.UUID, site_url: str
    ) -> Permission | None:
        """Fetch the user's permission on a site, if any."""
        stmt = select(Permission).where(
            Permission.user_id == user_id,
            Permission.site_url == site_url,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def grant(
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        site_url: str,
        level: PermissionLevel,
        granted_by: uuid.UUID,
    ) -> Permission:
        """Grant a permission, or return the existing grant unchanged.

        The site row must already be flushed; the permission references it.

        Args:
            db: Async database session.
            user_id: Receiving user.
            site_url: Site being granted.
            level: Permission level.
            granted_by: Granting user id or INTERNAL_USER_ID.

        Returns:
            The new or pre-existing Permission.
        """
        existing = await PermissionRepository.get(db, user_id, site_url)
        if existing is not None:
            return existing

        permission = Permission(
            user_id=user_id,
            site_url=site_url,
            level=level.value,
            granted_by=granted_by,
        )
        db.add(permission)
        await db.flush()
        await db.refresh(permission)
        return permission

    @staticmethod
    async def list_for_user(
        db: AsyncSession, user_id: uuid.UUID
    ) -> list[tuple[Permission, Site]]:
        """List a user's permissions with their sites, ordered by site url."""
        stmt = (
            select(Permission, Site)
            .join(Site, Site.url == Permission.site_url)
            .where(Permission.user_id == user_id)
            .order_by(Site.url)
        )
        result = await db.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]
