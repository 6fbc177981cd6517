"""Map verified identities to user rows.

Rules:
1. If provider+subject already exists → returning user (email/name untouched)
2. Otherwise → create the user from the token claims

Two first requests racing for the same identity are not reconciled: the
loser hits the unique constraint and fails with a 500.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from clubhub.core.identity import Identity
from clubhub.models.user import User
from clubhub.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


async def find_user(
    db: AsyncSession, identity: Identity, *, provider: str
) -> User | None:
    """Look up the user for an identity without creating one."""
    return await UserRepository.get_by_subject(db, provider, identity.subject)


async def find_or_create_user(
    db: AsyncSession, identity: Identity, *, provider: str
) -> tuple[User, bool]:
    """Find or create the user for a verified identity.

    Args:
        db: Async database session.
        identity: Verified identity from the request.
        provider: Identity provider name.

    Returns:
        Tuple of (User, created) where created is True if a new user was made.
    """
    existing = await find_user(db, identity, provider=provider)
    if existing is not None:
        return existing, False

    user = await UserRepository.create(
        db,
        identity_provider=provider,
        external_subject=identity.subject,
        email=identity.email,
        name=identity.name,
    )
    logger.info("Created user", extra={"user_id": str(user.id), "provider": provider})
    return user, True
