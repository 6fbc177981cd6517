"""Repository for User operations.

Users are addressed by (identity_provider, external_subject); email and
name are copied from the first verified token and not updated after.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubhub.models.user import User


class UserRepository:
    """Stateless repository for User table operations.

    All methods are static. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def get_by_subject(
        db: AsyncSession, identity_provider: str, external_subject: str
    ) -> User | None:
        """Fetch a user by provider and provider subject.

        Args:
            db: Async database session.
            identity_provider: Provider name (e.g., "google").
            external_subject: Provider's user id.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(
            User.identity_provider == identity_provider,
            User.external_subject == external_subject,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        identity_provider: str,
        external_subject: str,
        email: str,
        name: str | None = None,
    ) -> User:
        """Create a new user.

        Email is normalized to lowercase before storage.

        Returns:
            Created User with database-generated fields populated.

        Raises:
            sqlalchemy.exc.IntegrityError: If the provider subject exists.
        """
        user = User(
            identity_provider=identity_provider,
            external_subject=external_subject,
            email=email.strip().lower(),
            name=name,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user
