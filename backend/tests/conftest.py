"""Shared test fixtures.

Tests run against an in-memory SQLite database (aiosqlite) with the same
ORM metadata the app uses, and a fake identity verifier that maps cookie
tokens to identities. The app under test is built with create_app() and a
ServerContext pointing at both.
"""

from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from clubhub.core.config import Settings
from clubhub.core.context import ServerContext
from clubhub.core.identity import Identity, IdentityVerificationError
from clubhub.core.rate_limiting import limiter
from clubhub.models import Base, Permission, PermissionLevel, Site, User
from clubhub.models.base import INTERNAL_USER_ID

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Cookie tokens understood by FakeIdentityVerifier
ALICE_TOKEN = "token-alice"  # nosec B105
BOB_TOKEN = "token-bob"  # nosec B105

ALICE = Identity(subject="google-alice", email="alice@example.com", name="Alice")
BOB = Identity(subject="google-bob", email="bob@example.com", name="Bob")

MAX_TEMP_KEY_SECONDS = 3600


class FakeIdentityVerifier:
    """Identity verifier backed by a token → Identity mapping."""

    def __init__(self, identities: dict[str, Identity]) -> None:
        self.identities = identities
        self.calls: list[str] = []

    async def verify(self, token: str) -> Identity:
        self.calls.append(token)
        try:
            return self.identities[token]
        except KeyError:
            raise IdentityVerificationError("Unknown test token") from None


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings for tests: short key lifetime, empty static dir, no rate limits."""
    return Settings(
        max_temp_key_seconds=MAX_TEMP_KEY_SECONDS,
        subhosts=["uvic.club", "example.club"],
        static_dir=tmp_path / "dist",
        rate_limit_enabled=False,
    )


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory database shared by every connection of one test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for service and repository tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def identity_verifier() -> FakeIdentityVerifier:
    return FakeIdentityVerifier({ALICE_TOKEN: ALICE, BOB_TOKEN: BOB})


@pytest.fixture(autouse=True)
def reset_rate_limits() -> Iterator[None]:
    """Clear the limiter's counters so hits never leak between tests."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def app(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    identity_verifier: FakeIdentityVerifier,
):
    """Application wired to the test database and fake verifier."""
    from clubhub.main import create_app

    return create_app(
        ServerContext(
            settings=settings,
            session_factory=session_factory,
            identity_verifier=identity_verifier,
        )
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
async def alice_client(app, settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client carrying Alice's authorization cookie."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies={settings.auth_cookie_name: ALICE_TOKEN},
    ) as ac:
        yield ac


@pytest.fixture
async def bob_client(app, settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client carrying Bob's authorization cookie."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies={settings.auth_cookie_name: BOB_TOKEN},
    ) as ac:
        yield ac


# =============================================================================
# Data helpers
# =============================================================================


async def seed_user(session: AsyncSession, identity: Identity) -> User:
    """Insert the user row for an identity."""
    user = User(
        identity_provider="google",
        external_subject=identity.subject,
        email=identity.email,
        name=identity.name,
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


async def seed_site(
    session: AsyncSession,
    url: str,
    *,
    name: str | None = None,
    subhost: str = "uvic.club",
    active: bool = False,
    content: dict | None = None,
    temporary_key: str | None = None,
    key_age: timedelta = timedelta(0),
) -> Site:
    """Insert a site, optionally unlocked by a temporary key of a given age."""
    site = Site(
        url=url,
        name=name or url.title(),
        subhost=subhost,
        active=active,
        content=content or {},
        temporary_key=temporary_key,
        temporary_key_created_at=(
            datetime.now(UTC) - key_age if temporary_key is not None else None
        ),
    )
    session.add(site)
    await session.flush()
    await session.refresh(site)
    return site


async def seed_permission(
    session: AsyncSession,
    user: User,
    site: Site,
    level: PermissionLevel = PermissionLevel.OWNER,
) -> Permission:
    permission = Permission(
        user_id=user.id,
        site_url=site.url,
        level=level.value,
        granted_by=INTERNAL_USER_ID,
    )
    session.add(permission)
    await session.flush()
    return permission


EXPIRED = timedelta(seconds=MAX_TEMP_KEY_SECONDS + 60)
FRESH = timedelta(seconds=60)
