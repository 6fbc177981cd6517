"""Server context shared by route handlers.

Everything a handler needs beyond the request itself: configuration, the
database session factory and the identity verifier. create_app() stores one
ServerContext on app.state.context.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clubhub.core.config import Settings
from clubhub.core.database import create_engine, create_session_factory
from clubhub.core.identity import IdentityVerifier, build_identity_verifier


@dataclass(frozen=True)
class ServerContext:
    """Explicit dependencies of the HTTP layer.

    Attributes:
        settings: Validated application settings.
        session_factory: Produces one AsyncSession per request.
        identity_verifier: Verifies the authorization cookie.
    """

    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    identity_verifier: IdentityVerifier


def build_context(settings: Settings) -> ServerContext:
    """Build the production context from settings.

    Creating the engine does not open a connection; the first query does.
    """
    engine = create_engine(
        settings.database_url, echo=settings.environment == "development"
    )
    return ServerContext(
        settings=settings,
        session_factory=create_session_factory(engine),
        identity_verifier=build_identity_verifier(
            client_id=settings.google_client_id,
            certs_url=settings.google_certs_url,
            cache_seconds=settings.google_certs_cache_seconds,
        ),
    )
