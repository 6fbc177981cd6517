"""Delete unclaimed sites whose temporary key has expired.

Standalone maintenance script. Expired unclaimed sites are already
reported as free by /api/site_exists and are replaced on the next newsite
call; this script removes them ahead of time so their content does not
linger.

Usage:
    cd backend && python -m scripts.purge_expired_sites [--dry-run]
"""

import argparse
import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from clubhub.repositories.site_repository import SiteRepository
from clubhub.services.site_lifecycle import purge_expired_sites

logger = logging.getLogger(__name__)


async def run_purge(
    session: AsyncSession, *, max_age_seconds: int, dry_run: bool = False
) -> list[str]:
    """Purge (or, with dry_run, list) expired unclaimed sites.

    Args:
        session: Async database session. Caller commits.
        max_age_seconds: Temporary key lifetime.
        dry_run: Only report what would be deleted.

    Returns:
        Urls deleted, or that would be deleted.
    """
    if dry_run:
        cutoff = datetime.now(UTC) - timedelta(seconds=max_age_seconds)
        stale = await SiteRepository.list_unclaimed_created_before(session, cutoff)
        urls = [site.url for site in stale]
        logger.info("Dry run: %d expired unclaimed sites: %s", len(urls), urls)
        return urls

    urls = await purge_expired_sites(session, max_age_seconds=max_age_seconds)
    logger.info("Purged %d expired unclaimed sites: %s", len(urls), urls)
    return urls


async def main() -> None:
    """CLI entry point: purge against the configured database."""
    from clubhub.core.config import settings
    from clubhub.core.database import create_engine, create_session_factory

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = create_engine(settings.database_url)
    factory = create_session_factory(engine)

    async with factory() as session:
        await run_purge(
            session,
            max_age_seconds=settings.max_temp_key_seconds,
            dry_run=args.dry_run,
        )
        await session.commit()

    await engine.dispose()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
