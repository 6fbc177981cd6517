"""API router aggregator, mounted at /api.

Routes not matched by any endpoint router fall through to a catch-all
that answers 404 for every method, so /api paths never reach the app
shell.
"""

from fastapi import APIRouter

from clubhub.api import accounts, directory, sites
from clubhub.core.errors import NotFoundError

router = APIRouter()

router.include_router(sites.router, tags=["sites"])
router.include_router(accounts.router, tags=["accounts"])
router.include_router(directory.router, tags=["directory"])


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def unknown_api_route(path: str) -> None:
    """Any other /api path."""
    raise NotFoundError("API route", f"/api/{path}")
