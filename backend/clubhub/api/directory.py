"""Club directory: the public listing of active sites per subhost."""

from fastapi import APIRouter

from clubhub.api.deps import DbSession
from clubhub.schemas.site import DirectoryEntry
from clubhub.services.site_lifecycle import list_directory

router = APIRouter()


@router.get("/directory/{subhost}")
async def get_directory(subhost: str, db: DbSession) -> list[DirectoryEntry]:
    """Active club sites under subhost (e.g. uvic.club), ordered by name."""
    return await list_directory(db, subhost)
