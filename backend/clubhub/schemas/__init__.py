"""Pydantic request/response schemas for API endpoints."""

from clubhub.schemas.sections import (
    SectionKind,
    SectionView,
    build_site_view,
    section_view,
    validate_content,
)
from clubhub.schemas.site import (
    ActiveRequest,
    ActiveResponse,
    DirectoryEntry,
    NewSiteRequest,
    NewSiteResponse,
    PermissionEntry,
    SiteDocument,
    SiteUpdateRequest,
    SiteUpdateResponse,
)

__all__ = [
    # Sections
    "SectionKind",
    "SectionView",
    "build_site_view",
    "section_view",
    "validate_content",
    # Sites
    "ActiveRequest",
    "ActiveResponse",
    "DirectoryEntry",
    "NewSiteRequest",
    "NewSiteResponse",
    "PermissionEntry",
    "SiteDocument",
    "SiteUpdateRequest",
    "SiteUpdateResponse",
]
