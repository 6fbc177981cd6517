"""Request and response schemas for the site endpoints.

Field names follow the editor front-end's JSON (camelCase siteName) where
it already exists on the wire.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from clubhub.schemas.sections import SectionView, build_site_view

_MAX_NESTING_DEPTH = 64


def _strip_null_bytes(value: Any, depth: int = 0) -> Any:
    """Recursively remove NUL characters; PostgreSQL JSONB rejects them."""
    if depth > _MAX_NESTING_DEPTH:
        return value
    if isinstance(value, str):
        return value.replace("\x00", "")
    if isinstance(value, dict):
        return {
            (k.replace("\x00", "") if isinstance(k, str) else k): _strip_null_bytes(
                v, depth + 1
            )
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_strip_null_bytes(v, depth + 1) for v in value]
    return value


class NewSiteRequest(BaseModel):
    """Body of POST /api/newsite/{url}."""

    model_config = ConfigDict(populate_by_name=True)

    site_name: str = Field(alias="siteName", min_length=1, max_length=255)
    subhost: str | None = Field(default=None, max_length=255)

    @field_validator("site_name")
    @classmethod
    def strip_site_name(cls, value: str) -> str:
        value = value.replace("\x00", "").strip()
        if not value:
            raise ValueError("siteName must not be blank")
        return value


class NewSiteResponse(BaseModel):
    url: str
    name: str
    subhost: str


class SiteUpdateRequest(BaseModel):
    """Body of POST /api/site/{url}: the full replacement content."""

    content: dict[str, Any]

    @field_validator("content")
    @classmethod
    def strip_content(cls, value: dict[str, Any]) -> dict[str, Any]:
        return _strip_null_bytes(value)


class SiteUpdateResponse(BaseModel):
    """Result of a save.

    Attributes:
        url: Saved site.
        claimed: True when this save transferred an unclaimed site to the
            signed-in user.
    """

    url: str
    claimed: bool


class SiteDocument(BaseModel):
    """Site as returned to the editor and public renderer.

    content is the stored JSON as saved; sections is the same content as
    display-ready views in page order. The temporary key is never part of
    the document.
    """

    model_config = ConfigDict(from_attributes=True)

    url: str
    name: str
    subhost: str
    active: bool
    content: dict[str, Any]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def sections(self) -> list[SectionView]:
        return build_site_view(self.content)


class ActiveRequest(BaseModel):
    active: bool


class ActiveResponse(BaseModel):
    active: bool


class PermissionEntry(BaseModel):
    site_url: str
    site_name: str
    level: str


class DirectoryEntry(BaseModel):
    name: str
    url: str
