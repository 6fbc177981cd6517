"""Site section view model.

A site's content is a JSON object keyed by section kind. The set of kinds
is closed; each kind has a pydantic model for its data, and
section_view() turns (kind, data) into a SectionView the editor accordion
and public renderer can display without knowing the kind's internals.

Section models allow extra fields: the editor may store presentation
details the backend does not interpret, and they are saved untouched.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from clubhub.core.errors import ValidationError


class SectionKind(str, Enum):
    """Section kinds, in display order."""

    HEADER = "header"
    ABOUT = "about"
    EVENTS = "events"
    CONTACT = "contact"
    SOCIAL = "social"


class _SectionData(BaseModel):
    model_config = ConfigDict(extra="allow")


class HeaderSection(_SectionData):
    title: str = Field(default="", max_length=255)
    tagline: str | None = Field(default=None, max_length=500)
    logo_url: str | None = Field(default=None, max_length=2000)


class AboutSection(_SectionData):
    heading: str | None = Field(default=None, max_length=255)
    body: str = Field(default="", max_length=20000)


class Event(_SectionData):
    name: str = Field(max_length=255)
    date: str | None = Field(default=None, max_length=100)
    location: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=5000)


class EventsSection(_SectionData):
    events: list[Event] = Field(default_factory=list, max_length=200)


class ContactSection(_SectionData):
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)


class SocialLink(_SectionData):
    platform: str = Field(max_length=50)
    url: str = Field(max_length=2000)


class SocialSection(_SectionData):
    links: list[SocialLink] = Field(default_factory=list, max_length=50)


SECTION_MODELS: dict[SectionKind, type[_SectionData]] = {
    SectionKind.HEADER: HeaderSection,
    SectionKind.ABOUT: AboutSection,
    SectionKind.EVENTS: EventsSection,
    SectionKind.CONTACT: ContactSection,
    SectionKind.SOCIAL: SocialSection,
}

SECTION_TITLES: dict[SectionKind, str] = {
    SectionKind.HEADER: "Header",
    SectionKind.ABOUT: "About",
    SectionKind.EVENTS: "Events",
    SectionKind.CONTACT: "Contact",
    SectionKind.SOCIAL: "Social Media",
}


class SectionView(BaseModel):
    """Display-ready section.

    Attributes:
        kind: Section kind.
        title: Accordion header / section heading.
        fields: Validated section data, extra editor fields included.
    """

    kind: SectionKind
    title: str
    fields: dict[str, Any]


def parse_section(kind: str, data: Any) -> _SectionData:
    """Validate one section's data against its kind.

    Raises:
        ValidationError: Unknown kind or data that does not fit the kind.
    """
    try:
        section_kind = SectionKind(kind)
    except ValueError:
        raise ValidationError(
            f"Unknown section kind: {kind}",
            details=[{"loc": ["content", kind], "msg": "unknown section kind"}],
        ) from None

    try:
        return SECTION_MODELS[section_kind].model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Invalid {section_kind.value} section",
            details=[
                {"loc": ["content", kind, *e["loc"]], "msg": e["msg"], "type": e["type"]}
                for e in exc.errors()
            ],
        ) from None


def validate_content(content: dict[str, Any]) -> None:
    """Validate every section of a site content document.

    Raises:
        ValidationError: On the first invalid section.
    """
    for kind, data in content.items():
        parse_section(kind, data)


def section_view(kind: SectionKind, data: dict[str, Any]) -> SectionView:
    """Build the view of one section. Pure: no I/O, no mutation of data."""
    parsed = SECTION_MODELS[kind].model_validate(data)
    return SectionView(
        kind=kind,
        title=SECTION_TITLES[kind],
        fields=parsed.model_dump(exclude_none=True),
    )


def build_site_view(content: dict[str, Any]) -> list[SectionView]:
    """Views for every section present in content, in display order."""
    return [
        section_view(kind, content[kind.value])
        for kind in SectionKind
        if kind.value in content
    ]
