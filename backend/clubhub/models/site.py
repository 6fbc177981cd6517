"""Site model - one club website keyed by its url.

The url is the subdomain label (``myclub`` in ``myclub.uvic.club``), so it is
the natural primary key. A site created without an account carries a
temporary key until it is claimed or the key expires.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clubhub.models.base import Base, JSONDocument, TimestampMixin

if TYPE_CHECKING:
    from clubhub.models.permission import Permission


class Site(Base, TimestampMixin):
    """Club website document.

    Attributes:
        url: Subdomain label, primary key.
        name: Club name shown in the directory.
        subhost: Parent host the site lives under (e.g., "uvic.club").
        active: Public visibility. Active sites are readable by anyone.
        content: Section documents keyed by section kind.
        temporary_key: Edit secret for unclaimed sites. NULL once claimed or
            when the site was created by a signed-in user.
        temporary_key_created_at: When temporary_key was issued.
        updated_by: Last editor's user id, or INTERNAL_USER_ID for
            anonymous temporary-key saves. Not a foreign key.
    """

    __tablename__ = "sites"

    url: Mapped[str] = mapped_column(String(63), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subhost: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    content: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=dict,
    )
    temporary_key: Mapped[str | None] = mapped_column(String(64), nullable=True)
    temporary_key_created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    updated_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(), nullable=True)

    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        back_populates="site",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
