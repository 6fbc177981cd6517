"""Permission model - which users may edit which sites."""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clubhub.models.base import Base

if TYPE_CHECKING:
    from clubhub.models.site import Site
    from clubhub.models.user import User


class PermissionLevel(str, Enum):
    """Access levels a user can hold on a site."""

    OWNER = "owner"
    EDITOR = "editor"


class Permission(Base):
    """Grant of a permission level on a site to a user.

    Attributes:
        id: UUID primary key.
        user_id: FK to users.
        site_url: FK to sites.url.
        level: One of PermissionLevel.
        granted_by: Granting user id or INTERNAL_USER_ID. Not a foreign key.
        created_at: Grant timestamp.
    """

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("user_id", "site_url", name="uq_permissions_user_site"),
        CheckConstraint(
            "level IN ('owner', 'editor')",
            name="ck_permissions_level",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    site_url: Mapped[str] = mapped_column(
        String(63),
        ForeignKey("sites.url", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    granted_by: Mapped[uuid.UUID] = mapped_column(Uuid(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    user: Mapped["User"] = relationship("User", back_populates="permissions")
    site: Mapped["Site"] = relationship("Site", back_populates="permissions")
