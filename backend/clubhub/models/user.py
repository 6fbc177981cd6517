"""User model - one row per identity-provider account.

Users are created lazily the first time a verified identity does something
that needs a user id (creating a site, claiming one, POST /newuser).
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clubhub.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from clubhub.models.permission import Permission


class User(Base, TimestampMixin):
    """Site editor account.

    Attributes:
        id: UUID primary key.
        identity_provider: Provider name (e.g., "google").
        external_subject: Provider's stable user id ("sub" claim).
        email: Email address reported by the provider.
        name: Display name reported by the provider.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint(
            "identity_provider",
            "external_subject",
            name="uq_users_provider_subject",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )
    identity_provider: Mapped[str] = mapped_column(String(50), nullable=False)
    external_subject: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        back_populates="user",
        cascade="all, delete-orphan",
    )
