"""SQLAlchemy ORM models for ClubHub.

All models are exported from this module for convenient imports:
    from clubhub.models import User, Site, Permission

- user.py: User (identity-provider account)
- site.py: Site (club website document, keyed by url)
- permission.py: Permission (user x site grant)
"""

from clubhub.models.base import INTERNAL_USER_ID, Base, TimestampMixin
from clubhub.models.permission import Permission, PermissionLevel
from clubhub.models.site import Site
from clubhub.models.user import User

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "INTERNAL_USER_ID",
    # Tables
    "User",
    "Site",
    "Permission",
    "PermissionLevel",
]
