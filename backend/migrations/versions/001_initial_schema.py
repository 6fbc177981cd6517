"""Create users, sites and permissions.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    # Users are keyed by identity provider + provider subject
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("identity_provider", sa.String(50), nullable=False),
        sa.Column("external_subject", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "identity_provider",
            "external_subject",
            name="uq_users_provider_subject",
        ),
    )

    # Sites are keyed by their subdomain label
    op.create_table(
        "sites",
        sa.Column("url", sa.String(63), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("subhost", sa.String(255), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "content",
            JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("temporary_key", sa.String(64), nullable=True),
        sa.Column(
            "temporary_key_created_at", sa.DateTime(timezone=True), nullable=True
        ),
        sa.Column("updated_by", sa.UUID(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_sites_subhost", "sites", ["subhost"])
    # Purge script and reclamation look up unclaimed sites by key age
    op.create_index(
        "ix_sites_unclaimed_key_age",
        "sites",
        ["temporary_key_created_at"],
        postgresql_where=sa.text("temporary_key IS NOT NULL"),
    )

    op.create_table(
        "permissions",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "user_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "site_url",
            sa.String(63),
            sa.ForeignKey("sites.url", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("level", sa.String(20), nullable=False),
        sa.Column("granted_by", sa.UUID(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("user_id", "site_url", name="uq_permissions_user_site"),
        sa.CheckConstraint(
            "level IN ('owner', 'editor')",
            name="ck_permissions_level",
        ),
    )
    op.create_index("ix_permissions_user_id", "permissions", ["user_id"])
    op.create_index("ix_permissions_site_url", "permissions", ["site_url"])


def downgrade() -> None:
    op.drop_index("ix_permissions_site_url")
    op.drop_index("ix_permissions_user_id")
    op.drop_table("permissions")
    op.drop_index("ix_sites_unclaimed_key_age")
    op.drop_index("ix_sites_subhost")
    op.drop_table("sites")
    op.drop_table("users")
