"""
Initial schema: users, organizations, memberships, posts, attachments and venues.

Revision ID: 20260101_000000_initial_schema
Revises:
Create Date: 2026-01-01 00:00:00
"""

import sqlalchemy as sa

from alembic import op  # type: ignore[reportMissingImports]

# revision identifiers, used by Alembic.
revision = "20260101_000000_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name: str, nullable: bool = True, default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP") if default else None,
        nullable=nullable,
    )


def upgrade() -> None:
    # users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("email_address", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=32), server_default="member", nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at", default=False),
        sa.CheckConstraint(
            "role IN ('administrator', 'member')", name="ck_users_users_role_check"
        ),
        sa.PrimaryKeyConstraint("id", name="users_pkey"),
        sa.UniqueConstraint("email_address", name="users_email_address_key"),
    )

    # organizations
    op.create_table(
        "organizations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("address_line1", sa.String(length=1024), nullable=True),
        sa.Column("address_line2", sa.String(length=1024), nullable=True),
        sa.Column("city", sa.String(length=64), nullable=True),
        sa.Column("state", sa.String(length=64), nullable=True),
        sa.Column("postal_code", sa.String(length=32), nullable=True),
        sa.Column("country_code", sa.String(length=2), nullable=True),
        sa.Column("avatar_name", sa.String(length=64), nullable=True),
        sa.Column("avatar_mime_type", sa.String(length=64), nullable=True),
        sa.Column(
            "user_registration_required",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
        ),
        sa.Column("creator_id", sa.Uuid(), nullable=True),
        sa.Column("updater_id", sa.Uuid(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at", default=False),
        sa.ForeignKeyConstraint(
            ["creator_id"], ["users.id"], ondelete="SET NULL", name="organizations_creator_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["updater_id"], ["users.id"], ondelete="SET NULL", name="organizations_updater_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="organizations_pkey"),
        sa.UniqueConstraint("name", name="organizations_name_key"),
    )

    # organization_memberships
    op.create_table(
        "organization_memberships",
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=32), server_default="regular", nullable=False),
        sa.Column("creator_id", sa.Uuid(), nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "role IN ('administrator', 'regular')",
            name="ck_organization_memberships_organization_memberships_role_check",
        ),
        sa.ForeignKeyConstraint(
            ["member_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="organization_memberships_member_id_fkey",
        ),
        sa.ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="organization_memberships_organization_id_fkey",
        ),
        sa.PrimaryKeyConstraint(
            "member_id", "organization_id", name="organization_memberships_pkey"
        ),
    )
    op.create_index(
        "idx_organization_memberships_organization",
        "organization_memberships",
        ["organization_id"],
    )

    # posts
    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("caption", sa.String(length=2048), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("creator_id", sa.Uuid(), nullable=True),
        sa.Column("updater_id", sa.Uuid(), nullable=True),
        _timestamp("pinned_at", default=False),
        _timestamp("created_at"),
        _timestamp("updated_at", default=False),
        sa.ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="posts_organization_id_fkey",
        ),
        sa.ForeignKeyConstraint(
            ["creator_id"], ["users.id"], ondelete="SET NULL", name="posts_creator_id_fkey"
        ),
        sa.PrimaryKeyConstraint("id", name="posts_pkey"),
    )
    op.create_index("idx_posts_organization", "posts", ["organization_id"])
    op.create_index("idx_posts_pinned_at", "posts", ["pinned_at"])

    # post_attachments
    op.create_table(
        "post_attachments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("post_id", sa.Uuid(), nullable=False),
        sa.Column("creator_id", sa.Uuid(), nullable=True),
        sa.Column("mime_type", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("object_name", sa.String(length=256), nullable=True),
        sa.Column("file_hash", sa.String(length=64), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["post_id"], ["posts.id"], ondelete="CASCADE", name="post_attachments_post_id_fkey"
        ),
        sa.ForeignKeyConstraint(
            ["creator_id"],
            ["users.id"],
            ondelete="SET NULL",
            name="post_attachments_creator_id_fkey",
        ),
        sa.PrimaryKeyConstraint("id", name="post_attachments_pkey"),
    )
    op.create_index("idx_post_attachments_post", "post_attachments", ["post_id"])

    # venues
    op.create_table(
        "venues",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organization_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("creator_id", sa.Uuid(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="venues_organization_id_fkey",
        ),
        sa.PrimaryKeyConstraint("id", name="venues_pkey"),
        sa.UniqueConstraint("organization_id", "name", name="venues_organization_id_name_key"),
    )


def downgrade() -> None:
    # drop in reverse dependency order
    op.drop_table("venues")

    op.drop_index("idx_post_attachments_post", table_name="post_attachments")
    op.drop_table("post_attachments")

    op.drop_index("idx_posts_pinned_at", table_name="posts")
    op.drop_index("idx_posts_organization", table_name="posts")
    op.drop_table("posts")

    op.drop_index("idx_organization_memberships_organization", table_name="organization_memberships")
    op.drop_table("organization_memberships")

    op.drop_table("organizations")
    op.drop_table("users")
