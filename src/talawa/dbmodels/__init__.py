"""
Database models for Talawa (authoritative ORM definitions).

This module defines the SQLAlchemy Base with a naming convention for stable
Alembic autogenerate diffs, and exposes `target_metadata` for Alembic.

Primary keys are generated by the application (see ``talawa.ids``), never by
the database, so rows can be correlated with stored objects before insert.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKeyConstraint,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for deterministic constraint/index names in Alembic diffs
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all database models with type checking support."""

    metadata = MetaData(naming_convention=naming_convention)


class Users(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('administrator', 'member')", name="users_role_check"),
        PrimaryKeyConstraint("id", name="users_pkey"),
        UniqueConstraint("email_address", name="users_email_address_key"),
    )

    id: Mapped[UUID] = mapped_column(Uuid)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    email_address: Mapped[str] = mapped_column(String(320), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, server_default="member")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    organization_memberships: Mapped[list["OrganizationMemberships"]] = relationship(
        "OrganizationMemberships",
        uselist=True,
        back_populates="member",
        foreign_keys="OrganizationMemberships.member_id",
    )


class Organizations(Base):
    __tablename__ = "organizations"
    __table_args__ = (
        ForeignKeyConstraint(
            ["creator_id"],
            ["users.id"],
            ondelete="SET NULL",
            name="organizations_creator_id_fkey",
        ),
        ForeignKeyConstraint(
            ["updater_id"],
            ["users.id"],
            ondelete="SET NULL",
            name="organizations_updater_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="organizations_pkey"),
        UniqueConstraint("name", name="organizations_name_key"),
    )

    id: Mapped[UUID] = mapped_column(Uuid)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    address_line1: Mapped[str | None] = mapped_column(String(1024))
    address_line2: Mapped[str | None] = mapped_column(String(1024))
    city: Mapped[str | None] = mapped_column(String(64))
    state: Mapped[str | None] = mapped_column(String(64))
    postal_code: Mapped[str | None] = mapped_column(String(32))
    country_code: Mapped[str | None] = mapped_column(String(2))
    avatar_name: Mapped[str | None] = mapped_column(String(64))
    avatar_mime_type: Mapped[str | None] = mapped_column(String(64))
    user_registration_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    creator_id: Mapped[UUID | None] = mapped_column(Uuid)
    updater_id: Mapped[UUID | None] = mapped_column(Uuid)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    memberships: Mapped[list["OrganizationMemberships"]] = relationship(
        "OrganizationMemberships", uselist=True, back_populates="organization"
    )
    posts: Mapped[list["Posts"]] = relationship(
        "Posts", uselist=True, back_populates="organization"
    )
    venues: Mapped[list["Venues"]] = relationship(
        "Venues", uselist=True, back_populates="organization"
    )


class OrganizationMemberships(Base):
    __tablename__ = "organization_memberships"
    __table_args__ = (
        CheckConstraint(
            "role IN ('administrator', 'regular')", name="organization_memberships_role_check"
        ),
        ForeignKeyConstraint(
            ["member_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="organization_memberships_member_id_fkey",
        ),
        ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="organization_memberships_organization_id_fkey",
        ),
        PrimaryKeyConstraint("member_id", "organization_id", name="organization_memberships_pkey"),
        Index("idx_organization_memberships_organization", "organization_id"),
    )

    member_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    organization_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, server_default="regular")
    creator_id: Mapped[UUID | None] = mapped_column(Uuid)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )

    member: Mapped["Users"] = relationship(
        "Users", back_populates="organization_memberships", foreign_keys=[member_id]
    )
    organization: Mapped["Organizations"] = relationship(
        "Organizations", back_populates="memberships"
    )


class Posts(Base):
    __tablename__ = "posts"
    __table_args__ = (
        ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="posts_organization_id_fkey",
        ),
        ForeignKeyConstraint(
            ["creator_id"],
            ["users.id"],
            ondelete="SET NULL",
            name="posts_creator_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="posts_pkey"),
        Index("idx_posts_organization", "organization_id"),
        Index("idx_posts_pinned_at", "pinned_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid)
    caption: Mapped[str] = mapped_column(String(2048), nullable=False)
    organization_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    creator_id: Mapped[UUID | None] = mapped_column(Uuid)
    updater_id: Mapped[UUID | None] = mapped_column(Uuid)
    pinned_at: Mapped[datetime | None] = mapped_column(DateTime(True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(True))

    organization: Mapped["Organizations"] = relationship("Organizations", back_populates="posts")
    attachments: Mapped[list["PostAttachments"]] = relationship(
        "PostAttachments",
        uselist=True,
        back_populates="post",
        order_by="PostAttachments.id",
    )


class PostAttachments(Base):
    __tablename__ = "post_attachments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["post_id"],
            ["posts.id"],
            ondelete="CASCADE",
            name="post_attachments_post_id_fkey",
        ),
        ForeignKeyConstraint(
            ["creator_id"],
            ["users.id"],
            ondelete="SET NULL",
            name="post_attachments_creator_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="post_attachments_pkey"),
        Index("idx_post_attachments_post", "post_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid)
    post_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    creator_id: Mapped[UUID | None] = mapped_column(Uuid)
    mime_type: Mapped[str] = mapped_column(String(64), nullable=False)
    # Object-store key the binary content was written under.
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    # Filename supplied by the client.
    object_name: Mapped[str | None] = mapped_column(String(256))
    file_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )

    post: Mapped["Posts"] = relationship("Posts", back_populates="attachments")


class Venues(Base):
    __tablename__ = "venues"
    __table_args__ = (
        ForeignKeyConstraint(
            ["organization_id"],
            ["organizations.id"],
            ondelete="CASCADE",
            name="venues_organization_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="venues_pkey"),
        UniqueConstraint("organization_id", "name", name="venues_organization_id_name_key"),
    )

    id: Mapped[UUID] = mapped_column(Uuid)
    organization_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    capacity: Mapped[int | None] = mapped_column(Integer)
    creator_id: Mapped[UUID | None] = mapped_column(Uuid)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), server_default=text("CURRENT_TIMESTAMP")
    )

    organization: Mapped["Organizations"] = relationship("Organizations", back_populates="venues")


# Expose for Alembic
target_metadata = Base.metadata
