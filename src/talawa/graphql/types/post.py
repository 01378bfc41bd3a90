"""
Post GraphQL type definitions
"""

from datetime import datetime
from uuid import UUID

import strawberry


@strawberry.type
class PostAttachment:
    """Binary content attached to a post."""

    id: UUID
    post_id: UUID
    creator_id: UUID | None
    mime_type: str
    name: str
    object_name: str | None
    file_hash: str
    created_at: datetime


@strawberry.type
class Post:
    """Post type for GraphQL API."""

    id: UUID
    caption: str
    organization_id: UUID
    creator_id: UUID | None
    updater_id: UUID | None
    pinned_at: datetime | None
    created_at: datetime
    updated_at: datetime | None
    attachments: list[PostAttachment]

    @strawberry.field(
        name="attachmentURL",
        description="URL to the first image attachment as avatar of the post.",
    )
    def attachment_url(self) -> str | None:
        from ..resolvers.post import resolve_post_attachment_url

        return resolve_post_attachment_url(self)
