from __future__ import annotations

import asyncio
import hashlib
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin
from uuid import UUID

import strawberry
from sqlalchemy import insert, select
from sqlalchemy.orm import selectinload

from ...config import settings
from ...database.connection import get_async_session
from ...dbmodels import OrganizationMemberships, Organizations, PostAttachments, Posts
from ...errors import (
    TalawaGraphQLError,
    report_unexpected_errors,
    resource_not_found,
    unauthenticated,
    unexpected,
)
from ...ids import generate_ulid, uuid7
from ...logging import get_logger
from ...storage import StorageProvider, get_storage_provider
from ..access_control import (
    authorize_organization_action,
    get_auth_context_from_info,
    get_key_paths_with_non_undefined_values,
    load_organization_for_member,
    load_user_role,
    membership_role_of,
    require_authenticated_user_id,
)
from ..validation import (
    CreatePostArguments,
    ResourceLookupArguments,
    ValidatedImage,
    parse_arguments,
    to_raw_arguments,
    validate_images,
)

if TYPE_CHECKING:
    from ..mutations.root import MutationCreatePostInput
    from ..queries.root import QueryPostInput
    from ..types.post import Post

logger = get_logger(__name__)

# Arguments only organization administrators (or global administrators) may set.
RESTRICTED_CREATE_POST_ARGUMENTS = (("input", "isPinned"),)


def to_post_type(post: Posts, attachments: Sequence[PostAttachments]) -> Post:
    """Project a post row and its attachment rows into the GraphQL type."""
    from ..types.post import Post as PostType
    from ..types.post import PostAttachment as PostAttachmentType

    return PostType(
        id=post.id,
        caption=post.caption,
        organization_id=post.organization_id,
        creator_id=post.creator_id,
        updater_id=post.updater_id,
        pinned_at=post.pinned_at,
        created_at=post.created_at,
        updated_at=post.updated_at,
        attachments=[
            PostAttachmentType(
                id=attachment.id,
                post_id=attachment.post_id,
                creator_id=attachment.creator_id,
                mime_type=attachment.mime_type,
                name=attachment.name,
                object_name=attachment.object_name,
                file_hash=attachment.file_hash,
                created_at=attachment.created_at,
            )
            for attachment in attachments
        ],
    )


def resolve_post_attachment_url(post: Post) -> str | None:
    """URL of the first image attachment, served from the objects endpoint."""
    for attachment in post.attachments:
        if attachment.mime_type.startswith("image/") and attachment.name:
            return urljoin(settings.api_base_url, f"/objects/{attachment.name}")
    return None


async def _upload_images(
    storage: StorageProvider,
    images: Sequence[ValidatedImage],
    uploaded_names: list[str],
    *,
    post_id: UUID,
    creator_id: UUID,
) -> list[dict[str, Any]]:
    """Write each image to object storage and return its attachment row values.

    Names are appended to ``uploaded_names`` as soon as each write succeeds so the
    caller can clean up after a later failure.
    """
    attachment_values = []

    for image in images:
        name = generate_ulid()
        await storage.upload(
            name,
            image.content,
            image.mime_type,
            metadata={"post_id": str(post_id), "filename": image.filename or ""},
        )
        uploaded_names.append(name)

        attachment_values.append(
            {
                "id": uuid7(),
                "post_id": post_id,
                "creator_id": creator_id,
                "mime_type": image.mime_type,
                "name": name,
                "object_name": image.filename,
                "file_hash": hashlib.sha256(image.content).hexdigest(),
            }
        )

    return attachment_values


async def _delete_uploaded_objects(storage: StorageProvider, names: Sequence[str]) -> None:
    """Best-effort removal of objects written by a mutation that did not commit."""
    for name in names:
        try:
            await storage.delete(name)
        except Exception as e:
            logger.warning("Failed to delete orphaned object", object_name=name, error=str(e))


# Mutation resolvers
@report_unexpected_errors
async def create_post(info: strawberry.Info, input: MutationCreatePostInput) -> Post:
    """
    Create a post in an organization, optionally with image attachments.

    Images are written to object storage before the database transaction is
    opened; the post row and all attachment rows are then inserted in a single
    transaction. If anything fails after the uploads, the uploaded objects are
    deleted again before the error is surfaced.
    """
    auth_context = await get_auth_context_from_info(info)
    current_user_id = require_authenticated_user_id(auth_context)

    raw_input = to_raw_arguments(input)
    arguments = parse_arguments(CreatePostArguments, raw_input, root="input")

    images, image_issues = await validate_images(
        arguments.images, max_size=settings.max_upload_size
    )
    if image_issues:
        logger.warning(
            "Excluded invalid image uploads",
            issues=[issue.to_extension() for issue in image_issues],
        )

    user_role, organization = await asyncio.gather(
        load_user_role(current_user_id),
        load_organization_for_member(arguments.organization_id, current_user_id),
    )

    if user_role is None:
        raise unauthenticated()

    if organization is None:
        raise resource_not_found("input", "organizationId")

    authorize_organization_action(
        user_role,
        membership_role_of(organization, current_user_id),
        resource_path=["input", "organizationId"],
        restricted_argument_paths=get_key_paths_with_non_undefined_values(
            RESTRICTED_CREATE_POST_ARGUMENTS, {"input": raw_input}
        ),
    )

    # An explicit null pins too; only an omitted field or false leaves the post unpinned
    pin = "isPinned" in raw_input and raw_input["isPinned"] is not False

    storage = get_storage_provider()
    post_id = uuid7()
    uploaded_names: list[str] = []

    try:
        attachment_values = await _upload_images(
            storage, images, uploaded_names, post_id=post_id, creator_id=current_user_id
        )

        async with get_async_session() as session:
            created_post = (
                await session.scalars(
                    insert(Posts).returning(Posts),
                    [
                        {
                            "id": post_id,
                            "creator_id": current_user_id,
                            "caption": arguments.caption,
                            "organization_id": arguments.organization_id,
                            "pinned_at": datetime.now(UTC) if pin else None,
                        }
                    ],
                )
            ).first()

            if created_post is None:
                logger.error(
                    "Database insert operation unexpectedly returned no row instead of raising",
                    table="posts",
                    post_id=str(post_id),
                )
                raise unexpected()

            created_attachments: list[PostAttachments] = []
            if attachment_values:
                result = await session.scalars(
                    insert(PostAttachments).returning(
                        PostAttachments, sort_by_parameter_order=True
                    ),
                    attachment_values,
                )
                created_attachments = list(result.all())

            post = to_post_type(created_post, created_attachments)

    except TalawaGraphQLError:
        await _delete_uploaded_objects(storage, uploaded_names)
        raise
    except Exception as e:
        logger.error(
            "Failed to create post",
            organization_id=str(arguments.organization_id),
            error=str(e),
            exc_info=True,
        )
        await _delete_uploaded_objects(storage, uploaded_names)
        raise unexpected() from e

    logger.info(
        "Created post",
        post_id=str(post.id),
        organization_id=str(post.organization_id),
        attachment_count=len(post.attachments),
    )
    return post


# Query resolvers
@report_unexpected_errors
async def resolve_post_by_id(info: strawberry.Info, input: QueryPostInput) -> Post:
    """
    Resolve a post with its attachments.

    Global administrators can read any post; everyone else must be a member of
    the post's organization.
    """
    auth_context = await get_auth_context_from_info(info)
    current_user_id = require_authenticated_user_id(auth_context)

    arguments = parse_arguments(ResourceLookupArguments, to_raw_arguments(input), root="input")

    async def load_post() -> Posts | None:
        async with get_async_session() as session:
            stmt = (
                select(Posts)
                .where(Posts.id == arguments.id)
                .options(
                    selectinload(Posts.attachments),
                    selectinload(Posts.organization).selectinload(
                        Organizations.memberships.and_(
                            OrganizationMemberships.member_id == current_user_id
                        )
                    ),
                )
            )
            return await session.scalar(stmt)

    user_role, post = await asyncio.gather(load_user_role(current_user_id), load_post())

    if user_role is None:
        raise unauthenticated()

    if post is None:
        raise resource_not_found("input", "id")

    authorize_organization_action(
        user_role,
        membership_role_of(post.organization, current_user_id),
        resource_path=["input", "id"],
    )

    return to_post_type(post, post.attachments)
