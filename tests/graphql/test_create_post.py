"""
Tests for the createPost mutation resolver
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from talawa.config import settings
from talawa.database.connection import get_async_session
from talawa.dbmodels import PostAttachments, Posts
from talawa.errors import ErrorCode, TalawaGraphQLError
from talawa.graphql.access_control import UserRole
from talawa.graphql.mutations.root import MutationCreatePostInput
from talawa.graphql.queries.root import QueryPostInput
from talawa.graphql.resolvers.post import (
    create_post,
    resolve_post_attachment_url,
    resolve_post_by_id,
)

RESOLVER = "talawa.graphql.resolvers.post"


async def count_rows(model) -> int:
    async with get_async_session() as session:
        return await session.scalar(select(func.count()).select_from(model))


def patch_auth(auth_context):
    return patch(f"{RESOLVER}.get_auth_context_from_info", AsyncMock(return_value=auth_context))


def patch_storage(storage):
    return patch(f"{RESOLVER}.get_storage_provider", return_value=storage)


class TestCreatePostValidation:
    """Failures detected before any lookup or side effect."""

    @pytest.mark.asyncio
    async def test_unauthenticated_caller(self, mock_info, auth_context_for, memory_storage):
        input = MutationCreatePostInput(caption="hello", organization_id=uuid4())

        with patch_auth(auth_context_for(None)), patch_storage(memory_storage):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        assert exc_info.value.code is ErrorCode.UNAUTHENTICATED
        assert memory_storage.objects == {}

    @pytest.mark.asyncio
    async def test_empty_caption_is_invalid(self, mock_info, auth_context_for):
        input = MutationCreatePostInput(caption="", organization_id=uuid4())

        with patch_auth(auth_context_for(uuid4())):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        error = exc_info.value
        assert error.code is ErrorCode.INVALID_ARGUMENTS
        assert error.argument_paths == [["input", "caption"]]
        assert error.extensions["issues"][0]["message"]

    @pytest.mark.asyncio
    async def test_caption_longer_than_limit_is_invalid(self, mock_info, auth_context_for):
        input = MutationCreatePostInput(caption="x" * 2049, organization_id=uuid4())

        with patch_auth(auth_context_for(uuid4())):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        assert exc_info.value.code is ErrorCode.INVALID_ARGUMENTS
        assert exc_info.value.argument_paths == [["input", "caption"]]


@pytest.mark.integration
class TestCreatePostAuthorization:
    """Role and membership checks against a real database."""

    @pytest.mark.asyncio
    async def test_missing_user_record_is_unauthenticated(
        self, seed, mock_info, auth_context_for, memory_storage
    ):
        organization_id = await seed.organization()
        input = MutationCreatePostInput(caption="hello", organization_id=organization_id)

        with patch_auth(auth_context_for(uuid4())), patch_storage(memory_storage):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        assert exc_info.value.code is ErrorCode.UNAUTHENTICATED
        assert await count_rows(Posts) == 0

    @pytest.mark.asyncio
    async def test_missing_organization(self, seed, mock_info, auth_context_for, memory_storage):
        user_id = await seed.user(role="administrator")
        input = MutationCreatePostInput(caption="hello", organization_id=uuid4())

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        error = exc_info.value
        assert error.code is ErrorCode.ARGUMENTS_ASSOCIATED_RESOURCES_NOT_FOUND
        assert error.argument_paths == [["input", "organizationId"]]

    @pytest.mark.asyncio
    async def test_non_member_pinning_fails_on_membership_first(
        self, seed, mock_info, auth_context_for, memory_storage
    ):
        user_id = await seed.user(role="member")
        organization_id = await seed.organization()
        input = MutationCreatePostInput(
            caption="hello", organization_id=organization_id, is_pinned=True
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        error = exc_info.value
        assert error.code is ErrorCode.UNAUTHORIZED_ACTION_ON_ARGUMENTS_ASSOCIATED_RESOURCES
        assert error.argument_paths == [["input", "organizationId"]]
        assert await count_rows(Posts) == 0

    @pytest.mark.asyncio
    async def test_regular_member_cannot_pin(
        self, seed, mock_info, auth_context_for, memory_storage
    ):
        user_id = await seed.user(role="member")
        organization_id = await seed.organization()
        await seed.membership(user_id, organization_id, role="regular")
        input = MutationCreatePostInput(
            caption="hello", organization_id=organization_id, is_pinned=True
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        error = exc_info.value
        assert error.code is ErrorCode.UNAUTHORIZED_ARGUMENTS
        assert error.argument_paths == [["input", "isPinned"]]
        assert await count_rows(Posts) == 0

    @pytest.mark.asyncio
    async def test_regular_member_setting_pin_false_is_still_restricted(
        self, seed, mock_info, auth_context_for, memory_storage
    ):
        user_id = await seed.user(role="member")
        organization_id = await seed.organization()
        await seed.membership(user_id, organization_id, role="regular")
        input = MutationCreatePostInput(
            caption="hello", organization_id=organization_id, is_pinned=False
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        assert exc_info.value.code is ErrorCode.UNAUTHORIZED_ARGUMENTS

    @pytest.mark.asyncio
    async def test_regular_member_without_pin_succeeds(
        self, seed, mock_info, auth_context_for, memory_storage
    ):
        user_id = await seed.user(role="member")
        organization_id = await seed.organization()
        await seed.membership(user_id, organization_id, role="regular")
        input = MutationCreatePostInput(caption="hello", organization_id=organization_id)

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            post = await create_post(mock_info, input)

        assert post.caption == "hello"
        assert post.creator_id == user_id
        assert post.pinned_at is None
        assert post.attachments == []
        assert resolve_post_attachment_url(post) is None

    @pytest.mark.asyncio
    async def test_organization_administrator_can_pin(
        self, seed, mock_info, auth_context_for, memory_storage
    ):
        user_id = await seed.user(role="member")
        organization_id = await seed.organization()
        await seed.membership(user_id, organization_id, role="administrator")
        input = MutationCreatePostInput(
            caption="pinned", organization_id=organization_id, is_pinned=True
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            post = await create_post(mock_info, input)

        assert post.pinned_at is not None

    @pytest.mark.asyncio
    async def test_global_administrator_can_pin_without_membership(
        self, seed, mock_info, auth_context_for, memory_storage
    ):
        user_id = await seed.user(role="administrator")
        organization_id = await seed.organization()
        input = MutationCreatePostInput(
            caption="pinned", organization_id=organization_id, is_pinned=True
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            post = await create_post(mock_info, input)

        assert post.pinned_at is not None
        assert await count_rows(Posts) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("is_pinned", "pinned"), [(None, True), (False, False)])
    async def test_explicit_pin_value(
        self, seed, mock_info, auth_context_for, memory_storage, is_pinned, pinned
    ):
        user_id = await seed.user(role="administrator")
        organization_id = await seed.organization()
        input = MutationCreatePostInput(
            caption="pinned", organization_id=organization_id, is_pinned=is_pinned
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            post = await create_post(mock_info, input)

        assert (post.pinned_at is not None) is pinned


@pytest.mark.integration
class TestCreatePostAttachments:
    """Uploads, attachment rows and the derived URL."""

    @pytest.mark.asyncio
    async def test_administrator_with_two_images(
        self, seed, mock_info, auth_context_for, memory_storage, upload_factory
    ):
        user_id = await seed.user(role="administrator")
        organization_id = await seed.organization()
        input = MutationCreatePostInput(
            caption="gallery",
            organization_id=organization_id,
            images=[
                upload_factory("first.png", "image/png", b"first"),
                upload_factory("second.webp", "image/webp", b"second"),
            ],
        )

        with (
            patch_auth(auth_context_for(user_id)),
            patch_storage(memory_storage),
            patch.object(settings, "api_base_url", "https://api.example.org"),
        ):
            post = await create_post(mock_info, input)
            url = resolve_post_attachment_url(post)

        assert len(post.attachments) == 2
        first, second = post.attachments
        assert [first.mime_type, second.mime_type] == ["image/png", "image/webp"]
        assert [first.object_name, second.object_name] == ["first.png", "second.webp"]
        assert url == f"https://api.example.org/objects/{first.name}"

        # Stored names are ULIDs and the bytes are in the store under them
        assert len(first.name) == 26
        assert memory_storage.objects[first.name][0] == b"first"
        assert memory_storage.objects[second.name][1] == "image/webp"
        assert all(attachment.post_id == post.id for attachment in post.attachments)
        assert all(attachment.creator_id == user_id for attachment in post.attachments)

    @pytest.mark.asyncio
    async def test_file_hash_is_sha256_of_content(
        self, seed, mock_info, auth_context_for, memory_storage, upload_factory
    ):
        import hashlib

        user_id = await seed.user(role="administrator")
        organization_id = await seed.organization()
        input = MutationCreatePostInput(
            caption="hash",
            organization_id=organization_id,
            images=[upload_factory("a.jpg", "image/jpeg", b"jpeg-bytes")],
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            post = await create_post(mock_info, input)

        assert post.attachments[0].file_hash == hashlib.sha256(b"jpeg-bytes").hexdigest()

    @pytest.mark.asyncio
    async def test_disallowed_mime_type_is_dropped(
        self, seed, mock_info, auth_context_for, memory_storage, upload_factory
    ):
        user_id = await seed.user(role="administrator")
        organization_id = await seed.organization()
        input = MutationCreatePostInput(
            caption="mixed",
            organization_id=organization_id,
            images=[
                upload_factory("anim.gif", "image/gif", b"gif"),
                upload_factory("ok.png", "image/png", b"png"),
            ],
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            post = await create_post(mock_info, input)

        assert [a.mime_type for a in post.attachments] == ["image/png"]
        assert len(memory_storage.objects) == 1
        assert await count_rows(PostAttachments) == 1

    @pytest.mark.asyncio
    async def test_re_fetch_returns_same_attachments(
        self, seed, mock_info, auth_context_for, memory_storage, upload_factory
    ):
        user_id = await seed.user(role="administrator")
        organization_id = await seed.organization()
        input = MutationCreatePostInput(
            caption="round trip",
            organization_id=organization_id,
            images=[
                upload_factory(f"{i}.png", "image/png", f"image-{i}".encode()) for i in range(3)
            ],
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            created = await create_post(mock_info, input)
            fetched = await resolve_post_by_id(mock_info, QueryPostInput(id=created.id))

        assert fetched.id == created.id
        assert [(a.id, a.mime_type) for a in fetched.attachments] == [
            (a.id, a.mime_type) for a in created.attachments
        ]

    @pytest.mark.asyncio
    async def test_upload_failure_removes_earlier_objects(
        self, seed, mock_info, auth_context_for, memory_storage, upload_factory
    ):
        user_id = await seed.user(role="administrator")
        organization_id = await seed.organization()
        memory_storage.fail_on_upload = 2
        input = MutationCreatePostInput(
            caption="fails",
            organization_id=organization_id,
            images=[
                upload_factory("1.png", "image/png", b"one"),
                upload_factory("2.png", "image/png", b"two"),
            ],
        )

        with patch_auth(auth_context_for(user_id)), patch_storage(memory_storage):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        assert exc_info.value.code is ErrorCode.UNEXPECTED
        assert memory_storage.objects == {}
        assert len(memory_storage.deleted) == 1
        assert await count_rows(Posts) == 0

    @pytest.mark.asyncio
    async def test_failure_inside_transaction_rolls_back_and_cleans_up(
        self, seed, mock_info, auth_context_for, memory_storage, upload_factory
    ):
        user_id = await seed.user(role="administrator")
        organization_id = await seed.organization()
        input = MutationCreatePostInput(
            caption="rollback",
            organization_id=organization_id,
            images=[upload_factory("1.png", "image/png", b"one")],
        )

        with (
            patch_auth(auth_context_for(user_id)),
            patch_storage(memory_storage),
            patch(f"{RESOLVER}.to_post_type", side_effect=RuntimeError("boom")),
        ):
            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        assert exc_info.value.code is ErrorCode.UNEXPECTED
        assert memory_storage.objects == {}
        assert await count_rows(Posts) == 0
        assert await count_rows(PostAttachments) == 0


class TestCreatePostEmptyInsert:
    """The database returning no row for the post insert."""

    @pytest.mark.asyncio
    async def test_empty_insert_result_is_unexpected(
        self, mock_info, auth_context_for, memory_storage, upload_factory
    ):
        user_id = uuid4()
        organization = MagicMock()
        organization.memberships = []
        input = MutationCreatePostInput(
            caption="hello",
            organization_id=uuid4(),
            images=[upload_factory("1.png", "image/png", b"one")],
        )

        with (
            patch_auth(auth_context_for(user_id)),
            patch_storage(memory_storage),
            patch(f"{RESOLVER}.load_user_role", AsyncMock(return_value=UserRole.ADMINISTRATOR)),
            patch(
                f"{RESOLVER}.load_organization_for_member",
                AsyncMock(return_value=organization),
            ),
            patch(f"{RESOLVER}.get_async_session") as mock_session,
            patch(f"{RESOLVER}.logger") as mock_logger,
        ):
            mock_async_session = AsyncMock(spec=AsyncSession)
            mock_session.return_value.__aenter__.return_value = mock_async_session
            mock_session.return_value.__aexit__.return_value = False

            empty_result = MagicMock()
            empty_result.first.return_value = None
            mock_async_session.scalars.return_value = empty_result

            with pytest.raises(TalawaGraphQLError) as exc_info:
                await create_post(mock_info, input)

        assert exc_info.value.code is ErrorCode.UNEXPECTED
        mock_logger.error.assert_called_once()
        # Only the post insert ran; attachments were never inserted
        assert mock_async_session.scalars.await_count == 1
        assert memory_storage.objects == {}
        assert len(memory_storage.deleted) == 1
