"""
Root GraphQL mutation definitions
"""

from uuid import UUID

import strawberry
from strawberry.file_uploads import Upload

from ..types.post import Post


# Input types for mutations
@strawberry.input
class MutationCreatePostInput:
    """Input for creating a post."""

    caption: str
    organization_id: UUID
    is_pinned: bool | None = strawberry.UNSET
    images: list[Upload] | None = strawberry.UNSET


@strawberry.input(description="Input for reCAPTCHA verification mutation.")
class MutationRecaptchaInput:
    recaptcha_token: str = strawberry.field(description="The reCAPTCHA token to verify.")


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    @strawberry.mutation(name="createPost", description="Mutation field to create a post.")
    async def create_post(self, info: strawberry.Info, input: MutationCreatePostInput) -> Post:
        from ..resolvers.post import create_post

        return await create_post(info, input)

    @strawberry.mutation(description="Mutation field to verify Google reCAPTCHA v2 token.")
    async def recaptcha(self, info: strawberry.Info, data: MutationRecaptchaInput) -> bool:
        from ..resolvers.recaptcha import resolve_recaptcha

        return await resolve_recaptcha(info, data)
