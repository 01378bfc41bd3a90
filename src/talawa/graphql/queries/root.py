"""
Root GraphQL query definitions
"""

from uuid import UUID

import strawberry

from ..types.organization import Organization
from ..types.post import Post


@strawberry.input
class QueryPostInput:
    id: UUID


@strawberry.input
class QueryOrganizationInput:
    id: UUID


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def post(self, info: strawberry.Info, input: QueryPostInput) -> Post:
        """Get a post with its attachments."""
        from ..resolvers.post import resolve_post_by_id

        return await resolve_post_by_id(info, input)

    @strawberry.field
    async def organization(
        self, info: strawberry.Info, input: QueryOrganizationInput
    ) -> Organization:
        """Get an organization by ID."""
        from ..resolvers.organization import resolve_organization_by_id

        return await resolve_organization_by_id(info, input)
