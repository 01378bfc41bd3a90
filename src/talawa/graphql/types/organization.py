"""
Organization GraphQL type definitions
"""

from datetime import datetime
from uuid import UUID

import strawberry


@strawberry.type
class Organization:
    """Organization type for GraphQL API."""

    id: UUID
    name: str
    description: str | None
    address_line1: str | None
    address_line2: str | None
    city: str | None
    state: str | None
    postal_code: str | None
    country_code: str | None
    user_registration_required: bool
    created_at: datetime
    updated_at: datetime | None

    @strawberry.field(description="Total number of venues belonging to the organization.")
    async def venues_count(self, info: strawberry.Info) -> int:
        from ..resolvers.organization import resolve_organization_venues_count

        return await resolve_organization_venues_count(self, info)
