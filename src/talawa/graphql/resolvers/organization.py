from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import func, select

from ...database.connection import get_async_session
from ...dbmodels import Organizations, Venues
from ...errors import report_unexpected_errors, resource_not_found, unauthenticated
from ...logging import get_logger
from ..access_control import (
    get_auth_context_from_info,
    load_user_role,
    require_authenticated_user_id,
)
from ..validation import ResourceLookupArguments, parse_arguments, to_raw_arguments

if TYPE_CHECKING:
    from ..queries.root import QueryOrganizationInput
    from ..types.organization import Organization

logger = get_logger(__name__)


def to_organization_type(organization: Organizations) -> Organization:
    from ..types.organization import Organization as OrganizationType

    return OrganizationType(
        id=organization.id,
        name=organization.name,
        description=organization.description,
        address_line1=organization.address_line1,
        address_line2=organization.address_line2,
        city=organization.city,
        state=organization.state,
        postal_code=organization.postal_code,
        country_code=organization.country_code,
        user_registration_required=organization.user_registration_required,
        created_at=organization.created_at,
        updated_at=organization.updated_at,
    )


# Query resolvers
@report_unexpected_errors
async def resolve_organization_by_id(
    info: strawberry.Info, input: QueryOrganizationInput
) -> Organization:
    """Resolve an organization by its ID."""
    arguments = parse_arguments(ResourceLookupArguments, to_raw_arguments(input), root="input")

    async with get_async_session() as session:
        organization = await session.get(Organizations, arguments.id)

    if organization is None:
        logger.info("Organization not found", organization_id=str(arguments.id))
        raise resource_not_found("input", "id")

    return to_organization_type(organization)


# Field resolvers
@report_unexpected_errors
async def resolve_organization_venues_count(
    organization: Organization, info: strawberry.Info
) -> int:
    """
    Count the venues of an organization.

    Any authenticated caller with an existing user record may see it.
    """
    auth_context = await get_auth_context_from_info(info)
    current_user_id = require_authenticated_user_id(auth_context)

    if await load_user_role(current_user_id) is None:
        raise unauthenticated()

    async with get_async_session() as session:
        count = await session.scalar(
            select(func.count())
            .select_from(Venues)
            .where(Venues.organization_id == organization.id)
        )

    return count or 0
