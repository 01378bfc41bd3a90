"""
Shared access control logic for GraphQL resolvers
"""

from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

import strawberry
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ..auth.context import ANONYMOUS
from ..auth.middleware import get_auth_context_optional
from ..database.connection import get_async_session
from ..dbmodels import OrganizationMemberships, Organizations, Users
from ..errors import ArgumentPath, ErrorCode, Issue, TalawaGraphQLError, unauthenticated
from ..logging import get_logger

if TYPE_CHECKING:
    from ..auth.context import AuthContext

logger = get_logger(__name__)


class UserRole(str, Enum):
    """Global role of a user account."""

    ADMINISTRATOR = "administrator"
    MEMBER = "member"


class MembershipRole(str, Enum):
    """Role of a user inside one organization."""

    ADMINISTRATOR = "administrator"
    REGULAR = "regular"


async def get_auth_context_from_info(info: strawberry.Info) -> "AuthContext":
    """
    Extract auth context from GraphQL info object.

    Returns an unauthenticated context if the request is not available.
    """
    request = info.context.get("request")
    if not request:
        logger.error("Request not found in GraphQL context")
        return ANONYMOUS

    return await get_auth_context_optional(authorization=request.headers.get("authorization"))


def require_authenticated_user_id(auth_context: "AuthContext") -> UUID:
    """Return the caller's user id or fail with `unauthenticated`."""
    if not auth_context.is_authenticated or auth_context.user_id is None:
        raise unauthenticated()
    return auth_context.user_id


async def load_user_role(user_id: UUID) -> UserRole | None:
    """Look up the global role of a user; None when the account no longer exists."""
    async with get_async_session() as session:
        role = await session.scalar(select(Users.role).where(Users.id == user_id))
    return UserRole(role) if role is not None else None


async def load_organization_for_member(
    organization_id: UUID, member_id: UUID
) -> Organizations | None:
    """
    Load an organization together with the given user's membership in it.

    Only the caller's own membership row is loaded into ``memberships``, so the
    list has at most one entry.
    """
    async with get_async_session() as session:
        stmt = (
            select(Organizations)
            .where(Organizations.id == organization_id)
            .options(
                selectinload(
                    Organizations.memberships.and_(
                        OrganizationMemberships.member_id == member_id
                    )
                )
            )
        )
        return await session.scalar(stmt)


def membership_role_of(organization: Organizations, member_id: UUID) -> MembershipRole | None:
    """Return the member's role in an organization with preloaded memberships."""
    for membership in organization.memberships:
        if membership.member_id == member_id:
            return MembershipRole(membership.role)
    return None


def get_key_paths_with_non_undefined_values(
    key_paths: Iterable[Sequence[str]], value: Any
) -> list[ArgumentPath]:
    """
    Return the key paths that lead to an explicitly provided value.

    A path counts as provided when every key along it exists and the final
    value is not ``strawberry.UNSET``. An explicit null is a provided value.
    """
    provided: list[ArgumentPath] = []

    for key_path in key_paths:
        current = value
        for key in key_path:
            if isinstance(current, Mapping):
                current = current.get(key, strawberry.UNSET)
            else:
                current = getattr(current, key, strawberry.UNSET)
            if current is strawberry.UNSET:
                break

        if current is not strawberry.UNSET:
            provided.append(list(key_path))

    return provided


def authorize_organization_action(
    user_role: UserRole,
    membership_role: MembershipRole | None,
    *,
    resource_path: ArgumentPath,
    restricted_argument_paths: Sequence[ArgumentPath] = (),
) -> None:
    """
    Decide whether a caller may act on an organization-scoped resource.

    Global administrators are always allowed. Everyone else needs a membership
    in the organization, and only organization administrators may provide the
    restricted arguments. Every offending restricted argument is reported.
    """
    if user_role is UserRole.ADMINISTRATOR:
        return

    if membership_role is None:
        raise TalawaGraphQLError(
            ErrorCode.UNAUTHORIZED_ACTION_ON_ARGUMENTS_ASSOCIATED_RESOURCES,
            issues=[Issue(argument_path=tuple(resource_path))],
        )

    if membership_role is not MembershipRole.ADMINISTRATOR and restricted_argument_paths:
        raise TalawaGraphQLError(
            ErrorCode.UNAUTHORIZED_ARGUMENTS,
            issues=[Issue(argument_path=tuple(path)) for path in restricted_argument_paths],
        )
