"""
Structured GraphQL errors surfaced to API clients.

Every user-facing failure carries a ``code`` from :class:`ErrorCode` in the
error's ``extensions``. Failures tied to specific input locations also carry an
``issues`` list of ``{"argumentPath": [...], "message": ...}`` entries.
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, ParamSpec, TypeVar

from graphql import GraphQLError

from .logging import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


class ErrorCode(str, Enum):
    """Fixed vocabulary of error codes returned to clients."""

    UNAUTHENTICATED = "unauthenticated"
    INVALID_ARGUMENTS = "invalid_arguments"
    ARGUMENTS_ASSOCIATED_RESOURCES_NOT_FOUND = "arguments_associated_resources_not_found"
    UNAUTHORIZED_ACTION_ON_ARGUMENTS_ASSOCIATED_RESOURCES = (
        "unauthorized_action_on_arguments_associated_resources"
    )
    UNAUTHORIZED_ARGUMENTS = "unauthorized_arguments"
    UNAUTHORIZED_ACTION = "unauthorized_action"
    FORBIDDEN_ACTION = "forbidden_action"
    UNEXPECTED = "unexpected"


DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.UNAUTHENTICATED: "You must be authenticated to perform this action.",
    ErrorCode.INVALID_ARGUMENTS: "You have provided invalid arguments for this action.",
    ErrorCode.ARGUMENTS_ASSOCIATED_RESOURCES_NOT_FOUND: (
        "No associated resources found for the provided arguments."
    ),
    ErrorCode.UNAUTHORIZED_ACTION_ON_ARGUMENTS_ASSOCIATED_RESOURCES: (
        "You are not authorized to perform this action on the resources associated "
        "with the provided arguments."
    ),
    ErrorCode.UNAUTHORIZED_ARGUMENTS: (
        "You are not authorized to perform this action with the provided arguments."
    ),
    ErrorCode.UNAUTHORIZED_ACTION: "You are not authorized to perform this action.",
    ErrorCode.FORBIDDEN_ACTION: "This action is forbidden.",
    ErrorCode.UNEXPECTED: "Something went wrong. Please try again later.",
}

ArgumentPath = list[str | int]


@dataclass(frozen=True)
class Issue:
    """One offending input location."""

    argument_path: tuple[str | int, ...]
    message: str | None = None

    def to_extension(self) -> dict[str, Any]:
        entry: dict[str, Any] = {"argumentPath": list(self.argument_path)}
        if self.message is not None:
            entry["message"] = self.message
        return entry


class TalawaGraphQLError(GraphQLError):
    """GraphQL error carrying a structured error code and optional issues."""

    def __init__(
        self,
        code: ErrorCode,
        issues: Sequence[Issue] | None = None,
        message: str | None = None,
    ):
        self.code = code
        self.issues: list[Issue] = list(issues or [])

        extensions: dict[str, Any] = {"code": code.value}
        if self.issues:
            extensions["issues"] = [issue.to_extension() for issue in self.issues]

        super().__init__(message or DEFAULT_MESSAGES[code], extensions=extensions)

    @property
    def argument_paths(self) -> list[ArgumentPath]:
        return [list(issue.argument_path) for issue in self.issues]


def unauthenticated() -> TalawaGraphQLError:
    return TalawaGraphQLError(ErrorCode.UNAUTHENTICATED)


def unexpected() -> TalawaGraphQLError:
    return TalawaGraphQLError(ErrorCode.UNEXPECTED)


def resource_not_found(*argument_path: str | int) -> TalawaGraphQLError:
    return TalawaGraphQLError(
        ErrorCode.ARGUMENTS_ASSOCIATED_RESOURCES_NOT_FOUND,
        issues=[Issue(argument_path=argument_path)],
    )


def report_unexpected_errors(
    resolver: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """Log any failure that is not a structured error and surface it as ``unexpected``."""

    @functools.wraps(resolver)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await resolver(*args, **kwargs)
        except TalawaGraphQLError:
            raise
        except Exception as e:
            logger.error(
                "Resolver failed unexpectedly",
                resolver=resolver.__name__,
                error=str(e),
                exc_info=True,
            )
            raise unexpected() from e

    return wrapper
