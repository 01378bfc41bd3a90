"""
Main GraphQL schema definition using Strawberry
"""

from typing import Any

import strawberry
from fastapi import Request
from graphql import GraphQLError, get_introspection_query, graphql_sync
from graphql import validate_schema as gql_validate_schema
from strawberry.extensions import MaskErrors, QueryDepthLimiter
from strawberry.fastapi import GraphQLRouter

from ..config import settings
from ..errors import DEFAULT_MESSAGES, ErrorCode, TalawaGraphQLError
from ..logging import get_logger
from .mutations.root import Mutation
from .queries.root import Query

logger = get_logger(__name__)


def should_mask_error(error: GraphQLError) -> bool:
    """Hide resolver failures that are not structured API errors."""
    original = error.original_error
    if original is None:
        # Parse and validation errors describe the client's own document
        return False
    return not isinstance(original, TalawaGraphQLError)


class MaskUnexpectedErrors(MaskErrors):
    """Replace masked errors with the generic ``unexpected`` error clients expect."""

    def __init__(self) -> None:
        super().__init__(
            should_mask_error=should_mask_error,
            error_message=DEFAULT_MESSAGES[ErrorCode.UNEXPECTED],
        )

    def anonymise_error(self, error: GraphQLError) -> GraphQLError:
        return GraphQLError(
            message=self.error_message,
            nodes=error.nodes,
            source=error.source,
            positions=error.positions,
            path=error.path,
            extensions={"code": ErrorCode.UNEXPECTED.value},
        )


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[
        QueryDepthLimiter(max_depth=settings.graphql_max_query_depth),
        MaskUnexpectedErrors(),
    ],
)


def validate_schema() -> None:
    """Fail fast at startup if the schema is inconsistent or cannot be introspected."""
    graphql_schema = schema._schema

    problems = [str(e) for e in gql_validate_schema(graphql_schema)]
    if not problems:
        result = graphql_sync(graphql_schema, get_introspection_query())
        problems = [str(e) for e in result.errors or []]

    if problems:
        logger.error("GraphQL schema validation failed", errors=problems)
        raise RuntimeError(f"GraphQL schema validation failed: {'; '.join(problems)}")

    logger.info("GraphQL schema validation successful")


def create_graphql_router() -> GraphQLRouter[dict[str, Any], None]:
    """Create a GraphQL router for FastAPI."""

    async def get_context(request: Request) -> dict[str, Any]:
        """Get the context for GraphQL resolvers."""
        return {
            "request": request,
        }

    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide="graphiql" if settings.debug else None,
        context_getter=get_context,
        multipart_uploads_enabled=True,
    )
