"""
Main GraphQL schema definition using Strawberry
"""

from typing import Any

import strawberry
from fastapi import Request
from graphql import validate_schema as gql_validate_schema
from strawberry.extensions import DisableIntrospection
from strawberry.fastapi import GraphQLRouter

from ..logging import get_logger
from .mutations.root import Mutation
from .queries.root import Query
from .registry import check_resolvers

logger = get_logger(__name__)

# Create the GraphQL schema; introspection is not part of the public surface
schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[DisableIntrospection],
)


def validate_schema() -> None:
    """Validate the GraphQL schema at startup.

    Checks the schema structure with graphql-core and checks that every
    relation field of every entity type has its own resolver, so the server
    fails fast instead of resolving a relation to a missing attribute.

    Raises:
        Exception: If the schema is invalid or a resolver is missing
    """
    try:
        graphql_schema = schema._schema

        errors = gql_validate_schema(graphql_schema)
        if errors:
            error_messages = [str(e) for e in errors]
            raise Exception(f"GraphQL schema validation failed: {'; '.join(error_messages)}")

        problems = check_resolvers(schema)
        if problems:
            raise Exception(f"GraphQL resolver check failed: {'; '.join(problems)}")

        logger.info("GraphQL schema validation successful")

    except Exception as e:
        logger.error("GraphQL schema validation failed", error=str(e))
        raise


# Create the GraphQL router for FastAPI integration
def create_graphql_router() -> GraphQLRouter[dict[str, Any], None]:
    """Create a GraphQL router for FastAPI.

    The dispatcher is read from ``app.state`` so every request gets a context
    built around the gateway the app was started with.
    No in-browser IDE is served: it needs introspection, which the schema
    rejects.
    """

    async def get_context(request: Request) -> dict[str, Any]:
        """Get the context for GraphQL resolvers."""
        return request.app.state.dispatcher.build_context(request=request)

    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide=None,
        context_getter=get_context,
    )
