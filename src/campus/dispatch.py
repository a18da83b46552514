"""
Request dispatch: runs one GraphQL operation against the schema with a
gateway supplied by the caller.

GraphQL validation rejects unknown fields and missing required arguments
before any resolver runs. During execution a failing field nulls its own
branch and adds an entry to ``errors``; sibling branches are unaffected.
Mutation root fields run one after another in document order.
"""

from typing import Any

import strawberry
from strawberry.types import ExecutionResult

from .gateway.base import PersistenceGateway
from .graphql.loaders import Loaders
from .graphql.schema import schema as default_schema
from .logging import generate_request_id, get_logger, get_request_id

logger = get_logger(__name__)


class Dispatcher:
    """Executes operations with a fresh per-request context around one gateway."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        batch_relations: bool = False,
        schema: strawberry.Schema | None = None,
    ):
        self.gateway = gateway
        self.batch_relations = batch_relations
        self.schema = schema or default_schema

    def build_context(self, **extra: Any) -> dict[str, Any]:
        """Build the context for one request.

        Loaders are created per request so nothing resolved for one request
        is visible to another.
        """
        return {
            "gateway": self.gateway,
            "loaders": Loaders(self.gateway) if self.batch_relations else None,
            "request_id": get_request_id() or generate_request_id(),
            **extra,
        }

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> ExecutionResult:
        """Execute a single query or mutation document."""
        context = self.build_context()
        result = await self.schema.execute(
            query,
            variable_values=variables,
            context_value=context,
            operation_name=operation_name,
        )

        for error in result.errors or []:
            logger.warning(
                "Field resolution failed",
                request_id=context["request_id"],
                path=error.path,
                error=error.message,
            )

        return result
