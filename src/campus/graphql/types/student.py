"""
Student GraphQL type definitions
"""

from typing import TYPE_CHECKING, Annotated

import strawberry

if TYPE_CHECKING:
    from .department import Department


@strawberry.type
class Student:
    """Student type for GraphQL API."""

    id: strawberry.ID
    email: str
    full_name: str
    # Relation annotations fix field order; resolvers are defined below
    dept: Annotated["Department", strawberry.lazy(".department")]
    enrolled: bool | None
    updated_at: str | None
    created_at: str | None
    dept_id: strawberry.Private[int | None]

    @strawberry.field
    async def dept(
        self, info: strawberry.Info
    ) -> Annotated["Department", strawberry.lazy(".department")]:
        """Get the department this student belongs to."""
        from ..resolvers.student import resolve_student_dept

        return await resolve_student_dept(self, info)
