"""
Department GraphQL type definitions
"""

from typing import TYPE_CHECKING, Annotated

import strawberry

if TYPE_CHECKING:
    from .course import Course
    from .student import Student


@strawberry.type
class Department:
    """Department type for GraphQL API."""

    id: strawberry.ID
    name: str
    description: str | None
    # Relation annotations fix field order; resolvers are defined below
    students: list[Annotated["Student", strawberry.lazy(".student")] | None] | None
    courses: list[Annotated["Course", strawberry.lazy(".course")] | None] | None
    updated_at: str | None
    created_at: str | None

    @strawberry.field
    async def students(
        self, info: strawberry.Info
    ) -> list[Annotated["Student", strawberry.lazy(".student")] | None] | None:
        """Get students of this department."""
        from ..resolvers.department import resolve_department_students

        return await resolve_department_students(self, info)

    @strawberry.field
    async def courses(
        self, info: strawberry.Info
    ) -> list[Annotated["Course", strawberry.lazy(".course")] | None] | None:
        """Get courses offered by this department."""
        from ..resolvers.department import resolve_department_courses

        return await resolve_department_courses(self, info)
