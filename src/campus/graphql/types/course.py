"""
Course GraphQL type definitions
"""

from typing import TYPE_CHECKING, Annotated

import strawberry

if TYPE_CHECKING:
    from .department import Department
    from .teacher import Teacher


@strawberry.type
class Course:
    """Course type for GraphQL API."""

    id: strawberry.ID
    code: str
    title: str
    description: str | None
    # Relation annotations fix field order; resolvers are defined below
    teacher: Annotated["Teacher", strawberry.lazy(".teacher")] | None
    dept: Annotated["Department", strawberry.lazy(".department")] | None
    updated_at: str | None
    created_at: str | None

    @strawberry.field
    async def teacher(
        self, info: strawberry.Info
    ) -> Annotated["Teacher", strawberry.lazy(".teacher")] | None:
        """Get the teacher of this course, if any."""
        from ..resolvers.course import resolve_course_teacher

        return await resolve_course_teacher(self, info)

    @strawberry.field
    async def dept(
        self, info: strawberry.Info
    ) -> Annotated["Department", strawberry.lazy(".department")] | None:
        """Get the department of this course, if any."""
        from ..resolvers.course import resolve_course_dept

        return await resolve_course_dept(self, info)
