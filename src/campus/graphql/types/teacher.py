"""
Teacher GraphQL type definitions
"""

from enum import Enum
from typing import TYPE_CHECKING, Annotated

import strawberry

if TYPE_CHECKING:
    from .course import Course


@strawberry.enum
class TeacherType(Enum):
    """Teacher employment type."""

    FULLTIME = "FULLTIME"
    PARTTIME = "PARTTIME"


@strawberry.type
class Teacher:
    """Teacher type for GraphQL API."""

    id: strawberry.ID
    email: str
    full_name: str
    # Relation annotations fix field order; resolvers are defined below
    courses: list[Annotated["Course", strawberry.lazy(".course")] | None] | None
    type: TeacherType | None
    updated_at: str | None
    created_at: str | None

    @strawberry.field
    async def courses(
        self, info: strawberry.Info
    ) -> list[Annotated["Course", strawberry.lazy(".course")] | None] | None:
        """Get courses taught by this teacher."""
        from ..resolvers.teacher import resolve_teacher_courses

        return await resolve_teacher_courses(self, info)
