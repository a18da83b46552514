"""
Root GraphQL mutation definitions
"""

import strawberry

from ..types.course import Course
from ..types.department import Department
from ..types.student import Student
from ..types.teacher import Teacher


# Input types for mutations
@strawberry.input
class CourseCreateWithoutTeacherInput:
    """A course created together with its teacher."""

    code: str
    title: str
    description: str | None = None


@strawberry.input
class TeacherCreateInput:
    """Input for creating a teacher, optionally with the courses they teach."""

    email: str
    full_name: str
    courses: list[CourseCreateWithoutTeacherInput] | None = None


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    # Student mutations
    @strawberry.mutation(name="registerStudent")
    async def register_student(
        self, info: strawberry.Info, email: str, full_name: str, dept_id: int
    ) -> Student:
        """Register a new student in an existing department."""
        from ..resolvers.student import register_student

        return await register_student(info, email, full_name, dept_id)

    @strawberry.mutation
    async def enroll(self, info: strawberry.Info, id: strawberry.ID) -> Student | None:
        """Mark a student as enrolled."""
        from ..resolvers.student import enroll_student

        return await enroll_student(info, id)

    # Teacher mutations
    @strawberry.mutation(name="createTeacher")
    async def create_teacher(self, info: strawberry.Info, data: TeacherCreateInput) -> Teacher:
        """Create a teacher and any nested courses in one write."""
        from ..resolvers.teacher import create_teacher

        return await create_teacher(info, data)

    # Course mutations
    @strawberry.mutation(name="createCourse")
    async def create_course(
        self,
        info: strawberry.Info,
        code: str,
        title: str,
        teacher_email: str | None = None,
    ) -> Course:
        """Create a course, optionally taught by an existing teacher."""
        from ..resolvers.course import create_course

        return await create_course(info, code, title, teacher_email)

    # Department mutations
    @strawberry.mutation(name="createDepartment")
    async def create_department(
        self, info: strawberry.Info, name: str, description: str | None = None
    ) -> Department:
        """Create a department."""
        from ..resolvers.department import create_department

        return await create_department(info, name, description)
