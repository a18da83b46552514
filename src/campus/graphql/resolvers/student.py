from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ...gateway.base import Connect
from ...logging import get_logger
from .common import get_gateway, get_loaders, parse_id, to_department, to_student

if TYPE_CHECKING:
    from ..types.department import Department
    from ..types.student import Student

logger = get_logger(__name__)


# Query resolvers
async def resolve_enrollment(info: strawberry.Info) -> list[Student]:
    """Resolve the students whose enrolled flag is set."""
    rows = await get_gateway(info).students.find_many({"enrolled": True})
    return [to_student(row) for row in rows]


async def resolve_students(info: strawberry.Info) -> list[Student]:
    rows = await get_gateway(info).students.find_many()
    return [to_student(row) for row in rows]


async def resolve_student_by_id(info: strawberry.Info, id: strawberry.ID) -> Student | None:
    row = await get_gateway(info).students.find_first(parse_id(id))
    if row is None:
        logger.info("Student not found", student_id=str(id))
        return None
    return to_student(row)


# Mutation resolvers
async def register_student(
    info: strawberry.Info, email: str, full_name: str, dept_id: int
) -> Student:
    """
    Create a student linked to an existing department.

    A missing department is reported by the gateway as a ReferentialError.
    """
    row = await get_gateway(info).students.create(
        {"email": email, "full_name": full_name},
        links=[Connect("dept", "id", dept_id)],
    )
    logger.info("Student registered", student_id=row.id, dept_id=dept_id)
    return to_student(row)


async def enroll_student(info: strawberry.Info, id: strawberry.ID) -> Student | None:
    """
    Set the enrolled flag of a student.

    Enrollment is one-way; enrolling twice leaves the student enrolled.
    Returns None when the student does not exist.
    """
    student_id = parse_id(id)
    row = await get_gateway(info).students.update(student_id, {"enrolled": True})
    if row is None:
        logger.info("Enroll target not found", student_id=student_id)
        return None
    logger.info("Student enrolled", student_id=student_id)
    return to_student(row)


# Student field resolvers
async def resolve_student_dept(student: Student, info: strawberry.Info) -> Department | None:
    """
    Resolve the department of a student from its stored foreign key.

    The field is non-null, so a missing department surfaces as a GraphQL error.
    """
    if student.dept_id is None:
        return None

    loaders = get_loaders(info)
    if loaders is not None:
        row = await loaders.department_by_id.load(student.dept_id)
    else:
        row = await get_gateway(info).departments.find_first(student.dept_id)

    return to_department(row) if row is not None else None
