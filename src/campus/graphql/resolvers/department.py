from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ...logging import get_logger
from .common import get_gateway, get_loaders, parse_id, to_course, to_department, to_student

if TYPE_CHECKING:
    from ..types.course import Course
    from ..types.department import Department
    from ..types.student import Student

logger = get_logger(__name__)


# Query resolvers
async def resolve_departments(info: strawberry.Info) -> list[Department]:
    rows = await get_gateway(info).departments.find_many()
    return [to_department(row) for row in rows]


async def resolve_department_by_id(info: strawberry.Info, id: strawberry.ID) -> Department | None:
    row = await get_gateway(info).departments.find_first(parse_id(id))
    if row is None:
        logger.info("Department not found", department_id=str(id))
        return None
    return to_department(row)


# Mutation resolvers
async def create_department(
    info: strawberry.Info, name: str, description: str | None
) -> Department:
    """Create a department. Students and courses cannot be attached here."""
    row = await get_gateway(info).departments.create({"name": name, "description": description})
    logger.info("Department created", department_id=row.id)
    return to_department(row)


# Department field resolvers
async def resolve_department_students(department: Department, info: strawberry.Info) -> list[Student]:
    """Resolve the students of a department, in the order the store returns them."""
    parent_id = parse_id(department.id)
    loaders = get_loaders(info)
    if loaders is not None:
        rows = await loaders.department_students.load(parent_id)
    else:
        rows = await get_gateway(info).departments.related_collection(parent_id, "students")
    return [to_student(row) for row in rows]


async def resolve_department_courses(department: Department, info: strawberry.Info) -> list[Course]:
    parent_id = parse_id(department.id)
    loaders = get_loaders(info)
    if loaders is not None:
        rows = await loaders.department_courses.load(parent_id)
    else:
        rows = await get_gateway(info).departments.related_collection(parent_id, "courses")
    return [to_course(row) for row in rows]
