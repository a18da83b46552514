from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ...gateway.base import Connect
from ...logging import get_logger
from .common import get_gateway, get_loaders, parse_id, to_course, to_department, to_teacher

if TYPE_CHECKING:
    from ..types.course import Course
    from ..types.department import Department
    from ..types.teacher import Teacher

logger = get_logger(__name__)


# Query resolvers
async def resolve_courses(info: strawberry.Info) -> list[Course]:
    rows = await get_gateway(info).courses.find_many()
    return [to_course(row) for row in rows]


async def resolve_course_by_id(info: strawberry.Info, id: strawberry.ID) -> Course | None:
    row = await get_gateway(info).courses.find_first(parse_id(id))
    if row is None:
        logger.info("Course not found", course_id=str(id))
        return None
    return to_course(row)


# Mutation resolvers
async def create_course(
    info: strawberry.Info, code: str, title: str, teacher_email: str | None
) -> Course:
    """
    Create a course, connecting it to the teacher with ``teacher_email`` if given.

    The department link is not settable here.
    """
    links = [Connect("teacher", "email", teacher_email)] if teacher_email else []
    row = await get_gateway(info).courses.create({"code": code, "title": title}, links=links)
    logger.info("Course created", course_id=row.id, teacher_email=teacher_email)
    return to_course(row)


# Course field resolvers
async def resolve_course_teacher(course: Course, info: strawberry.Info) -> Teacher | None:
    parent_id = parse_id(course.id)
    loaders = get_loaders(info)
    if loaders is not None:
        row = await loaders.course_teacher.load(parent_id)
    else:
        row = await get_gateway(info).courses.related_single(parent_id, "teacher")
    return to_teacher(row) if row is not None else None


async def resolve_course_dept(course: Course, info: strawberry.Info) -> Department | None:
    parent_id = parse_id(course.id)
    loaders = get_loaders(info)
    if loaders is not None:
        row = await loaders.course_dept.load(parent_id)
    else:
        row = await get_gateway(info).courses.related_single(parent_id, "dept")
    return to_department(row) if row is not None else None
