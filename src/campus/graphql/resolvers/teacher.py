from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ...gateway.base import CreateMany
from ...logging import get_logger
from .common import get_gateway, get_loaders, parse_id, to_course, to_teacher

if TYPE_CHECKING:
    from ..mutations.root import TeacherCreateInput
    from ..types.course import Course
    from ..types.teacher import Teacher

logger = get_logger(__name__)


# Query resolvers
async def resolve_teachers(info: strawberry.Info) -> list[Teacher]:
    rows = await get_gateway(info).teachers.find_many()
    return [to_teacher(row) for row in rows]


async def resolve_teacher_by_id(info: strawberry.Info, id: strawberry.ID) -> Teacher | None:
    row = await get_gateway(info).teachers.find_first(parse_id(id))
    if row is None:
        logger.info("Teacher not found", teacher_id=str(id))
        return None
    return to_teacher(row)


# Mutation resolvers
async def create_teacher(info: strawberry.Info, data: TeacherCreateInput) -> Teacher:
    """
    Create a teacher together with the courses listed in ``data.courses``.

    The nested courses go to the gateway in the same create call, so the
    gateway decides how the composite write is made atomic.
    """
    links = []
    if data.courses:
        links.append(
            CreateMany(
                "courses",
                [
                    {
                        "code": course.code,
                        "title": course.title,
                        "description": course.description,
                    }
                    for course in data.courses
                ],
            )
        )

    row = await get_gateway(info).teachers.create(
        {"email": data.email, "full_name": data.full_name}, links=links
    )
    logger.info(
        "Teacher created",
        teacher_id=row.id,
        course_count=len(data.courses or []),
    )
    return to_teacher(row)


# Teacher field resolvers
async def resolve_teacher_courses(teacher: Teacher, info: strawberry.Info) -> list[Course]:
    parent_id = parse_id(teacher.id)
    loaders = get_loaders(info)
    if loaders is not None:
        rows = await loaders.teacher_courses.load(parent_id)
    else:
        rows = await get_gateway(info).teachers.related_collection(parent_id, "courses")
    return [to_course(row) for row in rows]
