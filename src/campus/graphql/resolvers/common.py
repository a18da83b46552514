"""
Shared helpers for resolvers: context access, id parsing and row conversion.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

import strawberry

from ...errors import ValidationError
from ..types.course import Course
from ..types.department import Department
from ..types.student import Student
from ..types.teacher import Teacher, TeacherType

if TYPE_CHECKING:
    from ...gateway.base import PersistenceGateway
    from ..loaders import Loaders


def get_gateway(info: strawberry.Info) -> PersistenceGateway:
    """Return the gateway bound to the current request."""
    return info.context["gateway"]


def get_loaders(info: strawberry.Info) -> Loaders | None:
    """Return the request's relation loaders, or None when batching is off."""
    return info.context.get("loaders")


def parse_id(value: Any) -> int:
    """Convert a GraphQL ID into the integer key used by the store."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid id: {value!r}") from None


def format_timestamp(value: datetime | None) -> str | None:
    """Render a stored datetime as epoch milliseconds."""
    if value is None:
        return None
    return str(int(value.timestamp() * 1000))


def to_student(row: Any) -> Student:
    return Student(
        id=strawberry.ID(str(row.id)),
        email=row.email,
        full_name=row.full_name,
        enrolled=row.enrolled,
        updated_at=format_timestamp(row.updated_at),
        created_at=format_timestamp(row.created_at),
        dept_id=row.dept_id,
    )


def to_department(row: Any) -> Department:
    return Department(
        id=strawberry.ID(str(row.id)),
        name=row.name,
        description=row.description,
        updated_at=format_timestamp(row.updated_at),
        created_at=format_timestamp(row.created_at),
    )


def to_teacher(row: Any) -> Teacher:
    return Teacher(
        id=strawberry.ID(str(row.id)),
        email=row.email,
        full_name=row.full_name,
        type=TeacherType(row.type) if row.type else None,
        updated_at=format_timestamp(row.updated_at),
        created_at=format_timestamp(row.created_at),
    )


def to_course(row: Any) -> Course:
    return Course(
        id=strawberry.ID(str(row.id)),
        code=row.code,
        title=row.title,
        description=row.description,
        updated_at=format_timestamp(row.updated_at),
        created_at=format_timestamp(row.created_at),
    )
