"""
Per-request relation loaders.

With batching enabled, relation fields of the same kind requested within one
execution tick are collected and sent to the gateway as a single batch call;
repeated keys are deduplicated. Loaders live for one request only.
"""

from collections.abc import Sequence
from typing import Any

from strawberry.dataloader import DataLoader

from ..gateway.base import EntityGateway, PersistenceGateway


def _collections(gateway: EntityGateway, relation: str):
    async def load(keys: Sequence[int]) -> list[list[Any]]:
        return await gateway.related_collections(list(keys), relation)

    return load


def _singles(gateway: EntityGateway, relation: str):
    async def load(keys: Sequence[int]) -> list[Any | None]:
        return await gateway.related_singles(list(keys), relation)

    return load


def _by_ids(gateway: EntityGateway):
    async def load(keys: Sequence[int]) -> list[Any | None]:
        return await gateway.find_by_ids(list(keys))

    return load


class Loaders:
    def __init__(self, gateway: PersistenceGateway):
        self.department_by_id = DataLoader(load_fn=_by_ids(gateway.departments))
        self.department_students = DataLoader(
            load_fn=_collections(gateway.departments, "students")
        )
        self.department_courses = DataLoader(load_fn=_collections(gateway.departments, "courses"))
        self.teacher_courses = DataLoader(load_fn=_collections(gateway.teachers, "courses"))
        self.course_teacher = DataLoader(load_fn=_singles(gateway.courses, "teacher"))
        self.course_dept = DataLoader(load_fn=_singles(gateway.courses, "dept"))
