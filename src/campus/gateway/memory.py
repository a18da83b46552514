"""
In-memory persistence gateway.

Keeps rows in per-entity lists and records every primitive call in
``MemoryStore.calls``, so the number of store round trips a request
causes can be observed directly. Used by ``campus serve --in-memory`` and
by the test suite.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

from ..errors import GatewayError, ReferentialError
from .base import Connect, CreateMany, EntityGateway, PersistenceGateway, RelationLink

# entity -> relation -> (target entity, foreign key, many)
RELATIONS: dict[str, dict[str, tuple[str, str, bool]]] = {
    "students": {"dept": ("departments", "dept_id", False)},
    "departments": {
        "students": ("students", "dept_id", True),
        "courses": ("courses", "dept_id", True),
    },
    "teachers": {"courses": ("courses", "teacher_id", True)},
    "courses": {
        "teacher": ("teachers", "teacher_id", False),
        "dept": ("departments", "dept_id", False),
    },
}

DEFAULTS: dict[str, dict[str, Any]] = {
    "students": {"enrolled": None, "dept_id": None},
    "departments": {"description": None},
    "teachers": {"type": None},
    "courses": {"description": None, "teacher_id": None, "dept_id": None},
}

UNIQUE: dict[str, tuple[str, ...]] = {"students": ("email",), "teachers": ("email",)}


@dataclass(frozen=True)
class GatewayCall:
    entity: str
    method: str
    args: tuple


class MemoryStore:
    """Shared row storage and call log for the in-memory gateways."""

    def __init__(self, clock=None):
        self.tables: dict[str, list[SimpleNamespace]] = {name: [] for name in RELATIONS}
        self.calls: list[GatewayCall] = []
        self._next_id = {name: 1 for name in RELATIONS}
        self._clock = clock or (lambda: datetime.now(UTC))

    def now(self) -> datetime:
        return self._clock()

    def record(self, entity: str, method: str, *args: Any) -> None:
        self.calls.append(GatewayCall(entity, method, args))

    def count(self, method: str | None = None, entity: str | None = None) -> int:
        return sum(
            1
            for call in self.calls
            if (method is None or call.method == method)
            and (entity is None or call.entity == entity)
        )

    def reset_calls(self) -> None:
        self.calls.clear()

    def get(self, entity: str, id: int) -> SimpleNamespace | None:
        return next((row for row in self.tables[entity] if row.id == id), None)

    def insert(self, entity: str, fields: Mapping[str, Any]) -> SimpleNamespace:
        for key in UNIQUE.get(entity, ()):
            if any(getattr(row, key) == fields.get(key) for row in self.tables[entity]):
                raise GatewayError(f"Unique constraint failed on {entity}.{key}")

        now = self.now()
        row = SimpleNamespace(
            **{**DEFAULTS[entity], **fields},
            id=self._next_id[entity],
            created_at=now,
            updated_at=now,
        )
        self._next_id[entity] += 1
        self.tables[entity].append(row)
        return row


class MemoryEntityGateway(EntityGateway[SimpleNamespace]):
    def __init__(self, store: MemoryStore, entity: str):
        self.store = store
        self.entity = entity

    def _relation(self, name: str) -> tuple[str, str, bool]:
        try:
            return RELATIONS[self.entity][name]
        except KeyError:
            raise GatewayError(f"Unknown relation {self.entity}.{name}") from None

    async def find_many(self, filters: Mapping[str, Any] | None = None) -> list[SimpleNamespace]:
        self.store.record(self.entity, "find_many", dict(filters or {}))
        return [
            row
            for row in self.store.tables[self.entity]
            if all(getattr(row, key) == value for key, value in (filters or {}).items())
        ]

    async def find_first(self, id: int) -> SimpleNamespace | None:
        self.store.record(self.entity, "find_first", id)
        return self.store.get(self.entity, id)

    async def find_by_ids(self, ids: Sequence[int]) -> list[SimpleNamespace | None]:
        self.store.record(self.entity, "find_by_ids", tuple(ids))
        return [self.store.get(self.entity, id) for id in ids]

    async def create(
        self, fields: Mapping[str, Any], links: Sequence[RelationLink] = ()
    ) -> SimpleNamespace:
        self.store.record(self.entity, "create", dict(fields), tuple(links))

        values = dict(fields)
        children: list[tuple[str, str, Sequence[Mapping[str, Any]]]] = []
        for link in links:
            target, foreign_key, _ = self._relation(link.relation)
            if isinstance(link, Connect):
                match = next(
                    (
                        row
                        for row in self.store.tables[target]
                        if getattr(row, link.field) == link.value
                    ),
                    None,
                )
                if match is None:
                    raise ReferentialError(
                        f"No '{target}' record found for {link.field}={link.value!r} "
                        f"to connect to {self.entity}.{link.relation}"
                    )
                values[foreign_key] = match.id
            elif isinstance(link, CreateMany):
                children.append((target, foreign_key, link.rows))

        row = self.store.insert(self.entity, values)
        for target, foreign_key, rows in children:
            for child in rows:
                self.store.insert(target, {**child, foreign_key: row.id})
        return row

    async def update(self, id: int, fields: Mapping[str, Any]) -> SimpleNamespace | None:
        self.store.record(self.entity, "update", id, dict(fields))
        row = self.store.get(self.entity, id)
        if row is None:
            return None
        for key, value in fields.items():
            setattr(row, key, value)
        row.updated_at = self.store.now()
        return row

    async def related_collection(self, parent_id: int, relation: str) -> list[SimpleNamespace]:
        self.store.record(self.entity, "related_collection", parent_id, relation)
        return self._collection(parent_id, relation)

    async def related_collections(
        self, parent_ids: Sequence[int], relation: str
    ) -> list[list[SimpleNamespace]]:
        self.store.record(self.entity, "related_collections", tuple(parent_ids), relation)
        return [self._collection(parent_id, relation) for parent_id in parent_ids]

    async def related_single(self, parent_id: int, relation: str) -> SimpleNamespace | None:
        self.store.record(self.entity, "related_single", parent_id, relation)
        return self._single(parent_id, relation)

    async def related_singles(
        self, parent_ids: Sequence[int], relation: str
    ) -> list[SimpleNamespace | None]:
        self.store.record(self.entity, "related_singles", tuple(parent_ids), relation)
        return [self._single(parent_id, relation) for parent_id in parent_ids]

    def _collection(self, parent_id: int, relation: str) -> list[SimpleNamespace]:
        target, foreign_key, many = self._relation(relation)
        if not many:
            raise GatewayError(f"{self.entity}.{relation} is not a collection")
        return [row for row in self.store.tables[target] if getattr(row, foreign_key) == parent_id]

    def _single(self, parent_id: int, relation: str) -> SimpleNamespace | None:
        target, foreign_key, many = self._relation(relation)
        if many:
            raise GatewayError(f"{self.entity}.{relation} is a collection")
        parent = self.store.get(self.entity, parent_id)
        if parent is None or getattr(parent, foreign_key) is None:
            return None
        return self.store.get(target, getattr(parent, foreign_key))


def create_memory_gateway(store: MemoryStore | None = None) -> PersistenceGateway:
    """Build an in-memory gateway bundle over ``store`` (a fresh one by default)."""
    store = store or MemoryStore()
    return PersistenceGateway(
        students=MemoryEntityGateway(store, "students"),
        departments=MemoryEntityGateway(store, "departments"),
        teachers=MemoryEntityGateway(store, "teachers"),
        courses=MemoryEntityGateway(store, "courses"),
    )
