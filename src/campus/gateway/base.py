"""
Persistence gateway contract.

The GraphQL layer only talks to storage through these primitives. Each entity
type gets one ``EntityGateway``; the four of them travel together as a
``PersistenceGateway`` that is handed to the dispatcher per request.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

RowT = TypeVar("RowT")


@dataclass(frozen=True)
class Connect:
    """Link the new row to an existing row of ``relation`` where ``field == value``."""

    relation: str
    field: str
    value: Any


@dataclass(frozen=True)
class CreateMany:
    """Create child rows of ``relation`` inline, in the same write as the parent."""

    relation: str
    rows: Sequence[Mapping[str, Any]] = field(default_factory=tuple)


RelationLink = Connect | CreateMany


class EntityGateway(ABC, Generic[RowT]):
    """CRUD primitives for one entity type."""

    entity: str

    @abstractmethod
    async def find_many(self, filters: Mapping[str, Any] | None = None) -> list[RowT]:
        """Return every row matching the equality ``filters``, in store order."""

    @abstractmethod
    async def find_first(self, id: int) -> RowT | None:
        """Return the row with ``id`` or None."""

    @abstractmethod
    async def create(
        self, fields: Mapping[str, Any], links: Sequence[RelationLink] = ()
    ) -> RowT:
        """Insert a row, applying relation links in the same write."""

    @abstractmethod
    async def update(self, id: int, fields: Mapping[str, Any]) -> RowT | None:
        """Update the row with ``id``; None when it does not exist."""

    @abstractmethod
    async def related_collection(self, parent_id: int, relation: str) -> list[Any]:
        """Rows of a to-many ``relation`` of the row ``parent_id``."""

    @abstractmethod
    async def related_single(self, parent_id: int, relation: str) -> Any | None:
        """Row of a to-one ``relation`` of the row ``parent_id``, or None."""

    # Batch primitives, used by the per-request loaders. Results are aligned
    # with the keys. Implementations may override them with set-based queries.

    async def find_by_ids(self, ids: Sequence[int]) -> list[RowT | None]:
        return [await self.find_first(id) for id in ids]

    async def related_collections(
        self, parent_ids: Sequence[int], relation: str
    ) -> list[list[Any]]:
        return [await self.related_collection(parent_id, relation) for parent_id in parent_ids]

    async def related_singles(
        self, parent_ids: Sequence[int], relation: str
    ) -> list[Any | None]:
        return [await self.related_single(parent_id, relation) for parent_id in parent_ids]


@dataclass
class PersistenceGateway:
    """The per-entity gateways consumed by resolvers."""

    students: EntityGateway
    departments: EntityGateway
    teachers: EntityGateway
    courses: EntityGateway
