"""
SQLAlchemy implementation of the persistence gateway
"""

from collections import defaultdict
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database.connection import session_scope
from ..dbmodels import Base, Courses, Departments, Students, Teachers
from ..errors import CampusError, GatewayError, ReferentialError
from ..logging import get_logger
from .base import Connect, CreateMany, EntityGateway, PersistenceGateway, RelationLink

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


@dataclass(frozen=True)
class Relation:
    """How a relation of a model maps onto a foreign key.

    For ``many`` relations the key lives on ``target``; for ``one`` relations
    it lives on the owning model.
    """

    target: type[Base]
    foreign_key: str
    many: bool


class SqlEntityGateway(EntityGateway[ModelT], Generic[ModelT]):
    model: ClassVar[type[Base]]
    relations: ClassVar[dict[str, Relation]] = {}

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @property
    def entity(self) -> str:  # type: ignore[override]
        return self.model.__tablename__

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session scope that reports store failures as GatewayError."""
        try:
            async with session_scope(self._session_factory) as session:
                yield session
        except CampusError:
            raise
        except SQLAlchemyError as e:
            logger.warning("Gateway call failed", entity=self.entity, error=str(e))
            raise GatewayError(str(e)) from e

    def _relation(self, name: str) -> Relation:
        try:
            return self.relations[name]
        except KeyError:
            raise GatewayError(f"Unknown relation {self.entity}.{name}") from None

    def _collection_relation(self, name: str) -> Relation:
        spec = self._relation(name)
        if not spec.many:
            raise GatewayError(f"{self.entity}.{name} is not a collection")
        return spec

    def _single_relation(self, name: str) -> Relation:
        spec = self._relation(name)
        if spec.many:
            raise GatewayError(f"{self.entity}.{name} is a collection")
        return spec

    async def find_many(self, filters: Mapping[str, Any] | None = None) -> list[ModelT]:
        stmt = select(self.model).order_by(self.model.id)
        for key, value in (filters or {}).items():
            stmt = stmt.where(getattr(self.model, key) == value)

        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def find_first(self, id: int) -> ModelT | None:
        async with self._session() as session:
            return await session.get(self.model, id)

    async def find_by_ids(self, ids: Sequence[int]) -> list[ModelT | None]:
        stmt = select(self.model).where(self.model.id.in_(ids))
        async with self._session() as session:
            result = await session.execute(stmt)
            rows_map = {row.id: row for row in result.scalars().all()}
            return [rows_map.get(id) for id in ids]

    async def create(
        self, fields: Mapping[str, Any], links: Sequence[RelationLink] = ()
    ) -> ModelT:
        async with self._session() as session:
            row = self.model(**fields)
            for link in links:
                relation = self._relation(link.relation)
                if isinstance(link, Connect):
                    target = await session.scalar(
                        select(relation.target).where(
                            getattr(relation.target, link.field) == link.value
                        )
                    )
                    if target is None:
                        raise ReferentialError(
                            f"No '{relation.target.__name__}' record found for "
                            f"{link.field}={link.value!r} to connect to {self.entity}.{link.relation}"
                        )
                    setattr(row, relation.foreign_key, target.id)
                elif isinstance(link, CreateMany):
                    getattr(row, link.relation).extend(
                        relation.target(**child) for child in link.rows
                    )

            session.add(row)
            await session.flush()
            await session.refresh(row)
            logger.debug("Row created", entity=self.entity, id=row.id)
            return row

    async def update(self, id: int, fields: Mapping[str, Any]) -> ModelT | None:
        async with self._session() as session:
            row = await session.get(self.model, id)
            if row is None:
                return None
            for key, value in fields.items():
                setattr(row, key, value)
            await session.flush()
            await session.refresh(row)
            logger.debug("Row updated", entity=self.entity, id=id, fields=list(fields))
            return row

    async def related_collection(self, parent_id: int, relation: str) -> list[Any]:
        spec = self._collection_relation(relation)
        stmt = (
            select(spec.target)
            .where(getattr(spec.target, spec.foreign_key) == parent_id)
            .order_by(spec.target.id)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def related_collections(
        self, parent_ids: Sequence[int], relation: str
    ) -> list[list[Any]]:
        spec = self._collection_relation(relation)
        foreign_key = getattr(spec.target, spec.foreign_key)
        stmt = select(spec.target).where(foreign_key.in_(parent_ids)).order_by(spec.target.id)
        async with self._session() as session:
            result = await session.execute(stmt)
            groups: dict[int, list[Any]] = defaultdict(list)
            for row in result.scalars().all():
                groups[getattr(row, spec.foreign_key)].append(row)
            return [groups.get(parent_id, []) for parent_id in parent_ids]

    async def related_single(self, parent_id: int, relation: str) -> Any | None:
        spec = self._single_relation(relation)
        stmt = (
            select(spec.target)
            .join(self.model, getattr(self.model, spec.foreign_key) == spec.target.id)
            .where(self.model.id == parent_id)
        )
        async with self._session() as session:
            return await session.scalar(stmt)

    async def related_singles(
        self, parent_ids: Sequence[int], relation: str
    ) -> list[Any | None]:
        spec = self._single_relation(relation)
        stmt = (
            select(self.model.id, spec.target)
            .join(spec.target, getattr(self.model, spec.foreign_key) == spec.target.id)
            .where(self.model.id.in_(parent_ids))
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            rows_map = {parent_id: target for parent_id, target in result.all()}
            return [rows_map.get(parent_id) for parent_id in parent_ids]


class StudentGateway(SqlEntityGateway[Students]):
    model = Students
    relations = {"dept": Relation(Departments, "dept_id", many=False)}


class DepartmentGateway(SqlEntityGateway[Departments]):
    model = Departments
    relations = {
        "students": Relation(Students, "dept_id", many=True),
        "courses": Relation(Courses, "dept_id", many=True),
    }


class TeacherGateway(SqlEntityGateway[Teachers]):
    model = Teachers
    relations = {"courses": Relation(Courses, "teacher_id", many=True)}


class CourseGateway(SqlEntityGateway[Courses]):
    model = Courses
    relations = {
        "teacher": Relation(Teachers, "teacher_id", many=False),
        "dept": Relation(Departments, "dept_id", many=False),
    }


def create_sql_gateway(session_factory: async_sessionmaker[AsyncSession]) -> PersistenceGateway:
    """Build the SQL-backed gateway bundle over one session factory."""
    return PersistenceGateway(
        students=StudentGateway(session_factory),
        departments=DepartmentGateway(session_factory),
        teachers=TeacherGateway(session_factory),
        courses=CourseGateway(session_factory),
    )
