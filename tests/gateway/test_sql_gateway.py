"""
Unit tests for the SQLAlchemy gateway with a mocked session
"""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from campus.dbmodels import Courses, Departments, Students, Teachers
from campus.errors import GatewayError, ReferentialError
from campus.gateway import sql
from campus.gateway.base import Connect, CreateMany
from campus.gateway.sql import (
    CourseGateway,
    DepartmentGateway,
    StudentGateway,
    TeacherGateway,
    create_sql_gateway,
)


@pytest.fixture
def session(monkeypatch):
    """Replace the session scope with one yielding a mock session."""
    session = AsyncMock()
    session.add = MagicMock()

    @asynccontextmanager
    async def fake_session_scope(session_factory):
        yield session

    monkeypatch.setattr(sql, "session_scope", fake_session_scope)
    return session


@pytest.fixture
def session_factory():
    return MagicMock()


def scalars_result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


class TestReads:
    @pytest.mark.asyncio
    async def test_find_first(self, session, session_factory):
        row = SimpleNamespace(id=1, email="s1@uni.edu")
        session.get.return_value = row

        result = await StudentGateway(session_factory).find_first(1)

        assert result is row
        session.get.assert_awaited_once_with(Students, 1)

    @pytest.mark.asyncio
    async def test_find_many(self, session, session_factory):
        rows = [SimpleNamespace(id=1), SimpleNamespace(id=2)]
        session.execute.return_value = scalars_result(rows)

        result = await StudentGateway(session_factory).find_many({"enrolled": True})

        assert result == rows
        statement = session.execute.await_args.args[0]
        assert "students.enrolled" in str(statement)
        assert "ORDER BY students.id" in str(statement)

    @pytest.mark.asyncio
    async def test_find_by_ids_aligns_with_keys(self, session, session_factory):
        first, second = SimpleNamespace(id=1), SimpleNamespace(id=2)
        session.execute.return_value = scalars_result([second, first])

        result = await DepartmentGateway(session_factory).find_by_ids([1, 5, 2])

        assert result == [first, None, second]

    @pytest.mark.asyncio
    async def test_related_collections_group_by_parent(self, session, session_factory):
        rows = [
            SimpleNamespace(id=1, dept_id=1),
            SimpleNamespace(id=2, dept_id=2),
            SimpleNamespace(id=3, dept_id=1),
        ]
        session.execute.return_value = scalars_result(rows)

        result = await DepartmentGateway(session_factory).related_collections(
            [2, 1, 3], "students"
        )

        assert [[row.id for row in group] for group in result] == [[2], [1, 3], []]

    @pytest.mark.asyncio
    async def test_related_singles_align_with_parents(self, session, session_factory):
        teacher = SimpleNamespace(id=9)
        result_proxy = MagicMock()
        result_proxy.all.return_value = [(1, teacher), (3, teacher)]
        session.execute.return_value = result_proxy

        result = await CourseGateway(session_factory).related_singles([1, 2, 3], "teacher")

        assert result == [teacher, None, teacher]

    @pytest.mark.asyncio
    async def test_related_single_joins_through_foreign_key(self, session, session_factory):
        dept = SimpleNamespace(id=4)
        session.scalar.return_value = dept

        result = await CourseGateway(session_factory).related_single(7, "dept")

        assert result is dept
        statement = str(session.scalar.await_args.args[0])
        assert "JOIN courses ON courses.dept_id = departments.id" in statement

    @pytest.mark.asyncio
    async def test_wrong_relation_kind(self, session, session_factory):
        with pytest.raises(GatewayError, match="is not a collection"):
            await CourseGateway(session_factory).related_collection(1, "teacher")

        with pytest.raises(GatewayError, match="is a collection"):
            await TeacherGateway(session_factory).related_single(1, "courses")

        with pytest.raises(GatewayError, match="Unknown relation students.courses"):
            await StudentGateway(session_factory).related_collection(1, "courses")

        session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_relation_kind_in_batches(self, session, session_factory):
        with pytest.raises(GatewayError, match="courses.teacher is not a collection"):
            await CourseGateway(session_factory).related_collections([1, 2], "teacher")

        with pytest.raises(GatewayError, match="teachers.courses is a collection"):
            await TeacherGateway(session_factory).related_singles([1, 2], "courses")

        session.execute.assert_not_awaited()


class TestWrites:
    @pytest.mark.asyncio
    async def test_create_plain_row(self, session, session_factory):
        row = await DepartmentGateway(session_factory).create({"name": "CS"})

        assert isinstance(row, Departments)
        assert row.name == "CS"
        session.add.assert_called_once_with(row)
        session.flush.assert_awaited_once()
        session.refresh.assert_awaited_once_with(row)

    @pytest.mark.asyncio
    async def test_connect_sets_foreign_key(self, session, session_factory):
        session.scalar.return_value = SimpleNamespace(id=4, email="ada@uni.edu")

        row = await CourseGateway(session_factory).create(
            {"code": "CS101", "title": "Intro"},
            [Connect("teacher", "email", "ada@uni.edu")],
        )

        assert isinstance(row, Courses)
        assert row.teacher_id == 4

    @pytest.mark.asyncio
    async def test_connect_to_missing_record(self, session, session_factory):
        session.scalar.return_value = None

        with pytest.raises(ReferentialError, match="No 'Teachers' record found"):
            await CourseGateway(session_factory).create(
                {"code": "CS101", "title": "Intro"},
                [Connect("teacher", "email", "nobody@uni.edu")],
            )

        session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_many_children(self, session, session_factory):
        row = await TeacherGateway(session_factory).create(
            {"email": "ada@uni.edu", "full_name": "Ada"},
            [
                CreateMany(
                    "courses",
                    [{"code": "CS101", "title": "Intro"}, {"code": "CS102", "title": "Data"}],
                )
            ],
        )

        assert isinstance(row, Teachers)
        assert [course.code for course in row.courses] == ["CS101", "CS102"]
        session.add.assert_called_once_with(row)

    @pytest.mark.asyncio
    async def test_update(self, session, session_factory):
        row = SimpleNamespace(id=1, enrolled=None)
        session.get.return_value = row

        result = await StudentGateway(session_factory).update(1, {"enrolled": True})

        assert result is row
        assert row.enrolled is True
        session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_missing_row(self, session, session_factory):
        session.get.return_value = None

        assert await StudentGateway(session_factory).update(42, {"enrolled": True}) is None
        session.flush.assert_not_awaited()


class TestFailures:
    @pytest.mark.asyncio
    async def test_store_errors_become_gateway_errors(self, session, session_factory):
        cause = OperationalError("SELECT 1", {}, Exception("connection refused"))
        session.get.side_effect = cause

        with pytest.raises(GatewayError) as exc_info:
            await StudentGateway(session_factory).find_first(1)

        assert exc_info.value.__cause__ is cause

    @pytest.mark.asyncio
    async def test_domain_errors_pass_through(self, session, session_factory):
        session.scalar.return_value = None

        with pytest.raises(ReferentialError) as exc_info:
            await StudentGateway(session_factory).create(
                {"email": "s@uni.edu", "full_name": "S"}, [Connect("dept", "id", 99)]
            )

        assert not isinstance(exc_info.value, GatewayError)


def test_create_sql_gateway_bundles_every_entity(session_factory):
    gateway = create_sql_gateway(session_factory)

    assert isinstance(gateway.students, StudentGateway)
    assert isinstance(gateway.departments, DepartmentGateway)
    assert isinstance(gateway.teachers, TeacherGateway)
    assert isinstance(gateway.courses, CourseGateway)
    assert gateway.courses.entity == "courses"
