"""
Tests for the in-memory gateway used by the test suite and --in-memory serving
"""

import pytest

from campus.errors import GatewayError, ReferentialError
from campus.gateway.base import Connect, CreateMany
from campus.gateway.memory import GatewayCall, MemoryStore, create_memory_gateway


@pytest.mark.asyncio
async def test_ids_are_assigned_per_entity(gateway, store: MemoryStore):
    first = await gateway.departments.create({"name": "CS"})
    second = await gateway.departments.create({"name": "Math"})
    teacher = await gateway.teachers.create({"email": "ada@uni.edu", "full_name": "Ada"})

    assert (first.id, second.id, teacher.id) == (1, 2, 1)
    assert first.description is None
    assert first.created_at == store.now()


@pytest.mark.asyncio
async def test_calls_are_recorded(gateway, store: MemoryStore):
    await gateway.students.find_many({"enrolled": True})
    await gateway.students.find_first(3)

    assert store.calls == [
        GatewayCall("students", "find_many", ({"enrolled": True},)),
        GatewayCall("students", "find_first", (3,)),
    ]
    assert store.count("find_first") == 1
    assert store.count(entity="students") == 2


@pytest.mark.asyncio
async def test_unique_email(gateway):
    await gateway.students.create({"email": "s@uni.edu", "full_name": "S"})

    with pytest.raises(GatewayError, match="Unique constraint failed on students.email"):
        await gateway.students.create({"email": "s@uni.edu", "full_name": "Other"})


@pytest.mark.asyncio
async def test_connect_and_create_many(gateway, store: MemoryStore):
    teacher = await gateway.teachers.create(
        {"email": "ada@uni.edu", "full_name": "Ada"},
        [CreateMany("courses", [{"code": "CS101", "title": "Intro"}])],
    )
    course = await gateway.courses.create(
        {"code": "CS102", "title": "Data"}, [Connect("teacher", "email", "ada@uni.edu")]
    )

    assert course.teacher_id == teacher.id
    assert [row.code for row in store.tables["courses"]] == ["CS101", "CS102"]
    assert store.tables["courses"][0].teacher_id == teacher.id


@pytest.mark.asyncio
async def test_connect_to_missing_record_writes_nothing(gateway, store: MemoryStore):
    with pytest.raises(ReferentialError, match="No 'teachers' record found"):
        await gateway.courses.create(
            {"code": "CS101", "title": "Intro"}, [Connect("teacher", "email", "nobody@uni.edu")]
        )

    assert store.tables["courses"] == []


@pytest.mark.asyncio
async def test_update_touches_updated_at():
    clock = iter(["t0", "t1"])
    store = MemoryStore(clock=lambda: next(clock))
    gateway = create_memory_gateway(store)
    store.insert("students", {"email": "s@uni.edu", "full_name": "S"})

    row = await gateway.students.update(1, {"enrolled": True})

    assert row.enrolled is True
    assert (row.created_at, row.updated_at) == ("t0", "t1")
    assert await gateway.students.update(2, {"enrolled": True}) is None


@pytest.mark.asyncio
async def test_relation_lookups(gateway, seeded: MemoryStore):
    assert [row.id for row in await gateway.departments.related_collection(1, "students")] == [
        1,
        3,
    ]
    assert (await gateway.courses.related_single(2, "teacher")).email == "alan@uni.edu"
    assert await gateway.courses.related_single(4, "teacher") is None
    assert await gateway.courses.related_single(999, "dept") is None

    with pytest.raises(GatewayError, match="Unknown relation"):
        await gateway.students.related_single(1, "teacher")
