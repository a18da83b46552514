"""
Shared pytest fixtures and configuration for all tests.
"""

import os
import shutil
import subprocess
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from campus.dispatch import Dispatcher
from campus.gateway.base import PersistenceGateway
from campus.gateway.memory import MemoryStore, create_memory_gateway

FIXED_NOW = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture
def store() -> MemoryStore:
    """An empty in-memory store with a frozen clock."""
    return MemoryStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def gateway(store: MemoryStore) -> PersistenceGateway:
    return create_memory_gateway(store)


@pytest.fixture
def dispatcher(gateway: PersistenceGateway) -> Dispatcher:
    return Dispatcher(gateway)


@pytest.fixture
def batched_dispatcher(gateway: PersistenceGateway) -> Dispatcher:
    return Dispatcher(gateway, batch_relations=True)


@pytest.fixture
def seeded(store: MemoryStore) -> MemoryStore:
    """Populate the store directly and clear the call log.

    departments: 1 CS, 2 Math
    teachers:    1 ada@uni.edu (FULLTIME), 2 alan@uni.edu
    courses:     1 CS101 (teacher 1, dept 1), 2 CS102 (teacher 2, dept 1),
                 3 MA101 (teacher 1, dept 2), 4 GEN100 (no teacher, no dept)
    students:    1 s1 (dept 1), 2 s2 (dept 2), 3 s3 (dept 1, enrolled)
    """
    store.insert("departments", {"name": "CS", "description": "Computer Science"})
    store.insert("departments", {"name": "Math"})
    store.insert("teachers", {"email": "ada@uni.edu", "full_name": "Ada", "type": "FULLTIME"})
    store.insert("teachers", {"email": "alan@uni.edu", "full_name": "Alan"})
    store.insert("courses", {"code": "CS101", "title": "Intro", "teacher_id": 1, "dept_id": 1})
    store.insert("courses", {"code": "CS102", "title": "Data", "teacher_id": 2, "dept_id": 1})
    store.insert("courses", {"code": "MA101", "title": "Calculus", "teacher_id": 1, "dept_id": 2})
    store.insert("courses", {"code": "GEN100", "title": "General"})
    store.insert("students", {"email": "s1@uni.edu", "full_name": "S One", "dept_id": 1})
    store.insert("students", {"email": "s2@uni.edu", "full_name": "S Two", "dept_id": 2})
    store.insert(
        "students",
        {"email": "s3@uni.edu", "full_name": "S Three", "dept_id": 1, "enrolled": True},
    )
    store.reset_calls()
    return store


# PostgreSQL fixtures for integration tests


@pytest.fixture(scope="function")
def test_database(postgresql: Any) -> Generator[str, None, None]:
    """Return the DSN for the running pytest-postgresql database."""
    info = postgresql.info
    dsn = (
        f"postgresql://{info.user}:{getattr(info, 'password', '')}"
        f"@{info.host}:{info.port}/{info.dbname}"
    )
    yield dsn


@pytest.fixture(scope="function")
def alembic_migrate(test_database: str) -> Generator[str, None, None]:
    """Run Alembic upgrade to head against the pytest-postgresql instance."""
    from alembic import command
    from alembic.config import Config

    os.environ["CAMPUS_DATABASE_URL"] = test_database
    cfg = Config(str(Path(__file__).parent.parent / "alembic.ini"))
    cfg.set_main_option("script_location", str(Path(__file__).parent.parent / "alembic"))
    command.upgrade(cfg, "head")
    yield test_database
    command.downgrade(cfg, "base")


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pg_ctl_available() -> bool:
    """Whether the pg_ctl that pytest-postgresql starts servers with can be found.

    pg_config alone is not enough: it ships with the client libraries.
    """
    if shutil.which("pg_ctl"):
        return True
    pg_config = shutil.which("pg_config")
    if pg_config is None:
        return False
    result = subprocess.run([pg_config, "--bindir"], capture_output=True, text=True, check=False)
    bindir = result.stdout.strip()
    return bool(bindir) and (Path(bindir) / "pg_ctl").exists()


def pytest_collection_modifyitems(config: Any, items: list[Any]) -> None:
    """Skip database tests when no PostgreSQL server binaries are available."""
    if pg_ctl_available():
        return
    skip_db = pytest.mark.skip(reason="pg_ctl not available")
    for item in items:
        if "requires_db" in item.keywords:
            item.add_marker(skip_db)
