"""
Pytest configuration and fixtures for Waypoint tests.

Tests run against an in-memory SQLite database so no server is needed.
"""

import os

# Must be set before app modules create their engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401  (registers tables)
from app.main import app
from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.models import Project, Task, TaskType, Dependency


TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_USER = "test-user"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(test_engine):
    """Create an async test client with test database and a fixed user."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_session():
        async with async_session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_current_user():
        return AuthenticatedUser(uid=TEST_USER, email="test@example.com")

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = override_get_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Data builders
# =============================================================================

@pytest.fixture
def make_project(test_session):
    async def _make(auto_schedule: bool = True, name: str = "Test project") -> Project:
        project = Project(name=name, auto_schedule=auto_schedule)
        test_session.add(project)
        await test_session.flush()
        return project
    return _make


@pytest.fixture
def make_task(test_session):
    async def _make(
        project: Project,
        title: str = "Task",
        start: date | None = None,
        end: date | None = None,
        parent: Task | None = None,
        type: TaskType = TaskType.TASK,
        progress: int = 0,
        estimate_pd: float | None = None,
        order_index: int = 0,
    ) -> Task:
        task = Task(
            project_id=project.id,
            parent_id=parent.id if parent else None,
            title=title,
            type=type,
            start_date=start,
            end_date=end,
            progress=progress,
            estimate_pd=estimate_pd,
            order_index=order_index,
        )
        test_session.add(task)
        await test_session.flush()
        return task
    return _make


@pytest.fixture
def link(test_session):
    async def _link(predecessor: Task, successor: Task, lag_days: int = 0) -> Dependency:
        dep = Dependency(
            project_id=predecessor.project_id,
            predecessor_task_id=predecessor.id,
            successor_task_id=successor.id,
            lag_days=lag_days,
        )
        test_session.add(dep)
        await test_session.flush()
        return dep
    return _link
