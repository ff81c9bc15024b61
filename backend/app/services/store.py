"""
Task store: async data-access primitives shared by the scheduling engine.

Every query here excludes soft-deleted tasks unless stated otherwise, so
callers never have to repeat the deleted_at filter.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlmodel import select

from app.exceptions import NotFoundError
from app.models import Project, Task, Dependency


async def get_project(session: AsyncSession, project_id: uuid.UUID) -> Project:
    project = await session.get(Project, project_id)
    if not project:
        raise NotFoundError("Project", str(project_id))
    return project


async def get_active_task(
    session: AsyncSession,
    task_id: uuid.UUID,
    project_id: uuid.UUID | None = None,
    resource: str = "Task",
) -> Task:
    """Fetch a live task, optionally constrained to a project; 404 otherwise."""
    task = await session.get(Task, task_id)
    if task is None or task.is_deleted:
        raise NotFoundError(resource, str(task_id))
    if project_id is not None and task.project_id != project_id:
        raise NotFoundError(resource, str(task_id))
    return task


async def find_children(session: AsyncSession, parent_id: uuid.UUID) -> list[Task]:
    """Live direct children of a task, in sibling order."""
    result = await session.execute(
        select(Task)
        .where(Task.parent_id == parent_id, Task.deleted_at.is_(None))
        .order_by(Task.order_index)
    )
    return list(result.scalars().all())


def _live_edges():
    """Select dependencies whose predecessor and successor are both live."""
    predecessor = aliased(Task)
    successor = aliased(Task)
    return (
        select(Dependency)
        .join(predecessor, predecessor.id == Dependency.predecessor_task_id)
        .join(successor, successor.id == Dependency.successor_task_id)
        .where(predecessor.deleted_at.is_(None), successor.deleted_at.is_(None))
    )


async def find_dependencies_by_predecessor(
    session: AsyncSession,
    task_id: uuid.UUID,
) -> list[Dependency]:
    """Outgoing edges of a task (task -> successors)."""
    result = await session.execute(
        _live_edges()
        .where(Dependency.predecessor_task_id == task_id)
        .order_by(Dependency.created_at)
    )
    return list(result.scalars().all())


async def find_dependencies_by_successor(
    session: AsyncSession,
    task_id: uuid.UUID,
) -> list[Dependency]:
    """Incoming edges of a task (predecessors -> task)."""
    result = await session.execute(
        _live_edges()
        .where(Dependency.successor_task_id == task_id)
        .order_by(Dependency.created_at)
    )
    return list(result.scalars().all())


async def find_dependencies_by_project(
    session: AsyncSession,
    project_id: uuid.UUID,
) -> list[Dependency]:
    """All edges of a project between live tasks."""
    result = await session.execute(
        _live_edges()
        .where(Dependency.project_id == project_id)
        .order_by(Dependency.created_at)
    )
    return list(result.scalars().all())


async def update_task_dates(
    session: AsyncSession,
    task_id: uuid.UUID,
    start_date: date | None,
    end_date: date | None,
) -> Task:
    task = await session.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task", str(task_id))
    task.start_date = start_date
    task.end_date = end_date
    task.updated_at = datetime.utcnow()
    session.add(task)
    await session.flush()
    return task


async def update_summary_fields(
    session: AsyncSession,
    task_id: uuid.UUID,
    start_date: date | None,
    end_date: date | None,
    progress: int,
) -> Task:
    task = await session.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task", str(task_id))
    task.start_date = start_date
    task.end_date = end_date
    task.progress = progress
    task.updated_at = datetime.utcnow()
    session.add(task)
    await session.flush()
    return task


async def next_order_index(
    session: AsyncSession,
    project_id: uuid.UUID,
    parent_id: uuid.UUID | None,
) -> int:
    """One past the highest order_index among live siblings (0 for an empty level)."""
    parent_clause = Task.parent_id.is_(None) if parent_id is None else Task.parent_id == parent_id
    result = await session.execute(
        select(func.max(Task.order_index)).where(
            Task.project_id == project_id,
            parent_clause,
            Task.deleted_at.is_(None),
        )
    )
    current_max = result.scalar_one_or_none()
    return 0 if current_max is None else current_max + 1


async def count_active_tasks(session: AsyncSession, project_id: uuid.UUID) -> int:
    result = await session.execute(
        select(func.count()).select_from(Task).where(
            Task.project_id == project_id,
            Task.deleted_at.is_(None),
        )
    )
    return result.scalar_one()
