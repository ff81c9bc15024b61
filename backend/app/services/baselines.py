"""
Baselines: frozen copies of a project's schedule and their diff against
the live schedule.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import Baseline, BaselineTask, Task
from app.schemas import BaselineDiff, BaselineDiffItem, BaselineDiffSummary
from app.services import store
from app.services.changelog import log_change
from app.exceptions import NotFoundError
from app.logging_config import get_logger

logger = get_logger(__name__)


async def create_baseline(
    session: AsyncSession,
    project_id: uuid.UUID,
    name: str,
    user_id: str,
) -> Baseline:
    await store.get_project(session, project_id)

    tasks_result = await session.execute(
        select(Task).where(Task.project_id == project_id, Task.deleted_at.is_(None))
    )
    tasks = list(tasks_result.scalars().all())

    baseline = Baseline(project_id=project_id, name=name, locked=True, created_by=user_id)
    session.add(baseline)
    await session.flush()

    for task in tasks:
        session.add(BaselineTask(
            baseline_id=baseline.id,
            task_id=task.id,
            start_date=task.start_date,
            end_date=task.end_date,
            estimate_pd=task.estimate_pd,
            progress=task.progress,
            status=task.status,
        ))
    await session.flush()
    await session.refresh(baseline)

    await log_change(
        session,
        entity_type="Baseline",
        entity_id=baseline.id,
        user_id=user_id,
        field="created",
        before=None,
        after={"name": baseline.name, "task_count": len(tasks)},
    )
    logger.info(f"Created baseline '{name}' for project {project_id} with {len(tasks)} tasks")
    return baseline


async def list_baselines(session: AsyncSession, project_id: uuid.UUID) -> list[Baseline]:
    result = await session.execute(
        select(Baseline)
        .where(Baseline.project_id == project_id)
        .order_by(Baseline.created_at.desc())
    )
    return list(result.scalars().all())


async def get_baseline(session: AsyncSession, baseline_id: uuid.UUID) -> Baseline:
    baseline = await session.get(Baseline, baseline_id)
    if not baseline:
        raise NotFoundError("Baseline", str(baseline_id))
    return baseline


async def diff_baseline(session: AsyncSession, baseline_id: uuid.UUID) -> BaselineDiff:
    """
    Compare a baseline with the current schedule.

    delta_days compares end dates and is positive when a task slipped;
    only positive deltas count towards slipped_tasks and total_delta_days.
    Tasks deleted since the snapshot are left out.
    """
    baseline = await get_baseline(session, baseline_id)

    snapshot_result = await session.execute(
        select(BaselineTask).where(BaselineTask.baseline_id == baseline_id)
    )
    current_result = await session.execute(
        select(Task).where(Task.project_id == baseline.project_id, Task.deleted_at.is_(None))
    )
    current_by_id = {task.id: task for task in current_result.scalars().all()}

    items: list[BaselineDiffItem] = []
    slipped_tasks = 0
    total_delta_days = 0
    total_delta_pd = 0.0

    for snapshot in snapshot_result.scalars().all():
        current = current_by_id.get(snapshot.task_id)
        if current is None:
            continue

        delta_days = None
        if snapshot.end_date is not None and current.end_date is not None:
            delta_days = (current.end_date - snapshot.end_date).days
            if delta_days > 0:
                slipped_tasks += 1
                total_delta_days += delta_days

        delta_pd = None
        if snapshot.estimate_pd is not None and current.estimate_pd is not None:
            delta_pd = current.estimate_pd - snapshot.estimate_pd
            total_delta_pd += delta_pd

        items.append(BaselineDiffItem(
            task_id=snapshot.task_id,
            task_title=current.title,
            baseline_start=snapshot.start_date,
            baseline_end=snapshot.end_date,
            current_start=current.start_date,
            current_end=current.end_date,
            delta_days=delta_days,
            delta_pd=delta_pd,
        ))

    return BaselineDiff(
        summary=BaselineDiffSummary(
            slipped_tasks=slipped_tasks,
            total_delta_days=total_delta_days,
            delta_pd=total_delta_pd,
        ),
        items=items,
    )
