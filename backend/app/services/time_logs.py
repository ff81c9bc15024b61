"""
Time logs and the actual_pd figures derived from them.
"""

import uuid
from datetime import date
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import TimeLog
from app.schemas import TimeLogCreate
from app.services import store
from app.logging_config import get_logger

logger = get_logger(__name__)


async def create_time_log(
    session: AsyncSession,
    task_id: uuid.UUID,
    log_in: TimeLogCreate,
    user_id: str,
) -> TimeLog:
    await store.get_active_task(session, task_id)

    time_log = TimeLog(task_id=task_id, user_id=user_id, **log_in.model_dump())
    session.add(time_log)
    await session.flush()
    await session.refresh(time_log)

    logger.info(f"Logged {time_log.pd} pd on task {task_id} for {time_log.work_date} by {user_id}")
    return time_log


async def list_time_logs(
    session: AsyncSession,
    task_id: uuid.UUID,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[TimeLog]:
    """Time logs of a task, newest work date first, optionally within [from, to]."""
    await store.get_active_task(session, task_id)

    query = select(TimeLog).where(TimeLog.task_id == task_id)
    if date_from is not None:
        query = query.where(TimeLog.work_date >= date_from)
    if date_to is not None:
        query = query.where(TimeLog.work_date <= date_to)

    result = await session.execute(query.order_by(TimeLog.work_date.desc()))
    return list(result.scalars().all())


async def actual_pd_by_task(
    session: AsyncSession,
    task_ids: Iterable[uuid.UUID],
) -> dict[uuid.UUID, float]:
    """Sum of logged pd per task; tasks without logs are absent from the result."""
    ids = list(task_ids)
    if not ids:
        return {}

    result = await session.execute(
        select(TimeLog.task_id, func.sum(TimeLog.pd))
        .where(TimeLog.task_id.in_(ids))
        .group_by(TimeLog.task_id)
    )
    return {task_id: float(total or 0) for task_id, total in result.all()}
