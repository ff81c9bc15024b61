"""
Task write and read paths.

A write runs in a fixed order inside the request's transaction:
1. persist the direct edit (with its change log)
2. propagate schedule shifts, when the project auto-schedules and dates were sent
3. re-aggregate the parent summaries of every task that changed

Reads are enriched with actual_pd, the WBS outline number and schedule
warnings, none of which are stored.
"""

import uuid
from datetime import date, datetime
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import Task, TaskType, TaskStatus
from app.schemas import TaskCreate, TaskUpdate, TaskMove, TaskRead, TaskUpdateResult, TaskMoveResult
from app.services import store
from app.services.changelog import log_change
from app.services.hierarchy import (
    recalculate_summary,
    recalculate_parents,
    is_descendant,
    collect_subtree,
    wbs_outline,
)
from app.services.scheduling import propagate_schedule
from app.services.time_logs import actual_pd_by_task
from app.services.warnings import evaluate_warnings
from app.exceptions import SummaryFieldsReadOnlyError, InvalidMoveError, ValidationError
from app.logging_config import get_logger

logger = get_logger(__name__)

SUMMARY_DERIVED_FIELDS = ("start_date", "end_date", "progress")
NON_NULLABLE_FIELDS = ("title", "progress", "status")


# =============================================================================
# Validation helpers
# =============================================================================

def _milestone_dates(start: date | None, end: date | None) -> tuple[date | None, date | None]:
    """A milestone occupies a single day: whichever date is given sets both."""
    if start is not None and end is not None and start != end:
        raise ValidationError(
            "A milestone must start and end on the same day",
            details=[{"loc": ["body", "end_date"], "msg": "must equal start_date", "type": "milestone"}],
        )
    day = start if start is not None else end
    return day, day


def _check_date_order(start: date | None, end: date | None) -> None:
    if start is not None and end is not None and end < start:
        raise ValidationError(
            "end_date must not be earlier than start_date",
            details=[{"loc": ["body", "end_date"], "msg": "before start_date", "type": "date_order"}],
        )


# =============================================================================
# Reads
# =============================================================================

def to_task_read(
    task: Task,
    actual_pd: float | None = None,
    wbs_code: str | None = None,
    warnings: Iterable = (),
) -> TaskRead:
    warnings = list(warnings)
    return TaskRead.model_validate(task).model_copy(update={
        "actual_pd": actual_pd,
        "wbs_code": wbs_code,
        "has_schedule_warning": bool(warnings),
        "schedule_warnings": warnings,
    })


async def enrich_tasks(
    session: AsyncSession,
    project_id: uuid.UUID,
    tasks: list[Task],
) -> list[TaskRead]:
    """Attach computed read-time fields to tasks of one project."""
    project_result = await session.execute(select(Task).where(Task.project_id == project_id))
    project_tasks = list(project_result.scalars().all())
    tasks_by_id = {task.id: task for task in project_tasks}

    dependencies = await store.find_dependencies_by_project(session, project_id)
    actual_pd = await actual_pd_by_task(session, [task.id for task in tasks])
    codes = {task.id: code for task, code in wbs_outline(project_tasks)}

    return [
        to_task_read(
            task,
            actual_pd=actual_pd.get(task.id),
            wbs_code=codes.get(task.id),
            warnings=evaluate_warnings(task, dependencies, tasks_by_id).warnings,
        )
        for task in tasks
    ]


async def enrich_task(session: AsyncSession, task: Task) -> TaskRead:
    return (await enrich_tasks(session, task.project_id, [task]))[0]


async def list_tasks(
    session: AsyncSession,
    project_id: uuid.UUID,
    include_deleted: bool = False,
) -> list[TaskRead]:
    """Tasks of a project in WBS outline order; deleted ones (if asked for) come last."""
    await store.get_project(session, project_id)

    result = await session.execute(select(Task).where(Task.project_id == project_id))
    all_tasks = list(result.scalars().all())

    ordered = [task for task, _ in wbs_outline(all_tasks)]
    placed = {task.id for task in ordered}
    # Live tasks unreachable from a root (corrupt parent links) still get listed
    ordered.extend(
        task for task in all_tasks
        if task.id not in placed and (include_deleted or not task.is_deleted)
    )

    logger.debug(f"Listed {len(ordered)} tasks for project={project_id}")
    return await enrich_tasks(session, project_id, ordered)


async def get_task(session: AsyncSession, task_id: uuid.UUID) -> TaskRead:
    task = await store.get_active_task(session, task_id)
    return await enrich_task(session, task)


# =============================================================================
# Writes
# =============================================================================

async def create_task(
    session: AsyncSession,
    task_in: TaskCreate,
    actor_id: str,
) -> TaskRead:
    """
    Create a task at the end of its parent's level.

    Summary tasks take no dates or progress from the client; milestones get
    a single-day range.
    """
    await store.get_project(session, task_in.project_id)
    if task_in.parent_id is not None:
        await store.get_active_task(session, task_in.parent_id, task_in.project_id, resource="Parent task")

    data = task_in.model_dump()

    if task_in.type == TaskType.SUMMARY:
        sent = [f for f in SUMMARY_DERIVED_FIELDS if data[f] is not None]
        if sent:
            raise SummaryFieldsReadOnlyError("new", sent)
    elif task_in.type == TaskType.MILESTONE:
        data["start_date"], data["end_date"] = _milestone_dates(data["start_date"], data["end_date"])
    _check_date_order(data["start_date"], data["end_date"])

    if data["status"] is None:
        data["status"] = TaskStatus.NOT_STARTED
    if data["progress"] is None:
        data["progress"] = 0
    # Done means fully complete
    if data["status"] == TaskStatus.DONE and task_in.type != TaskType.SUMMARY:
        data["progress"] = 100

    data["order_index"] = await store.next_order_index(session, task_in.project_id, task_in.parent_id)

    task = Task(**data)
    session.add(task)
    await session.flush()
    await session.refresh(task)

    await log_change(
        session,
        entity_type="Task",
        entity_id=task.id,
        user_id=actor_id,
        field="created",
        before=None,
        after={"title": task.title, "type": task.type.value},
    )
    logger.info(f"Created task: id={task.id} title='{task.title}' type={task.type.value} project={task.project_id}")

    if task.parent_id is not None:
        await recalculate_summary(session, task.parent_id)

    return await enrich_task(session, task)


def _resolve_update(task: Task, data: dict[str, Any]) -> dict[str, Any]:
    """Apply type rules to a partial update and return the fields to write."""
    for name in NON_NULLABLE_FIELDS:
        if name in data and data[name] is None:
            raise ValidationError(
                f"{name} cannot be null",
                details=[{"loc": ["body", name], "msg": "may not be null", "type": "not_null"}],
            )

    if task.is_summary:
        sent = [f for f in SUMMARY_DERIVED_FIELDS if f in data]
        if sent:
            raise SummaryFieldsReadOnlyError(str(task.id), sent)
        return data

    if data.get("status") == TaskStatus.DONE:
        data["progress"] = 100

    if task.type == TaskType.MILESTONE and ("start_date" in data or "end_date" in data):
        data["start_date"], data["end_date"] = _milestone_dates(
            data.get("start_date"), data.get("end_date")
        )

    _check_date_order(
        data.get("start_date", task.start_date),
        data.get("end_date", task.end_date),
    )
    return data


async def update_task(
    session: AsyncSession,
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    actor_id: str,
) -> TaskUpdateResult:
    """
    Apply a partial update, then propagate and re-aggregate.

    Returns the updated task and every task that schedule propagation moved.
    """
    task = await store.get_active_task(session, task_id)
    data = _resolve_update(task, task_in.model_dump(exclude_unset=True))
    dates_sent = "start_date" in data or "end_date" in data

    logger.info(f"Updating task {task_id}: {data}")

    changes = []
    for name, value in data.items():
        before = getattr(task, name)
        if before != value:
            changes.append((name, before, value))
            setattr(task, name, value)

    task.updated_at = datetime.utcnow()
    session.add(task)
    await session.flush()

    for name, before, after in changes:
        await log_change(session, "Task", task.id, actor_id, name, before, after)

    affected: list[Task] = []
    project = await store.get_project(session, task.project_id)
    if project.auto_schedule and dates_sent:
        affected = await propagate_schedule(session, task.project_id, task.id, actor_id)

    await recalculate_parents(session, [task, *affected])

    return TaskUpdateResult(
        updated_task=await enrich_task(session, task),
        affected_tasks=await enrich_tasks(session, task.project_id, affected) if affected else [],
    )


async def delete_task(session: AsyncSession, task_id: uuid.UUID, actor_id: str) -> None:
    """Soft-delete a task together with its subtree and re-aggregate the parent."""
    task = await store.get_active_task(session, task_id)
    descendants = await collect_subtree(session, task.id)

    deleted_at = datetime.utcnow()
    for row in (task, *descendants):
        row.deleted_at = deleted_at
        row.updated_at = deleted_at
        session.add(row)
    await session.flush()

    await log_change(
        session,
        entity_type="Task",
        entity_id=task.id,
        user_id=actor_id,
        field="deleted",
        before={"title": task.title},
        after=None,
    )
    logger.info(f"Soft-deleted task {task_id} '{task.title}' and {len(descendants)} descendant(s)")

    if task.parent_id is not None:
        await recalculate_summary(session, task.parent_id)


async def move_task(
    session: AsyncSession,
    task_id: uuid.UUID,
    move_in: TaskMove,
    actor_id: str,
) -> TaskMoveResult:
    """
    Reparent and/or reorder a task.

    The task lands right after after_task_id, or first at the target level
    when no anchor is given; later siblings shift down by one.
    """
    task = await store.get_active_task(session, task_id)
    new_parent_id = move_in.new_parent_id

    if new_parent_id is not None:
        await store.get_active_task(session, new_parent_id, task.project_id, resource="New parent task")
        if await is_descendant(session, new_parent_id, task.id):
            logger.warning(f"Rejected move of {task_id} under its own descendant {new_parent_id}")
            raise InvalidMoveError(str(task_id), str(new_parent_id))

    if move_in.after_task_id is not None:
        if move_in.after_task_id == task.id:
            raise ValidationError("A task cannot be placed after itself")
        anchor = await store.get_active_task(
            session, move_in.after_task_id, task.project_id, resource="After task"
        )
        if anchor.parent_id != new_parent_id:
            raise ValidationError("after_task_id must be a task at the target level")
        new_index = anchor.order_index + 1
    else:
        new_index = 0

    parent_clause = Task.parent_id.is_(None) if new_parent_id is None else Task.parent_id == new_parent_id
    siblings_result = await session.execute(
        select(Task).where(
            Task.project_id == task.project_id,
            parent_clause,
            Task.deleted_at.is_(None),
            Task.id != task.id,
            Task.order_index >= new_index,
        )
    )
    for sibling in siblings_result.scalars().all():
        sibling.order_index += 1
        session.add(sibling)

    old_parent_id = task.parent_id
    task.parent_id = new_parent_id
    task.order_index = new_index
    task.updated_at = datetime.utcnow()
    session.add(task)
    await session.flush()

    await log_change(
        session,
        entity_type="Task",
        entity_id=task.id,
        user_id=actor_id,
        field="moved",
        before={"parent_id": old_parent_id},
        after={"parent_id": new_parent_id, "order_index": new_index},
    )
    logger.info(f"Moved task {task_id}: parent {old_parent_id} -> {new_parent_id} at index {new_index}")

    if old_parent_id is not None:
        await recalculate_summary(session, old_parent_id)
    if new_parent_id is not None and new_parent_id != old_parent_id:
        await recalculate_summary(session, new_parent_id)

    return TaskMoveResult(moved_task_id=task.id)
