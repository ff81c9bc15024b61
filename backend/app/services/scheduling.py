"""
Schedule propagation along finish-to-start dependencies.

Rule for an edge predecessor -> successor with lag L:
    minimum_start = predecessor.end_date + L days + 1 day

The successor may not start on the day its predecessor finishes. When it
starts before minimum_start it is shifted to minimum_start, keeping its
duration, and the shift cascades to its own successors. Propagation only
ever pushes dates later; a successor with slack is left alone.
"""

import uuid
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Task
from app.services import store
from app.services.changelog import log_change, date_range
from app.exceptions import PropagationError
from app.logging_config import get_logger

logger = get_logger(__name__)


def minimum_start(predecessor_end: date, lag_days: int) -> date:
    """Earliest start a successor may have under finish-to-start + lag."""
    return predecessor_end + timedelta(days=lag_days + 1)


def shift_to(start: date, end: date, new_start: date) -> tuple[date, date]:
    """Move a date range so it starts at new_start, preserving its length."""
    return new_start, new_start + (end - start)


async def propagate_schedule(
    session: AsyncSession,
    project_id: uuid.UUID,
    changed_task_id: uuid.UUID,
    actor_id: str,
) -> list[Task]:
    """
    Push successors of changed_task_id (transitively) past their constraints.

    Each outgoing edge is handled in full, including its cascade, before the
    next one. Edges with missing dates, deleted successors and summary
    successors (whose dates are derived) are skipped silently.

    Returns every task that moved, each once, in the order it first moved.

    Raises:
        PropagationError: if the cascade goes deeper than the project has
            tasks, which only happens when the graph contains a cycle.
    """
    depth_limit = await store.count_active_tasks(session, project_id)
    affected: dict[uuid.UUID, Task] = {}

    await _propagate(session, changed_task_id, actor_id, 0, depth_limit, affected)

    if affected:
        logger.info(
            f"Auto-scheduled {len(affected)} task(s) after change to {changed_task_id} "
            f"(project={project_id})"
        )
    return list(affected.values())


async def _propagate(
    session: AsyncSession,
    task_id: uuid.UUID,
    actor_id: str,
    depth: int,
    depth_limit: int,
    affected: dict[uuid.UUID, Task],
) -> None:
    if depth > depth_limit:
        logger.error(f"Propagation depth {depth} exceeded limit {depth_limit} at task {task_id}")
        raise PropagationError(
            "Schedule propagation did not terminate; the dependency graph may contain a cycle",
            task_id=str(task_id),
        )

    predecessor = await session.get(Task, task_id)
    if predecessor is None or predecessor.is_deleted:
        return

    for dep in await store.find_dependencies_by_predecessor(session, task_id):
        successor = await session.get(Task, dep.successor_task_id)
        if successor is None or successor.is_deleted or successor.is_summary:
            continue

        # Undated tasks are never auto-scheduled
        if predecessor.end_date is None or successor.start_date is None or successor.end_date is None:
            logger.debug(f"Skipping edge {task_id} -> {successor.id}: missing dates")
            continue

        earliest = minimum_start(predecessor.end_date, dep.lag_days)
        if successor.start_date >= earliest:
            continue

        before = date_range(successor.start_date, successor.end_date)
        new_start, new_end = shift_to(successor.start_date, successor.end_date, earliest)
        await store.update_task_dates(session, successor.id, new_start, new_end)
        await log_change(
            session,
            entity_type="Task",
            entity_id=successor.id,
            user_id=actor_id,
            field="auto-scheduled",
            before=before,
            after=date_range(new_start, new_end),
        )
        logger.debug(f"Shifted {successor.id} to {new_start}..{new_end} (depth={depth})")

        affected.setdefault(successor.id, successor)
        await _propagate(session, successor.id, actor_id, depth + 1, depth_limit, affected)
