"""
Hierarchy aggregation for summary tasks.

A summary task's schedule is a rollup of its live direct children:
- start_date = earliest child start_date
- end_date = latest child end_date
- progress = children's progress weighted by estimate_pd (1 when absent)

After a summary is recalculated its own parent is recalculated too, so a
change at any depth reaches the top of the WBS.
"""

import math
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Task
from app.services import store
from app.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Rollup:
    """Aggregated summary fields computed from a set of children."""
    start_date: date | None
    end_date: date | None
    progress: int


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_rollup(children: Iterable[Task]) -> Rollup:
    """
    Aggregate children into summary fields.

    Children without dates are ignored for the date range; a range with no
    dated children is None. A total weight of zero yields progress 0.
    """
    starts: list[date] = []
    ends: list[date] = []
    total_weight = 0.0
    weighted_progress = 0.0

    for child in children:
        if child.start_date is not None:
            starts.append(child.start_date)
        if child.end_date is not None:
            ends.append(child.end_date)
        weight = child.estimate_pd if child.estimate_pd is not None else 1
        total_weight += weight
        weighted_progress += child.progress * weight

    progress = round_half_up(weighted_progress / total_weight) if total_weight > 0 else 0

    return Rollup(
        start_date=min(starts) if starts else None,
        end_date=max(ends) if ends else None,
        progress=progress,
    )


async def recalculate_summary(session: AsyncSession, summary_id: uuid.UUID) -> None:
    """
    Recalculate a summary task from its children, then walk up its ancestors.

    Stops at the first ancestor that is missing, deleted or not a summary.
    A summary with no live children keeps its current values and the walk
    ends there, since nothing above it changed.
    """
    visited: set[uuid.UUID] = set()
    current_id: uuid.UUID | None = summary_id

    while current_id is not None and current_id not in visited:
        visited.add(current_id)

        summary = await session.get(Task, current_id)
        if summary is None or summary.is_deleted or not summary.is_summary:
            return

        children = await store.find_children(session, current_id)
        if not children:
            logger.debug(f"Summary {current_id} has no live children, keeping its values")
            return

        rollup = compute_rollup(children)
        await store.update_summary_fields(
            session,
            current_id,
            rollup.start_date,
            rollup.end_date,
            rollup.progress,
        )
        logger.debug(
            f"Recalculated summary {current_id}: "
            f"{rollup.start_date}..{rollup.end_date} progress={rollup.progress}"
        )

        current_id = summary.parent_id


async def recalculate_parents(session: AsyncSession, tasks: Iterable[Task]) -> None:
    """Re-aggregate the distinct parents of the given tasks."""
    parent_ids: list[uuid.UUID] = []
    for task in tasks:
        if task.parent_id is not None and task.parent_id not in parent_ids:
            parent_ids.append(task.parent_id)

    for parent_id in parent_ids:
        await recalculate_summary(session, parent_id)


async def is_descendant(
    session: AsyncSession,
    candidate_id: uuid.UUID,
    ancestor_id: uuid.UUID,
) -> bool:
    """
    True if candidate_id is ancestor_id itself or lies anywhere below it.

    Walks the parent chain up from the candidate.
    """
    visited: set[uuid.UUID] = set()
    current_id: uuid.UUID | None = candidate_id

    while current_id is not None and current_id not in visited:
        if current_id == ancestor_id:
            return True
        visited.add(current_id)

        task = await session.get(Task, current_id)
        if task is None:
            return False
        current_id = task.parent_id

    return False


async def collect_subtree(session: AsyncSession, root_id: uuid.UUID) -> list[Task]:
    """All live descendants of a task, breadth-first."""
    descendants: list[Task] = []
    seen: set[uuid.UUID] = {root_id}
    queue = deque([root_id])

    while queue:
        for child in await store.find_children(session, queue.popleft()):
            if child.id in seen:
                continue
            seen.add(child.id)
            descendants.append(child)
            queue.append(child.id)

    return descendants


def wbs_outline(tasks: Iterable[Task]) -> list[tuple[Task, str]]:
    """
    Order live tasks depth-first by order_index and number them "1", "1.1", ...

    Tasks whose parent is missing from the given set are treated as roots.
    Deleted tasks are skipped.
    """
    live = [task for task in tasks if not task.is_deleted]
    live_ids = {task.id for task in live}

    children: dict[uuid.UUID | None, list[Task]] = {}
    for task in live:
        parent_key = task.parent_id if task.parent_id in live_ids else None
        children.setdefault(parent_key, []).append(task)
    for siblings in children.values():
        siblings.sort(key=lambda t: (t.order_index, t.created_at))

    outline: list[tuple[Task, str]] = []
    stack: list[tuple[Task, str]] = [
        (task, str(position))
        for position, task in reversed(list(enumerate(children.get(None, []), start=1)))
    ]
    while stack:
        task, code = stack.pop()
        outline.append((task, code))
        stack.extend(
            (child, f"{code}.{position}")
            for position, child in reversed(list(enumerate(children.get(task.id, []), start=1)))
        )

    return outline
