"""
Read-time schedule warnings.

Warnings describe the current state and are recomputed on every read;
nothing here writes to the database.
"""

import enum
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from app.models import Task, Dependency
from app.services.scheduling import minimum_start


class ScheduleWarning(str, enum.Enum):
    SCHEDULE_MISSING_DATES = "SCHEDULE_MISSING_DATES"
    SCHEDULE_VIOLATION = "SCHEDULE_VIOLATION"


@dataclass
class ScheduleWarnings:
    warnings: list[ScheduleWarning] = field(default_factory=list)

    @property
    def has_warning(self) -> bool:
        return bool(self.warnings)

    def add(self, warning: ScheduleWarning) -> None:
        if warning not in self.warnings:
            self.warnings.append(warning)


def evaluate_warnings(
    task: Task,
    dependencies: Iterable[Dependency],
    tasks_by_id: Mapping[uuid.UUID, Task],
) -> ScheduleWarnings:
    """
    Compute warning flags for a task from the edges it is a successor of.

    dependencies may contain unrelated edges; only those whose successor is
    this task are considered. tasks_by_id must resolve the predecessors;
    edges to missing or deleted predecessors are ignored.
    """
    result = ScheduleWarnings()

    for dep in dependencies:
        if dep.successor_task_id != task.id:
            continue
        predecessor = tasks_by_id.get(dep.predecessor_task_id)
        if predecessor is None or predecessor.is_deleted:
            continue

        if task.start_date is None or task.end_date is None:
            result.add(ScheduleWarning.SCHEDULE_MISSING_DATES)

        if predecessor.end_date is not None and task.start_date is not None:
            if task.start_date < minimum_start(predecessor.end_date, dep.lag_days):
                result.add(ScheduleWarning.SCHEDULE_VIOLATION)

    return result
