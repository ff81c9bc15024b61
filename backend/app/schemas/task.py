import uuid
from datetime import date, datetime
from pydantic import BaseModel, Field

from app.models import TaskType, TaskStatus
from app.services.warnings import ScheduleWarning


class TaskCreate(BaseModel):
    """Schema for creating a new task."""
    project_id: uuid.UUID
    parent_id: uuid.UUID | None = None
    type: TaskType = TaskType.TASK
    title: str = Field(max_length=200)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    status: TaskStatus | None = None
    priority: str | None = None
    estimate_pd: float | None = Field(default=None, ge=0)


class TaskUpdate(BaseModel):
    """
    Schema for a partial task update.

    Only fields present in the request body are applied; an explicit null
    clears a nullable field.
    """
    title: str | None = Field(default=None, max_length=200)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    status: TaskStatus | None = None
    priority: str | None = None
    estimate_pd: float | None = Field(default=None, ge=0)


class TaskMove(BaseModel):
    """Schema for reparenting/reordering a task."""
    new_parent_id: uuid.UUID | None = None  # None moves the task to the root level
    after_task_id: uuid.UUID | None = None  # None places it first among its siblings


class TaskRead(BaseModel):
    """Schema for reading a task with its computed read-time fields."""
    id: uuid.UUID
    project_id: uuid.UUID
    parent_id: uuid.UUID | None
    order_index: int
    type: TaskType
    title: str
    description: str | None
    start_date: date | None
    end_date: date | None
    progress: int
    status: TaskStatus
    priority: str | None
    estimate_pd: float | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None

    # Computed on read, never persisted
    wbs_code: str | None = None  # Outline number such as "1.2.3"; None for deleted tasks
    actual_pd: float | None = None
    has_schedule_warning: bool = False
    schedule_warnings: list[ScheduleWarning] = []

    model_config = {"from_attributes": True}


class TaskUpdateResult(BaseModel):
    """The edited task plus every task moved by schedule propagation."""
    updated_task: TaskRead
    affected_tasks: list[TaskRead]


class TaskMoveResult(BaseModel):
    moved_task_id: uuid.UUID
