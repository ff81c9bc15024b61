import uuid
from datetime import datetime
from pydantic import BaseModel

from app.models import DependencyType
from app.schemas.task import TaskRead


class DependencyCreate(BaseModel):
    """Schema for creating a new dependency."""
    predecessor_task_id: uuid.UUID  # The blocker task
    successor_task_id: uuid.UUID    # The blocked task
    type: DependencyType = DependencyType.FS
    lag_days: int = 0


class DependencyRead(BaseModel):
    """Schema for reading a dependency."""
    id: uuid.UUID
    project_id: uuid.UUID
    predecessor_task_id: uuid.UUID
    successor_task_id: uuid.UUID
    type: DependencyType
    lag_days: int
    created_at: datetime

    model_config = {"from_attributes": True}


class DependencyCreateResult(BaseModel):
    """The new edge plus every task moved by schedule propagation."""
    dependency: DependencyRead
    affected_tasks: list[TaskRead]
