import uuid
from datetime import date, datetime
from pydantic import BaseModel, Field


class BaselineCreate(BaseModel):
    """Schema for snapshotting a project's current schedule."""
    project_id: uuid.UUID
    name: str = Field(max_length=100)


class BaselineRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    name: str
    locked: bool
    created_by: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BaselineDiffItem(BaseModel):
    task_id: uuid.UUID
    task_title: str
    baseline_start: date | None
    baseline_end: date | None
    current_start: date | None
    current_end: date | None
    delta_days: int | None  # Only when both baseline and current end dates exist
    delta_pd: float | None  # Only when both estimates exist


class BaselineDiffSummary(BaseModel):
    slipped_tasks: int
    total_delta_days: int
    delta_pd: float


class BaselineDiff(BaseModel):
    summary: BaselineDiffSummary
    items: list[BaselineDiffItem]
