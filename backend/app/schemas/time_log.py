import uuid
from datetime import date, datetime
from pydantic import BaseModel, Field


class TimeLogCreate(BaseModel):
    """Schema for booking work against a task."""
    work_date: date
    pd: float = Field(ge=0)
    note: str | None = None


class TimeLogRead(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    user_id: str
    work_date: date
    pd: float
    note: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
