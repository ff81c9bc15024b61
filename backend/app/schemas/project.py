import uuid
from datetime import date, datetime
from pydantic import BaseModel, Field

from app.models import ProjectStatus


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""
    name: str = Field(max_length=100)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    timezone: str = "Asia/Tokyo"
    auto_schedule: bool = True


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""
    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    auto_schedule: bool | None = None
    status: ProjectStatus | None = None


class ProjectRead(BaseModel):
    """Schema for reading a project."""
    id: uuid.UUID
    name: str
    description: str | None
    start_date: date | None
    end_date: date | None
    timezone: str
    auto_schedule: bool
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
