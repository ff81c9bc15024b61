import uuid
from datetime import date, datetime
from sqlmodel import SQLModel, Field

from app.models.task import TaskStatus


class Baseline(SQLModel, table=True):
    """Immutable snapshot of a project's schedule at a point in time."""

    __tablename__ = "baselines"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", index=True)
    name: str = Field(max_length=100)
    locked: bool = Field(default=True)
    created_by: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class BaselineTask(SQLModel, table=True):
    """One task's schedule fields as captured by a baseline."""

    __tablename__ = "baseline_tasks"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    baseline_id: uuid.UUID = Field(foreign_key="baselines.id", index=True)
    task_id: uuid.UUID = Field(foreign_key="tasks.id", index=True)
    start_date: date | None = Field(default=None)
    end_date: date | None = Field(default=None)
    estimate_pd: float | None = Field(default=None)
    progress: int = Field(default=0)
    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED)
