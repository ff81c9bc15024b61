import enum
import uuid
from datetime import date, datetime
from sqlmodel import SQLModel, Field


class TaskType(str, enum.Enum):
    TASK = "task"
    SUMMARY = "summary"
    MILESTONE = "milestone"


class TaskStatus(str, enum.Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    BLOCKED = "Blocked"
    DONE = "Done"


class Task(SQLModel, table=True):
    """
    WBS task stored as a flat row; the tree is expressed through parent_id.

    Key fields:
    - type: summary tasks derive start_date/end_date/progress from children,
      milestones have start_date == end_date
    - order_index: sibling order at one parent level
    - estimate_pd: weight for summary progress (1 when absent)
    - deleted_at: soft delete marker; deleted rows take no part in
      aggregation, propagation or cycle checks
    """

    __tablename__ = "tasks"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", index=True)
    parent_id: uuid.UUID | None = Field(default=None, foreign_key="tasks.id", index=True)
    order_index: int = Field(default=0)
    type: TaskType = Field(default=TaskType.TASK)
    title: str = Field(max_length=200)
    description: str | None = Field(default=None)
    start_date: date | None = Field(default=None)
    end_date: date | None = Field(default=None)
    progress: int = Field(default=0, ge=0, le=100)
    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED)
    priority: str | None = Field(default=None)
    estimate_pd: float | None = Field(default=None, ge=0)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    deleted_at: datetime | None = Field(default=None, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_summary(self) -> bool:
        return self.type == TaskType.SUMMARY
