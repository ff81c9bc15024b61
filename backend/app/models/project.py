import enum
import uuid
from datetime import date, datetime
from sqlmodel import SQLModel, Field


class ProjectStatus(str, enum.Enum):
    PLANNING = "Planning"
    ACTIVE = "Active"
    ON_HOLD = "OnHold"
    DONE = "Done"
    ARCHIVED = "Archived"


class Project(SQLModel, table=True):
    """
    Project model - groups tasks together.

    auto_schedule gates schedule propagation: when on, date edits and new
    dependencies push successors later; when off, violations only surface
    as read-time warnings.
    """

    __tablename__ = "projects"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True, max_length=100)
    description: str | None = Field(default=None)
    start_date: date | None = Field(default=None)
    end_date: date | None = Field(default=None)
    timezone: str = Field(default="Asia/Tokyo")
    auto_schedule: bool = Field(default=True)
    status: ProjectStatus = Field(default=ProjectStatus.PLANNING)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
