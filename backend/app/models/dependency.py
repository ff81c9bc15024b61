import enum
import uuid
from datetime import datetime
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class DependencyType(str, enum.Enum):
    FS = "FS"  # finish-to-start, the only supported kind


class Dependency(SQLModel, table=True):
    """
    Dependency model representing a directed edge in the task graph.

    predecessor_task_id -> successor_task_id means:
    "The successor may start no earlier than the day after the predecessor
    finishes, plus lag_days"

    Example: If Task A blocks Task B with lag_days=2 and A ends on the 10th:
    - predecessor_task_id = A.id
    - successor_task_id = B.id
    - B may start on the 13th at the earliest
    """

    __tablename__ = "dependencies"
    __table_args__ = (
        UniqueConstraint("predecessor_task_id", "successor_task_id", name="uq_dependency_pair"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", index=True)
    predecessor_task_id: uuid.UUID = Field(foreign_key="tasks.id", index=True)
    successor_task_id: uuid.UUID = Field(foreign_key="tasks.id", index=True)
    type: DependencyType = Field(default=DependencyType.FS)
    lag_days: int = Field(default=0)

    created_at: datetime = Field(default_factory=datetime.utcnow)
