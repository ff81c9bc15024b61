import uuid
from datetime import date, datetime
from sqlmodel import SQLModel, Field


class TimeLog(SQLModel, table=True):
    """Person-days of work booked against a task; summed into actual_pd."""

    __tablename__ = "time_logs"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    task_id: uuid.UUID = Field(foreign_key="tasks.id", index=True)
    user_id: str = Field(index=True)
    work_date: date
    pd: float = Field(ge=0)
    note: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
