import uuid
from datetime import datetime
from sqlmodel import SQLModel, Field


class ChangeLog(SQLModel, table=True):
    """
    Field-level change history.

    before/after hold string renderings (dates as ISO strings, compound
    values as JSON); either may be null for creations and deletions.
    """

    __tablename__ = "change_logs"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    entity_type: str = Field(index=True)  # Project | Task | Dependency | Baseline
    entity_id: uuid.UUID = Field(index=True)
    user_id: str
    field: str
    before: str | None = Field(default=None)
    after: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
