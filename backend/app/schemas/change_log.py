import uuid
from datetime import datetime
from pydantic import BaseModel


class ChangeLogRead(BaseModel):
    id: uuid.UUID
    entity_type: str
    entity_id: uuid.UUID
    user_id: str
    field: str
    before: str | None
    after: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
