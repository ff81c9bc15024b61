"""
Change history for projects, tasks, dependencies and baselines.
"""

import enum
import json
import uuid
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import ChangeLog


def render_value(value: Any) -> str | None:
    """String form stored in before/after columns."""
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return json.dumps(value, default=str)
    if isinstance(value, enum.Enum):
        return str(value.value)
    return str(value)


def date_range(start: date | None, end: date | None) -> dict[str, str | None]:
    return {"start_date": render_value(start), "end_date": render_value(end)}


async def log_change(
    session: AsyncSession,
    entity_type: str,
    entity_id: uuid.UUID,
    user_id: str,
    field: str,
    before: Any,
    after: Any,
) -> ChangeLog:
    entry = ChangeLog(
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        field=field,
        before=render_value(before),
        after=render_value(after),
    )
    session.add(entry)
    await session.flush()
    return entry


async def list_changes(
    session: AsyncSession,
    entity_type: str,
    entity_id: uuid.UUID,
) -> list[ChangeLog]:
    """History of one entity, newest first."""
    result = await session.execute(
        select(ChangeLog)
        .where(ChangeLog.entity_type == entity_type, ChangeLog.entity_id == entity_id)
        .order_by(ChangeLog.created_at.desc())
    )
    return list(result.scalars().all())
