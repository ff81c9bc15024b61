"""
Time log routes for the Waypoint API (mounted under /tasks).
"""

import uuid
from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.models import TimeLog
from app.schemas import TimeLogCreate, TimeLogRead
from app.services import time_logs as time_log_service

router = APIRouter()


@router.post("/{task_id}/time-logs", response_model=TimeLogRead, status_code=status.HTTP_201_CREATED)
async def create_time_log(
    task_id: uuid.UUID,
    log_in: TimeLogCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> TimeLog:
    """Book person-days of work against a task."""
    return await time_log_service.create_time_log(session, task_id, log_in, user.uid)


@router.get("/{task_id}/time-logs", response_model=list[TimeLogRead])
async def list_time_logs(
    task_id: uuid.UUID,
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    session: AsyncSession = Depends(get_session),
) -> list[TimeLog]:
    """List a task's time logs, optionally within a work-date window."""
    return await time_log_service.list_time_logs(session, task_id, date_from, date_to)
