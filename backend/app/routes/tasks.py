"""
Task routes for the Waypoint API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.schemas import (
    TaskCreate,
    TaskUpdate,
    TaskMove,
    TaskRead,
    TaskUpdateResult,
    TaskMoveResult,
    ChangeLogRead,
)
from app.services import tasks as task_service
from app.services import store
from app.services.changelog import list_changes
from app.models import ChangeLog

router = APIRouter()


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> TaskRead:
    """
    Create a new task.

    The task is appended after its last sibling; its parent summary is
    re-aggregated.
    """
    return await task_service.create_task(session, task_in, user.uid)


@router.get("/", response_model=list[TaskRead])
async def list_tasks(
    project_id: uuid.UUID,
    include_deleted: bool = False,
    session: AsyncSession = Depends(get_session),
) -> list[TaskRead]:
    """
    List a project's tasks in WBS order.

    Each task carries actual_pd, its outline number and schedule warnings.
    """
    return await task_service.list_tasks(session, project_id, include_deleted)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> TaskRead:
    """Get a task by ID."""
    return await task_service.get_task(session, task_id)


@router.patch("/{task_id}", response_model=TaskUpdateResult)
async def update_task(
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> TaskUpdateResult:
    """
    Update a task.

    Date changes on an auto-scheduled project push dependent tasks later;
    every task moved that way is returned in affected_tasks.
    """
    return await task_service.update_task(session, task_id, task_in, user.uid)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> None:
    """Soft-delete a task and its subtree."""
    await task_service.delete_task(session, task_id, user.uid)


@router.post("/{task_id}/move", response_model=TaskMoveResult)
async def move_task(
    task_id: uuid.UUID,
    move_in: TaskMove,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> TaskMoveResult:
    """Move a task under a new parent and/or after a given sibling."""
    return await task_service.move_task(session, task_id, move_in, user.uid)


@router.get("/{task_id}/history", response_model=list[ChangeLogRead])
async def get_task_history(
    task_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> list[ChangeLog]:
    """Change history of a task, newest first."""
    await store.get_active_task(session, task_id)
    return await list_changes(session, "Task", task_id)
