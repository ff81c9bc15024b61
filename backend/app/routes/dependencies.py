"""
Dependency routes for the Waypoint API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.models import Dependency
from app.schemas import DependencyCreate, DependencyRead, DependencyCreateResult
from app.services import dependencies as dependency_service

router = APIRouter()


@router.post("/", response_model=DependencyCreateResult, status_code=status.HTTP_201_CREATED)
async def create_dependency(
    dep_in: DependencyCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> DependencyCreateResult:
    """
    Create a new finish-to-start dependency.

    Rejects duplicates (409), self-edges and cycles (400). On auto-scheduled
    projects the successor chain is pushed past the predecessor and every
    moved task is returned in affected_tasks.
    """
    return await dependency_service.create_dependency(session, dep_in, user.uid)


@router.get("/", response_model=list[DependencyRead])
async def list_dependencies(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> list[Dependency]:
    """List all dependencies of a project."""
    return await dependency_service.list_dependencies(session, project_id)


@router.delete("/{dependency_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_dependency(
    dependency_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> None:
    """Delete a dependency. Dates of the former successor are left as they are."""
    await dependency_service.delete_dependency(session, dependency_id, user.uid)
