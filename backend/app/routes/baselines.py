"""
Baseline routes for the Waypoint API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.models import Baseline
from app.schemas import BaselineCreate, BaselineRead, BaselineDiff
from app.services import baselines as baseline_service

router = APIRouter()


@router.post("/", response_model=BaselineRead, status_code=status.HTTP_201_CREATED)
async def create_baseline(
    baseline_in: BaselineCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Baseline:
    """Snapshot the current schedule of every live task in a project."""
    return await baseline_service.create_baseline(
        session, baseline_in.project_id, baseline_in.name, user.uid
    )


@router.get("/", response_model=list[BaselineRead])
async def list_baselines(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> list[Baseline]:
    """List a project's baselines, newest first."""
    return await baseline_service.list_baselines(session, project_id)


@router.get("/{baseline_id}", response_model=BaselineRead)
async def get_baseline(
    baseline_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> Baseline:
    """Get a baseline by ID."""
    return await baseline_service.get_baseline(session, baseline_id)


@router.get("/{baseline_id}/diff", response_model=BaselineDiff)
async def diff_baseline(
    baseline_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> BaselineDiff:
    """Compare a baseline with the current schedule."""
    return await baseline_service.diff_baseline(session, baseline_id)
