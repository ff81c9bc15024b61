"""
Project routes for the Waypoint API.
"""

import uuid
from datetime import datetime
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.models import Project
from app.schemas import ProjectCreate, ProjectUpdate, ProjectRead
from app.services import store
from app.services.changelog import log_change
from app.exceptions import ValidationError
from app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()

NON_NULLABLE_FIELDS = ("name", "auto_schedule", "status")


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Project:
    """Create a new project. Auto-scheduling is on unless disabled."""
    project = Project(**project_in.model_dump())
    session.add(project)
    await session.flush()
    await session.refresh(project)

    await log_change(session, "Project", project.id, user.uid, "created", None, {"name": project.name})
    logger.info(f"Created project: id={project.id} name='{project.name}' auto_schedule={project.auto_schedule}")

    return project


@router.get("/", response_model=list[ProjectRead])
async def list_projects(
    session: AsyncSession = Depends(get_session),
) -> list[Project]:
    """List all projects."""
    result = await session.execute(select(Project).order_by(Project.created_at))
    projects = list(result.scalars().all())

    logger.debug(f"Listed {len(projects)} projects")

    return projects


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> Project:
    """Get a project by ID."""
    return await store.get_project(session, project_id)


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: uuid.UUID,
    project_in: ProjectUpdate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Project:
    """
    Update a project.

    Turning auto_schedule off leaves existing dates alone; violations then
    show up as task warnings instead of being corrected.
    """
    project = await store.get_project(session, project_id)

    update_data = project_in.model_dump(exclude_unset=True)
    for name in NON_NULLABLE_FIELDS:
        if name in update_data and update_data[name] is None:
            raise ValidationError(
                f"{name} cannot be null",
                details=[{"loc": ["body", name], "msg": "may not be null", "type": "not_null"}],
            )

    logger.info(f"Updating project {project_id}: {update_data}")

    for field, value in update_data.items():
        before = getattr(project, field)
        if before == value:
            continue
        setattr(project, field, value)
        await log_change(session, "Project", project.id, user.uid, field, before, value)

    project.updated_at = datetime.utcnow()
    await session.flush()
    await session.refresh(project)
    return project
