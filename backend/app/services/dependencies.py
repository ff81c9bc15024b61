"""
Dependency creation, listing and deletion.

All validation runs before the edge is inserted, so a rejected request
leaves nothing behind.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import Task, Dependency
from app.schemas import DependencyCreate, DependencyRead, DependencyCreateResult
from app.services import store
from app.services.changelog import log_change
from app.services.graph import would_create_cycle
from app.services.hierarchy import recalculate_parents
from app.services.scheduling import propagate_schedule
from app.services.tasks import enrich_tasks
from app.exceptions import (
    NotFoundError,
    CycleDetectedError,
    DuplicateDependencyError,
    SelfDependencyError,
    CrossProjectDependencyError,
)
from app.logging_config import get_logger

logger = get_logger(__name__)


async def create_dependency(
    session: AsyncSession,
    dep_in: DependencyCreate,
    actor_id: str,
) -> DependencyCreateResult:
    """
    Create a finish-to-start edge.

    Checks, in order: both tasks live, same project, not a duplicate, not a
    self-edge, no cycle. With auto-scheduling on, the new successor (and its
    own successors) are then pushed past the predecessor.
    """
    logger.info(f"Creating dependency: {dep_in.predecessor_task_id} -> {dep_in.successor_task_id}")

    predecessor = await store.get_active_task(session, dep_in.predecessor_task_id, resource="Predecessor task")
    successor = await store.get_active_task(session, dep_in.successor_task_id, resource="Successor task")

    if predecessor.project_id != successor.project_id:
        logger.warning(
            f"Cross-project dependency rejected: "
            f"{predecessor.project_id} -> {successor.project_id}"
        )
        raise CrossProjectDependencyError(str(predecessor.project_id), str(successor.project_id))

    existing = await session.execute(
        select(Dependency).where(
            Dependency.predecessor_task_id == dep_in.predecessor_task_id,
            Dependency.successor_task_id == dep_in.successor_task_id,
        )
    )
    if existing.scalars().first() is not None:
        logger.warning(f"Duplicate dependency rejected: {dep_in.predecessor_task_id} -> {dep_in.successor_task_id}")
        raise DuplicateDependencyError(str(dep_in.predecessor_task_id), str(dep_in.successor_task_id))

    if dep_in.predecessor_task_id == dep_in.successor_task_id:
        logger.warning(f"Self-dependency rejected: {dep_in.predecessor_task_id}")
        raise SelfDependencyError(str(dep_in.predecessor_task_id))

    if await would_create_cycle(session, predecessor.id, successor.id, predecessor.project_id):
        logger.warning(
            f"Cycle detected: {dep_in.predecessor_task_id} -> {dep_in.successor_task_id} "
            f"would create a cycle"
        )
        raise CycleDetectedError(str(dep_in.predecessor_task_id), str(dep_in.successor_task_id))

    dependency = Dependency(
        project_id=predecessor.project_id,
        predecessor_task_id=predecessor.id,
        successor_task_id=successor.id,
        type=dep_in.type,
        lag_days=dep_in.lag_days,
    )
    session.add(dependency)
    await session.flush()
    await session.refresh(dependency)

    await log_change(
        session,
        entity_type="Dependency",
        entity_id=dependency.id,
        user_id=actor_id,
        field="created",
        before=None,
        after={
            "predecessor": str(predecessor.id),
            "successor": str(successor.id),
            "lag_days": dependency.lag_days,
        },
    )
    logger.info(
        f"Created dependency: {predecessor.title} -> {successor.title} "
        f"lag={dependency.lag_days} (project={predecessor.project_id})"
    )

    affected: list[Task] = []
    project = await store.get_project(session, predecessor.project_id)
    if project.auto_schedule:
        affected = await propagate_schedule(session, project.id, predecessor.id, actor_id)
        await recalculate_parents(session, affected)

    return DependencyCreateResult(
        dependency=DependencyRead.model_validate(dependency),
        affected_tasks=await enrich_tasks(session, project.id, affected) if affected else [],
    )


async def list_dependencies(session: AsyncSession, project_id: uuid.UUID) -> list[Dependency]:
    """Every stored edge of a project, oldest first."""
    await store.get_project(session, project_id)
    result = await session.execute(
        select(Dependency)
        .where(Dependency.project_id == project_id)
        .order_by(Dependency.created_at)
    )
    dependencies = list(result.scalars().all())
    logger.debug(f"Listed {len(dependencies)} dependencies for project={project_id}")
    return dependencies


async def delete_dependency(
    session: AsyncSession,
    dependency_id: uuid.UUID,
    actor_id: str,
) -> None:
    """
    Remove an edge.

    Successors are not pulled earlier: propagation only ever pushes dates later.
    """
    dependency = await session.get(Dependency, dependency_id)
    if not dependency:
        raise NotFoundError("Dependency", str(dependency_id))

    logger.info(
        f"Deleting dependency {dependency_id}: "
        f"{dependency.predecessor_task_id} -> {dependency.successor_task_id}"
    )

    await session.delete(dependency)
    await session.flush()

    await log_change(
        session,
        entity_type="Dependency",
        entity_id=dependency_id,
        user_id=actor_id,
        field="deleted",
        before={
            "predecessor": str(dependency.predecessor_task_id),
            "successor": str(dependency.successor_task_id),
        },
        after=None,
    )
