"""
Graph operations using NetworkX.

This module handles:
- Building a project's dependency graph from stored edges
- Cycle detection for dependency validation

The graph is rebuilt from storage for every check and never cached, so it
cannot go stale when edges are added or removed by other requests.
"""

import uuid
import networkx as nx
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import Task
from app.services import store
from app.logging_config import get_logger

logger = get_logger(__name__)


async def build_project_graph(
    session: AsyncSession,
    project_id: uuid.UUID,
) -> nx.DiGraph:
    """
    Build a NetworkX DiGraph from the live tasks and dependencies of a project.

    Returns a graph where:
    - Nodes are task IDs (soft-deleted tasks are left out)
    - Edges go from predecessor -> successor, carrying lag_days
    """
    tasks_result = await session.execute(
        select(Task.id).where(
            Task.project_id == project_id,
            Task.deleted_at.is_(None),
        )
    )
    dependencies = await store.find_dependencies_by_project(session, project_id)

    graph = nx.DiGraph()
    graph.add_nodes_from(tasks_result.scalars().all())
    for dep in dependencies:
        graph.add_edge(
            dep.predecessor_task_id,
            dep.successor_task_id,
            lag_days=dep.lag_days,
        )

    return graph


def closes_cycle(
    graph: nx.DiGraph,
    predecessor_id: uuid.UUID,
    successor_id: uuid.UUID,
) -> bool:
    """
    Check whether adding predecessor -> successor to graph would close a cycle.

    That is the case exactly when predecessor is already reachable from
    successor (or both are the same node).
    """
    if predecessor_id == successor_id:
        return True
    if successor_id not in graph or predecessor_id not in graph:
        return False
    return nx.has_path(graph, successor_id, predecessor_id)


async def would_create_cycle(
    session: AsyncSession,
    predecessor_id: uuid.UUID,
    successor_id: uuid.UUID,
    project_id: uuid.UUID,
) -> bool:
    """
    Check if adding an edge (predecessor -> successor) would create a cycle.

    Algorithm:
    1. Build the current graph for the project (live tasks only)
    2. Search forward from the proposed successor
    3. Reaching the proposed predecessor means the new edge closes a cycle

    Returns True if a cycle would be created, False otherwise.
    """
    graph = await build_project_graph(session, project_id)
    result = closes_cycle(graph, predecessor_id, successor_id)
    logger.debug(
        f"Cycle check {predecessor_id} -> {successor_id} over "
        f"{graph.number_of_nodes()} tasks / {graph.number_of_edges()} edges: {result}"
    )
    return result
