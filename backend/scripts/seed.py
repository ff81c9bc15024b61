#!/usr/bin/env python3
"""
Seed script to generate a sample WBS project.

Builds a project with nested phases, chained finish-to-start dependencies,
a milestone per phase and a baseline, going through the same service layer
the API uses so rollups and auto-scheduling apply.

Usage:
    python -m scripts.seed [--phases 3] [--tasks 4] [--name "Sample WBS Project"]

Options:
    --phases N   Number of top-level phases (default: 3)
    --tasks N    Tasks per phase (default: 4)
    --name       Name of the project to create
    --no-auto    Create the project with auto-scheduling off
"""

import argparse
import asyncio
import random
import time
from datetime import date, timedelta

from app.database import get_session_context, init_db
from app.models import Project, TaskType
from app.schemas import TaskCreate, DependencyCreate
from app.services.tasks import create_task
from app.services.dependencies import create_dependency
from app.services.baselines import create_baseline

SEED_USER = "seed-script"


async def seed(name: str, phases: int, tasks_per_phase: int, auto_schedule: bool) -> None:
    await init_db()
    start = time.perf_counter()

    async with get_session_context() as session:
        project = Project(name=name, description="Seeded sample project", auto_schedule=auto_schedule)
        session.add(project)
        await session.flush()

        cursor = date.today()
        previous_last = None
        dependency_count = 0

        for phase_number in range(1, phases + 1):
            phase = await create_task(session, TaskCreate(
                project_id=project.id,
                type=TaskType.SUMMARY,
                title=f"Phase {phase_number}",
            ), SEED_USER)

            chain = []
            for task_number in range(1, tasks_per_phase + 1):
                duration = random.randint(1, 5)
                task = await create_task(session, TaskCreate(
                    project_id=project.id,
                    parent_id=phase.id,
                    title=f"Task {phase_number}.{task_number}",
                    start_date=cursor,
                    end_date=cursor + timedelta(days=duration - 1),
                    estimate_pd=float(duration),
                    progress=random.choice([0, 0, 25, 50, 100]),
                ), SEED_USER)
                chain.append(task)
                cursor += timedelta(days=duration)

            milestone = await create_task(session, TaskCreate(
                project_id=project.id,
                parent_id=phase.id,
                type=TaskType.MILESTONE,
                title=f"Phase {phase_number} complete",
                start_date=cursor,
            ), SEED_USER)
            chain.append(milestone)

            # Chain within the phase, and link phases end-to-start
            links = list(zip(chain, chain[1:]))
            if previous_last is not None:
                links.insert(0, (previous_last, chain[0]))
            for predecessor, successor in links:
                await create_dependency(session, DependencyCreate(
                    predecessor_task_id=predecessor.id,
                    successor_task_id=successor.id,
                    lag_days=random.choice([0, 0, 0, 1]),
                ), SEED_USER)
                dependency_count += 1

            previous_last = milestone
            cursor += timedelta(days=1)

        await create_baseline(session, project.id, "Initial plan", SEED_USER)

    elapsed = time.perf_counter() - start
    print(f"Seeded project '{name}' ({project.id})")
    print(f"  phases={phases} tasks/phase={tasks_per_phase} dependencies={dependency_count}")
    print(f"  auto_schedule={auto_schedule} in {elapsed:.2f}s")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a sample WBS project")
    parser.add_argument("--phases", type=int, default=3)
    parser.add_argument("--tasks", type=int, default=4)
    parser.add_argument("--name", default="Sample WBS Project")
    parser.add_argument("--no-auto", action="store_true")
    args = parser.parse_args()

    asyncio.run(seed(args.name, args.phases, args.tasks, not args.no_auto))


if __name__ == "__main__":
    main()
