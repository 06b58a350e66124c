"""
Dependency routes for the Pathwise API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlmodel import select

from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.models import Task, Dependency
from app.schemas import (
    DependencyCreate,
    DependencyRead,
    DependencyEdgeRead,
    DependencyList,
    MessageResponse,
)
from app.services.graph import detect_cycle
from app.services.roadmaps import get_active_roadmap
from app.services.workflow import get_owned_task
from app.exceptions import (
    NotFoundError,
    CycleDetectedError,
    DuplicateDependencyError,
    SelfDependencyError,
    CrossRoadmapDependencyError,
)
from app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=DependencyList)
async def list_dependencies(
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> DependencyList:
    """
    List the edges of the active roadmap.

    Each edge names both tasks with their current status, for drawing the
    dependency graph.
    """
    roadmap = await get_active_roadmap(session, user.uid)
    if roadmap is None:
        return DependencyList(dependencies=[])

    dependent = aliased(Task)
    prerequisite = aliased(Task)
    result = await session.execute(
        select(
            Dependency.task_id,
            Dependency.depends_on_task_id,
            dependent.title,
            dependent.status,
            prerequisite.title,
            prerequisite.status,
        )
        .join(dependent, dependent.id == Dependency.task_id)
        .join(prerequisite, prerequisite.id == Dependency.depends_on_task_id)
        .where(dependent.roadmap_id == roadmap.id)
        .order_by(dependent.sequence_order, prerequisite.sequence_order)
    )

    dependencies = [
        DependencyEdgeRead(
            task_id=task_id,
            depends_on_task_id=depends_on_task_id,
            task_title=task_title,
            task_status=task_status,
            dependency_title=dependency_title,
            dependency_status=dependency_status,
        )
        for (
            task_id,
            depends_on_task_id,
            task_title,
            task_status,
            dependency_title,
            dependency_status,
        ) in result.all()
    ]

    logger.debug(f"Listed {len(dependencies)} dependencies for roadmap={roadmap.id}")

    return DependencyList(dependencies=dependencies)


@router.post("", response_model=DependencyRead, status_code=status.HTTP_201_CREATED)
async def create_dependency(
    dep_in: DependencyCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> Dependency:
    """
    Make a task depend on another task of the same roadmap.

    Performs cycle detection before creating the dependency, since a task
    on a cycle could never be unblocked.
    """
    logger.info(f"Creating dependency: {dep_in.task_id} depends on {dep_in.depends_on_task_id}")

    if dep_in.task_id == dep_in.depends_on_task_id:
        logger.warning(f"Self-dependency rejected: {dep_in.task_id}")
        raise SelfDependencyError(str(dep_in.task_id))

    task = await get_owned_task(session, dep_in.task_id, user.uid)
    prerequisite = await get_owned_task(session, dep_in.depends_on_task_id, user.uid)

    if task.roadmap_id != prerequisite.roadmap_id:
        logger.warning(
            f"Cross-roadmap dependency rejected: {task.roadmap_id} -> {prerequisite.roadmap_id}"
        )
        raise CrossRoadmapDependencyError(str(task.roadmap_id), str(prerequisite.roadmap_id))

    existing = await session.get(Dependency, (dep_in.task_id, dep_in.depends_on_task_id))
    if existing:
        logger.warning(f"Duplicate dependency rejected: {dep_in.task_id} -> {dep_in.depends_on_task_id}")
        raise DuplicateDependencyError(str(dep_in.task_id), str(dep_in.depends_on_task_id))

    if await detect_cycle(session, task.roadmap_id, dep_in.task_id, dep_in.depends_on_task_id):
        logger.warning(
            f"Cycle detected: {dep_in.task_id} -> {dep_in.depends_on_task_id} would create a cycle"
        )
        raise CycleDetectedError(str(dep_in.task_id), str(dep_in.depends_on_task_id))

    dependency = Dependency(task_id=dep_in.task_id, depends_on_task_id=dep_in.depends_on_task_id)
    session.add(dependency)
    await session.flush()
    await session.refresh(dependency)

    logger.info(f"Created dependency: '{task.title}' depends on '{prerequisite.title}'")

    return dependency


@router.delete("/{task_id}/{depends_on_task_id}", response_model=MessageResponse)
async def delete_dependency(
    task_id: uuid.UUID,
    depends_on_task_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Delete a dependency; the task may become unblocked."""
    await get_owned_task(session, task_id, user.uid)

    dependency = await session.get(Dependency, (task_id, depends_on_task_id))
    if not dependency:
        raise NotFoundError("Dependency", f"{task_id}/{depends_on_task_id}")

    logger.info(f"Deleting dependency: {task_id} -> {depends_on_task_id}")

    await session.delete(dependency)
    await session.flush()

    return MessageResponse(message="Dependency deleted")
