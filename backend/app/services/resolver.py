"""
Dependency resolver.

A task is blocked when it is still in todo and at least one of its
prerequisites is not completed. Blocked is derived on every read and never
stored; a task that already left todo is never reported as blocked.
"""

import uuid
from collections import defaultdict
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlmodel import select

from app.models import Task, TaskResource, Dependency, Milestone, TASK_TODO, TASK_COMPLETED
from app.schemas import TaskRead, TaskDependencyRef

def is_blocked(status: str, prerequisite_statuses: Iterable[str]) -> bool:
    """Blocked iff the task is todo and some prerequisite is not completed."""
    if status != TASK_TODO:
        return False
    return any(prereq_status != TASK_COMPLETED for prereq_status in prerequisite_statuses)

def incomplete_prerequisites_query(task_id: uuid.UUID, lock: bool = False):
    """
    Select the ids of a task's prerequisites that are not completed.

    With lock=True the prerequisite rows are read FOR SHARE so no
    concurrent move can change them until the caller's transaction ends.
    """
    query = (
        select(Task.id)
        .join(Dependency, Dependency.depends_on_task_id == Task.id)
        .where(Dependency.task_id == task_id, Task.status != TASK_COMPLETED)
    )
    if lock:
        query = query.with_for_update(read=True, of=Task)
    return query

async def incomplete_prerequisite_count(
    session: AsyncSession,
    task_id: uuid.UUID,
    lock: bool = False,
) -> int:
    """Number of prerequisites of task_id that are not completed."""
    result = await session.execute(incomplete_prerequisites_query(task_id, lock=lock))
    return len(result.all())

async def load_task_views(
    session: AsyncSession,
    roadmap_id: uuid.UUID,
    task_ids: list[uuid.UUID] | None = None,
) -> list[TaskRead]:
    """
    Load tasks of a roadmap decorated for the Kanban board.

    Each task carries its milestone title, ordered resources, prerequisites
    (id, title, status) and the derived is_blocked flag. Tasks come back in
    milestone order, then task order.
    """
    tasks_query = (
        select(Task, Milestone.title)
        .join(Milestone, Milestone.id == Task.milestone_id)
        .where(Task.roadmap_id == roadmap_id)
        .order_by(Milestone.sequence_order, Task.sequence_order, Task.created_at)
    )
    if task_ids is not None:
        tasks_query = tasks_query.where(Task.id.in_(task_ids))

    rows = (await session.execute(tasks_query)).all()
    if not rows:
        return []

    ids = [task.id for task, _ in rows]

    prerequisite = aliased(Task)
    deps_result = await session.execute(
        select(Dependency.task_id, prerequisite.id, prerequisite.title, prerequisite.status)
        .join(prerequisite, prerequisite.id == Dependency.depends_on_task_id)
        .where(Dependency.task_id.in_(ids))
        .order_by(prerequisite.sequence_order)
    )
    dependencies_by_task: dict[uuid.UUID, list[TaskDependencyRef]] = defaultdict(list)
    for task_id, prereq_id, prereq_title, prereq_status in deps_result.all():
        dependencies_by_task[task_id].append(
            TaskDependencyRef(id=prereq_id, title=prereq_title, status=prereq_status)
        )

    resources_result = await session.execute(
        select(TaskResource)
        .where(TaskResource.task_id.in_(ids))
        .order_by(TaskResource.task_id, TaskResource.position)
    )
    resources_by_task: dict[uuid.UUID, list[str]] = defaultdict(list)
    for resource in resources_result.scalars().all():
        resources_by_task[resource.task_id].append(resource.url)

    views = []
    for task, milestone_title in rows:
        dependencies = dependencies_by_task.get(task.id, [])
        view = TaskRead.model_validate(task)
        view.milestone_title = milestone_title
        view.resources = resources_by_task.get(task.id, [])
        view.dependencies = dependencies
        view.is_blocked = is_blocked(task.status, (dep.status for dep in dependencies))
        views.append(view)

    return views

async def load_task_view(session: AsyncSession, task: Task) -> TaskRead:
    """Decorated view of a single task."""
    views = await load_task_views(session, task.roadmap_id, task_ids=[task.id])
    return views[0]

