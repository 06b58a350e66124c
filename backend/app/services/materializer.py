"""
Roadmap materializer.

Writes a generated RoadmapTemplate into the graph store as the user's new
active roadmap. The whole operation runs in the caller's transaction:
- the user's profile row is locked FOR UPDATE, so two generations for the
  same user run one after the other
- every active roadmap of the user is archived
- the new roadmap, its milestones, tasks, resources and dependency edges
  are inserted
If anything raises, rolling back the transaction restores the previous
active roadmap and leaves no trace of the new one.
"""

import uuid
from datetime import datetime, timedelta

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import (
    UserProfile,
    Roadmap,
    Milestone,
    Task,
    TaskResource,
    Dependency,
    ROADMAP_ACTIVE,
    ROADMAP_ARCHIVED,
    TASK_TODO,
    utc_now,
)
from app.schemas import RoadmapTemplate, TemplateTask
from app.exceptions import NotFoundError
from app.logging_config import get_logger

logger = get_logger(__name__)


async def lock_user(session: AsyncSession, user_id: str) -> UserProfile:
    """Lock the user's profile row for the rest of the transaction."""
    result = await session.execute(
        select(UserProfile).where(UserProfile.id == user_id).with_for_update()
    )
    user = result.scalars().first()
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def archive_active_roadmaps(session: AsyncSession, user_id: str) -> int:
    """Flip every active roadmap of the user to archived. Returns how many were flipped."""
    result = await session.execute(
        update(Roadmap)
        .where(Roadmap.user_id == user_id, Roadmap.status == ROADMAP_ACTIVE)
        .values(status=ROADMAP_ARCHIVED, updated_at=utc_now())
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


def resolve_prerequisites(
    indices: list[int],
    task_ids_by_index: dict[int, uuid.UUID],
    own_index: int,
) -> list[uuid.UUID]:
    """
    Map local prerequisite indices to persisted task ids.

    Only tasks generated before this one can be prerequisites; forward,
    out-of-range, negative and self references are dropped. Each
    prerequisite is returned once, in first-mention order.
    """
    resolved = []
    for index in indices:
        if index >= own_index:
            continue
        task_id = task_ids_by_index.get(index)
        if task_id is None or task_id in resolved:
            continue
        resolved.append(task_id)
    return resolved


def _build_task(
    template_task: TemplateTask,
    roadmap_id: uuid.UUID,
    milestone_id: uuid.UUID,
    generation_index: int,
    position: int,
    now: datetime,
) -> Task:
    deadline = None
    if template_task.deadline_days_from_start is not None:
        deadline = now + timedelta(days=template_task.deadline_days_from_start)

    return Task(
        roadmap_id=roadmap_id,
        milestone_id=milestone_id,
        title=template_task.title,
        description=template_task.description,
        category=template_task.category,
        priority=template_task.priority,
        difficulty=template_task.difficulty,
        estimated_hours=template_task.estimated_hours,
        deadline=deadline,
        sequence_order=(
            template_task.sequence_order if template_task.sequence_order is not None else position
        ),
        generation_index=generation_index,
        status=TASK_TODO,
    )


async def materialize_roadmap(
    session: AsyncSession,
    user_id: str,
    template: RoadmapTemplate,
) -> Roadmap:
    """
    Persist template as the user's new active roadmap.

    Returns the new Roadmap with total_tasks set to the number of tasks
    inserted.

    Raises:
        NotFoundError: the user has no profile
    """
    await lock_user(session, user_id)

    archived = await archive_active_roadmaps(session, user_id)
    if archived:
        logger.info(f"Archived {archived} active roadmap(s) for user={user_id}")

    now = utc_now()
    roadmap = Roadmap(
        user_id=user_id,
        title=template.title,
        description=template.description,
        estimated_hours=template.estimated_total_hours,
        status=ROADMAP_ACTIVE,
    )
    session.add(roadmap)
    await session.flush()

    milestones = []
    tasks = []
    resources = []
    dependencies = []
    task_ids_by_index: dict[int, uuid.UUID] = {}
    skipped = 0

    for milestone_position, template_milestone in enumerate(template.milestones, start=1):
        milestone = Milestone(
            roadmap_id=roadmap.id,
            title=template_milestone.title,
            description=template_milestone.description,
            sequence_order=(
                template_milestone.sequence_order
                if template_milestone.sequence_order is not None
                else milestone_position
            ),
        )
        milestones.append(milestone)

        for task_position, template_task in enumerate(template_milestone.tasks, start=1):
            generation_index = len(tasks)
            task = _build_task(template_task, roadmap.id, milestone.id, generation_index, task_position, now)
            tasks.append(task)
            task_ids_by_index[generation_index] = task.id

            resources.extend(
                TaskResource(task_id=task.id, position=position, url=url)
                for position, url in enumerate(template_task.resources)
            )

            prerequisite_ids = resolve_prerequisites(
                template_task.prerequisite_task_indices,
                task_ids_by_index,
                generation_index,
            )
            skipped += len(set(template_task.prerequisite_task_indices)) - len(prerequisite_ids)
            dependencies.extend(
                Dependency(task_id=task.id, depends_on_task_id=prereq_id)
                for prereq_id in prerequisite_ids
            )

    # Flush parents before children; the models declare no relationships
    # for the unit of work to order inserts by.
    session.add_all(milestones)
    await session.flush()
    session.add_all(tasks)
    await session.flush()
    session.add_all(resources)
    session.add_all(dependencies)

    roadmap.total_tasks = len(tasks)
    await session.flush()

    if skipped:
        logger.debug(f"Skipped {skipped} unresolvable prerequisite index(es) for roadmap={roadmap.id}")

    logger.info(
        f"Materialized roadmap {roadmap.id} for user={user_id}: "
        f"{len(milestones)} milestones, {len(tasks)} tasks, {len(dependencies)} dependencies"
    )

    return roadmap
