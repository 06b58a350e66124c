"""
Progress aggregation for roadmaps and milestones.

Live task-status counts are the source of truth. refresh_progress writes the
roadmap-level numbers back onto the roadmap row as a cache for cheap reads;
that cache may lag behind concurrent moves.
"""

import uuid

from sqlalchemy import case, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import Roadmap, Milestone, Task, TASK_COMPLETED, TASK_IN_PROGRESS, utc_now
from app.schemas import ProgressSummary, MilestoneRead
from app.exceptions import NotFoundError
from app.logging_config import get_logger

logger = get_logger(__name__)


def compute_percentage(completed: int, total: int) -> int:
    """
    Whole-number completion percentage, rounding halves up.

    Returns 0 for an empty roadmap.
    """
    if total <= 0:
        return 0
    # Integer form of floor(completed / total * 100 + 0.5)
    return (200 * completed + total) // (2 * total)


def _status_counts():
    """Aggregate columns: total, completed, in progress."""
    return (
        func.count(Task.id),
        func.coalesce(func.sum(case((Task.status == TASK_COMPLETED, 1), else_=0)), 0),
        func.coalesce(func.sum(case((Task.status == TASK_IN_PROGRESS, 1), else_=0)), 0),
    )


async def refresh_progress(
    session: AsyncSession,
    roadmap_id: uuid.UUID,
) -> ProgressSummary:
    """
    Recount task statuses for a roadmap and update its cached progress.

    Raises NotFoundError if the roadmap does not exist.
    """
    roadmap = await session.get(Roadmap, roadmap_id)
    if roadmap is None:
        raise NotFoundError("Roadmap", str(roadmap_id))

    result = await session.execute(
        select(
            *_status_counts(),
            func.coalesce(func.sum(Task.estimated_hours), 0),
            func.coalesce(
                func.sum(case((Task.status == TASK_COMPLETED, Task.actual_hours), else_=None)),
                0,
            ),
        ).where(Task.roadmap_id == roadmap_id)
    )
    total, completed, in_progress, estimated_hours, actual_hours = result.one()
    total, completed, in_progress = int(total), int(completed), int(in_progress)
    percentage = compute_percentage(completed, total)

    if (
        roadmap.total_tasks != total
        or roadmap.completed_tasks != completed
        or roadmap.progress_percentage != percentage
    ):
        roadmap.total_tasks = total
        roadmap.completed_tasks = completed
        roadmap.progress_percentage = percentage
        roadmap.updated_at = utc_now()
        await session.flush()
        logger.debug(f"Refreshed progress cache for roadmap={roadmap_id}: {completed}/{total} ({percentage}%)")

    return ProgressSummary(
        total_tasks=total,
        completed_tasks=completed,
        in_progress_tasks=in_progress,
        todo_tasks=total - completed - in_progress,
        progress_percentage=percentage,
        total_estimated_hours=float(estimated_hours or 0),
        total_actual_hours=float(actual_hours or 0),
        roadmap_title=roadmap.title,
    )


async def milestone_progress(
    session: AsyncSession,
    roadmap_id: uuid.UUID,
) -> list[MilestoneRead]:
    """Milestones of a roadmap in sequence order, each with live task counts."""
    total, completed, in_progress = _status_counts()
    result = await session.execute(
        select(Milestone, total, completed, in_progress)
        .outerjoin(Task, Task.milestone_id == Milestone.id)
        .where(Milestone.roadmap_id == roadmap_id)
        .group_by(Milestone.id)
        .order_by(Milestone.sequence_order, Milestone.created_at)
    )

    milestones = []
    for milestone, total_tasks, completed_tasks, in_progress_tasks in result.all():
        view = MilestoneRead.model_validate(milestone)
        view.total_tasks = int(total_tasks)
        view.completed_tasks = int(completed_tasks)
        view.in_progress_tasks = int(in_progress_tasks)
        view.progress_percentage = compute_percentage(view.completed_tasks, view.total_tasks)
        milestones.append(view)
    return milestones
