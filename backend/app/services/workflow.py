"""
Kanban workflow for roadmap tasks.

States: todo, in-progress, completed. Any transition between them is
allowed; moving forward (into in-progress or completed) requires every
prerequisite to be completed. The check and the write happen in the same
transaction under row locks:
- the moved task is locked FOR UPDATE
- its prerequisites are locked FOR SHARE, so none of them can be moved
  back out of completed until this transaction commits
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import Task, Roadmap, TASK_IN_PROGRESS, TASK_COMPLETED, TASK_STATUSES, utc_now
from app.services.resolver import incomplete_prerequisite_count
from app.exceptions import NotFoundError, BlockedError, ValidationError
from app.logging_config import get_logger

logger = get_logger(__name__)

FORWARD_STATUSES = (TASK_IN_PROGRESS, TASK_COMPLETED)


def owned_task_query(task_id: uuid.UUID, user_id: str, lock: bool = False):
    """Select a task only if its roadmap belongs to user_id."""
    query = (
        select(Task)
        .join(Roadmap, Roadmap.id == Task.roadmap_id)
        .where(Task.id == task_id, Roadmap.user_id == user_id)
    )
    if lock:
        query = query.with_for_update(of=Task)
    return query


async def get_owned_task(
    session: AsyncSession,
    task_id: uuid.UUID,
    user_id: str,
    lock: bool = False,
) -> Task:
    """Fetch a task owned by user_id, raising NotFoundError otherwise."""
    result = await session.execute(owned_task_query(task_id, user_id, lock=lock))
    task = result.scalars().first()
    if task is None:
        raise NotFoundError("Task", str(task_id))
    return task


async def move_task(
    session: AsyncSession,
    task_id: uuid.UUID,
    user_id: str,
    target_status: str,
) -> Task:
    """
    Move a task to target_status.

    Moving to the current status is a no-op that succeeds without touching
    any field. completed_at is stamped on entry to completed and left as is
    when a task moves back out of it.

    Raises:
        NotFoundError: task missing or owned by another user
        BlockedError: forward move with incomplete prerequisites
    """
    if target_status not in TASK_STATUSES:
        raise ValidationError(f"Unknown task status '{target_status}'")

    task = await get_owned_task(session, task_id, user_id, lock=True)

    if task.status == target_status:
        logger.debug(f"Task {task_id} already '{target_status}', nothing to do")
        return task

    if target_status in FORWARD_STATUSES:
        incomplete = await incomplete_prerequisite_count(session, task_id, lock=True)
        if incomplete > 0:
            logger.info(
                f"Blocked move of task {task_id} to '{target_status}': "
                f"{incomplete} prerequisite(s) not completed"
            )
            raise BlockedError(str(task_id), incomplete)

    previous_status = task.status
    now = utc_now()
    task.status = target_status
    task.updated_at = now
    if target_status == TASK_COMPLETED:
        task.completed_at = now

    await session.flush()

    logger.info(f"Moved task {task_id}: '{previous_status}' -> '{target_status}' (user={user_id})")

    return task
