"""
Task routes for the Pathwise API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.models import Task, TaskResource, Milestone, Dependency, TASK_TODO, utc_now
from app.schemas import (
    TaskCreate,
    TaskUpdate,
    TaskMove,
    TaskList,
    TaskEnvelope,
    TaskMoved,
    MessageResponse,
)
from app.services.resolver import load_task_views, load_task_view
from app.services.roadmaps import get_active_roadmap
from app.services.workflow import get_owned_task, move_task as apply_move
from app.exceptions import NotFoundError, ValidationError
from app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=TaskList)
async def list_tasks(
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> TaskList:
    """
    List tasks of the active roadmap.

    Each task carries its prerequisites and a derived is_blocked flag so
    the board can disable dragging blocked cards. The flag is advisory;
    moves are re-checked server side.
    """
    roadmap = await get_active_roadmap(session, user.uid)
    if roadmap is None:
        return TaskList(tasks=[])

    tasks = await load_task_views(session, roadmap.id)

    logger.debug(f"Listed {len(tasks)} tasks for roadmap={roadmap.id}")

    return TaskList(tasks=tasks)


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> TaskEnvelope:
    """
    Add a task to a milestone of the active roadmap.

    The task goes to the end of the roadmap's ordering and starts in todo.
    """
    if not task_in.title or not task_in.title.strip():
        raise ValidationError(
            "Title is required",
            details=[{"loc": ["body", "title"], "msg": "Title is required", "type": "missing"}],
        )
    if task_in.milestone_id is None:
        raise ValidationError(
            "Milestone is required",
            details=[{"loc": ["body", "milestone_id"], "msg": "Milestone is required", "type": "missing"}],
        )

    roadmap = await get_active_roadmap(session, user.uid)
    if roadmap is None:
        raise NotFoundError("Active roadmap", user.uid)

    milestone = await session.get(Milestone, task_in.milestone_id)
    if milestone is None or milestone.roadmap_id != roadmap.id:
        raise NotFoundError("Milestone", str(task_in.milestone_id))

    seq_result = await session.execute(
        select(func.coalesce(func.max(Task.sequence_order), 0)).where(Task.roadmap_id == roadmap.id)
    )
    next_seq = seq_result.scalar_one() + 1

    task = Task(
        roadmap_id=roadmap.id,
        milestone_id=milestone.id,
        title=task_in.title.strip(),
        description=task_in.description,
        category=task_in.category,
        priority=task_in.priority,
        difficulty=task_in.difficulty,
        estimated_hours=task_in.estimated_hours,
        sequence_order=next_seq,
        status=TASK_TODO,
    )
    session.add(task)
    await session.flush()

    logger.info(f"Created task: id={task.id} title='{task.title}' roadmap={roadmap.id}")

    return TaskEnvelope(message="Task created", task=await load_task_view(session, task))


@router.put("/{task_id}", response_model=TaskEnvelope)
async def update_task(
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> TaskEnvelope:
    """
    Update a task's editable fields.

    Fields left out of the body, or sent as null, keep their value.
    """
    task = await get_owned_task(session, task_id, user.uid, lock=True)

    update_data = {
        field: value
        for field, value in task_in.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if "title" in update_data:
        if not update_data["title"].strip():
            raise ValidationError(
                "Title is required",
                details=[{"loc": ["body", "title"], "msg": "Title must not be blank", "type": "missing"}],
            )
        update_data["title"] = update_data["title"].strip()

    logger.info(f"Updating task {task_id}: {update_data}")

    for field, value in update_data.items():
        setattr(task, field, value)

    task.updated_at = utc_now()
    await session.flush()

    return TaskEnvelope(message="Task updated", task=await load_task_view(session, task))


@router.put("/{task_id}/move", response_model=TaskMoved)
async def move_task(
    task_id: uuid.UUID,
    move_in: TaskMove,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> TaskMoved:
    """
    Move a task to another Kanban column.

    Returns 400 when moving forward while prerequisites are incomplete.
    """
    task = await apply_move(session, task_id, user.uid, move_in.status)
    return TaskMoved(new_status=task.status, task=await load_task_view(session, task))


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """
    Delete a task.

    Every dependency edge touching the task goes with it, so tasks that
    depended on it lose that prerequisite.
    """
    task = await get_owned_task(session, task_id, user.uid, lock=True)

    logger.info(f"Deleting task {task_id}: '{task.title}'")

    edges_result = await session.execute(
        delete(Dependency).where(
            or_(Dependency.task_id == task_id, Dependency.depends_on_task_id == task_id)
        )
    )
    await session.execute(delete(TaskResource).where(TaskResource.task_id == task_id))

    logger.debug(f"Removed {edges_result.rowcount} dependency edge(s) of task {task_id}")

    await session.delete(task)
    await session.flush()

    return MessageResponse(message="Task deleted")
