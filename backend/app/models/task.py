import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from app.models.timestamps import TZDateTime, utc_now

TASK_TODO = "todo"
TASK_IN_PROGRESS = "in-progress"
TASK_COMPLETED = "completed"

TASK_STATUSES = (TASK_TODO, TASK_IN_PROGRESS, TASK_COMPLETED)


class Task(SQLModel, table=True):
    """
    Roadmap task - a node in the prerequisite graph and a Kanban card.

    Key fields:
    - status: todo -> in-progress -> completed (any direction allowed,
      forward moves are gated on prerequisites)
    - completed_at: stamped when the task moves into completed
    - generation_index: position in the generated template (None for
      tasks added by hand)
    """

    __tablename__ = "roadmap_tasks"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    roadmap_id: uuid.UUID = Field(foreign_key="career_roadmaps.id", index=True, ondelete="CASCADE")
    milestone_id: uuid.UUID = Field(foreign_key="roadmap_milestones.id", index=True, ondelete="CASCADE")

    title: str
    description: str | None = Field(default=None)
    category: str = Field(default="learning")
    priority: str = Field(default="medium")
    difficulty: str = Field(default="beginner")
    estimated_hours: float = Field(default=0, ge=0)
    actual_hours: float | None = Field(default=None)
    deadline: datetime | None = Field(default=None, sa_type=TZDateTime)
    notes: str | None = Field(default=None)
    sequence_order: int = Field(default=0)
    generation_index: int | None = Field(default=None)

    status: str = Field(default=TASK_TODO, index=True)
    completed_at: datetime | None = Field(default=None, sa_type=TZDateTime)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=TZDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=TZDateTime)


class TaskResource(SQLModel, table=True):
    """One entry of a task's ordered resource list."""

    __tablename__ = "task_resources"

    task_id: uuid.UUID = Field(foreign_key="roadmap_tasks.id", primary_key=True, ondelete="CASCADE")
    position: int = Field(primary_key=True)
    url: str
