import uuid
from datetime import datetime, timezone
from typing import Literal
from pydantic import BaseModel, Field, field_validator

from app.schemas.template import TaskCategory, TaskPriority, TaskDifficulty

TaskStatus = Literal["todo", "in-progress", "completed"]


class TaskCreate(BaseModel):
    """
    Schema for adding a task to the active roadmap.

    title and milestone_id are checked by the route so a missing value
    is reported as a 400 with a readable message.
    """
    title: str | None = None
    milestone_id: uuid.UUID | None = None
    description: str | None = None
    category: TaskCategory = "learning"
    priority: TaskPriority = "medium"
    difficulty: TaskDifficulty = "beginner"
    estimated_hours: float = Field(default=0, ge=0)


class TaskUpdate(BaseModel):
    """Schema for editing a task. Omitted or null fields keep their value."""
    title: str | None = None
    description: str | None = None
    priority: TaskPriority | None = None
    deadline: datetime | None = None
    notes: str | None = None
    actual_hours: float | None = Field(default=None, ge=0)

    @field_validator("deadline")
    @classmethod
    def deadline_as_utc(cls, value: datetime | None) -> datetime | None:
        """Timestamps are stored as aware UTC; naive input is taken to be UTC."""
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class TaskMove(BaseModel):
    """Kanban move request."""
    status: TaskStatus


class TaskDependencyRef(BaseModel):
    """A prerequisite as shown on a task card."""
    id: uuid.UUID
    title: str
    status: str


class TaskRead(BaseModel):
    """Schema for reading a task with its prerequisites and derived blocked flag."""
    id: uuid.UUID
    roadmap_id: uuid.UUID
    milestone_id: uuid.UUID
    milestone_title: str | None = None
    title: str
    description: str | None
    category: str
    priority: str
    difficulty: str
    estimated_hours: float
    actual_hours: float | None
    deadline: datetime | None
    notes: str | None
    sequence_order: int
    status: str
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime
    resources: list[str] = Field(default_factory=list)
    dependencies: list[TaskDependencyRef] = Field(default_factory=list)
    is_blocked: bool = False

    model_config = {"from_attributes": True}


class TaskList(BaseModel):
    tasks: list[TaskRead]


class TaskEnvelope(BaseModel):
    message: str
    task: TaskRead


class TaskMoved(BaseModel):
    message: str = "Task status updated"
    new_status: str
    task: TaskRead


class MessageResponse(BaseModel):
    message: str
