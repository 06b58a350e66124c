import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from app.models.timestamps import TZDateTime, utc_now


class Dependency(SQLModel, table=True):
    """
    Dependency model representing a directed edge in the task graph.

    task_id -> depends_on_task_id means:
    "task_id cannot start until depends_on_task_id is completed"

    A task with several edges needs all of its prerequisites completed.
    Both ends are removed with their task.
    """

    __tablename__ = "task_dependencies"

    # Composite primary key
    task_id: uuid.UUID = Field(
        foreign_key="roadmap_tasks.id",
        primary_key=True,
        ondelete="CASCADE",
    )
    depends_on_task_id: uuid.UUID = Field(
        foreign_key="roadmap_tasks.id",
        primary_key=True,
        ondelete="CASCADE",
    )

    created_at: datetime = Field(default_factory=utc_now, sa_type=TZDateTime)
