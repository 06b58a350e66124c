import uuid
from datetime import datetime

from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field

from app.models.timestamps import TZDateTime, utc_now

ROADMAP_ACTIVE = "active"
ROADMAP_ARCHIVED = "archived"


class Roadmap(SQLModel, table=True):
    """
    A user's learning plan.

    Key fields:
    - status: "active" or "archived"; at most one active roadmap per user
    - total_tasks / completed_tasks / progress_percentage: cached progress,
      refreshed on read; live task counts are the source of truth
    """

    __tablename__ = "career_roadmaps"
    __table_args__ = (
        Index(
            "uq_career_roadmaps_one_active_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    title: str
    description: str | None = Field(default=None)
    estimated_hours: float = Field(default=0)
    status: str = Field(default=ROADMAP_ACTIVE, index=True)

    # Cached progress
    total_tasks: int = Field(default=0)
    completed_tasks: int = Field(default=0)
    progress_percentage: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, sa_type=TZDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=TZDateTime)


class Milestone(SQLModel, table=True):
    """An ordered phase of a roadmap. sequence_order is a display hint, not a schedule."""

    __tablename__ = "roadmap_milestones"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    roadmap_id: uuid.UUID = Field(foreign_key="career_roadmaps.id", index=True, ondelete="CASCADE")
    title: str
    description: str | None = Field(default=None)
    sequence_order: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, sa_type=TZDateTime)
