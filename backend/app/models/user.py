from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

from app.models.timestamps import TZDateTime, utc_now


class UserProfile(SQLModel, table=True):
    """
    Career profile of a user, owned by the profile service.

    The roadmap engine only reads it: the profile feeds the content
    generator and its row is the per-user lock for roadmap generation.
    """

    __tablename__ = "users"

    id: str = Field(primary_key=True)  # Auth provider uid
    name: str | None = Field(default=None)
    career_goal: str | None = Field(default=None)
    proficiency_level: str | None = Field(default=None)
    experience_years: int = Field(default=0, ge=0)
    skills: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utc_now, sa_type=TZDateTime)
