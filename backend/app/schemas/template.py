"""
Roadmap template - the shape produced by the content generator.

Prerequisites are expressed as global 0-based indices into the flattened
task list (all milestones, in generation order).
"""

from typing import Literal

from pydantic import BaseModel, Field

TaskCategory = Literal["learning", "project", "practice", "reading"]
TaskPriority = Literal["low", "medium", "high", "critical"]
TaskDifficulty = Literal["beginner", "intermediate", "advanced"]


class TemplateTask(BaseModel):
    title: str
    description: str | None = None
    category: TaskCategory = "learning"
    priority: TaskPriority = "medium"
    difficulty: TaskDifficulty = "beginner"
    estimated_hours: float = Field(default=0, ge=0)
    deadline_days_from_start: int | None = None
    sequence_order: int | None = None
    resources: list[str] = Field(default_factory=list)
    prerequisite_task_indices: list[int] = Field(default_factory=list)


class TemplateMilestone(BaseModel):
    title: str
    description: str | None = None
    sequence_order: int | None = None
    tasks: list[TemplateTask] = Field(default_factory=list)


class RoadmapTemplate(BaseModel):
    title: str
    description: str | None = None
    estimated_total_hours: float = Field(default=0, ge=0)
    milestones: list[TemplateMilestone] = Field(default_factory=list)

    @property
    def task_count(self) -> int:
        return sum(len(milestone.tasks) for milestone in self.milestones)


class GenerationProfile(BaseModel):
    """Profile facts handed to the content generator."""
    career_goal: str | None = None
    proficiency_level: str | None = None
    skills: list[str] = Field(default_factory=list)
    experience_years: int = 0
