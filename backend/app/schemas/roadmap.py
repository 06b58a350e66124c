import uuid
from datetime import datetime
from pydantic import BaseModel


class RoadmapRead(BaseModel):
    """Schema for reading a roadmap with its cached progress."""
    id: uuid.UUID
    user_id: str
    title: str
    description: str | None
    estimated_hours: float
    status: str
    total_tasks: int
    completed_tasks: int
    progress_percentage: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RoadmapEnvelope(BaseModel):
    roadmap: RoadmapRead | None


class RoadmapGenerated(BaseModel):
    """Result of a roadmap generation."""
    message: str = "Roadmap generated successfully"
    roadmap_id: uuid.UUID
    title: str
    total_tasks: int


class MilestoneRead(BaseModel):
    """Schema for reading a milestone with live per-milestone progress."""
    id: uuid.UUID
    roadmap_id: uuid.UUID
    title: str
    description: str | None
    sequence_order: int
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    progress_percentage: int = 0

    model_config = {"from_attributes": True}


class MilestoneList(BaseModel):
    milestones: list[MilestoneRead]
