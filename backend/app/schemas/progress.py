from pydantic import BaseModel


class ProgressSummary(BaseModel):
    """Live task counts for a roadmap."""
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    progress_percentage: int
    total_estimated_hours: float
    total_actual_hours: float  # Logged hours of completed tasks only
    roadmap_title: str


class ProgressEnvelope(BaseModel):
    progress: ProgressSummary | None
