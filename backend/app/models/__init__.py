from app.models.user import UserProfile
from app.models.roadmap import Roadmap, Milestone, ROADMAP_ACTIVE, ROADMAP_ARCHIVED
from app.models.task import (
    Task,
    TaskResource,
    TASK_TODO,
    TASK_IN_PROGRESS,
    TASK_COMPLETED,
    TASK_STATUSES,
)
from app.models.dependency import Dependency
from app.models.timestamps import utc_now

__all__ = [
    "UserProfile",
    "Roadmap",
    "Milestone",
    "Task",
    "TaskResource",
    "Dependency",
    "ROADMAP_ACTIVE",
    "ROADMAP_ARCHIVED",
    "TASK_TODO",
    "TASK_IN_PROGRESS",
    "TASK_COMPLETED",
    "TASK_STATUSES",
    "utc_now",
]
