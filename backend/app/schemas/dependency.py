import uuid
from datetime import datetime
from pydantic import BaseModel


class DependencyCreate(BaseModel):
    """Schema for creating a new dependency."""
    task_id: uuid.UUID             # The blocked task
    depends_on_task_id: uuid.UUID  # The prerequisite


class DependencyRead(BaseModel):
    """Schema for reading a dependency."""
    task_id: uuid.UUID
    depends_on_task_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class DependencyEdgeRead(BaseModel):
    """An edge of the active roadmap with both ends described."""
    task_id: uuid.UUID
    depends_on_task_id: uuid.UUID
    task_title: str
    task_status: str
    dependency_title: str
    dependency_status: str


class DependencyList(BaseModel):
    dependencies: list[DependencyEdgeRead]
