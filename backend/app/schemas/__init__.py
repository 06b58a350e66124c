from app.schemas.template import (
    RoadmapTemplate,
    TemplateMilestone,
    TemplateTask,
    GenerationProfile,
)
from app.schemas.roadmap import (
    RoadmapRead,
    RoadmapEnvelope,
    RoadmapGenerated,
    MilestoneRead,
    MilestoneList,
)
from app.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskMove,
    TaskRead,
    TaskDependencyRef,
    TaskList,
    TaskEnvelope,
    TaskMoved,
    MessageResponse,
)
from app.schemas.dependency import (
    DependencyCreate,
    DependencyRead,
    DependencyEdgeRead,
    DependencyList,
)
from app.schemas.progress import ProgressSummary, ProgressEnvelope

__all__ = [
    "RoadmapTemplate",
    "TemplateMilestone",
    "TemplateTask",
    "GenerationProfile",
    "RoadmapRead",
    "RoadmapEnvelope",
    "RoadmapGenerated",
    "MilestoneRead",
    "MilestoneList",
    "TaskCreate",
    "TaskUpdate",
    "TaskMove",
    "TaskRead",
    "TaskDependencyRef",
    "TaskList",
    "TaskEnvelope",
    "TaskMoved",
    "MessageResponse",
    "DependencyCreate",
    "DependencyRead",
    "DependencyEdgeRead",
    "DependencyList",
    "ProgressSummary",
    "ProgressEnvelope",
]
