"""
Roadmap routes for the Pathwise API.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.schemas import RoadmapRead, RoadmapEnvelope, RoadmapGenerated
from app.services.generator import ContentGenerator, generate_roadmap_template, get_content_generator
from app.services.materializer import materialize_roadmap
from app.services.progress import refresh_progress
from app.services.roadmaps import get_active_roadmap, load_generation_profile
from app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/generate", response_model=RoadmapGenerated)
async def generate_roadmap(
    user: AuthenticatedUser = Depends(get_current_user),
    generator: ContentGenerator = Depends(get_content_generator),
    session: AsyncSession = Depends(get_session),
) -> RoadmapGenerated:
    """
    Generate a personalized roadmap and make it the user's active one.

    The previous active roadmap, if any, is archived in the same transaction.
    """
    profile = await load_generation_profile(session, user.uid)

    # No transaction is held while the generator runs
    template = await generate_roadmap_template(generator, profile)

    roadmap = await materialize_roadmap(session, user.uid, template)

    return RoadmapGenerated(
        roadmap_id=roadmap.id,
        title=roadmap.title,
        total_tasks=roadmap.total_tasks,
    )


@router.get("", response_model=RoadmapEnvelope)
async def get_roadmap(
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> RoadmapEnvelope:
    """Get the user's active roadmap with its progress cache refreshed."""
    roadmap = await get_active_roadmap(session, user.uid)
    if roadmap is None:
        return RoadmapEnvelope(roadmap=None)

    await refresh_progress(session, roadmap.id)
    return RoadmapEnvelope(roadmap=RoadmapRead.model_validate(roadmap))
