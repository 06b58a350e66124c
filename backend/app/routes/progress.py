"""
Milestone and progress routes for the Pathwise API.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import AuthenticatedUser, get_current_user
from app.database import get_session
from app.schemas import MilestoneList, ProgressEnvelope
from app.services.progress import milestone_progress, refresh_progress
from app.services.roadmaps import get_active_roadmap

router = APIRouter()


@router.get("/milestones", response_model=MilestoneList)
async def list_milestones(
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MilestoneList:
    """Milestones of the active roadmap with per-milestone progress."""
    roadmap = await get_active_roadmap(session, user.uid)
    if roadmap is None:
        return MilestoneList(milestones=[])
    return MilestoneList(milestones=await milestone_progress(session, roadmap.id))


@router.get("/progress", response_model=ProgressEnvelope)
async def get_progress(
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProgressEnvelope:
    """Live progress counts for the active roadmap."""
    roadmap = await get_active_roadmap(session, user.uid)
    if roadmap is None:
        return ProgressEnvelope(progress=None)
    return ProgressEnvelope(progress=await refresh_progress(session, roadmap.id))
