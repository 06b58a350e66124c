from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import Roadmap, UserProfile, ROADMAP_ACTIVE
from app.schemas import GenerationProfile
from app.exceptions import NotFoundError


async def get_active_roadmap(session: AsyncSession, user_id: str) -> Roadmap | None:
    """The user's active roadmap, if any."""
    result = await session.execute(
        select(Roadmap)
        .where(Roadmap.user_id == user_id, Roadmap.status == ROADMAP_ACTIVE)
        .order_by(Roadmap.created_at.desc())
        .limit(1)
    )
    return result.scalars().first()



async def load_generation_profile(session: AsyncSession, user_id: str) -> GenerationProfile:
    """
    Read the profile facts the content generator needs.

    Ends the read transaction before returning so no connection sits idle
    in a transaction while the generator runs.

    Raises:
        NotFoundError: the user has no profile
    """
    profile = await session.get(UserProfile, user_id)
    if profile is None:
        raise NotFoundError("User", user_id)

    generation_profile = GenerationProfile(
        career_goal=profile.career_goal,
        proficiency_level=profile.proficiency_level,
        skills=profile.skills or [],
        experience_years=profile.experience_years,
    )
    await session.commit()
    return generation_profile
