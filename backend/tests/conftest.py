"""
Pytest configuration and fixtures for Pathwise tests.

Every test gets its own SQLite database file, so tests never share state
and need no database server.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./pathwise_test.db")

import pytest
import pytest_asyncio
from fastapi import Request
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

from app.main import app
from app.auth import AuthenticatedUser, get_current_user
from app.database import build_engine, get_session
from app.models import UserProfile
from app.services.generator import FallbackRoadmapGenerator, get_content_generator

from factories import TEST_USER, OTHER_USER


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create a test database engine."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'pathwise_test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def users(session_maker):
    """Two user profiles: a beginner and an intermediate learner."""
    async with session_maker() as session:
        session.add_all([
            UserProfile(
                id=TEST_USER,
                name="Test User",
                career_goal="Data Engineer",
                proficiency_level="beginner",
                skills=["python"],
            ),
            UserProfile(
                id=OTHER_USER,
                name="Other User",
                career_goal="Backend Developer",
                proficiency_level="intermediate",
                experience_years=3,
            ),
        ])
        await session.commit()
    return [TEST_USER, OTHER_USER]


@pytest_asyncio.fixture(scope="function")
async def test_session(session_maker, users):
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_maker, users):
    """
    Async test client with the test database and fake auth.

    Requests act as TEST_USER unless they send an X-Test-User header.
    """

    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_current_user(request: Request) -> AuthenticatedUser:
        return AuthenticatedUser(uid=request.headers.get("X-Test-User", TEST_USER))

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_content_generator] = FallbackRoadmapGenerator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
