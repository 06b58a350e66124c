"""
Dependency resolver tests.
"""

import pytest
from sqlmodel import select

from app.models import Task
from app.services.materializer import materialize_roadmap
from app.services.resolver import (
    is_blocked,
    incomplete_prerequisite_count,
    load_task_view,
    load_task_views,
)
from factories import TEST_USER, chain_template


class TestIsBlocked:

    def test_todo_without_prerequisites(self):
        assert is_blocked("todo", []) is False

    def test_todo_with_incomplete_prerequisite(self):
        assert is_blocked("todo", ["completed", "in-progress"]) is True
        assert is_blocked("todo", ["todo"]) is True

    def test_todo_with_all_completed(self):
        assert is_blocked("todo", ["completed", "completed"]) is False

    @pytest.mark.parametrize("status", ["in-progress", "completed"])
    def test_started_tasks_never_blocked(self, status):
        assert is_blocked(status, ["todo"]) is False


async def _chain(session):
    roadmap = await materialize_roadmap(session, TEST_USER, chain_template())
    await session.commit()
    result = await session.execute(select(Task).where(Task.roadmap_id == roadmap.id))
    return roadmap, {task.title: task for task in result.scalars().all()}


class TestLiveChecks:

    @pytest.mark.asyncio
    async def test_counts_follow_prerequisite_status(self, test_session):
        _, tasks = await _chain(test_session)

        assert await incomplete_prerequisite_count(test_session, tasks["A"].id) == 0
        assert await incomplete_prerequisite_count(test_session, tasks["C"].id) == 2

        tasks["A"].status = "completed"
        await test_session.flush()

        assert await incomplete_prerequisite_count(test_session, tasks["C"].id) == 1
        assert (await load_task_view(test_session, tasks["B"])).is_blocked is False
        assert (await load_task_view(test_session, tasks["C"])).is_blocked is True


class TestTaskViews:

    @pytest.mark.asyncio
    async def test_views_are_decorated_and_ordered(self, test_session):
        roadmap, _ = await _chain(test_session)

        views = await load_task_views(test_session, roadmap.id)

        assert [v.title for v in views] == ["A", "B", "C"]
        a, b, c = views
        assert a.milestone_title == "Basics"
        assert c.milestone_title == "Projects"
        assert a.resources == ["https://a.example/1", "https://a.example/2"]
        assert b.resources == []
        assert [d.title for d in c.dependencies] == ["A", "B"]
        assert all(d.status == "todo" for d in c.dependencies)
        assert (a.is_blocked, b.is_blocked, c.is_blocked) == (False, True, True)

    @pytest.mark.asyncio
    async def test_subset_of_tasks(self, test_session):
        roadmap, tasks = await _chain(test_session)

        views = await load_task_views(test_session, roadmap.id, task_ids=[tasks["C"].id])

        assert len(views) == 1
        assert len(views[0].dependencies) == 2

    @pytest.mark.asyncio
    async def test_started_task_is_not_blocked(self, test_session):
        roadmap, tasks = await _chain(test_session)
        tasks["B"].status = "in-progress"
        await test_session.flush()

        views = {v.title: v for v in await load_task_views(test_session, roadmap.id)}
        assert views["B"].is_blocked is False
        assert views["C"].is_blocked is True
