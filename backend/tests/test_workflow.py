"""
Workflow tests: Kanban moves gated on prerequisites.
"""

import uuid

import pytest
from sqlalchemy.dialects import postgresql
from sqlmodel import select

from app.exceptions import BlockedError, NotFoundError, ValidationError
from app.models import Task
from app.services.materializer import materialize_roadmap
from app.services.resolver import incomplete_prerequisites_query, load_task_view
from app.services.workflow import move_task, owned_task_query
from factories import TEST_USER, OTHER_USER, make_template


@pytest.fixture
def two_task_template():
    """Task1 has no prerequisites, Task2 depends on Task1."""
    return make_template(
        ("Phase 1", [
            {"title": "Task1"},
            {"title": "Task2", "prerequisite_task_indices": [0]},
        ]),
    )


async def _tasks_by_title(session, roadmap_id):
    result = await session.execute(
        select(Task).where(Task.roadmap_id == roadmap_id).execution_options(populate_existing=True)
    )
    return {task.title: task for task in result.scalars().all()}


class TestMoveTask:

    @pytest.mark.asyncio
    async def test_prerequisite_gates_forward_moves(self, test_session, two_task_template):
        roadmap = await materialize_roadmap(test_session, TEST_USER, two_task_template)
        await test_session.commit()
        tasks = await _tasks_by_title(test_session, roadmap.id)
        task1_id, task2_id = tasks["Task1"].id, tasks["Task2"].id

        with pytest.raises(BlockedError) as exc_info:
            await move_task(test_session, task2_id, TEST_USER, "in-progress")
        assert exc_info.value.message == "Cannot start task: Prerequisites not completed"
        assert exc_info.value.incomplete_count == 1
        await test_session.rollback()

        moved = await move_task(test_session, task1_id, TEST_USER, "completed")
        await test_session.commit()
        assert moved.status == "completed"
        assert moved.completed_at is not None

        moved = await move_task(test_session, task2_id, TEST_USER, "in-progress")
        await test_session.commit()
        assert moved.status == "in-progress"
        assert moved.completed_at is None

    @pytest.mark.asyncio
    async def test_completing_directly_is_gated_too(self, test_session, two_task_template):
        roadmap = await materialize_roadmap(test_session, TEST_USER, two_task_template)
        await test_session.commit()
        tasks = await _tasks_by_title(test_session, roadmap.id)

        await move_task(test_session, tasks["Task1"].id, TEST_USER, "in-progress")
        with pytest.raises(BlockedError):
            await move_task(test_session, tasks["Task2"].id, TEST_USER, "completed")

    @pytest.mark.asyncio
    async def test_same_status_is_a_noop(self, test_session, two_task_template):
        roadmap = await materialize_roadmap(test_session, TEST_USER, two_task_template)
        await test_session.commit()
        task1 = (await _tasks_by_title(test_session, roadmap.id))["Task1"]

        await move_task(test_session, task1.id, TEST_USER, "completed")
        await test_session.commit()
        before = (task1.completed_at, task1.updated_at)

        again = await move_task(test_session, task1.id, TEST_USER, "completed")
        await test_session.commit()

        assert again.status == "completed"
        assert (again.completed_at, again.updated_at) == before

    @pytest.mark.asyncio
    async def test_noop_on_blocked_task_succeeds(self, test_session, two_task_template):
        roadmap = await materialize_roadmap(test_session, TEST_USER, two_task_template)
        await test_session.commit()
        task2 = (await _tasks_by_title(test_session, roadmap.id))["Task2"]

        moved = await move_task(test_session, task2.id, TEST_USER, "todo")
        assert moved.status == "todo"

    @pytest.mark.asyncio
    async def test_backward_moves_keep_completed_at(self, test_session, two_task_template):
        roadmap = await materialize_roadmap(test_session, TEST_USER, two_task_template)
        await test_session.commit()
        task1 = (await _tasks_by_title(test_session, roadmap.id))["Task1"]

        await move_task(test_session, task1.id, TEST_USER, "completed")
        completed_at = task1.completed_at

        moved = await move_task(test_session, task1.id, TEST_USER, "todo")
        assert moved.status == "todo"
        assert moved.completed_at == completed_at

    @pytest.mark.asyncio
    async def test_regressing_a_prerequisite_blocks_again(self, test_session, two_task_template):
        roadmap = await materialize_roadmap(test_session, TEST_USER, two_task_template)
        await test_session.commit()
        tasks = await _tasks_by_title(test_session, roadmap.id)
        task1, task2 = tasks["Task1"], tasks["Task2"]

        await move_task(test_session, task1.id, TEST_USER, "completed")
        assert (await load_task_view(test_session, task2)).is_blocked is False

        await move_task(test_session, task1.id, TEST_USER, "in-progress")
        assert (await load_task_view(test_session, task2)).is_blocked is True

    @pytest.mark.asyncio
    async def test_other_users_task_is_not_found(self, test_session, two_task_template):
        roadmap = await materialize_roadmap(test_session, TEST_USER, two_task_template)
        await test_session.commit()
        task1 = (await _tasks_by_title(test_session, roadmap.id))["Task1"]

        with pytest.raises(NotFoundError):
            await move_task(test_session, task1.id, OTHER_USER, "completed")

        with pytest.raises(NotFoundError):
            await move_task(test_session, uuid.uuid4(), TEST_USER, "completed")

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, test_session, two_task_template):
        roadmap = await materialize_roadmap(test_session, TEST_USER, two_task_template)
        await test_session.commit()
        task1 = (await _tasks_by_title(test_session, roadmap.id))["Task1"]

        with pytest.raises(ValidationError):
            await move_task(test_session, task1.id, TEST_USER, "done")


class TestLockClauses:
    """The check-then-write runs under row locks on PostgreSQL."""

    def _sql(self, query):
        return str(query.compile(dialect=postgresql.dialect()))

    def test_moved_task_locked_for_update(self):
        sql = self._sql(owned_task_query(uuid.uuid4(), TEST_USER, lock=True))
        assert "FOR UPDATE OF roadmap_tasks" in sql

    def test_prerequisites_locked_for_share(self):
        sql = self._sql(incomplete_prerequisites_query(uuid.uuid4(), lock=True))
        assert "FOR SHARE OF roadmap_tasks" in sql

    def test_unlocked_reads_take_no_locks(self):
        sql = self._sql(incomplete_prerequisites_query(uuid.uuid4()))
        assert "FOR SHARE" not in sql
        assert "FOR UPDATE" not in sql
