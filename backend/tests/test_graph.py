"""
Tests for graph construction and cycle detection.
"""

import networkx as nx
import pytest
from sqlmodel import select

from app.models import Task
from app.services.graph import build_roadmap_graph, detect_cycle, would_create_cycle
from app.services.materializer import materialize_roadmap
from factories import TEST_USER, chain_template


class TestWouldCreateCycle:

    def test_simple_cycle(self):
        """A -> B, adding B -> A closes a loop."""
        graph = nx.DiGraph([("A", "B")])
        assert would_create_cycle(graph, "B", "A") is True

    def test_transitive_cycle(self):
        graph = nx.DiGraph([("A", "B"), ("B", "C")])
        assert would_create_cycle(graph, "C", "A") is True

    def test_parallel_edge_is_fine(self):
        graph = nx.DiGraph([("A", "B"), ("B", "C")])
        assert would_create_cycle(graph, "A", "C") is False

    def test_self_loop(self):
        assert would_create_cycle(nx.DiGraph(), "A", "A") is True

    def test_unknown_nodes(self):
        graph = nx.DiGraph([("A", "B")])
        assert would_create_cycle(graph, "X", "A") is False


class TestRoadmapGraph:

    @pytest.mark.asyncio
    async def test_edges_point_to_dependents(self, test_session):
        roadmap = await materialize_roadmap(test_session, TEST_USER, chain_template())
        await test_session.commit()
        tasks = {
            t.title: t.id
            for t in (await test_session.execute(select(Task).where(Task.roadmap_id == roadmap.id))).scalars()
        }

        graph = await build_roadmap_graph(test_session, roadmap.id)

        assert set(graph.nodes) == set(tasks.values())
        assert graph.has_edge(tasks["A"], tasks["B"])
        assert graph.has_edge(tasks["B"], tasks["C"])
        assert list(nx.topological_sort(graph))[0] == tasks["A"]

        assert await detect_cycle(test_session, roadmap.id, tasks["A"], tasks["C"]) is True
        assert await detect_cycle(test_session, roadmap.id, tasks["C"], tasks["A"]) is False
