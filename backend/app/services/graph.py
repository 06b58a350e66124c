"""
Graph operations using NetworkX.

This module handles:
- Building the prerequisite graph of a roadmap
- Cycle detection for user-added dependency edges

Edges point from prerequisite to dependent task, so a topological order
is an order in which the tasks can be completed.
"""

import uuid
import networkx as nx
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models import Task, Dependency


async def build_roadmap_graph(
    session: AsyncSession,
    roadmap_id: uuid.UUID,
) -> nx.DiGraph:
    """
    Build a NetworkX DiGraph from all tasks and dependencies in a roadmap.

    Returns a graph where:
    - Nodes are task IDs
    - Edges go from prerequisite -> dependent task
    """
    tasks_result = await session.execute(
        select(Task.id, Task.status).where(Task.roadmap_id == roadmap_id)
    )
    tasks = tasks_result.all()

    task_ids = [row.id for row in tasks]
    deps_result = await session.execute(
        select(Dependency).where(Dependency.task_id.in_(task_ids))
    )
    dependencies = deps_result.scalars().all()

    graph = nx.DiGraph()

    for row in tasks:
        graph.add_node(row.id, status=row.status)

    for dep in dependencies:
        graph.add_edge(dep.depends_on_task_id, dep.task_id)

    return graph


async def detect_cycle(
    session: AsyncSession,
    roadmap_id: uuid.UUID,
    task_id: uuid.UUID,
    depends_on_task_id: uuid.UUID,
) -> bool:
    """
    Check if making task_id depend on depends_on_task_id would create a cycle.

    Returns True if a cycle would be created, False otherwise.
    """
    graph = await build_roadmap_graph(session, roadmap_id)
    return would_create_cycle(graph, depends_on_task_id, task_id)


def would_create_cycle(graph: nx.DiGraph, prerequisite_id, dependent_id) -> bool:
    """True if adding prerequisite -> dependent closes a loop in graph."""
    if prerequisite_id == dependent_id:
        return True
    if prerequisite_id not in graph or dependent_id not in graph:
        return False
    # A loop appears exactly when the prerequisite is already reachable from the dependent
    return nx.has_path(graph, dependent_id, prerequisite_id)

