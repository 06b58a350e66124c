#!/usr/bin/env python3
"""
Seed script for local development and load testing.

Creates (or updates) a user profile and materializes a roadmap for it,
either one of the fixed fallback roadmaps or a large generated template:
- Milestones of tasks in "waves"
- Each task depends on 1-3 tasks of the previous waves
- Some tasks start completed so the board has blocked and unblocked cards

Usage:
    python -m scripts.seed [--user demo-user] [--level beginner] [--tasks 500]

Options:
    --user ID    Profile id to seed (matches the Firebase uid when testing with a real token)
    --goal TEXT  Career goal on the profile
    --level L    Proficiency level for the fallback roadmap
    --tasks N    Generate an N-task roadmap instead of the fallback one
    --complete F Fraction of tasks marked completed in graph order (default: 0)
"""

import argparse
import asyncio
import random
import time

from sqlalchemy import func
from sqlmodel import select

from app.database import get_session_context, init_db
from app.models import UserProfile, Task, Dependency, TASK_COMPLETED, utc_now
from app.schemas import GenerationProfile, RoadmapTemplate
from app.services.generator import fallback_template
from app.services.materializer import materialize_roadmap
from app.services.progress import refresh_progress
from app.services.resolver import load_task_views


def generate_template(num_tasks: int, tasks_per_milestone: int = 50) -> RoadmapTemplate:
    """
    Build a template with num_tasks tasks split into milestones.

    Prerequisite indices always point to earlier tasks, preferring the
    previous milestone but occasionally reaching back further.
    """
    milestones = []
    waves: list[list[int]] = []
    index = 0
    wave = 0

    while index < num_tasks:
        size = min(tasks_per_milestone, num_tasks - index)
        tasks = []
        wave_indices = []
        for i in range(size):
            prerequisites = []
            if waves:
                earlier = [idx for w in waves[-3:] for idx in w]
                prerequisites = random.sample(earlier, random.randint(1, min(3, len(earlier))))
            tasks.append({
                "title": f"Task M{wave:02d}-{i:03d}",
                "description": f"Milestone {wave}, task {i}",
                "category": random.choice(["learning", "project", "practice", "reading"]),
                "priority": random.choice(["low", "medium", "high", "critical"]),
                "estimated_hours": random.randint(1, 20),
                "sequence_order": i + 1,
                "prerequisite_task_indices": prerequisites,
            })
            wave_indices.append(index)
            index += 1
        waves.append(wave_indices)
        milestones.append({
            "title": f"Milestone {wave + 1}",
            "description": f"{size} generated tasks",
            "sequence_order": wave + 1,
            "tasks": tasks,
        })
        wave += 1

    return RoadmapTemplate.model_validate({
        "title": f"Load test roadmap ({num_tasks} tasks)",
        "description": "Generated by scripts.seed",
        "estimated_total_hours": sum(t["estimated_hours"] for m in milestones for t in m["tasks"]),
        "milestones": milestones,
    })


async def upsert_profile(session, user_id: str, goal: str, level: str) -> UserProfile:
    profile = await session.get(UserProfile, user_id)
    if profile is None:
        profile = UserProfile(id=user_id, name=user_id)
        session.add(profile)
    profile.career_goal = goal
    profile.proficiency_level = level
    await session.flush()
    return profile


async def complete_in_order(session, roadmap_id, fraction: float) -> int:
    """Mark the first fraction of tasks completed, in generation order."""
    if fraction <= 0:
        return 0
    result = await session.execute(
        select(Task).where(Task.roadmap_id == roadmap_id).order_by(Task.generation_index)
    )
    tasks = list(result.scalars().all())
    count = int(len(tasks) * min(fraction, 1.0))
    now = utc_now()
    for task in tasks[:count]:
        task.status = TASK_COMPLETED
        task.completed_at = now
    await session.flush()
    return count


async def print_stats(session, roadmap_id):
    """Print statistics about the seeded roadmap."""
    summary = await refresh_progress(session, roadmap_id)

    dep_count = await session.execute(
        select(func.count())
        .select_from(Dependency)
        .join(Task, Task.id == Dependency.task_id)
        .where(Task.roadmap_id == roadmap_id)
    )
    num_deps = dep_count.scalar_one()

    start = time.time()
    views = await load_task_views(session, roadmap_id)
    list_time = time.time() - start
    blocked = sum(1 for view in views if view.is_blocked)

    print("\n=== Roadmap Statistics ===")
    print(f"Title:         {summary.roadmap_title}")
    print(f"Tasks:         {summary.total_tasks}")
    print(f"Dependencies:  {num_deps}")
    print(f"Completed:     {summary.completed_tasks} ({summary.progress_percentage}%)")
    print(f"Blocked:       {blocked}")
    print(f"Task list load time: {list_time * 1000:.2f}ms")


async def main():
    parser = argparse.ArgumentParser(description="Seed a user profile and roadmap")
    parser.add_argument("--user", type=str, default="demo-user", help="Profile id")
    parser.add_argument("--goal", type=str, default="Software Engineer", help="Career goal")
    parser.add_argument("--level", type=str, default="beginner", help="Proficiency level")
    parser.add_argument("--tasks", type=int, default=0, help="Generate a roadmap with this many tasks")
    parser.add_argument("--complete", type=float, default=0.0, help="Fraction of tasks to complete")

    args = parser.parse_args()

    print("=== Pathwise Seed Script ===")

    await init_db()

    async with get_session_context() as session:
        await upsert_profile(session, args.user, args.goal, args.level)

        if args.tasks > 0:
            print(f"Generating {args.tasks} tasks...")
            template = generate_template(args.tasks)
        else:
            template = fallback_template(
                GenerationProfile(career_goal=args.goal, proficiency_level=args.level)
            )

        start_time = time.time()
        roadmap = await materialize_roadmap(session, args.user, template)
        print(f"Materialize time: {time.time() - start_time:.2f}s")

        completed = await complete_in_order(session, roadmap.id, args.complete)
        if completed:
            print(f"Completed {completed} tasks")

        await print_stats(session, roadmap.id)

    print("\n=== Seeding Complete ===")
    print(f"User ID:    {args.user}")
    print(f"Roadmap ID: {roadmap.id}")


if __name__ == "__main__":
    asyncio.run(main())
