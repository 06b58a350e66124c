"""Test data builders shared by the test modules."""

from app.schemas import RoadmapTemplate

TEST_USER = "user-1"
OTHER_USER = "user-2"


def make_template(*milestones, title="Test Roadmap") -> RoadmapTemplate:
    """
    Build a template from (milestone title, [task dicts]) pairs.

    Task dicts need only a title; prerequisites go in
    "prerequisite_task_indices".
    """
    return RoadmapTemplate.model_validate({
        "title": title,
        "description": "Generated for tests",
        "estimated_total_hours": 42,
        "milestones": [
            {"title": milestone_title, "sequence_order": order, "tasks": tasks}
            for order, (milestone_title, tasks) in enumerate(milestones, start=1)
        ],
    })


def chain_template(title="Chain") -> RoadmapTemplate:
    """Three tasks over two milestones: B needs A, C needs A and B."""
    return make_template(
        ("Basics", [
            {"title": "A", "resources": ["https://a.example/1", "https://a.example/2"]},
            {"title": "B", "prerequisite_task_indices": [0]},
        ]),
        ("Projects", [
            {"title": "C", "prerequisite_task_indices": [0, 1]},
        ]),
        title=title,
    )
