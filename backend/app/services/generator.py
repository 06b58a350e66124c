"""
Roadmap content generation.

The engine only needs a RoadmapTemplate. It can come from an
OpenAI-compatible LLM endpoint or, when that is not configured or fails,
from fixed templates keyed by proficiency level so a user always gets a
roadmap.
"""

import json
import re
from abc import ABC, abstractmethod
from functools import lru_cache

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError as PydanticValidationError

from app.config import get_settings
from app.exceptions import UpstreamGenerationError
from app.schemas import RoadmapTemplate, GenerationProfile
from app.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CAREER_GOAL = "Software Engineer"
DEFAULT_LEVEL = "beginner"


class ContentGenerator(ABC):
    """Produces a roadmap template for a user profile."""

    @abstractmethod
    async def generate(self, profile: GenerationProfile) -> RoadmapTemplate:
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release any resources held by the generator."""


# =============================================================================
# LLM generator
# =============================================================================

SYSTEM_PROMPT = "You are an expert career coach creating personalized learning roadmaps. Reply with JSON only."

USER_PROMPT = """USER PROFILE:
- Career Goal: {career_goal}
- Current Level: {level}
- Current Skills: {skills}
- Experience: {experience_years} years

Create a learning roadmap with 3-4 sequential milestones, each with 3-5 specific,
measurable tasks. Mix learning, project and practice tasks, give realistic hour
estimates and difficulty matching the user's level, and link tasks to the tasks
they build on.

OUTPUT FORMAT (JSON):
{{
  "title": "Roadmap title",
  "description": "Brief overview",
  "estimated_total_hours": 120,
  "milestones": [
    {{
      "title": "Milestone title",
      "description": "What this phase achieves",
      "sequence_order": 1,
      "tasks": [
        {{
          "title": "Task title",
          "description": "Detailed description",
          "category": "learning|project|practice|reading",
          "priority": "low|medium|high|critical",
          "difficulty": "beginner|intermediate|advanced",
          "estimated_hours": 10,
          "deadline_days_from_start": 7,
          "sequence_order": 1,
          "resources": ["https://..."],
          "prerequisite_task_indices": [0]
        }}
      ]
    }}
  ]
}}

prerequisite_task_indices are 0-based positions of earlier tasks, counted across
all milestones in order."""


def build_prompt(profile: GenerationProfile) -> str:
    return USER_PROMPT.format(
        career_goal=profile.career_goal or DEFAULT_CAREER_GOAL,
        level=profile.proficiency_level or DEFAULT_LEVEL,
        skills=", ".join(profile.skills) if profile.skills else "None specified",
        experience_years=profile.experience_years,
    )


def extract_json_text(text: str) -> str:
    """
    Pull the JSON document out of a model reply.

    Prefers a fenced ```json block, then the outermost {...} span, then the
    raw text.
    """
    match = re.search(r"```(?:json)?\s*\n?(.*?)\n?\s*```", text, re.DOTALL | re.IGNORECASE)
    if match:
        return match.group(1).strip()
    match = re.search(r"\{.*\}", text, re.DOTALL)
    if match:
        return match.group(0)
    return text.strip()


def parse_template(text: str) -> RoadmapTemplate:
    """Parse and validate a model reply, raising UpstreamGenerationError if unusable."""
    try:
        data = json.loads(extract_json_text(text))
        template = RoadmapTemplate.model_validate(data)
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise UpstreamGenerationError(f"Content generator returned an unparseable roadmap: {e}") from e

    if template.task_count == 0:
        raise UpstreamGenerationError("Content generator returned a roadmap without tasks")
    return template


class LLMRoadmapGenerator(ContentGenerator):
    """Asks an OpenAI-compatible chat model for a roadmap template."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.7,
        timeout: float = 60.0,
    ):
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.model = model
        self.temperature = temperature

    async def generate(self, profile: GenerationProfile) -> RoadmapTemplate:
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(profile)},
                ],
            )
        except openai.OpenAIError as e:
            raise UpstreamGenerationError(f"Content generator unreachable: {e}") from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise UpstreamGenerationError("Content generator returned an empty reply")
        return parse_template(content)

    async def aclose(self) -> None:
        await self.client.close()


# =============================================================================
# Offline fallback
# =============================================================================

def _task(
    title,
    description,
    category,
    priority,
    difficulty,
    hours,
    deadline_days,
    order,
    resources=(),
    prerequisites=(),
):
    return {
        "title": title,
        "description": description,
        "category": category,
        "priority": priority,
        "difficulty": difficulty,
        "estimated_hours": hours,
        "deadline_days_from_start": deadline_days,
        "sequence_order": order,
        "resources": list(resources),
        "prerequisite_task_indices": list(prerequisites),
    }


FALLBACK_ROADMAPS = {
    "beginner": {
        "title": "{goal} - Beginner to Proficient Path",
        "description": "Build strong fundamentals and create your first projects",
        "estimated_total_hours": 200,
        "milestones": [
            {
                "title": "Programming Fundamentals",
                "description": "Master core programming concepts",
                "sequence_order": 1,
                "tasks": [
                    _task("Complete Programming Basics Course", "Learn variables, loops, conditions, functions",
                          "learning", "high", "beginner", 40, 14, 1,
                          ["https://www.codecademy.com", "https://www.freecodecamp.org"]),
                    _task("Build 3 Simple Projects", "Calculator, To-Do List, Weather App",
                          "project", "high", "beginner", 30, 21, 2, prerequisites=[0]),
                    _task("Learn Git & GitHub", "Version control basics and collaboration",
                          "learning", "medium", "beginner", 10, 21, 3, ["https://www.github.com"]),
                ],
            },
            {
                "title": "Data Structures & Algorithms",
                "description": "Essential problem-solving skills",
                "sequence_order": 2,
                "tasks": [
                    _task("Study Arrays, Strings, Hash Maps", "Master basic data structures",
                          "learning", "high", "intermediate", 25, 35, 1, ["https://leetcode.com"], [0, 1]),
                    _task("Solve 50 Easy LeetCode Problems", "Practice algorithmic thinking",
                          "practice", "high", "intermediate", 40, 50, 2, ["https://leetcode.com"], [3]),
                ],
            },
            {
                "title": "Portfolio Projects",
                "description": "Build impressive projects for your resume",
                "sequence_order": 3,
                "tasks": [
                    _task("Build Full-Stack Web Application", "Create a complete web app with frontend and backend",
                          "project", "critical", "intermediate", 50, 70, 1, prerequisites=[1, 4]),
                    _task("Deploy to Production", "Learn deployment with Vercel/Heroku",
                          "learning", "high", "intermediate", 5, 75, 2, prerequisites=[5]),
                ],
            },
        ],
    },
    "intermediate": {
        "title": "{goal} - Intermediate to Advanced Path",
        "description": "Level up your skills with advanced concepts",
        "estimated_total_hours": 180,
        "milestones": [
            {
                "title": "Advanced Concepts & Architecture",
                "description": "Master system design and architecture patterns",
                "sequence_order": 1,
                "tasks": [
                    _task("Study System Design Fundamentals", "Load balancing, caching, databases, scalability",
                          "learning", "high", "advanced", 30, 20, 1,
                          ["https://github.com/donnemartin/system-design-primer"]),
                    _task("Build Microservices Application", "Create app with multiple services",
                          "project", "high", "advanced", 60, 40, 2, prerequisites=[0]),
                ],
            },
            {
                "title": "Interview Preparation",
                "description": "Prepare for senior-level interviews",
                "sequence_order": 2,
                "tasks": [
                    _task("Solve 100 Medium LeetCode Problems", "Advanced algorithmic problem solving",
                          "practice", "critical", "advanced", 80, 70, 1, ["https://leetcode.com"]),
                    _task("Practice Mock Interviews", "10 mock technical interviews",
                          "practice", "high", "advanced", 10, 75, 2, prerequisites=[2]),
                ],
            },
        ],
    },
    "advanced": {
        "title": "{goal} - Expert Mastery Path",
        "description": "Become a thought leader in your domain",
        "estimated_total_hours": 150,
        "milestones": [
            {
                "title": "Specialization & Expertise",
                "description": "Deep dive into specialized areas",
                "sequence_order": 1,
                "tasks": [
                    _task("Master Advanced Framework/Technology", "Become expert in cutting-edge tech",
                          "learning", "high", "advanced", 50, 30, 1),
                    _task("Contribute to Open Source", "Make significant contributions to major projects",
                          "project", "high", "advanced", 40, 50, 2, ["https://github.com"], [0]),
                ],
            },
            {
                "title": "Leadership & Influence",
                "description": "Build your professional brand",
                "sequence_order": 2,
                "tasks": [
                    _task("Write Technical Blog Series", "Share knowledge through 10 blog posts",
                          "project", "medium", "intermediate", 30, 60, 1),
                    _task("Speak at Tech Conference/Meetup", "Present your expertise publicly",
                          "project", "medium", "advanced", 30, 75, 2, prerequisites=[2]),
                ],
            },
        ],
    },
}


class FallbackRoadmapGenerator(ContentGenerator):
    """Fixed roadmap per proficiency level; unknown levels get the beginner path."""

    async def generate(self, profile: GenerationProfile) -> RoadmapTemplate:
        return fallback_template(profile)


def fallback_template(profile: GenerationProfile) -> RoadmapTemplate:
    level = (profile.proficiency_level or DEFAULT_LEVEL).lower()
    data = FALLBACK_ROADMAPS.get(level, FALLBACK_ROADMAPS[DEFAULT_LEVEL])
    goal = profile.career_goal or DEFAULT_CAREER_GOAL
    template = RoadmapTemplate.model_validate(data)
    template.title = template.title.format(goal=goal)
    return template


async def generate_roadmap_template(
    generator: ContentGenerator,
    profile: GenerationProfile,
) -> RoadmapTemplate:
    """
    Ask the generator for a template, degrading to the fallback on upstream failure.
    """
    try:
        return await generator.generate(profile)
    except UpstreamGenerationError as e:
        logger.warning(f"Roadmap generation failed, using fallback template: {e.message}")
        return fallback_template(profile)


@lru_cache
def get_content_generator() -> ContentGenerator:
    """
    FastAPI dependency: LLM generator when configured, otherwise the fallback.

    Built once per process so the HTTP connection pool of the LLM client is shared.
    """
    settings = get_settings()
    if not settings.llm_api_key:
        return FallbackRoadmapGenerator()
    return LLMRoadmapGenerator(
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        timeout=settings.llm_timeout_seconds,
    )
