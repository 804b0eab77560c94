"""Learning roadmaps built from a readiness breakdown.

Each benchmark that is below its required level, or held but not yet
validated, becomes one step:

- ``learn_new``: the user does not hold the skill at all.
- ``validate``: the skill is self-reported and not mentor-validated; the
  step targets the current level and only asks for a validation session.
- ``improve``: the skill is held (resume, GitHub or validated) below the
  required level.

Steps are ordered by priority: +100 for required benchmarks, plus the
benchmark weight, plus 10 per level still needed, plus 5 for self-reported
skills awaiting validation.
"""

import logging
import math
from dataclasses import dataclass, field

from roleready.readiness import LEVEL_POINTS, LEVEL_RANK, ReadinessResult, SkillReadiness

logger = logging.getLogger("roleready.roadmap")

LEVEL_ORDER = ["none", "beginner", "intermediate", "advanced", "expert"]

# Estimated study hours to climb one level, keyed by (from, to).
HOURS_PER_LEVEL = {
    ("none", "beginner"): 20,
    ("beginner", "intermediate"): 40,
    ("intermediate", "advanced"): 80,
    ("advanced", "expert"): 160,
}
DEFAULT_HOURS_PER_LEVEL = 40
VALIDATION_HOURS = 2

REQUIRED_BONUS = 100
LEVEL_GAP_POINTS = 10
UNVALIDATED_BONUS = 5

ACTION_TEMPLATES = {
    "learn_new": "Start learning {skill} fundamentals and build up to {level} level proficiency.",
    "improve": "Deepen your {skill} knowledge through practice and study to reach {level} level.",
    "validate": "Request mentor validation for your {skill} skill to increase your readiness score.",
}

DEFAULT_RESOURCES = [
    "Online courses (Coursera, Udemy, Pluralsight)",
    "Official documentation and tutorials",
    "Practice projects and coding challenges",
    "Community forums and discussion groups",
]
PROGRAMMING_RESOURCES = [
    "LeetCode for algorithm practice",
    "GitHub open source contributions",
    "Build personal projects",
    "Code review with peers",
]
SOFT_SKILL_RESOURCES = [
    "Books and audiobooks",
    "Workshops and webinars",
    "Mentorship sessions",
    "Real-world practice opportunities",
]
VALIDATION_RESOURCES = [
    "Schedule a mentor validation session",
    "Prepare examples of your work",
]

SOFT_SKILL_KEYWORDS = ("communication", "leadership", "teamwork")
PROGRAMMING_KEYWORDS = ("javascript", "python", "java", "programming", "coding")


@dataclass
class RoadmapStep:
    skill_id: str
    skill_name: str
    step_type: str
    importance: str
    current_level: str
    target_level: str
    levels_to_improve: int
    priority: float
    weight: float
    estimated_hours: int
    action_description: str
    suggested_resources: list[str] = field(default_factory=list)


@dataclass
class Roadmap:
    user_id: str
    role_id: str
    title: str
    description: str
    steps: list[RoadmapStep]
    total_estimated_hours: int
    readiness_at_generation: float
    projected_readiness: float


def estimate_hours(current_level: str, target_level: str) -> int:
    """Study hours to go from ``current_level`` to ``target_level`` (0 if already there)."""
    start = LEVEL_ORDER.index(current_level)
    end = LEVEL_ORDER.index(target_level)
    return sum(
        HOURS_PER_LEVEL.get((LEVEL_ORDER[i], LEVEL_ORDER[i + 1]), DEFAULT_HOURS_PER_LEVEL)
        for i in range(start, end)
    )


def step_type_for(item: SkillReadiness) -> str:
    if item.user_level == "none":
        return "learn_new"
    if item.source == "self" and item.validation_status != "validated":
        return "validate"
    return "improve"


def suggested_resources(skill_name: str) -> list[str]:
    lowered = skill_name.lower()
    if any(k in lowered for k in SOFT_SKILL_KEYWORDS):
        return list(SOFT_SKILL_RESOURCES)
    if any(k in lowered for k in PROGRAMMING_KEYWORDS):
        return list(PROGRAMMING_RESOURCES)
    return list(DEFAULT_RESOURCES)


def projected_readiness(
    current_percentage: float, breakdown: list[SkillReadiness], steps: list[RoadmapStep]
) -> int | float:
    """Readiness percentage once every step is done and validated, capped at 100."""
    if not steps:
        return current_percentage
    max_possible = sum(b.max_possible_score for b in breakdown)
    if max_possible == 0:
        return 100

    by_skill = {b.skill_id: b for b in breakdown}
    current_total = sum(b.weighted_score for b in breakdown)
    gain = 0.0
    for step in steps:
        item = by_skill.get(step.skill_id)
        if item is None:
            continue
        gain += LEVEL_POINTS[step.target_level] * step.weight - item.weighted_score

    projected = math.floor((current_total + gain) / max_possible * 100 + 0.5)
    return min(projected, 100)


def generate_roadmap(
    user_id: str,
    role_id: str,
    role_name: str,
    readiness: ReadinessResult,
    max_steps: int | None = None,
) -> Roadmap:
    """Turn a readiness result into a prioritised list of learning steps.

    Pure: reads the breakdown and returns a new Roadmap.

    Args:
        user_id: The user the roadmap is for.
        role_id: The target role's id.
        role_name: The target role's display name, used in the title.
        readiness: Output of ``calculate_readiness`` for this user and role.
        max_steps: Keep only the highest-priority steps. ``None`` or 0 keeps all.

    Returns:
        Roadmap with steps sorted by priority, highest first.
    """
    steps = []
    for item in readiness.breakdown:
        if item.meets_requirement and item.validation_status == "validated":
            continue

        step_type = step_type_for(item)
        target = item.user_level if step_type == "validate" else item.required_level
        levels = max(0, LEVEL_RANK[target] - LEVEL_RANK[item.user_level])
        if levels == 0 and step_type != "validate":
            continue

        unvalidated = item.source == "self" and item.validation_status != "validated"
        priority = (
            (REQUIRED_BONUS if item.importance == "required" else 0)
            + item.weight
            + levels * LEVEL_GAP_POINTS
            + (UNVALIDATED_BONUS if unvalidated else 0)
        )

        if step_type == "validate":
            hours = VALIDATION_HOURS
            resources = list(VALIDATION_RESOURCES)
        else:
            hours = estimate_hours(item.user_level, target)
            resources = suggested_resources(item.skill_name)

        steps.append(
            RoadmapStep(
                skill_id=item.skill_id,
                skill_name=item.skill_name,
                step_type=step_type,
                importance=item.importance,
                current_level=item.user_level,
                target_level=target,
                levels_to_improve=levels,
                priority=priority,
                weight=item.weight,
                estimated_hours=hours,
                action_description=ACTION_TEMPLATES[step_type].format(
                    skill=item.skill_name, level=target
                ),
                suggested_resources=resources,
            )
        )

    steps.sort(key=lambda s: s.priority, reverse=True)
    if max_steps:
        steps = steps[:max_steps]

    projected = projected_readiness(readiness.percentage, readiness.breakdown, steps)
    logger.info(
        "Roadmap for %s: %d steps, readiness %s%% -> %s%%",
        role_name,
        len(steps),
        readiness.percentage,
        projected,
    )
    return Roadmap(
        user_id=user_id,
        role_id=role_id,
        title=f"Roadmap to {role_name}",
        description=(
            f"Your personalized learning path to become a {role_name}. "
            f"Complete these {len(steps)} steps to improve your readiness from "
            f"{readiness.percentage}% to an estimated {projected}%."
        ),
        steps=steps,
        total_estimated_hours=sum(s.estimated_hours for s in steps),
        readiness_at_generation=readiness.percentage,
        projected_readiness=projected,
    )
