"""Readiness scoring of a user's skills against a role's benchmarks.

Each benchmark contributes ``level points x validation multiplier x weight``
out of a maximum of ``100 x weight``. Level points run from 0 (none) to 100
(expert). Mentor-validated skills get full credit whatever their source,
self-reported skills 80% and resume-extracted skills 70%.

A user meets a role's requirements only when every required benchmark is
held at or above its required level. Optional benchmarks add to the score
but never block.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from roleready.roles import Benchmark

LEVEL_POINTS = {
    "none": 0,
    "beginner": 25,
    "intermediate": 50,
    "advanced": 75,
    "expert": 100,
}

LEVEL_RANK = {
    "none": 0,
    "beginner": 1,
    "intermediate": 2,
    "advanced": 3,
    "expert": 4,
}

VALIDATION_MULTIPLIERS = {
    "validated": 1.0,
    "self": 0.8,
    "resume": 0.7,
}


class UserSkillLike(Protocol):
    skill_id: str
    level: str
    source: str
    validation_status: str


@dataclass
class SkillReadiness:
    skill_id: str
    skill_name: str
    importance: str
    weight: float
    required_level: str
    user_level: str
    level_points: int
    validation_multiplier: float
    raw_score: float
    weighted_score: float
    max_possible_score: float
    meets_requirement: bool
    is_missing: bool
    source: str | None
    validation_status: str | None


@dataclass
class ReadinessResult:
    user_id: str
    role_id: str
    role_name: str
    total_score: float
    max_possible_score: float
    percentage: float
    has_all_required: bool
    required_skills_met: int
    required_skills_total: int
    total_benchmarks: int
    skills_matched: int
    skills_missing: int
    breakdown: list[SkillReadiness] = field(default_factory=list)
    calculated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class SkillGap:
    skill_id: str
    skill_name: str
    current_level: str
    required_level: str
    importance: str
    levels_needed: int
    priority: float


def _round1(value: float) -> float:
    """Round half up to one decimal (``round`` would round half to even)."""
    return math.floor(value * 10 + 0.5) / 10


def validation_multiplier(source: str | None, validation_status: str | None) -> float:
    if validation_status == "validated":
        return VALIDATION_MULTIPLIERS["validated"]
    if source in VALIDATION_MULTIPLIERS:
        return VALIDATION_MULTIPLIERS[source]
    return 0.0


def meets_level_requirement(user_level: str, required_level: str) -> bool:
    return LEVEL_RANK[user_level] >= LEVEL_RANK[required_level]


def calculate_readiness(
    user_id: str,
    role_id: str,
    role_name: str,
    benchmarks: list[Benchmark],
    user_skills: list[UserSkillLike],
) -> ReadinessResult:
    """Score a user's skills against a role's benchmarks.

    Pure: no I/O, and the same inputs always give the same scores.

    Args:
        user_id: The user being scored.
        role_id: The target role's id.
        role_name: The target role's display name.
        benchmarks: The role's skill benchmarks.
        user_skills: The user's claimed or validated skills.

    Returns:
        ReadinessResult with totals and a per-benchmark breakdown.
    """
    by_skill = {s.skill_id: s for s in user_skills}

    breakdown: list[SkillReadiness] = []
    total_score = 0.0
    max_possible = 0.0
    required_met = 0
    required_total = 0
    matched = 0
    missing = 0

    for benchmark in benchmarks:
        user_skill = by_skill.get(benchmark.skill_id)
        is_missing = user_skill is None
        user_level = user_skill.level if user_skill and user_skill.level else "none"
        source = user_skill.source if user_skill else None
        status = user_skill.validation_status if user_skill else None

        points = LEVEL_POINTS[user_level]
        multiplier = validation_multiplier(source, status)
        raw = points * multiplier
        weighted = raw * benchmark.weight
        max_for_skill = 100 * benchmark.weight
        meets = meets_level_requirement(user_level, benchmark.required_level)

        if benchmark.importance == "required":
            required_total += 1
            if meets and not is_missing:
                required_met += 1

        if is_missing or user_level == "none":
            missing += 1
        else:
            matched += 1

        total_score += weighted
        max_possible += max_for_skill
        breakdown.append(
            SkillReadiness(
                skill_id=benchmark.skill_id,
                skill_name=benchmark.skill_name,
                importance=benchmark.importance,
                weight=benchmark.weight,
                required_level=benchmark.required_level,
                user_level=user_level,
                level_points=points,
                validation_multiplier=multiplier,
                raw_score=raw,
                weighted_score=weighted,
                max_possible_score=max_for_skill,
                meets_requirement=meets,
                is_missing=is_missing,
                source=source,
                validation_status=status,
            )
        )

    percentage = _round1(total_score / max_possible * 100) if max_possible > 0 else 0.0

    return ReadinessResult(
        user_id=user_id,
        role_id=role_id,
        role_name=role_name,
        total_score=_round1(total_score),
        max_possible_score=max_possible,
        percentage=percentage,
        has_all_required=required_met == required_total,
        required_skills_met=required_met,
        required_skills_total=required_total,
        total_benchmarks=len(benchmarks),
        skills_matched=matched,
        skills_missing=missing,
        breakdown=breakdown,
    )


def get_skill_gaps(result: ReadinessResult) -> list[SkillGap]:
    """Skills below their required level, most urgent first.

    Priority favours required skills (+100), then how many levels are
    missing (10 per level), then the benchmark weight.
    """
    gaps = []
    for item in result.breakdown:
        if item.meets_requirement:
            continue
        levels_needed = LEVEL_RANK[item.required_level] - LEVEL_RANK[item.user_level]
        bonus = 100 if item.importance == "required" else 0
        gaps.append(
            SkillGap(
                skill_id=item.skill_id,
                skill_name=item.skill_name,
                current_level=item.user_level,
                required_level=item.required_level,
                importance=item.importance,
                levels_needed=levels_needed,
                priority=bonus + levels_needed * 10 + item.weight,
            )
        )
    return sorted(gaps, key=lambda g: g.priority, reverse=True)
