"""Rule-based ATS compatibility scoring of resume text for a target role.

This measures how well the resume *represents* the role's skills, not the
candidate's capability. Four components are combined:

    overall = relevance x 0.40 + context depth x 0.25
              + structure x 0.20 + impact x 0.15
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from roleready.roles import Benchmark

ACTION_VERBS = [
    "built",
    "developed",
    "implemented",
    "optimized",
    "designed",
    "improved",
    "led",
    "created",
    "reduced",
    "increased",
    "achieved",
    "delivered",
    "launched",
    "managed",
    "established",
    "streamlined",
    "automated",
    "enhanced",
    "scaled",
    "architected",
]

COMPONENT_WEIGHTS = {
    "relevance": 0.40,
    "context_depth": 0.25,
    "structure": 0.20,
    "impact": 0.15,
}

STRUCTURE_POINTS = {
    "skills_section": 20,
    "experience": 25,
    "education": 15,
    "contact": 20,
    "length": 20,
}

MIN_WORDS = 300
MAX_WORDS = 1500
CONTEXT_POINTS_PER_SKILL = 10

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
SKILLS_SECTION_RES = [
    re.compile(r"skills?[:|\s]", re.IGNORECASE),
    re.compile(r"technical\s+skills", re.IGNORECASE),
    re.compile(r"core\s+competencies", re.IGNORECASE),
]
EXPERIENCE_RES = [
    re.compile(r"experience[:|\s]", re.IGNORECASE),
    re.compile(r"work\s+history", re.IGNORECASE),
]
EDUCATION_RE = re.compile(r"education[:|\s]", re.IGNORECASE)
ACTION_VERB_RES = [re.compile(rf"\b{verb}\b") for verb in ACTION_VERBS]


@dataclass
class ATSBreakdown:
    relevance: int
    context_depth: int
    structure: int
    impact: int

    def total(self) -> int:
        return self.relevance + self.context_depth + self.structure + self.impact


@dataclass
class ATSScoreResult:
    overall_score: int
    breakdown: ATSBreakdown
    missing_keywords: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    calculated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def keyword_relevance(
    resume_text: str, benchmarks: list[Benchmark]
) -> tuple[int, list[str]]:
    """Share of benchmark weight whose skill name appears in the text.

    Returns:
        Score 0-100 and the names of skills that were not found, in
        benchmark order.
    """
    if not resume_text or not benchmarks:
        return 0, []

    lower = resume_text.lower()
    matched_weight = 0.0
    total_weight = 0.0
    missing = []
    for benchmark in benchmarks:
        total_weight += benchmark.weight
        if benchmark.skill_name.lower() in lower:
            matched_weight += benchmark.weight
        else:
            missing.append(benchmark.skill_name)

    score = matched_weight / total_weight * 100 if total_weight > 0 else 0
    return _round(score), missing


def context_depth(
    resume_text: str,
    benchmarks: list[Benchmark],
    experience_text: str | None = None,
) -> int:
    """Reward skills that are discussed rather than listed once.

    One mention earns 40% of a skill's points, two or three 70%, four or more
    80%. A mention inside the experience text adds 20%, capped at 100% per
    skill.
    """
    if not resume_text or not benchmarks:
        return 0

    lower = resume_text.lower()
    lower_experience = (experience_text or "").lower()

    total = 0.0
    max_total = 0.0
    for benchmark in benchmarks:
        skill = benchmark.skill_name.lower()
        max_total += CONTEXT_POINTS_PER_SKILL
        occurrences = len(re.findall(re.escape(skill), lower))
        if occurrences == 0:
            continue

        if occurrences == 1:
            points = CONTEXT_POINTS_PER_SKILL * 0.4
        elif occurrences <= 3:
            points = CONTEXT_POINTS_PER_SKILL * 0.7
        else:
            points = CONTEXT_POINTS_PER_SKILL * 0.8

        if lower_experience and skill in lower_experience:
            points += CONTEXT_POINTS_PER_SKILL * 0.2
        total += min(points, CONTEXT_POINTS_PER_SKILL)

    score = total / max_total * 100 if max_total > 0 else 0
    return min(_round(score), 100)


def structure_score(
    resume_text: str, has_experience: bool = False, has_education: bool = False
) -> int:
    """Points for standard sections, an e-mail address and a sensible length."""
    if not resume_text:
        return 0

    score = 0
    if any(p.search(resume_text) for p in SKILLS_SECTION_RES):
        score += STRUCTURE_POINTS["skills_section"]
    if has_experience or any(p.search(resume_text) for p in EXPERIENCE_RES):
        score += STRUCTURE_POINTS["experience"]
    if has_education or EDUCATION_RE.search(resume_text):
        score += STRUCTURE_POINTS["education"]
    if EMAIL_RE.search(resume_text):
        score += STRUCTURE_POINTS["contact"]
    if MIN_WORDS <= len(resume_text.split()) <= MAX_WORDS:
        score += STRUCTURE_POINTS["length"]
    return min(score, 100)


def impact_score(resume_text: str) -> int:
    """Score action-verb density (verbs per 100 words) on a stepped curve.

    0-1% maps to 0-30, 1-2% to 30-60, 2-3% to 60-85 and 3%+ to 85-100.
    """
    words = resume_text.split() if resume_text else []
    if not words:
        return 0

    lower = resume_text.lower()
    verb_count = sum(len(p.findall(lower)) for p in ACTION_VERB_RES)
    density = verb_count / len(words) * 100

    if density >= 3:
        score = 85 + min((density - 3) * 5, 15)
    elif density >= 2:
        score = 60 + (density - 2) * 25
    elif density >= 1:
        score = 30 + (density - 1) * 30
    else:
        score = density * 30
    return min(_round(score), 100)


def generate_suggestions(breakdown: ATSBreakdown, missing_keywords: list[str]) -> list[str]:
    suggestions = []

    if breakdown.relevance < 60:
        if missing_keywords:
            top_missing = ", ".join(missing_keywords[:5])
            suggestions.append(f"Add missing required skills to your resume: {top_missing}")
        suggestions.append(
            "Ensure all key skills from the job description appear in your resume"
        )

    if breakdown.context_depth < 60:
        suggestions.append(
            "Expand project descriptions to provide more context for your skills"
        )
        suggestions.append(
            "Include specific examples of how you used each skill in your experience"
        )

    if breakdown.structure < 60:
        suggestions.append("Add clear section headers: Skills, Experience, Education")
        suggestions.append(
            f"Ensure your resume is between {MIN_WORDS}-{MAX_WORDS} words for optimal length"
        )
        suggestions.append(
            "Include contact information with a professional email address"
        )

    if breakdown.impact < 50:
        suggestions.append(
            "Use strong action verbs: built, developed, implemented, optimized"
        )
        suggestions.append(
            'Quantify achievements with measurable results (e.g., "Reduced load time by 40%")'
        )
        suggestions.append(
            "Focus on impact and outcomes rather than just responsibilities"
        )

    if breakdown.total() < 200:
        suggestions.append(
            "Review the job requirements and align your resume content accordingly"
        )
    return suggestions


def calculate_ats_score(
    resume_text: str,
    benchmarks: list[Benchmark],
    experience_text: str | None = None,
    has_experience: bool = False,
    has_education: bool = False,
) -> ATSScoreResult:
    """Score resume text against a role's active benchmarks.

    Args:
        resume_text: Raw text extracted from the resume.
        benchmarks: The target role's benchmarks; inactive ones are ignored.
        experience_text: Optional text of the experience entries, used for
            the context-depth bonus.
        has_experience: Whether structured experience entries were extracted.
        has_education: Whether structured education entries were extracted.

    Raises:
        ValueError: If the resume text is blank or no active benchmarks remain.
    """
    if not resume_text or not resume_text.strip():
        raise ValueError("Resume has not been parsed yet.")
    active = [b for b in benchmarks if b.is_active]
    if not active:
        raise ValueError("Role has no active benchmarks configured")

    relevance, missing = keyword_relevance(resume_text, active)
    breakdown = ATSBreakdown(
        relevance=relevance,
        context_depth=context_depth(resume_text, active, experience_text),
        structure=structure_score(resume_text, has_experience, has_education),
        impact=impact_score(resume_text),
    )
    overall = _round(
        breakdown.relevance * COMPONENT_WEIGHTS["relevance"]
        + breakdown.context_depth * COMPONENT_WEIGHTS["context_depth"]
        + breakdown.structure * COMPONENT_WEIGHTS["structure"]
        + breakdown.impact * COMPONENT_WEIGHTS["impact"]
    )
    return ATSScoreResult(
        overall_score=overall,
        breakdown=breakdown,
        missing_keywords=missing,
        suggestions=generate_suggestions(breakdown, missing),
    )


def score_resume(resume, benchmarks: list[Benchmark]) -> ATSScoreResult:
    """ATS score for a parsed ``Resume``, using any extracted sections."""
    data = resume.extracted_data
    if resume.status != "completed" or data is None or not data.raw_text:
        raise ValueError(
            "Resume has not been parsed yet. Please wait for processing to complete."
        )
    experience_text = " ".join(
        " ".join(filter(None, (e.title, e.company, e.duration))) for e in data.experience
    )
    return calculate_ats_score(
        data.raw_text,
        benchmarks,
        experience_text=experience_text or None,
        has_experience=bool(data.experience),
        has_education=bool(data.education),
    )
