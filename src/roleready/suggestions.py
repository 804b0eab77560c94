"""Resume skill-suggestion review flow.

A parsed resume yields *suggestions*: catalog skills found in the resume
that the user does not yet hold. The user confirms the ones they want, and
those become user skills with ``source="resume"``, awaiting mentor
validation.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from roleready.resume_parser import parse_resume_file
from roleready.skills import SkillCatalog

logger = logging.getLogger("roleready.suggestions")

DEFAULT_CONFIDENCE = 80
CONFIRMABLE_LEVELS = ("beginner", "intermediate", "advanced", "expert")
SKILL_SOURCES = ("self", "resume", "github")
VALIDATION_STATUSES = ("none", "pending", "validated", "rejected")


class EmptyCatalogError(RuntimeError):
    """Raised when there are no active skills to match a resume against."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ParsedSkill:
    name: str
    confidence: int = DEFAULT_CONFIDENCE
    context: str | None = None


@dataclass
class ExperienceEntry:
    company: str | None = None
    title: str | None = None
    duration: str | None = None


@dataclass
class EducationEntry:
    institution: str | None = None
    degree: str | None = None
    year: str | None = None


@dataclass
class ExtractedData:
    raw_text: str = ""
    skills: list[ParsedSkill] = field(default_factory=list)
    experience: list[ExperienceEntry] = field(default_factory=list)
    education: list[EducationEntry] = field(default_factory=list)
    summary: str | None = None


@dataclass
class Resume:
    id: str
    user_id: str
    filename: str
    original_name: str
    mime_type: str
    status: str = "pending"
    parsed_at: datetime | None = None
    parse_error: str | None = None
    extracted_data: ExtractedData | None = None
    skills_synced: bool = False
    skills_synced_at: datetime | None = None
    is_active: bool = True


@dataclass
class UserSkill:
    user_id: str
    skill_id: str
    level: str = "intermediate"
    source: str = "self"
    validation_status: str = "none"


@dataclass
class Suggestion:
    skill_id: str
    skill_name: str
    domain: str | None
    confidence: int = DEFAULT_CONFIDENCE
    context: str | None = None


@dataclass
class ParseOutcome:
    resume_id: str
    status: str
    already_parsed: bool = False
    text_length: int = 0
    total_skills_found: int = 0
    suggestions: list[Suggestion] = field(default_factory=list)
    already_have: int = 0


def _held_skill_ids(user_skills: list[UserSkill], user_id: str) -> set[str]:
    return {s.skill_id for s in user_skills if s.user_id == user_id}


def parse_resume(
    resume: Resume,
    upload_dir: str | Path,
    catalog: SkillCatalog,
    user_skills: list[UserSkill],
) -> ParseOutcome:
    """Parse a stored resume and record the matched skills on it.

    The resume moves to ``processing`` and then to ``completed``, or to
    ``failed`` with ``parse_error`` set before the error is re-raised. A
    resume that already completed with extracted skills is not parsed again.

    Raises:
        EmptyCatalogError: No active skills to match against.
        FileNotFoundError: The stored file is missing from ``upload_dir``.
        ValueError: The stored file cannot be read or holds no text.
        RuntimeError: PyMuPDF could not open the PDF.
    """
    data = resume.extracted_data
    if resume.status == "completed" and data is not None and data.skills:
        return ParseOutcome(
            resume_id=resume.id,
            status=resume.status,
            already_parsed=True,
            total_skills_found=len(data.skills),
        )

    available = catalog.as_matches()
    if not available:
        resume.status = "failed"
        resume.parse_error = "No skills found in catalog. Please add skills first."
        raise EmptyCatalogError(resume.parse_error)

    resume.status = "processing"
    try:
        result = parse_resume_file(
            Path(upload_dir) / resume.filename, resume.mime_type, available
        )
    except Exception as e:
        logger.error("Failed to parse resume %s: %s", resume.id, e)
        resume.status = "failed"
        resume.parse_error = str(e) or "Failed to parse resume"
        raise

    held = _held_skill_ids(user_skills, resume.user_id)
    new_skills = [s for s in result.matched_skills if s.id not in held]

    resume.status = "completed"
    resume.parsed_at = _now()
    resume.parse_error = None
    previous = resume.extracted_data or ExtractedData()
    resume.extracted_data = ExtractedData(
        raw_text=result.raw_text,
        skills=[ParsedSkill(name=s.name) for s in result.matched_skills],
        experience=previous.experience,
        education=previous.education,
        summary=previous.summary,
    )

    logger.info(
        "Parse complete: %d skills found, %d new suggestions",
        len(result.matched_skills),
        len(new_skills),
    )
    return ParseOutcome(
        resume_id=resume.id,
        status=resume.status,
        text_length=result.text_length,
        total_skills_found=len(result.matched_skills),
        suggestions=[
            Suggestion(skill_id=s.id, skill_name=s.name, domain=s.domain)
            for s in new_skills
        ],
        already_have=len(result.matched_skills) - len(new_skills),
    )


def get_suggestions(
    resume: Resume | None, catalog: SkillCatalog, user_skills: list[UserSkill]
) -> list[Suggestion]:
    """Suggestions from a parsed resume, excluding skills the user already holds."""
    if resume is None or not resume.is_active or resume.status != "completed":
        return []
    data = resume.extracted_data
    if data is None or not data.skills:
        return []

    held = _held_skill_ids(user_skills, resume.user_id)
    suggestions = []
    for parsed in data.skills:
        skill = catalog.get_by_name(parsed.name)
        if skill is None or skill.id in held:
            continue
        suggestions.append(
            Suggestion(
                skill_id=skill.id,
                skill_name=skill.name,
                domain=skill.domain,
                confidence=parsed.confidence or DEFAULT_CONFIDENCE,
                context=parsed.context,
            )
        )
    return suggestions


def confirm_suggestions(
    resume: Resume | None,
    catalog: SkillCatalog,
    user_skills: list[UserSkill],
    accepted_skill_ids: list[str],
    level: str = "intermediate",
) -> list[UserSkill]:
    """Add accepted suggestions to the user's skills.

    New user skills are appended to ``user_skills`` with ``source="resume"``
    and ``validation_status="none"``. Skills the user already holds are left
    untouched. The resume is marked as synced the first time this succeeds.

    Returns:
        The user skills that were actually added.

    Raises:
        ValueError: Empty id list, invalid level, or no id matches a skill.
        LookupError: No completed resume to confirm suggestions from.
    """
    if not isinstance(accepted_skill_ids, list) or not accepted_skill_ids:
        raise ValueError("accepted_skill_ids must be a non-empty list")
    if level not in CONFIRMABLE_LEVELS:
        raise ValueError(f"level must be one of: {', '.join(CONFIRMABLE_LEVELS)}")
    if resume is None or not resume.is_active or resume.status != "completed":
        raise LookupError("No parsed resume found")

    skills = [s for s in (catalog.get(i) for i in accepted_skill_ids) if s is not None]
    if not skills:
        raise ValueError("No valid skills found")

    held = _held_skill_ids(user_skills, resume.user_id)
    added = []
    for skill in skills:
        if skill.id in held:
            continue
        user_skill = UserSkill(
            user_id=resume.user_id,
            skill_id=skill.id,
            level=level,
            source="resume",
            validation_status="none",
        )
        user_skills.append(user_skill)
        added.append(user_skill)
        held.add(skill.id)

    if not resume.skills_synced:
        resume.skills_synced = True
        resume.skills_synced_at = _now()

    logger.info("Added %d skills from resume %s", len(added), resume.id)
    return added


def add_github_skills(
    user_id: str,
    accepted_skill_ids: list[str],
    user_skills: list[UserSkill],
    level: str = "intermediate",
) -> list[UserSkill]:
    """Add accepted repository-derived skills with ``source="github"``.

    Held skills are checked at confirm time, so skills added from a resume
    after the repositories were fetched are not added twice.
    """
    if level not in CONFIRMABLE_LEVELS:
        raise ValueError(f"level must be one of: {', '.join(CONFIRMABLE_LEVELS)}")

    held = _held_skill_ids(user_skills, user_id)
    added = []
    for skill_id in accepted_skill_ids:
        if skill_id in held:
            continue
        user_skill = UserSkill(user_id=user_id, skill_id=skill_id, level=level, source="github")
        user_skills.append(user_skill)
        added.append(user_skill)
        held.add(skill_id)

    logger.info("Added %d skills from GitHub", len(added))
    return added
