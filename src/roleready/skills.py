"""Skill catalog: normalised skill names, lookup and CSV loading."""

import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from roleready.resume_parser import SkillMatch

logger = logging.getLogger("roleready.skills")

SKILL_DOMAINS = (
    "technical",
    "soft-skills",
    "tools",
    "frameworks",
    "languages",
    "databases",
    "cloud",
    "other",
)
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

DEFAULT_SKILLS_CSV = Path(__file__).parent / "data" / "skills.csv"


class DuplicateSkillError(ValueError):
    """Raised when a skill with the same normalised name already exists."""


def normalize_skill_name(name: str) -> str:
    """Catalog key for a skill name.

    Unlike the resume normaliser, dots, dashes and underscores are kept so
    "Node.js" and "Node" remain distinct catalog entries.
    """
    name = name.lower().strip()
    name = re.sub(r"[^a-z0-9\s+#._-]", "", name)
    return re.sub(r"\s+", " ", name)


@dataclass
class Skill:
    id: str
    name: str
    normalized_name: str
    domain: str = "other"
    description: str = ""
    is_active: bool = True

    def as_match(self) -> SkillMatch:
        return SkillMatch(
            id=self.id,
            name=self.name,
            normalized_name=self.normalized_name,
            domain=self.domain,
        )


class SkillCatalog:
    """In-memory skill catalog keyed by normalised name.

    Deactivated skills stay in the catalog so historical references keep
    resolving, but are excluded from matching and name lookups.
    """

    def __init__(self, skills: list[Skill] | None = None):
        self._by_id: dict[str, Skill] = {}
        self._by_normalized: dict[str, Skill] = {}
        for skill in skills or []:
            self._insert(skill)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self):
        return iter(self._by_id.values())

    def _insert(self, skill: Skill) -> None:
        if skill.normalized_name in self._by_normalized:
            raise DuplicateSkillError(
                f"A skill with this name already exists: {skill.name}"
            )
        self._by_id[skill.id] = skill
        self._by_normalized[skill.normalized_name] = skill

    def add(
        self,
        name: str,
        domain: str = "other",
        description: str = "",
        skill_id: str | None = None,
    ) -> Skill:
        """Create a skill after validating it against the catalog rules.

        Raises:
            ValueError: Empty or over-long name, over-long description, or an
                unknown domain.
            DuplicateSkillError: A skill with the same normalised name exists.
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Skill name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValueError(
                f"Skill name cannot exceed {MAX_NAME_LENGTH} characters"
            )
        if len(description or "") > MAX_DESCRIPTION_LENGTH:
            raise ValueError(
                f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            )
        if domain not in SKILL_DOMAINS:
            raise ValueError(f"{domain} is not a valid domain")

        skill = Skill(
            id=skill_id or uuid.uuid4().hex,
            name=name,
            normalized_name=normalize_skill_name(name),
            domain=domain,
            description=description or "",
        )
        self._insert(skill)
        return skill

    def get(self, skill_id: str) -> Skill | None:
        return self._by_id.get(skill_id)

    def get_by_name(self, name: str) -> Skill | None:
        return self._by_normalized.get(normalize_skill_name(name))

    def deactivate(self, skill_id: str) -> None:
        skill = self._by_id.get(skill_id)
        if skill is None:
            raise KeyError(skill_id)
        skill.is_active = False

    def active(self) -> list[Skill]:
        return [s for s in self._by_id.values() if s.is_active]

    def find_by_normalized_names(self, names: list[str]) -> list[Skill]:
        """Resolve free-form names to active catalog skills, without repeats."""
        found: dict[str, Skill] = {}
        for name in names:
            skill = self._by_normalized.get(normalize_skill_name(name))
            if skill is not None and skill.is_active:
                found.setdefault(skill.id, skill)
        return list(found.values())

    def search(self, term: str) -> list[Skill]:
        term = term.strip().lower()
        return [
            s
            for s in self._by_id.values()
            if term in s.name.lower() or term in s.normalized_name
        ]

    def as_matches(self) -> list[SkillMatch]:
        return [s.as_match() for s in self.active()]


def load_skill_catalog(path: str | Path = DEFAULT_SKILLS_CSV) -> SkillCatalog:
    """Load a catalog from a CSV with ``name``, ``domain`` and ``description`` columns.

    Blank names are dropped. Rows whose normalised name repeats an earlier
    row are skipped, so a seed file may list "React" and "react" safely.
    """
    df = pd.read_csv(path, dtype=str).fillna("")
    catalog = SkillCatalog()
    skipped = 0
    for row in df.itertuples(index=False):
        name = row.name.strip()
        if not name:
            continue
        domain = getattr(row, "domain", "") or "other"
        try:
            catalog.add(name, domain=domain, description=getattr(row, "description", ""))
        except DuplicateSkillError:
            skipped += 1
    logger.info("Loaded %d skills from %s (%d duplicates skipped)", len(catalog), path, skipped)
    return catalog
