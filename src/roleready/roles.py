"""Target roles and their skill benchmarks."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from roleready.skills import SkillCatalog

logger = logging.getLogger("roleready.roles")

# A benchmark always asks for at least beginner.
REQUIRED_LEVELS = ("beginner", "intermediate", "advanced", "expert")

# Seed files grade importance on three steps; readiness only distinguishes
# required from optional.
IMPORTANCE_ALIASES = {
    "required": "required",
    "critical": "required",
    "optional": "optional",
    "important": "optional",
    "nice-to-have": "optional",
}

DEFAULT_BENCHMARKS_CSV = Path(__file__).parent / "data" / "benchmarks.csv"


@dataclass
class Benchmark:
    skill_id: str
    skill_name: str
    importance: str
    weight: float
    required_level: str
    is_active: bool = True


@dataclass
class Role:
    id: str
    name: str
    description: str = ""
    benchmarks: list[Benchmark] = field(default_factory=list)

    def active_benchmarks(self) -> list[Benchmark]:
        return [b for b in self.benchmarks if b.is_active]


def load_roles(
    catalog: SkillCatalog, path: str | Path = DEFAULT_BENCHMARKS_CSV
) -> dict[str, Role]:
    """Load roles from a long-form benchmark CSV, keyed by role name.

    Expected columns: ``role``, ``skill``, ``importance``, ``weight``,
    ``required_level``. Benchmarks naming a skill missing from the catalog
    are skipped with a warning.

    Raises:
        ValueError: Unknown importance or required level.
    """
    df = pd.read_csv(path, dtype={"role": str, "skill": str, "importance": str})
    df["importance"] = df["importance"].str.strip().str.lower()
    df["required_level"] = df["required_level"].str.strip().str.lower()

    unknown_importance = set(df["importance"]) - IMPORTANCE_ALIASES.keys()
    if unknown_importance:
        raise ValueError(f"Unknown benchmark importance: {sorted(unknown_importance)}")
    unknown_levels = set(df["required_level"]) - set(REQUIRED_LEVELS)
    if unknown_levels:
        raise ValueError(f"Unknown required level: {sorted(unknown_levels)}")

    roles: dict[str, Role] = {}
    for role_name, group in df.groupby("role", sort=False):
        role = Role(id=str(role_name), name=str(role_name))
        for row in group.itertuples(index=False):
            skill = catalog.get_by_name(row.skill)
            if skill is None:
                logger.warning("Role %s references unknown skill %s", role_name, row.skill)
                continue
            role.benchmarks.append(
                Benchmark(
                    skill_id=skill.id,
                    skill_name=skill.name,
                    importance=IMPORTANCE_ALIASES[row.importance],
                    weight=float(row.weight),
                    required_level=row.required_level,
                )
            )
        roles[role.name] = role
    logger.info("Loaded %d roles from %s", len(roles), path)
    return roles
