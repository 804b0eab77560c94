"""Environment-based settings."""

import os
from dataclasses import dataclass
from pathlib import Path

from roleready.github import GITHUB_API_URL
from roleready.roles import DEFAULT_BENCHMARKS_CSV
from roleready.skills import DEFAULT_SKILLS_CSV


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str
    upload_dir: Path
    skills_csv: Path
    benchmarks_csv: Path
    github_api_url: str
    log_level: str


def _clean(value: str) -> str:
    # Keys pasted from dashboards often keep their surrounding quotes.
    return value.strip().strip("\"'")


def load_settings(environ=None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        gemini_api_key=_clean(env.get("GEMINI_API_KEY", "")),
        upload_dir=Path(env.get("ROLEREADY_UPLOAD_DIR", "uploads/resumes")),
        skills_csv=Path(env.get("ROLEREADY_SKILLS_CSV") or DEFAULT_SKILLS_CSV),
        benchmarks_csv=Path(env.get("ROLEREADY_BENCHMARKS_CSV") or DEFAULT_BENCHMARKS_CSV),
        github_api_url=env.get("GITHUB_API_URL", GITHUB_API_URL),
        log_level=env.get("ROLEREADY_LOG_LEVEL", "INFO").upper(),
    )
