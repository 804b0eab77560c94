"""Skill suggestions from a user's GitHub repositories."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

import requests

from roleready.skills import Skill, SkillCatalog

logger = logging.getLogger("roleready.github")

GITHUB_API_URL = "https://api.github.com"
GITHUB_TIMEOUT_SECONDS = 30
REPO_MAX_AGE_YEARS = 2


class GitHubAPIError(RuntimeError):
    """Raised when the GitHub API returns an unexpected error."""


class GitHubAuthError(GitHubAPIError):
    """Raised when the stored GitHub token is no longer accepted."""


@dataclass
class GitHubRepo:
    id: str
    name: str
    description: str | None = None
    html_url: str = ""
    primary_language: str | None = None
    topics: list[str] = field(default_factory=list)
    stars: int = 0
    forks: int = 0
    updated_at: str = ""
    is_fork: bool = False


def _parse_pushed_at(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _years_ago(now: datetime, years: int) -> datetime:
    try:
        return now.replace(year=now.year - years)
    except ValueError:
        # 29 February
        return now.replace(year=now.year - years, day=28)


def fetch_user_repositories(
    token: str,
    session: requests.Session | None = None,
    api_url: str = GITHUB_API_URL,
    now: datetime | None = None,
) -> list[GitHubRepo]:
    """Fetch the authenticated user's recent, non-fork repositories.

    Args:
        token: GitHub OAuth access token.
        session: Optional requests session (for connection reuse and tests).
        api_url: Base URL of the GitHub REST API.
        now: Reference time for the recency filter.

    Returns:
        Named, non-fork repositories pushed within the last two years.

    Raises:
        GitHubAuthError: The token was rejected (HTTP 401).
        GitHubAPIError: Any other non-OK response.
        requests.RequestException: Network errors are propagated.
    """
    http = session or requests
    response = http.get(
        f"{api_url.rstrip('/')}/user/repos",
        params={"per_page": 100, "sort": "pushed"},
        headers={
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github.v3+json",
        },
        timeout=GITHUB_TIMEOUT_SECONDS,
    )
    if response.status_code == 401:
        raise GitHubAuthError("GitHub session expired. Please log in again.")
    if not response.ok:
        raise GitHubAPIError(f"GitHub API error: {response.reason}")

    cutoff = _years_ago(now or datetime.now(timezone.utc), REPO_MAX_AGE_YEARS)
    repos = []
    for raw in response.json():
        pushed = _parse_pushed_at(raw.get("pushed_at"))
        if not raw.get("name") or raw.get("fork") or pushed is None or pushed <= cutoff:
            continue
        repos.append(
            GitHubRepo(
                id=str(raw["id"]),
                name=raw["name"],
                description=raw.get("description"),
                html_url=raw.get("html_url", ""),
                primary_language=raw.get("language"),
                topics=raw.get("topics") or [],
                stars=raw.get("stargazers_count", 0),
                forks=raw.get("forks_count", 0),
                updated_at=raw.get("pushed_at", ""),
                is_fork=bool(raw.get("fork")),
            )
        )
    logger.info("Fetched %d recent repositories", len(repos))
    return repos


def candidate_skill_names(repos: list[GitHubRepo]) -> list[str]:
    """Primary languages and topics, plus topics with a trailing "js" dropped."""
    names: dict[str, None] = {}
    for repo in repos:
        if repo.primary_language:
            names[repo.primary_language] = None
        for topic in repo.topics:
            lowered = topic.lower()
            if lowered.endswith("js"):
                names[lowered[:-2]] = None
            names[topic] = None
    return list(names)


def suggest_skills_from_repos(
    repos: list[GitHubRepo], catalog: SkillCatalog
) -> list[Skill]:
    names = candidate_skill_names(repos)
    if not names:
        return []
    return catalog.find_by_normalized_names(names)
