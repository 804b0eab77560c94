"""Tests for GitHub repository fetching and repo-based skill suggestions."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from roleready.github import (
    GitHubAPIError,
    GitHubAuthError,
    GitHubRepo,
    candidate_skill_names,
    fetch_user_repositories,
    suggest_skills_from_repos,
)
from roleready.skills import SkillCatalog

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


def _raw_repo(**overrides):
    repo = {
        "id": 1,
        "name": "api",
        "description": "REST API",
        "html_url": "https://github.com/u/api",
        "language": "Python",
        "topics": ["fastapi", "docker"],
        "stargazers_count": 3,
        "forks_count": 1,
        "pushed_at": "2026-01-10T12:00:00Z",
        "fork": False,
    }
    repo.update(overrides)
    return repo


def _response(status=200, payload=None, reason="OK"):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.reason = reason
    resp.json.return_value = payload or []
    return resp


class TestFetchUserRepositories:
    def test_request_shape(self):
        session = MagicMock()
        session.get.return_value = _response(payload=[])

        fetch_user_repositories("tok", session=session, now=NOW)

        args, kwargs = session.get.call_args
        assert args[0] == "https://api.github.com/user/repos"
        assert kwargs["params"] == {"per_page": 100, "sort": "pushed"}
        assert kwargs["headers"]["Authorization"] == "Bearer tok"
        assert kwargs["timeout"] > 0

    def test_normalises_repo_fields(self):
        session = MagicMock()
        session.get.return_value = _response(payload=[_raw_repo()])

        [repo] = fetch_user_repositories("tok", session=session, now=NOW)

        assert repo.id == "1"
        assert repo.primary_language == "Python"
        assert repo.topics == ["fastapi", "docker"]
        assert repo.stars == 3
        assert repo.is_fork is False

    def test_filters_forks_unnamed_and_stale_repos(self):
        """Forked or abandoned repos say nothing about current skills."""
        payload = [
            _raw_repo(id=1),
            _raw_repo(id=2, fork=True),
            _raw_repo(id=3, name=""),
            _raw_repo(id=4, pushed_at="2023-05-31T00:00:00Z"),
            _raw_repo(id=5, pushed_at=None),
            _raw_repo(id=6, topics=None),
        ]
        session = MagicMock()
        session.get.return_value = _response(payload=payload)

        repos = fetch_user_repositories("tok", session=session, now=NOW)

        assert [r.id for r in repos] == ["1", "6"]
        assert repos[1].topics == []

    def test_expired_token(self):
        session = MagicMock()
        session.get.return_value = _response(status=401, reason="Unauthorized")

        with pytest.raises(GitHubAuthError, match="expired"):
            fetch_user_repositories("tok", session=session)

    def test_other_errors(self):
        session = MagicMock()
        session.get.return_value = _response(status=500, reason="Server Error")

        with pytest.raises(GitHubAPIError, match="Server Error"):
            fetch_user_repositories("tok", session=session)

    def test_defaults_to_requests_module(self):
        with patch("roleready.github.requests.get", return_value=_response()) as get:
            fetch_user_repositories("tok", api_url="https://ghe.example.com/api/v3/")

        assert get.call_args[0][0] == "https://ghe.example.com/api/v3/user/repos"

    def test_network_error_propagates(self):
        session = MagicMock()
        session.get.side_effect = ConnectionError("timeout")

        with pytest.raises(ConnectionError):
            fetch_user_repositories("tok", session=session)


class TestSuggestSkillsFromRepos:
    def test_candidate_names(self):
        repos = [
            GitHubRepo(id="1", name="a", primary_language="TypeScript", topics=["reactjs", "Docker"]),
            GitHubRepo(id="2", name="b", primary_language=None, topics=["docker"]),
        ]
        assert candidate_skill_names(repos) == ["TypeScript", "react", "reactjs", "Docker", "docker"]

    def test_resolves_against_catalog(self):
        catalog = SkillCatalog()
        react = catalog.add("React")
        docker = catalog.add("Docker")
        catalog.add("Rust")
        repos = [GitHubRepo(id="1", name="a", primary_language="Go", topics=["reactjs", "docker"])]

        assert suggest_skills_from_repos(repos, catalog) == [react, docker]

    def test_no_candidates(self):
        repos = [GitHubRepo(id="1", name="a")]
        assert suggest_skills_from_repos(repos, SkillCatalog()) == []
