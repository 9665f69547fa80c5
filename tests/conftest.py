from __future__ import annotations

import json
from pathlib import Path

import pytest

from commit_lens.models import Settings


def make_commit(sha: str, timestamp: str | None = None, **fields) -> dict:
    commit = {"sha": sha}
    if timestamp is not None:
        commit["timestamp"] = timestamp
    commit.update(fields)
    return commit


@pytest.fixture
def utc() -> Settings:
    return Settings(use_utc=True)


@pytest.fixture
def scenario_commits() -> list[dict]:
    """Two working commits on Monday 2024-01-01 plus a Saturday merge."""
    return [
        make_commit("a", "2024-01-01T09:00:00Z", tags=["feature"], urgency=1),
        make_commit("b", "2024-01-01T22:00:00Z", tags=["bugfix"], urgency=4),
        make_commit("c", "2024-01-06T10:00:00Z", tags=["merge"]),
    ]


@pytest.fixture
def sample_commits() -> list[dict]:
    return [
        make_commit(
            "c1",
            "2024-03-04T09:15:00Z",
            author={"name": "Alice", "email": "alice@example.com"},
            repo_id="api",
            tags=["feature"],
            urgency=2,
            complexity=3,
            impact="user-facing",
            risk="low",
            debt="paid",
            stats={"additions": 120, "deletions": 30},
            files=["src/app.py", "README.md"],
            subject="feat(api): add search endpoint",
        ),
        make_commit(
            "c2",
            "2024-03-05T19:30:00Z",
            author={"name": "Bob", "email": "bob@example.com"},
            repo_id="web",
            tags=["bugfix"],
            urgency=4,
            complexity=2,
            impact="internal",
            risk="high",
            debt="added",
            stats={"additions": 10, "deletions": 5},
            files=["src/app.py"],
            subject="fix: handle empty query",
        ),
        make_commit(
            "c3",
            "2024-03-09T11:00:00Z",
            author_email="Alice@Example.com",
            author_name="Alice",
            tags=["refactor", "test"],
            urgency=3,
            complexity=5,
            lines_added=600,
            lines_deleted=0,
            files=["src/app.py", "tests/test_app.py"],
            subject="Restructure app module",
        ),
        make_commit(
            "c4",
            "2024-04-01T08:00:00Z",
            author={"name": "Carol", "email": "carol@example.com"},
            repo_id="api",
            tags=["security"],
            type="security",
            urgency=5,
            complexity=4,
            impact="infrastructure",
            stats={"additions": 1, "deletions": 1},
            files=["src/auth.py"],
            subject="security: rotate signing key",
        ),
        make_commit(
            "c5",
            author={"name": "Dave", "email": "dave@example.com"},
            repo_id="api",
            tags=[],
            urgency=True,
            complexity=9,
        ),
    ]


@pytest.fixture
def write_dataset(tmp_path: Path):
    def write(name: str, commits: list[dict], **metadata) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps({"commits": commits, "metadata": metadata}))
        return path

    return write
