from __future__ import annotations

from collections import Counter
from datetime import date

from commit_lens.accessors import (
    commit_day,
    get_additions,
    get_author_email,
    get_commit_tags,
    get_deletions,
    get_files_changed,
    get_repo_id,
)
from commit_lens.models import CommitRecord, Statistics


def percent(part: int, whole: int) -> int:
    """Whole-number percentage rounded half up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def mean(values: list[int] | list[float], digits: int = 1) -> float | None:
    if not values:
        return None
    return round(sum(values) / len(values), digits)


def compute_statistics(commits: list[CommitRecord]) -> Statistics:
    if not commits:
        return Statistics()

    total = len(commits)

    # Date span
    days = sorted(d for d in (commit_day(c) for c in commits) if d)
    earliest = days[0] if days else ""
    latest = days[-1] if days else ""
    span = 0
    if days:
        span = (date.fromisoformat(latest) - date.fromisoformat(earliest)).days
    weeks = max(span / 7.0, 1.0)

    authors = Counter(get_author_email(c) for c in commits)
    top_authors: list[dict[str, int | str]] = [
        {"author": author, "commits": count} for author, count in authors.most_common(20)
    ]

    by_tag: Counter[str] = Counter()
    for c in commits:
        by_tag.update(get_commit_tags(c))
    by_repo = Counter(get_repo_id(c) for c in commits)

    return Statistics(
        total_commits=total,
        date_span_days=span,
        earliest=earliest,
        latest=latest,
        commits_per_week=round(total / weeks, 1),
        unique_authors=len(authors),
        unique_repos=len(by_repo),
        total_additions=sum(get_additions(c) for c in commits),
        total_deletions=sum(get_deletions(c) for c in commits),
        total_files_changed=sum(get_files_changed(c) for c in commits),
        by_tag=dict(by_tag.most_common()),
        by_repo=dict(by_repo.most_common(50)),
        top_authors=top_authors,
    )
