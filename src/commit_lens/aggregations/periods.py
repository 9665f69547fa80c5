from __future__ import annotations

from collections.abc import Callable
from datetime import date

from commit_lens.accessors import commit_day, get_additions, get_commit_tags, get_deletions, parse_timestamp
from commit_lens.models import CommitPage, CommitRecord, DailyActivity, PeriodBucket, ViewConfig
from commit_lens.predicates import day_key, week_key

COMMIT_PAGE_SIZE = 100
TIMELINE_DAYS = 60


def _short_date(d: date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def week_label(key: str) -> str:
    return f"Week of {_short_date(date.fromisoformat(key))}"


def day_label(key: str) -> str:
    d = date.fromisoformat(key)
    return f"{d:%a}, {_short_date(d)}"


def _bucket(
    commits: list[CommitRecord],
    key_fn: Callable[[CommitRecord], str | None],
    label_fn: Callable[[str], str],
) -> list[PeriodBucket]:
    buckets: dict[str, PeriodBucket] = {}
    for c in commits:
        key = key_fn(c)
        if key is None:
            continue
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = PeriodBucket(key=key, label=label_fn(key), count=0)
        bucket.commits.append(c)
        bucket.count += 1
        for tag in sorted(get_commit_tags(c)):
            bucket.tags[tag] = bucket.tags.get(tag, 0) + 1
        repo = c.get("repo_id")
        if isinstance(repo, str) and repo and repo not in bucket.repos:
            bucket.repos.append(repo)
    return sorted(buckets.values(), key=lambda b: b.key, reverse=True)


def aggregate_by_week_period(commits: list[CommitRecord]) -> list[PeriodBucket]:
    """Commits grouped by the Monday starting their week, newest week first."""
    return _bucket(commits, week_key, week_label)


def aggregate_by_day_period(commits: list[CommitRecord]) -> list[PeriodBucket]:
    return _bucket(commits, day_key, day_label)


def aggregate_periods(commits: list[CommitRecord], view: ViewConfig) -> list[PeriodBucket]:
    if view.timing == "week":
        return aggregate_by_week_period(commits)
    return aggregate_by_day_period(commits)


def sort_commits_newest_first(commits: list[CommitRecord]) -> list[CommitRecord]:
    """Newest first; commits without a usable timestamp go last in input order."""
    dated = [(parse_timestamp(c), i, c) for i, c in enumerate(commits)]
    with_ts = sorted((d for d in dated if d[0] is not None), key=lambda d: (d[0], -d[1]), reverse=True)
    without_ts = [d for d in dated if d[0] is None]
    return [c for _, _, c in with_ts] + [c for _, _, c in without_ts]


def page_commits(commits: list[CommitRecord], visible: int = COMMIT_PAGE_SIZE) -> CommitPage:
    visible = max(0, min(visible, len(commits)))
    return CommitPage(commits=commits[:visible], visible=visible, total=len(commits))


def next_visible(visible: int) -> int:
    return visible + COMMIT_PAGE_SIZE


def activity_timeline(commits: list[CommitRecord], limit: int = TIMELINE_DAYS) -> list[DailyActivity]:
    """Per-day commit counts and line changes for the most recent ``limit`` active days, oldest first."""
    by_day: dict[str, DailyActivity] = {}
    for c in commits:
        day = commit_day(c)
        if day is None:
            continue
        entry = by_day.setdefault(day, DailyActivity(date=day, count=0, additions=0, deletions=0))
        entry.count += 1
        entry.additions += get_additions(c)
        entry.deletions += get_deletions(c)
    days = sorted(by_day)
    if limit is not None:
        days = days[-limit:] if limit > 0 else []
    return [by_day[d] for d in days]


