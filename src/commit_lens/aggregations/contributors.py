from __future__ import annotations

from collections.abc import Iterable

from commit_lens.accessors import (
    commit_day,
    get_author_email,
    get_author_name,
    get_category,
    get_commit_datetime,
    get_commit_tags,
    get_complexity,
    get_urgency_label,
    is_after_hours,
    is_weekend,
)
from commit_lens.aggregations.stats import mean, percent
from commit_lens.models import (
    IMPACT_CATEGORIES,
    URGENCY_LEVELS,
    CommitRecord,
    ContributorGroup,
    DeveloperPattern,
    DrilldownSummary,
    GroupCounts,
    RepoCount,
    Settings,
    ViewConfig,
)
from commit_lens.predicates import group_key

BREAKDOWN_LIMIT = 6
CARD_LIMIT = 8
TOP_TAGS = 5


def _cap(items: list, limit: int | None) -> list:
    return items if limit is None else items[:limit]


def group_commits(commits: list[CommitRecord], view: ViewConfig) -> dict[str, list[CommitRecord]]:
    """Commits keyed by contributor group, in first-seen order."""
    groups: dict[str, list[CommitRecord]] = {}
    for c in commits:
        groups.setdefault(group_key(c, view.contributors), []).append(c)
    return groups


def _group_name(key: str, members: list[CommitRecord], view: ViewConfig) -> str:
    authors = len({get_author_email(c) for c in members})
    if view.contributors == "total":
        return f"All Contributors ({authors})"
    if view.contributors == "repo":
        return f"{key} ({authors} contributors)"
    return get_author_name(members[0])


def tag_counts(commits: Iterable[CommitRecord]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for c in commits:
        for tag in sorted(get_commit_tags(c)):
            counts[tag] = counts.get(tag, 0) + 1
    return counts


def aggregate_contributors(
    commits: list[CommitRecord], view: ViewConfig, limit: int | None = BREAKDOWN_LIMIT
) -> list[ContributorGroup]:
    """Roll commits up per the view's contributor granularity, largest groups first.

    Names for individual contributors are the raw author names; callers pass
    them through a NameSanitizer when privacy mode is on.
    """
    groups = []
    for key, members in group_commits(commits, view).items():
        groups.append(
            ContributorGroup(
                label=key,
                name=_group_name(key, members, view),
                count=len(members),
                breakdown=tag_counts(members),
                complexities=[v for v in (get_complexity(c) for c in members) if v is not None],
                author_count=len({get_author_email(c) for c in members}),
            )
        )
    groups.sort(key=lambda g: g.count, reverse=True)
    return _cap(groups, limit)


def top_tags(group: ContributorGroup, limit: int = TOP_TAGS) -> list[tuple[str, int]]:
    return sorted(group.breakdown.items(), key=lambda kv: kv[1], reverse=True)[:limit]


def average_complexity(group: ContributorGroup) -> float | None:
    return mean(group.complexities)


def _counts_by_group(
    commits: list[CommitRecord],
    view: ViewConfig,
    limit: int | None,
    categories: tuple[str, ...],
    value_of,
) -> list[GroupCounts]:
    result = []
    for key, members in group_commits(commits, view).items():
        counts = dict.fromkeys(categories, 0)
        for c in members:
            value = value_of(c)
            if value in counts:
                counts[value] += 1
        result.append(GroupCounts(label=key, name=_group_name(key, members, view), total=len(members), counts=counts))
    result.sort(key=lambda g: g.total, reverse=True)
    return _cap(result, limit)


def urgency_by_group(
    commits: list[CommitRecord], view: ViewConfig, limit: int | None = BREAKDOWN_LIMIT
) -> list[GroupCounts]:
    return _counts_by_group(commits, view, limit, URGENCY_LEVELS, get_urgency_label)


def impact_by_group(
    commits: list[CommitRecord], view: ViewConfig, limit: int | None = BREAKDOWN_LIMIT
) -> list[GroupCounts]:
    return _counts_by_group(commits, view, limit, IMPACT_CATEGORIES, lambda c: get_category(c, "impact"))


def developer_patterns(
    commits: list[CommitRecord], settings: Settings, limit: int | None = BREAKDOWN_LIMIT
) -> list[DeveloperPattern]:
    """Per-author timing habits over commits with a usable timestamp."""
    by_author: dict[str, list[CommitRecord]] = {}
    for c in commits:
        if get_commit_datetime(c, settings) is not None:
            by_author.setdefault(get_author_email(c), []).append(c)

    patterns = []
    for email, members in by_author.items():
        by_hour = [0] * 24
        by_day = [0] * 7
        after_hours = weekend = 0
        for c in members:
            when = get_commit_datetime(c, settings)
            by_hour[when.hour] += 1
            by_day[when.day_of_week] += 1
            if is_after_hours(when.hour, settings):
                after_hours += 1
            if is_weekend(when.day_of_week):
                weekend += 1
        total = len(members)
        patterns.append(
            DeveloperPattern(
                email=email,
                name=get_author_name(members[0]),
                commit_count=total,
                peak_hour=by_hour.index(max(by_hour)),
                peak_day=by_day.index(max(by_day)),
                work_hours_pct=percent(total - after_hours, total),
                after_hours_pct=percent(after_hours, total),
                weekend_pct=percent(weekend, total),
                by_hour=by_hour,
                by_day=by_day,
            )
        )
    patterns.sort(key=lambda p: p.commit_count, reverse=True)
    return _cap(patterns, limit)


def summarize_for_drilldown(commits: list[CommitRecord], view: ViewConfig) -> DrilldownSummary:
    """Stats that stand in for the commit list at the coarser view levels."""
    repos: list[str] = []
    for c in commits:
        repo = c.get("repo_id")
        if isinstance(repo, str) and repo and repo not in repos:
            repos.append(repo)
    days = sorted(d for d in (commit_day(c) for c in commits) if d)

    by_repo = None
    if view.contributors == "repo":
        by_repo = [RepoCount(name=r, count=sum(1 for c in commits if c.get("repo_id") == r)) for r in repos]
        by_repo.sort(key=lambda rc: rc.count, reverse=True)

    return DrilldownSummary(
        total_commits=len(commits),
        contributor_count=len({get_author_email(c) for c in commits}),
        tag_breakdown=tag_counts(commits),
        repo_count=len(repos),
        earliest=days[0] if days else "N/A",
        latest=days[-1] if days else "N/A",
        by_repo=by_repo,
    )
