from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from commit_lens.accessors import (
    NameSanitizer,
    get_author_email,
    get_author_name,
    get_commit_subject,
    get_commit_tags,
    get_repo_id,
    sanitize_message,
)
from commit_lens.aggregations.breakdowns import (
    debt_breakdown,
    health_metrics,
    impact_breakdown,
    risk_breakdown,
    tag_breakdown,
    urgency_breakdown,
    work_summary,
)
from commit_lens.aggregations.contributors import (
    BREAKDOWN_LIMIT,
    CARD_LIMIT,
    aggregate_contributors,
    average_complexity,
    developer_patterns,
    impact_by_group,
    summarize_for_drilldown,
    top_tags,
    urgency_by_group,
)
from commit_lens.aggregations.discover import (
    DISCOVER_METRICS,
    comparisons,
    compute_metric,
    file_insights,
    pick_metrics,
)
from commit_lens.aggregations.heatmap import build_heatmap, hourly_distribution, weekday_distribution
from commit_lens.aggregations.periods import (
    COMMIT_PAGE_SIZE,
    activity_timeline,
    aggregate_periods,
    page_commits,
    sort_commits_newest_first,
)
from commit_lens.aggregations.stats import compute_statistics
from commit_lens.aggregations.trends import (
    complexity_trend,
    debt_trend,
    impact_trend,
    urgency_trend,
    work_type_trend,
)
from commit_lens.holidays import HolidayPredicate
from commit_lens.models import (
    CategoryTrend,
    Comparison,
    CommitRecord,
    ContributorGroup,
    DailyActivity,
    DailyHeatmap,
    DeveloperPattern,
    DrilldownSummary,
    FileInsight,
    GroupCounts,
    HealthMetrics,
    HourlyHeatmap,
    Settings,
    Statistics,
    TagShare,
    TrendSeries,
    ViewConfig,
    WeeklyHeatmap,
    WorkSummary,
)


@dataclass
class CommitRow:
    sha: str
    timestamp: str
    author: str
    subject: str
    repo: str
    tags: list[str] = field(default_factory=list)


@dataclass
class PeriodRow:
    key: str
    label: str
    count: int
    tags: dict[str, int] = field(default_factory=dict)
    repos: list[str] = field(default_factory=list)


@dataclass
class MetricCard:
    id: str
    label: str
    value: str
    sub: str


@dataclass
class ContributorCard:
    label: str
    name: str
    count: int
    top_tags: list[tuple[str, int]] = field(default_factory=list)
    average_complexity: float | None = None


@dataclass
class Trends:
    urgency: TrendSeries | None = None
    complexity: TrendSeries | None = None
    impact: CategoryTrend | None = None
    debt: CategoryTrend | None = None
    work_type: CategoryTrend | None = None


@dataclass
class Report:
    generated_at: str
    view_level: str
    settings: Settings
    metadata: dict[str, Any]
    filters: dict[str, Any]
    statistics: Statistics
    periods: list[PeriodRow]
    timeline: list[DailyActivity]
    heatmap: HourlyHeatmap | WeeklyHeatmap | DailyHeatmap
    hourly: list[int]
    weekday: list[int]
    contributors: list[ContributorGroup]
    contributor_cards: list[ContributorCard]
    urgency_by_group: list[GroupCounts]
    impact_by_group: list[GroupCounts]
    developer_patterns: list[DeveloperPattern]
    tags: list[TagShare]
    urgency: dict[str, int]
    impact: dict[str, int]
    risk: dict[str, int]
    debt: dict[str, int]
    health: HealthMetrics
    work: WorkSummary
    trends: Trends
    discover: list[MetricCard]
    comparisons: list[Comparison]
    files: list[FileInsight]
    commits: list[CommitRow] | None = None
    total_listed: int = 0
    summary: DrilldownSummary | None = None


def commit_row(
    commit: CommitRecord, view: ViewConfig, settings: Settings, sanitizer: NameSanitizer | None = None
) -> CommitRow:
    """Display row for one commit, honouring the view's visibility flags and privacy mode."""
    email = get_author_email(commit)
    name = get_author_name(commit)
    if sanitizer is not None:
        name = sanitizer.sanitize(name, email)
    subject = get_commit_subject(commit)
    if not view.show_commit_messages or settings.sanitize:
        subject = sanitize_message(subject, True)
    sha = commit.get("sha")
    timestamp = commit.get("timestamp")
    return CommitRow(
        sha=sha if isinstance(sha, str) else "",
        timestamp=timestamp if isinstance(timestamp, str) else "",
        author=name if view.show_author_names else "",
        subject=subject,
        repo=get_repo_id(commit),
        tags=sorted(get_commit_tags(commit)),
    )


def _named(items: list, sanitizer: NameSanitizer | None, email_of) -> list:
    if sanitizer is None or not sanitizer.enabled:
        return items
    return [replace(item, name=sanitizer.sanitize(item.name, email_of(item))) for item in items]


def contributor_cards(
    commits: list[CommitRecord], view: ViewConfig, sanitizer: NameSanitizer | None = None
) -> list[ContributorCard]:
    """Largest contributor groups with their five most used tags."""
    groups = aggregate_contributors(commits, view, CARD_LIMIT)
    if view.contributors == "individual":
        groups = _named(groups, sanitizer, lambda g: g.label)
    return [
        ContributorCard(
            label=g.label,
            name=g.name,
            count=g.count,
            top_tags=top_tags(g),
            average_complexity=average_complexity(g),
        )
        for g in groups
    ]


def discover_cards(
    commits: list[CommitRecord],
    settings: Settings,
    count: int = 4,
    pinned: Mapping[int, str] | None = None,
    rng: random.Random | None = None,
) -> list[MetricCard]:
    cards = []
    for metric_id in pick_metrics(count, pinned, rng):
        if metric_id is None:
            continue
        result = compute_metric(metric_id, commits, settings)
        cards.append(MetricCard(id=metric_id, label=DISCOVER_METRICS[metric_id].label, value=result.value, sub=result.sub))
    return cards


def build_report(
    commits: list[CommitRecord],
    view: ViewConfig,
    settings: Settings,
    *,
    metadata: dict[str, Any] | None = None,
    filters: dict[str, Any] | None = None,
    sanitizer: NameSanitizer | None = None,
    is_holiday: HolidayPredicate | None = None,
    pinned_metrics: Mapping[int, str] | None = None,
    rng: random.Random | None = None,
    visible: int = COMMIT_PAGE_SIZE,
    now: datetime | None = None,
) -> Report:
    """Every view of the filtered commits, ready to serialize."""
    contributors = aggregate_contributors(commits, view, BREAKDOWN_LIMIT)
    if view.contributors == "individual":
        contributors = _named(contributors, sanitizer, lambda g: g.label)
    urgency_groups = urgency_by_group(commits, view)
    impact_groups = impact_by_group(commits, view)
    if view.contributors == "individual":
        urgency_groups = _named(urgency_groups, sanitizer, lambda g: g.label)
        impact_groups = _named(impact_groups, sanitizer, lambda g: g.label)

    report = Report(
        generated_at=(now or datetime.now(timezone.utc)).isoformat(),
        view_level=view.name,
        settings=settings,
        metadata=dict(metadata or {}),
        filters=dict(filters or {}),
        statistics=compute_statistics(commits),
        periods=[
            PeriodRow(key=b.key, label=b.label, count=b.count, tags=b.tags, repos=b.repos)
            for b in aggregate_periods(commits, view)
        ],
        timeline=activity_timeline(commits),
        heatmap=build_heatmap(commits, view, settings),
        hourly=hourly_distribution(commits, settings),
        weekday=weekday_distribution(commits, settings),
        contributors=contributors,
        contributor_cards=contributor_cards(commits, view, sanitizer),
        urgency_by_group=urgency_groups,
        impact_by_group=impact_groups,
        developer_patterns=_named(developer_patterns(commits, settings), sanitizer, lambda p: p.email),
        tags=tag_breakdown(commits),
        urgency=urgency_breakdown(commits),
        impact=impact_breakdown(commits),
        risk=risk_breakdown(commits),
        debt=debt_breakdown(commits),
        health=health_metrics(commits, settings),
        work=work_summary(commits, settings, is_holiday),
        trends=Trends(
            urgency=urgency_trend(commits),
            complexity=complexity_trend(commits),
            impact=impact_trend(commits),
            debt=debt_trend(commits),
            work_type=work_type_trend(commits),
        ),
        discover=discover_cards(commits, settings, pinned=pinned_metrics, rng=rng),
        comparisons=comparisons(commits, settings),
        files=file_insights(commits),
    )

    if view.drilldown == "commits":
        page = page_commits(sort_commits_newest_first(commits), visible)
        report.commits = [commit_row(c, view, settings, sanitizer) for c in page.commits]
        report.total_listed = page.total
    else:
        report.summary = summarize_for_drilldown(commits, view)
    return report
