from __future__ import annotations

from commit_lens.accessors import get_commit_datetime, is_weekend
from commit_lens.aggregations.periods import aggregate_by_week_period
from commit_lens.aggregations.stats import percent
from commit_lens.models import (
    CommitRecord,
    DailyHeatmap,
    HourlyHeatmap,
    Settings,
    ViewConfig,
    WeeklyHeatmap,
)

HEATMAP_WEEKS = 26
HEAT_LEVELS = 4

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def heatmap_level(count: int, max_count: int) -> int:
    """Intensity band 0-4: zero is its own band, the rest split the max into quarters."""
    if count <= 0:
        return 0
    level = -(-HEAT_LEVELS * count // max(max_count, 1))
    return max(1, min(HEAT_LEVELS, level))


def build_hour_day_matrix(commits: list[CommitRecord], settings: Settings) -> HourlyHeatmap:
    matrix = [[0] * 7 for _ in range(24)]
    for c in commits:
        when = get_commit_datetime(c, settings)
        if when is None:
            continue
        matrix[when.hour][when.day_of_week] += 1
    max_count = max((n for row in matrix for n in row), default=0)
    return HourlyHeatmap(matrix=matrix, max_count=max_count)


def build_weekly_heatmap(commits: list[CommitRecord], weeks: int = HEATMAP_WEEKS) -> WeeklyHeatmap:
    """Totals for the most recent ``weeks`` active weeks, oldest first."""
    buckets = aggregate_by_week_period(commits)[:weeks]
    recent = [(b.key, b.count) for b in reversed(buckets)]
    total = sum(n for _, n in recent)
    return WeeklyHeatmap(
        weeks=recent,
        max_count=max((n for _, n in recent), default=0),
        total_commits=total,
        total_weeks=len(recent),
        avg_per_week=(2 * total + len(recent)) // (2 * len(recent)) if recent else 0,
    )


def weekday_distribution(commits: list[CommitRecord], settings: Settings) -> list[int]:
    """Commit counts indexed by day of week, 0=Sunday."""
    by_day = [0] * 7
    for c in commits:
        when = get_commit_datetime(c, settings)
        if when is not None:
            by_day[when.day_of_week] += 1
    return by_day


def hourly_distribution(commits: list[CommitRecord], settings: Settings) -> list[int]:
    by_hour = [0] * 24
    for c in commits:
        when = get_commit_datetime(c, settings)
        if when is not None:
            by_hour[when.hour] += 1
    return by_hour


def build_weekday_heatmap(commits: list[CommitRecord], settings: Settings) -> DailyHeatmap:
    by_day = weekday_distribution(commits, settings)
    weekend = sum(n for dow, n in enumerate(by_day) if is_weekend(dow))
    weekday = sum(by_day) - weekend
    return DailyHeatmap(
        by_day=by_day,
        max_count=max(by_day),
        weekday_commits=weekday,
        weekend_commits=weekend,
        weekend_pct=percent(weekend, len(commits)),
    )


def build_heatmap(
    commits: list[CommitRecord], view: ViewConfig, settings: Settings
) -> HourlyHeatmap | WeeklyHeatmap | DailyHeatmap:
    if view.timing == "week":
        return build_weekly_heatmap(commits)
    if view.timing == "day":
        return build_weekday_heatmap(commits, settings)
    return build_hour_day_matrix(commits, settings)
