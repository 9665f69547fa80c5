from __future__ import annotations

from collections.abc import Callable

from commit_lens.accessors import get_category, get_complexity, get_urgency, get_urgency_label, get_work_pattern
from commit_lens.aggregations.contributors import tag_counts
from commit_lens.aggregations.stats import mean, percent
from commit_lens.holidays import HolidayPredicate
from commit_lens.models import (
    DEBT_CATEGORIES,
    IMPACT_CATEGORIES,
    RISK_LEVELS,
    URGENCY_LEVELS,
    CommitRecord,
    HealthMetrics,
    Settings,
    TagShare,
    WorkSummary,
)
from commit_lens.predicates import (
    is_bugfix,
    is_complex,
    is_feature,
    is_planned,
    is_reactive,
    is_refactor,
    is_security,
    is_simple,
    is_test,
)


def tag_breakdown(commits: list[CommitRecord]) -> list[TagShare]:
    """Tags by frequency; percent is the share of all tag occurrences."""
    counts = tag_counts(commits)
    total = sum(counts.values())
    shares = [
        TagShare(tag=tag, count=n, percent=round(100 * n / total, 1) if total else 0.0)
        for tag, n in counts.items()
    ]
    shares.sort(key=lambda s: (-s.count, s.tag))
    return shares


def _fixed_counts(
    commits: list[CommitRecord], categories: tuple[str, ...], value_of: Callable[[CommitRecord], str | None]
) -> dict[str, int]:
    counts = dict.fromkeys(categories, 0)
    for c in commits:
        value = value_of(c)
        if value in counts:
            counts[value] += 1
    return counts


def urgency_breakdown(commits: list[CommitRecord]) -> dict[str, int]:
    return _fixed_counts(commits, URGENCY_LEVELS, get_urgency_label)


def impact_breakdown(commits: list[CommitRecord]) -> dict[str, int]:
    return _fixed_counts(commits, IMPACT_CATEGORIES, lambda c: get_category(c, "impact"))


def risk_breakdown(commits: list[CommitRecord]) -> dict[str, int]:
    return _fixed_counts(commits, RISK_LEVELS, lambda c: get_category(c, "risk"))


def debt_breakdown(commits: list[CommitRecord]) -> dict[str, int]:
    return _fixed_counts(commits, DEBT_CATEGORIES, lambda c: get_category(c, "debt"))


def health_metrics(commits: list[CommitRecord], settings: Settings) -> HealthMetrics:
    total = len(commits)
    patterns = [get_work_pattern(c, settings) for c in commits]
    return HealthMetrics(
        total=total,
        security_count=sum(1 for c in commits if is_security(c)),
        reactive_pct=percent(sum(1 for c in commits if is_reactive(c)), total),
        weekend_pct=percent(sum(1 for p in patterns if p.is_weekend), total),
        after_hours_pct=percent(sum(1 for p in patterns if p.is_after_hours), total),
    )


def work_summary(
    commits: list[CommitRecord], settings: Settings, is_holiday: HolidayPredicate | None = None
) -> WorkSummary:
    urgencies = [u for u in (get_urgency(c) for c in commits) if u is not None]
    complexities = [v for v in (get_complexity(c) for c in commits) if v is not None]
    patterns = [get_work_pattern(c, settings, is_holiday) for c in commits]
    return WorkSummary(
        features=sum(1 for c in commits if is_feature(c)),
        bugfixes=sum(1 for c in commits if is_bugfix(c)),
        refactors=sum(1 for c in commits if is_refactor(c)),
        tests=sum(1 for c in commits if is_test(c)),
        avg_complexity=mean(complexities),
        avg_urgency=mean(urgencies),
        planned_pct=percent(sum(1 for c in commits if is_planned(c)), len(urgencies)) if urgencies else None,
        complex_changes=sum(1 for c in commits if is_complex(c)),
        simple_changes=sum(1 for c in commits if is_simple(c)),
        after_hours=sum(1 for p in patterns if p.is_after_hours),
        weekend=sum(1 for p in patterns if p.is_weekend),
        holiday=sum(1 for p in patterns if p.is_holiday),
    )
