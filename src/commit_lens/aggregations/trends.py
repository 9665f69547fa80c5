from __future__ import annotations

from collections.abc import Callable

from commit_lens.accessors import get_category, get_complexity, get_urgency
from commit_lens.models import DEBT_CATEGORIES, IMPACT_CATEGORIES, CategoryTrend, CommitRecord, TrendSeries
from commit_lens.predicates import is_bugfix, is_feature, month_key


def _monthly_average(
    commits: list[CommitRecord], value_of: Callable[[CommitRecord], int | None]
) -> TrendSeries | None:
    # Only commits carrying a valid value count toward a month, on both
    # sides of the average.
    sums: dict[str, list[int]] = {}
    for c in commits:
        month = month_key(c)
        value = value_of(c)
        if month is None or value is None:
            continue
        entry = sums.setdefault(month, [0, 0])
        entry[0] += value
        entry[1] += 1
    if not sums:
        return None
    months = sorted(sums)
    return TrendSeries(months=months, values=[round(sums[m][0] / sums[m][1], 2) for m in months])


def urgency_trend(commits: list[CommitRecord]) -> TrendSeries | None:
    return _monthly_average(commits, get_urgency)


def complexity_trend(commits: list[CommitRecord]) -> TrendSeries | None:
    return _monthly_average(commits, get_complexity)


def _monthly_counts(
    commits: list[CommitRecord], categories: tuple[str, ...], category_of: Callable[[CommitRecord], str | None]
) -> CategoryTrend | None:
    by_month: dict[str, dict[str, int]] = {}
    for c in commits:
        month = month_key(c)
        category = category_of(c)
        if month is None or category not in categories:
            continue
        counts = by_month.setdefault(month, dict.fromkeys(categories, 0))
        counts[category] += 1
    if not by_month:
        return None
    months = sorted(by_month)
    return CategoryTrend(months=months, series={cat: [by_month[m][cat] for m in months] for cat in categories})


def impact_trend(commits: list[CommitRecord]) -> CategoryTrend | None:
    return _monthly_counts(commits, IMPACT_CATEGORIES, lambda c: get_category(c, "impact"))


def debt_trend(commits: list[CommitRecord]) -> CategoryTrend | None:
    return _monthly_counts(commits, DEBT_CATEGORIES, lambda c: get_category(c, "debt"))


def work_type_trend(commits: list[CommitRecord]) -> CategoryTrend | None:
    """Monthly feature and bugfix counts. A commit tagged both counts in both."""
    by_month: dict[str, dict[str, int]] = {}
    for c in commits:
        month = month_key(c)
        if month is None:
            continue
        feature, bugfix = is_feature(c), is_bugfix(c)
        if not (feature or bugfix):
            continue
        counts = by_month.setdefault(month, {"features": 0, "bugfixes": 0})
        counts["features"] += feature
        counts["bugfixes"] += bugfix
    if not by_month:
        return None
    months = sorted(by_month)
    return CategoryTrend(
        months=months,
        series={k: [by_month[m][k] for m in months] for k in ("features", "bugfixes")},
    )
