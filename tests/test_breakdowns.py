from __future__ import annotations

from conftest import make_commit

from commit_lens.aggregations.breakdowns import (
    debt_breakdown,
    health_metrics,
    impact_breakdown,
    risk_breakdown,
    tag_breakdown,
    urgency_breakdown,
    work_summary,
)
from commit_lens.filters import default_filter_spec, filter_commits
from commit_lens.holidays import HolidayCalendar
from commit_lens.models import HealthMetrics, TagShare, WorkSummary


def test_scenario_urgency(scenario_commits):
    commits = filter_commits(scenario_commits, default_filter_spec())
    assert urgency_breakdown(commits) == {"planned": 1, "normal": 0, "reactive": 1}


def test_urgency_counts_only_valid_values(sample_commits):
    counts = urgency_breakdown(sample_commits)
    assert counts == {"planned": 1, "normal": 1, "reactive": 2}
    assert sum(counts.values()) == 4


def test_out_of_range_urgency_is_ignored():
    commits = [make_commit(str(i), urgency=u) for i, u in enumerate([0, 7, "3", True, None])]
    assert urgency_breakdown(commits) == {"planned": 0, "normal": 0, "reactive": 0}


def test_category_breakdowns(sample_commits):
    assert impact_breakdown(sample_commits) == {"user-facing": 1, "internal": 1, "infrastructure": 1, "api": 0}
    assert risk_breakdown(sample_commits) == {"low": 1, "medium": 0, "high": 1}
    assert debt_breakdown(sample_commits) == {"added": 1, "paid": 1, "neutral": 0}


def test_unknown_category_values_are_ignored():
    assert impact_breakdown([make_commit("x", impact="cosmic")]) == {
        "user-facing": 0, "internal": 0, "infrastructure": 0, "api": 0,
    }


def test_tag_breakdown(sample_commits):
    shares = tag_breakdown(sample_commits)
    assert [s.tag for s in shares] == ["bugfix", "feature", "refactor", "security", "test"]
    assert all(s.count == 1 and s.percent == 20.0 for s in shares)


def test_tag_breakdown_orders_by_count():
    commits = [make_commit("1", tags=["docs", "test"]), make_commit("2", tags=["test"])]
    assert tag_breakdown(commits) == [TagShare("test", 2, 66.7), TagShare("docs", 1, 33.3)]
    assert tag_breakdown([]) == []


def test_health_metrics(sample_commits, utc):
    assert health_metrics(sample_commits, utc) == HealthMetrics(
        total=5, security_count=1, reactive_pct=40, weekend_pct=20, after_hours_pct=20
    )
    assert health_metrics([], utc) == HealthMetrics()


def test_work_summary(sample_commits, utc):
    summary = work_summary(sample_commits, utc, HolidayCalendar.south_africa(2024, 2024))
    assert (summary.features, summary.bugfixes, summary.refactors, summary.tests) == (1, 1, 1, 1)
    assert summary.avg_complexity == 3.5
    assert summary.avg_urgency == 3.5
    assert summary.planned_pct == 25
    assert (summary.complex_changes, summary.simple_changes) == (2, 1)
    assert (summary.after_hours, summary.weekend, summary.holiday) == (1, 1, 1)


def test_work_summary_without_holiday_calendar(sample_commits, utc):
    assert work_summary(sample_commits, utc).holiday == 0


def test_work_summary_without_data(utc):
    assert work_summary([], utc) == WorkSummary()
    assert work_summary([make_commit("x", tags=["feature"])], utc).planned_pct is None
