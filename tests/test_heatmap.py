from __future__ import annotations

from datetime import date, timedelta

import pytest
from conftest import make_commit

from commit_lens.aggregations.heatmap import (
    HEATMAP_WEEKS,
    build_heatmap,
    build_hour_day_matrix,
    build_weekday_heatmap,
    build_weekly_heatmap,
    heatmap_level,
    hourly_distribution,
)
from commit_lens.filters import default_filter_spec, filter_commits
from commit_lens.models import DailyHeatmap, HourlyHeatmap, WeeklyHeatmap
from commit_lens.views import resolve_view


def test_scenario_hour_day_matrix(scenario_commits, utc):
    commits = filter_commits(scenario_commits, default_filter_spec())
    heatmap = build_hour_day_matrix(commits, utc)
    assert heatmap.matrix[9][1] == 1
    assert heatmap.matrix[22][1] == 1
    assert sum(map(sum, heatmap.matrix)) == 2
    assert heatmap.max_count == 1
    assert heatmap_level(heatmap.matrix[9][1], heatmap.max_count) == 4
    assert heatmap_level(heatmap.matrix[22][1], heatmap.max_count) == 4


def test_matrix_conserves_dated_commits(sample_commits, utc):
    heatmap = build_hour_day_matrix(sample_commits, utc)
    assert sum(map(sum, heatmap.matrix)) == 4
    assert len(heatmap.matrix) == 24
    assert all(len(row) == 7 for row in heatmap.matrix)


@pytest.mark.parametrize(
    "count,max_count,level",
    [(0, 10, 0), (1, 10, 1), (2, 8, 1), (3, 10, 2), (5, 10, 2), (6, 10, 3), (10, 10, 4), (1, 0, 4)],
)
def test_heatmap_level(count, max_count, level):
    assert heatmap_level(count, max_count) == level


def test_weekly_heatmap(sample_commits):
    heatmap = build_weekly_heatmap(sample_commits)
    assert heatmap.weeks == [("2024-03-04", 3), ("2024-04-01", 1)]
    assert heatmap.max_count == 3
    assert heatmap.total_commits == 4
    assert heatmap.total_weeks == 2
    assert heatmap.avg_per_week == 2


def test_weekly_heatmap_keeps_most_recent_weeks():
    start = date(2023, 1, 2)
    commits = [make_commit(str(i), f"{start + timedelta(weeks=i)}T12:00:00Z") for i in range(30)]
    heatmap = build_weekly_heatmap(commits)
    assert heatmap.total_weeks == HEATMAP_WEEKS
    assert heatmap.weeks[0][0] == (start + timedelta(weeks=4)).isoformat()
    assert heatmap.weeks[-1][0] == (start + timedelta(weeks=29)).isoformat()


def test_weekday_heatmap(sample_commits, utc):
    heatmap = build_weekday_heatmap(sample_commits, utc)
    assert heatmap.by_day == [0, 2, 1, 0, 0, 0, 1]
    assert heatmap.max_count == 2
    assert heatmap.weekday_commits == 3
    assert heatmap.weekend_commits == 1
    assert heatmap.weekend_pct == 20


def test_hourly_distribution(sample_commits, utc):
    by_hour = hourly_distribution(sample_commits, utc)
    assert by_hour[9] == by_hour[19] == by_hour[11] == by_hour[8] == 1
    assert sum(by_hour) == 4


def test_heatmap_follows_view(sample_commits, utc):
    assert isinstance(build_heatmap(sample_commits, resolve_view("executive"), utc), WeeklyHeatmap)
    assert isinstance(build_heatmap(sample_commits, resolve_view("management"), utc), DailyHeatmap)
    assert isinstance(build_heatmap(sample_commits, resolve_view("developer"), utc), HourlyHeatmap)


def test_empty_heatmaps(utc):
    assert build_hour_day_matrix([], utc).max_count == 0
    weekly = build_weekly_heatmap([])
    assert (weekly.weeks, weekly.avg_per_week) == ([], 0)
    assert build_weekday_heatmap([], utc).weekend_pct == 0
