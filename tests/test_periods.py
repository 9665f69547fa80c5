from __future__ import annotations

from conftest import make_commit

from commit_lens.aggregations.periods import (
    COMMIT_PAGE_SIZE,
    activity_timeline,
    aggregate_by_day_period,
    aggregate_by_week_period,
    aggregate_periods,
    day_label,
    next_visible,
    page_commits,
    sort_commits_newest_first,
    week_label,
)
from commit_lens.views import resolve_view


def test_labels():
    assert week_label("2024-01-01") == "Week of Jan 1, 2024"
    assert day_label("2024-03-04") == "Mon, Mar 4, 2024"


def test_week_buckets(sample_commits):
    buckets = aggregate_by_week_period(sample_commits)
    assert [(b.key, b.count) for b in buckets] == [("2024-04-01", 1), ("2024-03-04", 3)]
    march = buckets[1]
    assert march.label == "Week of Mar 4, 2024"
    assert march.tags == {"feature": 1, "bugfix": 1, "refactor": 1, "test": 1}
    assert march.repos == ["api", "web"]
    assert [c["sha"] for c in march.commits] == ["c1", "c2", "c3"]


def test_sunday_belongs_to_the_week_before():
    buckets = aggregate_by_week_period([make_commit("s", "2024-03-10T12:00:00Z")])
    assert buckets[0].key == "2024-03-04"


def test_bucket_counts_cover_dated_commits(sample_commits):
    for buckets in (aggregate_by_week_period(sample_commits), aggregate_by_day_period(sample_commits)):
        assert sum(b.count for b in buckets) == 4
        assert all(b.count == len(b.commits) for b in buckets)


def test_day_buckets_newest_first(sample_commits):
    buckets = aggregate_by_day_period(sample_commits)
    assert [b.key for b in buckets] == ["2024-04-01", "2024-03-09", "2024-03-05", "2024-03-04"]
    assert buckets[-1].label == "Mon, Mar 4, 2024"


def test_periods_follow_view_timing(sample_commits):
    assert aggregate_periods(sample_commits, resolve_view("executive"))[0].key == "2024-04-01"
    assert len(aggregate_periods(sample_commits, resolve_view("management"))) == 4
    assert len(aggregate_periods(sample_commits, resolve_view("developer"))) == 4


def test_newest_first_puts_undated_last(sample_commits):
    ordered = sort_commits_newest_first(sample_commits)
    assert [c["sha"] for c in ordered] == ["c4", "c3", "c2", "c1", "c5"]


def test_paging():
    commits = [make_commit(str(i), "2024-01-01T00:00:00Z") for i in range(250)]
    page = page_commits(commits)
    assert page.visible == COMMIT_PAGE_SIZE
    assert page.total == 250
    assert page.has_more

    page = page_commits(commits, next_visible(next_visible(page.visible)))
    assert page.visible == 250
    assert len(page.commits) == 250
    assert not page.has_more


def test_activity_timeline(sample_commits):
    timeline = activity_timeline(sample_commits)
    assert [d.date for d in timeline] == ["2024-03-04", "2024-03-05", "2024-03-09", "2024-04-01"]
    assert (timeline[0].count, timeline[0].additions, timeline[0].deletions) == (1, 120, 30)
    assert [d.date for d in activity_timeline(sample_commits, limit=2)] == ["2024-03-09", "2024-04-01"]


def test_empty_input():
    assert aggregate_by_week_period([]) == []
    assert activity_timeline([]) == []
    assert not page_commits([]).has_more
