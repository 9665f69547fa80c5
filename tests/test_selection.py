from __future__ import annotations

import pytest

from commit_lens.accessors import NameSanitizer
from commit_lens.aggregations.breakdowns import health_metrics, tag_breakdown, urgency_breakdown, work_summary
from commit_lens.aggregations.contributors import aggregate_contributors
from commit_lens.aggregations.heatmap import build_hour_day_matrix
from commit_lens.aggregations.periods import aggregate_periods
from commit_lens.errors import UnknownDetailTargetError
from commit_lens.holidays import HolidayCalendar
from commit_lens.models import DetailTarget, DrilldownSummary, Settings
from commit_lens.selection import commit_count_label, select_detail
from commit_lens.views import VIEW_LEVELS, resolve_view

DEVELOPER = resolve_view("developer")


def select(commits, kind, value="", view=DEVELOPER, settings=None, **kwargs):
    return select_detail(commits, DetailTarget(kind, value), view, settings or Settings(use_utc=True), **kwargs)


@pytest.mark.parametrize("level", list(VIEW_LEVELS))
def test_period_selection_matches_bucket_counts(sample_commits, level):
    view = resolve_view(level)
    for bucket in aggregate_periods(sample_commits, view):
        selection = select(sample_commits, "period", bucket.key, view)
        assert selection.commits == bucket.commits


@pytest.mark.parametrize("level", list(VIEW_LEVELS))
def test_group_selection_matches_group_counts(sample_commits, level):
    view = resolve_view(level)
    for group in aggregate_contributors(sample_commits, view, limit=None):
        assert select(sample_commits, "group", group.label, view).count == group.count


def test_tag_selection_matches_breakdown(sample_commits):
    for share in tag_breakdown(sample_commits):
        assert select(sample_commits, "tag", share.tag).count == share.count


def test_urgency_selection_matches_breakdown(sample_commits):
    for label, count in urgency_breakdown(sample_commits).items():
        assert select(sample_commits, "urgency", label).count == count


def test_cell_selection_matches_heatmap(sample_commits, utc):
    matrix = build_hour_day_matrix(sample_commits, utc).matrix
    for hour in range(24):
        for dow in range(7):
            assert select(sample_commits, "cell", f"{hour}:{dow}").count == matrix[hour][dow]


def test_work_and_health_selection(sample_commits, utc):
    calendar = HolidayCalendar.south_africa(2024, 2024)
    summary = work_summary(sample_commits, utc, calendar)
    assert select(sample_commits, "work", "features").count == summary.features
    assert select(sample_commits, "work", "bugfixes").count == summary.bugfixes
    assert select(sample_commits, "health", "holiday", is_holiday=calendar).count == summary.holiday
    assert select(sample_commits, "health", "after-hours").count == summary.after_hours
    assert select(sample_commits, "health", "security").count == health_metrics(sample_commits, utc).security_count
    assert select(sample_commits, "health", "holiday").count == 0


def test_category_and_repo_selection(sample_commits):
    assert [c["sha"] for c in select(sample_commits, "impact", "internal").commits] == ["c2"]
    assert [c["sha"] for c in select(sample_commits, "risk", "high").commits] == ["c2"]
    assert [c["sha"] for c in select(sample_commits, "repo", "default").commits] == ["c3"]
    assert [c["sha"] for c in select(sample_commits, "security-repo", "api").commits] == ["c4"]
    assert [c["sha"] for c in select(sample_commits, "month", "2024-04").commits] == ["c4"]


def test_all_selection(sample_commits):
    selection = select(sample_commits, "all")
    assert selection.title == "All Commits"
    assert selection.subtitle == "5 commits"
    assert selection.filter_info is None
    assert selection.commits == sample_commits


def test_author_selection_title(sample_commits):
    selection = select(sample_commits, "author", "Alice@example.com")
    assert selection.title == "Alice"
    assert [c["sha"] for c in selection.commits] == ["c1", "c3"]
    assert selection.filter_info == DetailTarget("author", "Alice@example.com")

    sanitizer = NameSanitizer.for_commits(sample_commits)
    assert select(sample_commits, "author", "alice@example.com", sanitizer=sanitizer).title == "Developer A"


def test_selection_is_recomputed_identically(sample_commits):
    assert select(sample_commits, "tag", "feature") == select(sample_commits, "tag", "feature")


def test_subtitle_singular(sample_commits):
    assert select(sample_commits, "tag", "feature").subtitle == "1 commit"
    assert commit_count_label(0) == "0 commits"


def test_summary_depends_on_view(sample_commits):
    management = resolve_view("management")
    selection = select(sample_commits, "all", view=management)
    summary = selection.summary(management)
    assert isinstance(summary, DrilldownSummary)
    assert summary.total_commits == 5
    assert selection.summary(DEVELOPER) is None


@pytest.mark.parametrize(
    "kind,value",
    [("colour", "red"), ("urgency", "panic"), ("work", "meetings"), ("health", "sleep"), ("cell", "25:1"),
     ("cell", "noon"), ("impact", "cosmic")],
)
def test_unknown_targets(sample_commits, kind, value):
    with pytest.raises(UnknownDetailTargetError):
        select(sample_commits, kind, value)
