"""Commit predicates and bucket keys.

Every aggregate that groups or counts commits does so through the functions
here, and detail selection re-applies the same ones. A bucket's reported
count and the commits listed for it therefore always agree.
"""
from __future__ import annotations

from datetime import date, timedelta

from commit_lens.accessors import (
    commit_day,
    commit_month,
    day_of_week,
    get_author_email,
    get_category,
    get_commit_tags,
    get_complexity,
    get_repo_id,
    get_urgency_label,
    get_work_pattern,
)
from commit_lens.holidays import HolidayPredicate
from commit_lens.models import TOTAL_GROUP, CommitRecord, Settings

BUGFIX_TAGS = frozenset({"bugfix", "fix"})


# --- Tags and work types ---

def has_tag(commit: CommitRecord, tag: str) -> bool:
    return tag in get_commit_tags(commit)


def is_feature(commit: CommitRecord) -> bool:
    return has_tag(commit, "feature")


def is_bugfix(commit: CommitRecord) -> bool:
    return bool(get_commit_tags(commit) & BUGFIX_TAGS)


def is_refactor(commit: CommitRecord) -> bool:
    return has_tag(commit, "refactor")


def is_test(commit: CommitRecord) -> bool:
    return has_tag(commit, "test")


def is_security(commit: CommitRecord) -> bool:
    return commit.get("type") == "security" or has_tag(commit, "security")


def is_untagged(commit: CommitRecord) -> bool:
    return not get_commit_tags(commit)


WORK_TYPES = {
    "features": is_feature,
    "bugfixes": is_bugfix,
    "refactors": is_refactor,
    "tests": is_test,
}


# --- Classification buckets ---

def has_urgency_label(commit: CommitRecord, label: str) -> bool:
    return get_urgency_label(commit) == label


def is_reactive(commit: CommitRecord) -> bool:
    return has_urgency_label(commit, "reactive")


def is_planned(commit: CommitRecord) -> bool:
    return has_urgency_label(commit, "planned")


def is_simple(commit: CommitRecord) -> bool:
    complexity = get_complexity(commit)
    return complexity is not None and complexity <= 2


def is_complex(commit: CommitRecord) -> bool:
    complexity = get_complexity(commit)
    return complexity is not None and complexity >= 4


def has_category(commit: CommitRecord, key: str, value: str) -> bool:
    return get_category(commit, key) == value


# --- Timing ---

def is_weekend_commit(commit: CommitRecord, settings: Settings) -> bool:
    return get_work_pattern(commit, settings).is_weekend


def is_after_hours_commit(commit: CommitRecord, settings: Settings) -> bool:
    return get_work_pattern(commit, settings).is_after_hours


def is_holiday_commit(commit: CommitRecord, settings: Settings, is_holiday: HolidayPredicate | None) -> bool:
    if is_holiday is None:
        return False
    return get_work_pattern(commit, settings, is_holiday).is_holiday


# --- Bucket keys ---

def week_start(day: date) -> date:
    """Monday on or before ``day``."""
    return day - timedelta(days=(day_of_week(day) + 6) % 7)


def day_key(commit: CommitRecord) -> str | None:
    return commit_day(commit)


def week_key(commit: CommitRecord) -> str | None:
    day = commit_day(commit)
    if day is None:
        return None
    return week_start(date.fromisoformat(day)).isoformat()


def month_key(commit: CommitRecord) -> str | None:
    return commit_month(commit)


def period_key(commit: CommitRecord, timing: str) -> str | None:
    """Week key for week timing, day key otherwise."""
    return week_key(commit) if timing == "week" else day_key(commit)


def group_key(commit: CommitRecord, contributors: str) -> str:
    if contributors == "total":
        return TOTAL_GROUP
    if contributors == "repo":
        return get_repo_id(commit)
    return get_author_email(commit)
