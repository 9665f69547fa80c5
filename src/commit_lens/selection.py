"""Detail-pane selection: the exact commits behind one aggregate element.

Each target kind maps onto the predicate from ``commit_lens.predicates`` that
the matching aggregate counts with. Selections are recomputed from the
filtered commits on every call.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from commit_lens.accessors import (
    NameSanitizer,
    get_author_email,
    get_author_name,
    get_commit_datetime,
    get_repo_id,
)
from commit_lens.aggregations.contributors import summarize_for_drilldown
from commit_lens.aggregations.heatmap import DAY_NAMES
from commit_lens.errors import UnknownDetailTargetError
from commit_lens.holidays import HolidayPredicate
from commit_lens.models import (
    DEBT_CATEGORIES,
    IMPACT_CATEGORIES,
    RISK_LEVELS,
    TOTAL_GROUP,
    URGENCY_LEVELS,
    CommitRecord,
    DetailTarget,
    DrilldownSummary,
    Settings,
    ViewConfig,
)
from commit_lens.predicates import (
    WORK_TYPES,
    group_key,
    has_category,
    has_tag,
    has_urgency_label,
    is_after_hours_commit,
    is_holiday_commit,
    is_reactive,
    is_security,
    is_weekend_commit,
    month_key,
    period_key,
)

DETAIL_KINDS = (
    "all", "tag", "urgency", "impact", "risk", "debt", "author", "repo",
    "period", "month", "cell", "group", "work", "health", "security-repo",
)

HEALTH_SIGNALS = ("security", "reactive", "weekend", "after-hours", "holiday")

Predicate = Callable[[CommitRecord], bool]


@dataclass
class DetailSelection:
    title: str
    subtitle: str
    commits: list[CommitRecord]
    filter_info: DetailTarget | None = None

    @property
    def count(self) -> int:
        return len(self.commits)

    def summary(self, view: ViewConfig) -> DrilldownSummary | None:
        """Summary stats shown instead of the commit list, or None for views that list commits."""
        if view.drilldown == "commits":
            return None
        return summarize_for_drilldown(self.commits, view)


def commit_count_label(count: int) -> str:
    return f"{count} commit" if count == 1 else f"{count} commits"


def _require(value: str, allowed: tuple[str, ...], target: DetailTarget) -> None:
    if value not in allowed:
        raise UnknownDetailTargetError("Unknown detail value", {"kind": target.kind, "value": value})


def _cell_predicate(value: str, settings: Settings, target: DetailTarget) -> tuple[Predicate, str]:
    try:
        hour, dow = (int(part) for part in value.split(":"))
    except ValueError as e:
        raise UnknownDetailTargetError("Heatmap cells are written hour:day", {"value": value}) from e
    if not (0 <= hour < 24 and 0 <= dow < 7):
        raise UnknownDetailTargetError("Heatmap cell out of range", {"value": value})

    def pred(c: CommitRecord) -> bool:
        when = get_commit_datetime(c, settings)
        return when is not None and when.hour == hour and when.day_of_week == dow

    return pred, f"{DAY_NAMES[dow]} {hour:02d}:00"


def _author_title(commits: list[CommitRecord], email: str, sanitizer: NameSanitizer | None) -> str:
    name = next((get_author_name(c) for c in commits if get_author_email(c) == email), email)
    return sanitizer.sanitize(name, email) if sanitizer else name


def resolve_target(
    commits: list[CommitRecord],
    target: DetailTarget,
    view: ViewConfig,
    settings: Settings,
    sanitizer: NameSanitizer | None = None,
    is_holiday: HolidayPredicate | None = None,
) -> tuple[Predicate, str]:
    """Predicate and title for ``target``."""
    kind, value = target.kind, target.value

    if kind == "all":
        return (lambda c: True), "All Commits"
    if kind == "tag":
        return (lambda c: has_tag(c, value)), f"Tag: {value}"
    if kind == "urgency":
        _require(value, URGENCY_LEVELS, target)
        return (lambda c: has_urgency_label(c, value)), f"Urgency: {value.title()}"
    if kind in ("impact", "risk", "debt"):
        allowed = {"impact": IMPACT_CATEGORIES, "risk": RISK_LEVELS, "debt": DEBT_CATEGORIES}[kind]
        _require(value, allowed, target)
        return (lambda c: has_category(c, kind, value)), f"{kind.title()}: {value}"
    if kind == "author":
        email = value.lower()
        return (lambda c: get_author_email(c) == email), _author_title(commits, email, sanitizer)
    if kind == "repo":
        return (lambda c: get_repo_id(c) == value), f"Repository: {value}"
    if kind == "period":
        return (lambda c: period_key(c, view.timing) == value), value
    if kind == "month":
        return (lambda c: month_key(c) == value), value
    if kind == "cell":
        return _cell_predicate(value, settings, target)
    if kind == "group":
        if view.contributors == "individual":
            email = value.lower()
            return (lambda c: group_key(c, view.contributors) == email), _author_title(commits, email, sanitizer)
        title = "All Contributors" if value == TOTAL_GROUP else value
        return (lambda c: group_key(c, view.contributors) == value), title
    if kind == "work":
        _require(value, tuple(WORK_TYPES), target)
        return WORK_TYPES[value], value.title()
    if kind == "health":
        _require(value, HEALTH_SIGNALS, target)
        signals: dict[str, Predicate] = {
            "security": is_security,
            "reactive": is_reactive,
            "weekend": lambda c: is_weekend_commit(c, settings),
            "after-hours": lambda c: is_after_hours_commit(c, settings),
            "holiday": lambda c: is_holiday_commit(c, settings, is_holiday),
        }
        titles = {
            "security": "Security Commits",
            "reactive": "Reactive Work",
            "weekend": "Weekend Commits",
            "after-hours": "After-Hours Commits",
            "holiday": "Holiday Commits",
        }
        return signals[value], titles[value]
    if kind == "security-repo":
        return (lambda c: is_security(c) and get_repo_id(c) == value), f"Security: {value}"
    raise UnknownDetailTargetError("Unknown detail target", {"kind": kind})


def select_detail(
    commits: list[CommitRecord],
    target: DetailTarget,
    view: ViewConfig,
    settings: Settings,
    sanitizer: NameSanitizer | None = None,
    is_holiday: HolidayPredicate | None = None,
) -> DetailSelection:
    predicate, title = resolve_target(commits, target, view, settings, sanitizer, is_holiday)
    selected = [c for c in commits if predicate(c)]
    return DetailSelection(
        title=title,
        subtitle=commit_count_label(len(selected)),
        commits=selected,
        filter_info=None if target.kind == "all" else target,
    )
