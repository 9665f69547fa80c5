from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from commit_lens.errors import FilterValidationError

# Commits stay as the raw JSON objects they were loaded from; the accessors
# normalize legacy field names and missing values.
CommitRecord = dict[str, Any]

INCLUDE = "include"
EXCLUDE = "exclude"
FILTER_MODES = (INCLUDE, EXCLUDE)

URGENCY_LEVELS = ("planned", "normal", "reactive")
IMPACT_CATEGORIES = ("user-facing", "internal", "infrastructure", "api")
RISK_LEVELS = ("low", "medium", "high")
DEBT_CATEGORIES = ("added", "paid", "neutral")

DEFAULT_REPO = "default"
TOTAL_GROUP = "__total__"


@dataclass(frozen=True)
class Settings:
    use_utc: bool = False
    work_hour_start: int = 8
    work_hour_end: int = 17
    sanitize: bool = False


@dataclass(frozen=True)
class CommitDateTime:
    hour: int
    day_of_week: int  # 0=Sunday .. 6=Saturday


@dataclass(frozen=True)
class WorkPattern:
    is_weekend: bool = False
    is_after_hours: bool = False
    is_holiday: bool = False
    hour: int = 0
    day_of_week: int = 0
    date_str: str = ""


@dataclass(frozen=True)
class FilterDimension:
    values: tuple[str, ...] = ()
    mode: str = INCLUDE

    @property
    def active(self) -> bool:
        return len(self.values) > 0

    def to_dict(self) -> dict[str, Any]:
        return {"values": list(self.values), "mode": self.mode}

    @classmethod
    def from_dict(cls, name: str, raw: Any) -> FilterDimension:
        if not isinstance(raw, dict):
            raise FilterValidationError("Filter dimension must be an object", {"dimension": name})
        unknown = set(raw) - {"values", "mode"}
        if unknown:
            raise FilterValidationError(
                "Unknown filter dimension keys", {"dimension": name, "keys": ",".join(sorted(unknown))}
            )
        values = raw.get("values") or []
        if not isinstance(values, (list, tuple)) or not all(isinstance(v, str) for v in values):
            raise FilterValidationError("Filter values must be a list of strings", {"dimension": name})
        mode = raw.get("mode") or INCLUDE
        if mode not in FILTER_MODES:
            raise FilterValidationError("Invalid filter mode", {"dimension": name, "mode": str(mode)})
        return cls(values=tuple(values), mode=mode)


FILTER_DIMENSIONS = ("tag", "author", "repo", "urgency", "impact")

# Older saved states wrote the date bounds in camelCase.
_DATE_KEYS = {"date_from": "date_from", "date_to": "date_to", "dateFrom": "date_from", "dateTo": "date_to"}


def _check_date(name: str, value: Any) -> str:
    if value is None or value == "":
        return ""
    if not isinstance(value, str) or len(value) != 10:
        raise FilterValidationError("Dates must be YYYY-MM-DD", {name: str(value)})
    try:
        date.fromisoformat(value)
    except ValueError as e:
        raise FilterValidationError("Dates must be YYYY-MM-DD", {name: value}) from e
    return value


@dataclass(frozen=True)
class FilterSpec:
    tag: FilterDimension = field(default_factory=lambda: FilterDimension(("merge",), EXCLUDE))
    author: FilterDimension = field(default_factory=FilterDimension)
    repo: FilterDimension = field(default_factory=FilterDimension)
    urgency: FilterDimension = field(default_factory=FilterDimension)
    impact: FilterDimension = field(default_factory=FilterDimension)
    date_from: str = ""
    date_to: str = ""

    def dimensions(self) -> dict[str, FilterDimension]:
        return {name: getattr(self, name) for name in FILTER_DIMENSIONS}

    def to_dict(self) -> dict[str, Any]:
        raw: dict[str, Any] = {name: dim.to_dict() for name, dim in self.dimensions().items()}
        raw["date_from"] = self.date_from
        raw["date_to"] = self.date_to
        return raw

    @classmethod
    def from_dict(cls, raw: Any) -> FilterSpec:
        """Strict parse; dimensions left out keep their defaults."""
        if not isinstance(raw, dict):
            raise FilterValidationError("Filter spec must be an object")
        unknown = set(raw) - set(FILTER_DIMENSIONS) - set(_DATE_KEYS)
        if unknown:
            raise FilterValidationError("Unknown filter keys", {"keys": ",".join(sorted(unknown))})
        kwargs: dict[str, Any] = {}
        for name in FILTER_DIMENSIONS:
            if name in raw:
                kwargs[name] = FilterDimension.from_dict(name, raw[name])
        for key, attr in _DATE_KEYS.items():
            if key in raw:
                kwargs[attr] = _check_date(attr, raw[key])
        return cls(**kwargs)


@dataclass(frozen=True)
class ViewConfig:
    name: str
    label: str
    contributors: str  # total | repo | individual
    timing: str  # week | day | hour
    drilldown: str  # summary | commits
    show_author_names: bool = True
    show_commit_messages: bool = True


@dataclass
class PeriodBucket:
    key: str
    label: str
    count: int
    commits: list[CommitRecord] = field(default_factory=list)
    tags: dict[str, int] = field(default_factory=dict)
    repos: list[str] = field(default_factory=list)


@dataclass
class CommitPage:
    commits: list[CommitRecord]
    visible: int
    total: int

    @property
    def has_more(self) -> bool:
        return self.visible < self.total


@dataclass
class DailyActivity:
    date: str
    count: int
    additions: int
    deletions: int


@dataclass
class HourlyHeatmap:
    matrix: list[list[int]]  # [hour][day_of_week]
    max_count: int
    type: str = "hourly"


@dataclass
class WeeklyHeatmap:
    weeks: list[tuple[str, int]]
    max_count: int
    total_commits: int
    total_weeks: int
    avg_per_week: int
    type: str = "weekly"


@dataclass
class DailyHeatmap:
    by_day: list[int]  # index 0=Sunday
    max_count: int
    weekday_commits: int
    weekend_commits: int
    weekend_pct: int
    type: str = "daily"


@dataclass
class ContributorGroup:
    label: str
    name: str
    count: int
    breakdown: dict[str, int] = field(default_factory=dict)
    complexities: list[int] = field(default_factory=list)
    author_count: int = 0


@dataclass
class GroupCounts:
    label: str
    name: str
    total: int
    counts: dict[str, int] = field(default_factory=dict)


@dataclass
class DeveloperPattern:
    email: str
    name: str
    commit_count: int
    peak_hour: int
    peak_day: int
    work_hours_pct: int
    after_hours_pct: int
    weekend_pct: int
    by_hour: list[int] = field(default_factory=list)
    by_day: list[int] = field(default_factory=list)


@dataclass
class RepoCount:
    name: str
    count: int


@dataclass
class DrilldownSummary:
    total_commits: int
    contributor_count: int
    tag_breakdown: dict[str, int]
    repo_count: int
    earliest: str
    latest: str
    by_repo: list[RepoCount] | None = None


@dataclass
class TagShare:
    tag: str
    count: int
    percent: float


@dataclass
class HealthMetrics:
    total: int = 0
    security_count: int = 0
    reactive_pct: int = 0
    weekend_pct: int = 0
    after_hours_pct: int = 0


@dataclass
class WorkSummary:
    features: int = 0
    bugfixes: int = 0
    refactors: int = 0
    tests: int = 0
    avg_complexity: float | None = None
    avg_urgency: float | None = None
    planned_pct: int | None = None
    complex_changes: int = 0
    simple_changes: int = 0
    after_hours: int = 0
    weekend: int = 0
    holiday: int = 0


@dataclass
class TrendSeries:
    months: list[str]
    values: list[float]


@dataclass
class CategoryTrend:
    months: list[str]
    series: dict[str, list[int]]


@dataclass
class MetricResult:
    value: str
    sub: str


@dataclass
class ComparisonSide:
    label: str
    value: int
    percent: int


@dataclass
class Comparison:
    label: str
    left: ComparisonSide
    right: ComparisonSide


@dataclass
class FileInsight:
    path: str
    name: str
    count: int
    percent: int


@dataclass(frozen=True)
class DetailTarget:
    kind: str
    value: str = ""


@dataclass
class Dataset:
    commits: list[CommitRecord] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class Statistics:
    total_commits: int = 0
    date_span_days: int = 0
    earliest: str = ""
    latest: str = ""
    commits_per_week: float = 0.0
    unique_authors: int = 0
    unique_repos: int = 0
    total_additions: int = 0
    total_deletions: int = 0
    total_files_changed: int = 0
    by_tag: dict[str, int] = field(default_factory=dict)
    by_repo: dict[str, int] = field(default_factory=dict)
    top_authors: list[dict[str, int | str]] = field(default_factory=list)
