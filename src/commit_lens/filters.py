from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date
from typing import Any
from urllib.parse import parse_qs, urlencode

from commit_lens.accessors import (
    get_author_email,
    get_author_name,
    get_category,
    get_commit_tags,
    get_repo_id,
    get_urgency_label,
    parse_timestamp,
)
from commit_lens.errors import FilterValidationError
from commit_lens.models import (
    EXCLUDE,
    FILTER_DIMENSIONS,
    INCLUDE,
    URGENCY_LEVELS,
    CommitRecord,
    FilterDimension,
    FilterSpec,
)

logger = logging.getLogger(__name__)

# Value(s) a commit carries for each categorical dimension. None means the
# commit has no value for that dimension.
DIMENSION_VALUES: dict[str, Callable[[CommitRecord], frozenset[str] | str | None]] = {
    "tag": get_commit_tags,
    "author": get_author_email,
    "repo": get_repo_id,
    "urgency": get_urgency_label,
    "impact": lambda commit: get_category(commit, "impact"),
}


def default_filter_spec() -> FilterSpec:
    return FilterSpec()


def clear_filters() -> FilterSpec:
    return default_filter_spec()


def active_filter_count(spec: FilterSpec) -> int:
    count = sum(1 for dim in spec.dimensions().values() if dim.active)
    if spec.date_from or spec.date_to:
        count += 1
    return count


def validate_filter_spec(raw: Any) -> FilterSpec:
    return FilterSpec.from_dict(raw)


def load_filter_spec(raw: Any) -> FilterSpec:
    """Parse a persisted filter spec, falling back to the default if it is invalid."""
    if raw is None:
        return default_filter_spec()
    try:
        return FilterSpec.from_dict(raw)
    except FilterValidationError as e:
        logger.warning("Ignoring persisted filters: %s", e)
        return default_filter_spec()


def with_dimension(spec: FilterSpec, name: str, values: Iterable[str], mode: str = INCLUDE) -> FilterSpec:
    if name not in FILTER_DIMENSIONS:
        raise FilterValidationError("Unknown filter dimension", {"dimension": name})
    dim = FilterDimension.from_dict(name, {"values": list(values), "mode": mode})
    return replace(spec, **{name: dim})


def with_dates(spec: FilterSpec, date_from: str | None = None, date_to: str | None = None) -> FilterSpec:
    raw = spec.to_dict()
    if date_from is not None:
        raw["date_from"] = date_from
    if date_to is not None:
        raw["date_to"] = date_to
    return FilterSpec.from_dict(raw)


def matches_dimension(commit: CommitRecord, name: str, dim: FilterDimension) -> bool:
    """Whether ``commit`` survives a single categorical dimension."""
    if not dim.active:
        return True
    value = DIMENSION_VALUES[name](commit)
    if isinstance(value, frozenset):
        has_match = bool(value & set(dim.values))
    else:
        has_match = value is not None and value in dim.values
    return not has_match if dim.mode == EXCLUDE else has_match


def _date_bounds(spec: FilterSpec) -> tuple[date | None, date | None]:
    start = date.fromisoformat(spec.date_from) if spec.date_from else None
    end = date.fromisoformat(spec.date_to) if spec.date_to else None
    return start, end


def matches_dates(commit: CommitRecord, start: date | None, end: date | None) -> bool:
    """Bounds compare against the calendar date written in the timestamp, like day buckets."""
    if start is None and end is None:
        return True
    ts = parse_timestamp(commit)
    if ts is None:
        return False
    day = ts.date()
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def filter_commits(commits: Iterable[CommitRecord], spec: FilterSpec) -> list[CommitRecord]:
    """Commits passing every active dimension of ``spec``, in input order."""
    start, end = _date_bounds(spec)
    active = [(name, dim) for name, dim in spec.dimensions().items() if dim.active]
    return [
        c
        for c in commits
        if matches_dates(c, start, end)
        and all(matches_dimension(c, name, dim) for name, dim in active)
    ]


# --- Shareable links ---

def filters_to_query(spec: FilterSpec) -> str:
    params: dict[str, str] = {}
    for name, dim in spec.dimensions().items():
        if dim.active:
            prefix = "!" if dim.mode == EXCLUDE else ""
            params[name] = prefix + ",".join(dim.values)
    if spec.date_from:
        params["from"] = spec.date_from
    if spec.date_to:
        params["to"] = spec.date_to
    return urlencode(params)


def filters_from_query(query: str) -> FilterSpec:
    """Filter spec from a query string; dimensions absent from the query are inactive."""
    params = {k: v[-1] for k, v in parse_qs(query.lstrip("?")).items()}
    raw: dict[str, Any] = {}
    for name in FILTER_DIMENSIONS:
        text = params.get(name, "")
        mode = INCLUDE
        if text.startswith("!"):
            mode, text = EXCLUDE, text[1:]
        raw[name] = {"values": [v for v in text.split(",") if v], "mode": mode}
    raw["date_from"] = params.get("from", "")
    raw["date_to"] = params.get("to", "")
    return FilterSpec.from_dict(raw)


# --- Selectable values ---

def filter_options(commits: Iterable[CommitRecord]) -> dict[str, list[Any]]:
    """Distinct values present in ``commits`` for each filter dimension.

    Authors come back as ``{"email", "name"}`` pairs sorted by email, using the
    first name seen for each email.
    """
    tags: set[str] = set()
    authors: dict[str, str] = {}
    repos: set[str] = set()
    urgencies: set[str] = set()
    impacts: set[str] = set()
    for c in commits:
        tags |= get_commit_tags(c)
        authors.setdefault(get_author_email(c), get_author_name(c))
        repos.add(get_repo_id(c))
        label = get_urgency_label(c)
        if label:
            urgencies.add(label)
        impact = get_category(c, "impact")
        if impact:
            impacts.add(impact)
    return {
        "tag": sorted(tags),
        "author": [{"email": e, "name": authors[e]} for e in sorted(authors)],
        "repo": sorted(repos),
        "urgency": [u for u in URGENCY_LEVELS if u in urgencies],
        "impact": sorted(impacts),
    }
