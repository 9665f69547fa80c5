from __future__ import annotations

import re
import zlib
from collections.abc import Iterable
from datetime import date, datetime, timezone
from typing import Any

from commit_lens.holidays import HolidayPredicate
from commit_lens.models import (
    DEFAULT_REPO,
    CommitDateTime,
    CommitRecord,
    Settings,
    WorkPattern,
)

UNKNOWN_AUTHOR = "unknown"

ANONYMOUS_NAMES = [
    "Developer A", "Developer B", "Developer C", "Developer D",
    "Developer E", "Developer F", "Developer G", "Developer H",
    "Developer J", "Developer K", "Developer L", "Developer M",
    "Developer N", "Developer P", "Developer Q", "Developer R",
    "Developer S", "Developer T", "Developer U", "Developer V",
]

CONVENTIONAL_PREFIX_RE = re.compile(
    r"^(feat|fix|docs|style|refactor|test|chore|ci|build|perf|security)(\(.+?\))?:",
    re.IGNORECASE,
)

_DEFAULT_SETTINGS = Settings()


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _count(*candidates: Any) -> int:
    for value in candidates:
        if isinstance(value, bool):
            continue
        if isinstance(value, int) and value > 0:
            return value
        if isinstance(value, float) and value > 0 and value.is_integer():
            return int(value)
    return 0


def _scale(value: Any, low: int = 1, high: int = 5) -> int | None:
    """Integer on a closed scale, or None for anything else (bools included)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and low <= value <= high:
        return value
    return None


# --- Author identity ---

def get_author_email(commit: CommitRecord) -> str:
    author = commit.get("author")
    email = _text(author.get("email")) if isinstance(author, dict) else None
    email = email or _text(commit.get("author_email")) or _text(commit.get("author_id"))
    return email.lower() if email else UNKNOWN_AUTHOR


def get_author_name(commit: CommitRecord) -> str:
    author = commit.get("author")
    if isinstance(author, dict):
        name = _text(author.get("name"))
    else:
        name = _text(author)
    return name or _text(commit.get("author_name")) or _text(commit.get("author_id")) or "Unknown"


def anonymous_name(index: int) -> str:
    base = ANONYMOUS_NAMES[index % len(ANONYMOUS_NAMES)]
    rounds = index // len(ANONYMOUS_NAMES)
    return base if rounds == 0 else f"{base}{rounds + 1}"


class NameSanitizer:
    """Maps author emails to stable pseudonyms when privacy mode is on.

    Pseudonyms are assigned in sorted email order, so two sanitizers built
    from the same dataset agree. Emails outside that set get a pseudonym
    derived from a checksum of the email.
    """

    def __init__(self, emails: Iterable[str] = (), enabled: bool = True) -> None:
        self.enabled = enabled
        self._names: dict[str, str] = {}
        for index, email in enumerate(sorted({e.lower() for e in emails})):
            self._names[email] = anonymous_name(index)

    @classmethod
    def for_commits(cls, commits: Iterable[CommitRecord], enabled: bool = True) -> NameSanitizer:
        return cls((get_author_email(c) for c in commits), enabled=enabled)

    def sanitize(self, name: str, email: str) -> str:
        if not self.enabled:
            return name
        key = email.lower()
        if key not in self._names:
            self._names[key] = anonymous_name(zlib.crc32(key.encode("utf-8")) % 1000)
        return self._names[key]


# --- Classification fields ---

def get_commit_tags(commit: CommitRecord) -> frozenset[str]:
    tags = commit.get("tags")
    if not isinstance(tags, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(t for t in tags if isinstance(t, str) and t)


def get_repo_id(commit: CommitRecord) -> str:
    return _text(commit.get("repo_id")) or DEFAULT_REPO


def get_urgency(commit: CommitRecord) -> int | None:
    return _scale(commit.get("urgency"))


def get_complexity(commit: CommitRecord) -> int | None:
    return _scale(commit.get("complexity"))


def urgency_label(urgency: int | None) -> str | None:
    if urgency is None:
        return None
    if urgency <= 2:
        return "planned"
    if urgency == 3:
        return "normal"
    return "reactive"


def get_urgency_label(commit: CommitRecord) -> str | None:
    return urgency_label(get_urgency(commit))


def get_category(commit: CommitRecord, key: str, allowed: Iterable[str] | None = None) -> str | None:
    value = _text(commit.get(key))
    if value is None:
        return None
    if allowed is not None and value not in allowed:
        return None
    return value


# --- Diff stats ---

def get_additions(commit: CommitRecord) -> int:
    stats = commit.get("stats") if isinstance(commit.get("stats"), dict) else {}
    return _count(stats.get("additions"), commit.get("lines_added"))


def get_deletions(commit: CommitRecord) -> int:
    stats = commit.get("stats") if isinstance(commit.get("stats"), dict) else {}
    return _count(stats.get("deletions"), commit.get("lines_deleted"))


def get_files_changed(commit: CommitRecord) -> int:
    stats = commit.get("stats") if isinstance(commit.get("stats"), dict) else {}
    files = commit.get("files")
    listed = len(files) if isinstance(files, list) else 0
    return _count(
        stats.get("filesChanged"), commit.get("filesChanged"), commit.get("files_changed"), listed
    )


def get_commit_files(commit: CommitRecord) -> list[str]:
    files = commit.get("files")
    if not isinstance(files, list):
        return []
    return [f for f in files if isinstance(f, str) and f]


def get_commit_subject(commit: CommitRecord) -> str:
    return _text(commit.get("subject")) or _text(commit.get("message")) or ""


def sanitize_message(message: str, enabled: bool) -> str:
    if not enabled:
        return message
    match = CONVENTIONAL_PREFIX_RE.match(message)
    if match:
        return match.group(0) + " [message hidden]"
    return "[Commit message hidden]"


# --- Time ---

def parse_timestamp(commit: CommitRecord) -> datetime | None:
    """Timezone-aware commit time, or None when absent or unparseable.

    Naive timestamps are read as UTC.
    """
    raw = _text(commit.get("timestamp"))
    if raw is None:
        return None
    if raw[-1] in "Zz":
        raw = raw[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def to_display_time(ts: datetime, settings: Settings) -> datetime:
    return ts.astimezone(timezone.utc) if settings.use_utc else ts.astimezone()


def commit_day(commit: CommitRecord) -> str | None:
    """Calendar date (YYYY-MM-DD) as written in the timestamp."""
    ts = parse_timestamp(commit)
    return ts.date().isoformat() if ts else None


def commit_month(commit: CommitRecord) -> str | None:
    day = commit_day(commit)
    return day[:7] if day else None


def day_of_week(day: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def get_commit_datetime(commit: CommitRecord, settings: Settings | None = None) -> CommitDateTime | None:
    ts = parse_timestamp(commit)
    if ts is None:
        return None
    local = to_display_time(ts, settings or _DEFAULT_SETTINGS)
    return CommitDateTime(hour=local.hour, day_of_week=day_of_week(local.date()))


def is_after_hours(hour: int, settings: Settings) -> bool:
    return hour < settings.work_hour_start or hour >= settings.work_hour_end


def is_weekend(dow: int) -> bool:
    return dow in (0, 6)


def get_work_pattern(
    commit: CommitRecord,
    settings: Settings | None = None,
    is_holiday: HolidayPredicate | None = None,
) -> WorkPattern:
    settings = settings or _DEFAULT_SETTINGS
    when = get_commit_datetime(commit, settings)
    day = commit_day(commit)
    if when is None or day is None:
        return WorkPattern()
    holiday = bool(is_holiday and is_holiday(date.fromisoformat(day)))
    return WorkPattern(
        is_weekend=is_weekend(when.day_of_week),
        is_after_hours=is_after_hours(when.hour, settings),
        is_holiday=holiday,
        hour=when.hour,
        day_of_week=when.day_of_week,
        date_str=day,
    )
