from __future__ import annotations

import random
from collections import Counter
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from commit_lens.accessors import (
    get_additions,
    get_author_email,
    get_commit_datetime,
    get_commit_files,
    get_deletions,
    get_files_changed,
)
from commit_lens.aggregations.heatmap import DAY_NAMES
from commit_lens.aggregations.stats import percent
from commit_lens.errors import UnknownMetricError
from commit_lens.models import (
    CommitDateTime,
    CommitRecord,
    Comparison,
    ComparisonSide,
    FileInsight,
    MetricResult,
    Settings,
)
from commit_lens.predicates import (
    has_tag,
    is_bugfix,
    is_complex,
    is_feature,
    is_planned,
    is_reactive,
    is_simple,
    is_untagged,
)

DEFAULT_CARD_COUNT = 4
FILE_INSIGHT_LIMIT = 10
LARGE_COMMIT_LINES = 500

FILE_NAME_ADJECTIVES = [
    "Whimsical", "Grumpy", "Sleepy", "Dancing", "Sneaky", "Jolly", "Mysterious", "Brave",
    "Lazy", "Mighty", "Tiny", "Giant", "Ancient", "Cosmic", "Fluffy", "Sparkly", "Rusty",
    "Golden", "Silver", "Crystal", "Thunder", "Shadow", "Lucky", "Wild", "Calm", "Swift",
]
FILE_NAME_NOUNS = [
    "Penguin", "Dragon", "Unicorn", "Wizard", "Robot", "Ninja", "Pirate", "Llama",
    "Phoenix", "Kraken", "Goblin", "Sphinx", "Yeti", "Griffin", "Mermaid", "Centaur",
    "Cyclops", "Hydra", "Chimera", "Basilisk", "Troll", "Ogre", "Fairy", "Gnome", "Sprite",
]

MetricFn = Callable[[list[CommitRecord], Settings], MetricResult]


@dataclass(frozen=True)
class DiscoverMetric:
    id: str
    label: str
    calculate: MetricFn


def _lines(commit: CommitRecord) -> int:
    return get_additions(commit) + get_deletions(commit)


def _times(commits: list[CommitRecord], settings: Settings) -> list[CommitDateTime]:
    return [t for t in (get_commit_datetime(c, settings) for c in commits) if t is not None]


def _share(count: int, commits: list[CommitRecord], sub: str) -> MetricResult:
    return MetricResult(value=f"{percent(count, len(commits))}%", sub=sub)


def _net_growth(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    net = sum(get_additions(c) for c in commits) - sum(get_deletions(c) for c in commits)
    return MetricResult(value=f"+{net:,}" if net >= 0 else f"{net:,}", sub="lines")


def _avg_commit_size(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    total = sum(_lines(c) for c in commits)
    avg = (2 * total + len(commits)) // (2 * len(commits)) if commits else 0
    return MetricResult(value=f"{avg:,}", sub="lines/commit")


def _deletion_ratio(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    dels = sum(get_deletions(c) for c in commits)
    total = sum(get_additions(c) for c in commits) + dels
    return MetricResult(value=f"{percent(dels, total)}%", sub="of changes")


def _feature_bug_ratio(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    features = sum(1 for c in commits if is_feature(c))
    bugs = sum(1 for c in commits if is_bugfix(c))
    if bugs == 0:
        return MetricResult(value=f"{features}:0", sub="features to bugs")
    return MetricResult(value=f"{features / bugs:.1f}:1", sub="features to bugs")


def _tag_share(tag: str, noun: str) -> MetricFn:
    def calculate(commits: list[CommitRecord], settings: Settings) -> MetricResult:
        count = sum(1 for c in commits if has_tag(c, tag))
        return _share(count, commits, f"{count} {noun}")

    return calculate


def _untagged(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    count = sum(1 for c in commits if is_untagged(c))
    return MetricResult(value=f"{count:,}", sub=f"{percent(count, len(commits))}% of total")


def _breaking_changes(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    count = sum(1 for c in commits if c.get("has_breaking_change") is True)
    return MetricResult(value=f"{count:,}", sub="commits")


def _peak_hour(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    counts = Counter(t.hour for t in _times(commits, settings))
    if not counts:
        return MetricResult(value="-", sub="")
    hour, n = counts.most_common(1)[0]
    suffix = "PM" if hour >= 12 else "AM"
    return MetricResult(value=f"{hour % 12 or 12}{suffix}", sub=f"{n} commits")


def _peak_day(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    counts = Counter(t.day_of_week for t in _times(commits, settings))
    if not counts:
        return MetricResult(value="-", sub="")
    day, n = counts.most_common(1)[0]
    return MetricResult(value=DAY_NAMES[day], sub=f"{n} commits")


def _top_contributor(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    counts = Counter(get_author_email(c) for c in commits)
    if not counts:
        return MetricResult(value="-", sub="")
    _, n = counts.most_common(1)[0]
    return MetricResult(value=f"{percent(n, len(commits))}%", sub="of commits")


def _contributor_count(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    return MetricResult(value=f"{len({get_author_email(c) for c in commits}):,}", sub="unique authors")


def _avg_files(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    if not commits:
        return MetricResult(value="0", sub="files changed")
    avg = sum(get_files_changed(c) for c in commits) / len(commits)
    return MetricResult(value=f"{avg:.1f}", sub="files changed")


def _single_file(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    count = sum(1 for c in commits if get_files_changed(c) == 1)
    return _share(count, commits, f"{count} commits")


def _large_commits(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    count = sum(1 for c in commits if _lines(c) > LARGE_COMMIT_LINES)
    return MetricResult(value=f"{count:,}", sub=f"{percent(count, len(commits))}% over {LARGE_COMMIT_LINES} lines")


def _security(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    count = sum(1 for c in commits if has_tag(c, "security"))
    return MetricResult(value=f"{count:,}", sub="security commits")


def _hour_share(start: int, end: int, sub: str) -> MetricFn:
    def calculate(commits: list[CommitRecord], settings: Settings) -> MetricResult:
        if start < end:
            count = sum(1 for t in _times(commits, settings) if start <= t.hour < end)
        else:
            count = sum(1 for t in _times(commits, settings) if t.hour >= start or t.hour < end)
        return _share(count, commits, f"{count} commits ({sub})")

    return calculate


def _weekend(commits: list[CommitRecord], settings: Settings) -> MetricResult:
    count = sum(1 for t in _times(commits, settings) if t.day_of_week in (0, 6))
    return _share(count, commits, f"{count} commits")


DISCOVER_METRICS: dict[str, DiscoverMetric] = {
    m.id: m
    for m in [
        DiscoverMetric("net-growth", "Net Code Growth", _net_growth),
        DiscoverMetric("avg-commit-size", "Avg Commit Size", _avg_commit_size),
        DiscoverMetric("deletion-ratio", "Deletion Ratio", _deletion_ratio),
        DiscoverMetric("feature-bug-ratio", "Feature:Bug Ratio", _feature_bug_ratio),
        DiscoverMetric("test-investment", "Test Investment", _tag_share("test", "test commits")),
        DiscoverMetric("docs-investment", "Docs Investment", _tag_share("docs", "doc commits")),
        DiscoverMetric("untagged-commits", "Untagged Commits", _untagged),
        DiscoverMetric("breaking-changes", "Breaking Changes", _breaking_changes),
        DiscoverMetric("peak-hour", "Peak Hour", _peak_hour),
        DiscoverMetric("peak-day", "Peak Day", _peak_day),
        DiscoverMetric("top-contributor", "Top Contributor", _top_contributor),
        DiscoverMetric("contributor-count", "Active Contributors", _contributor_count),
        DiscoverMetric("avg-files-per-commit", "Avg Files/Commit", _avg_files),
        DiscoverMetric("single-file-commits", "Single-File Commits", _single_file),
        DiscoverMetric("large-commits", "Large Commits", _large_commits),
        DiscoverMetric("refactor-ratio", "Refactor Work", _tag_share("refactor", "refactors")),
        DiscoverMetric("security-commits", "Security Work", _security),
        DiscoverMetric("weekend-work", "Weekend Work", _weekend),
        DiscoverMetric("night-owl", "Night Owl Work", _hour_share(22, 6, "10PM-6AM")),
        DiscoverMetric("early-bird", "Early Bird Work", _hour_share(5, 9, "5-9AM")),
    ]
}


def compute_metric(metric_id: str, commits: list[CommitRecord], settings: Settings) -> MetricResult:
    metric = DISCOVER_METRICS.get(metric_id)
    if metric is None:
        raise UnknownMetricError("Unknown discover metric", {"metric": metric_id})
    return metric.calculate(commits, settings)


def pick_metrics(
    count: int = DEFAULT_CARD_COUNT,
    pinned: Mapping[int, str] | None = None,
    rng: random.Random | None = None,
) -> list[str | None]:
    """Metric ids for ``count`` card slots.

    Pinned slots keep their metric; the rest draw at random without repeats.
    Slots stay None once the pool runs out.
    """
    rng = rng or random.Random()
    slots: list[str | None] = [None] * count
    used: set[str] = set()
    for index, metric_id in (pinned or {}).items():
        if 0 <= index < count and metric_id in DISCOVER_METRICS and metric_id not in used:
            slots[index] = metric_id
            used.add(metric_id)
    available = [m for m in DISCOVER_METRICS if m not in used]
    for index in range(count):
        if slots[index] is None and available:
            slots[index] = available.pop(rng.randrange(len(available)))
    return slots


def _comparison(label: str, left: tuple[str, int], right: tuple[str, int]) -> Comparison:
    total = left[1] + right[1]
    left_pct = percent(left[1], total) if total else 50
    return Comparison(
        label=label,
        left=ComparisonSide(label=left[0], value=left[1], percent=left_pct),
        right=ComparisonSide(label=right[0], value=right[1], percent=100 - left_pct),
    )


def comparisons(commits: list[CommitRecord], settings: Settings) -> list[Comparison]:
    """Two-sided splits of the commit set; a split with nothing on either side is left out."""
    def count(pred: Callable[[CommitRecord], bool]) -> int:
        return sum(1 for c in commits if pred(c))

    weekend = sum(1 for t in _times(commits, settings) if t.day_of_week in (0, 6))
    splits = [
        ("Weekend vs Weekday", ("Weekend", weekend), ("Weekday", len(commits) - weekend)),
        ("Features vs Bug Fixes", ("Features", count(is_feature)), ("Bug Fixes", count(is_bugfix))),
        (
            "Additions vs Deletions",
            ("Added", sum(get_additions(c) for c in commits)),
            ("Deleted", sum(get_deletions(c) for c in commits)),
        ),
        ("Planned vs Reactive", ("Planned", count(is_planned)), ("Reactive", count(is_reactive))),
        ("Simple vs Complex", ("Simple", count(is_simple)), ("Complex", count(is_complex))),
    ]
    return [_comparison(label, left, right) for label, left, right in splits if left[1] + right[1] > 0]


def _js_string_hash(text: str) -> int:
    """32-bit signed rolling hash over UTF-16 code units (h * 31 + unit)."""
    data = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    return h - (1 << 32) if h >= (1 << 31) else h


def playful_file_name(path: str) -> str:
    """Stable whimsical alias for a file path."""
    h = _js_string_hash(path)
    adjective = FILE_NAME_ADJECTIVES[abs(h) % len(FILE_NAME_ADJECTIVES)]
    noun = FILE_NAME_NOUNS[abs(h >> 8) % len(FILE_NAME_NOUNS)]
    return f"{adjective} {noun}"


def file_insights(commits: list[CommitRecord], limit: int = FILE_INSIGHT_LIMIT) -> list[FileInsight]:
    """Most frequently changed files; percent is relative to the busiest file."""
    counts: Counter[str] = Counter()
    for c in commits:
        counts.update(get_commit_files(c))
    top = counts.most_common(limit)
    if not top:
        return []
    busiest = top[0][1]
    return [
        FileInsight(path=path, name=playful_file_name(path), count=n, percent=percent(n, busiest))
        for path, n in top
    ]
