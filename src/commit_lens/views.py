from __future__ import annotations

from commit_lens.models import ViewConfig

DEFAULT_VIEW_LEVEL = "developer"

VIEW_LEVELS: dict[str, ViewConfig] = {
    "executive": ViewConfig(
        name="executive",
        label="Executive",
        contributors="total",
        timing="week",
        drilldown="summary",
        show_author_names=False,
        show_commit_messages=False,
    ),
    "management": ViewConfig(
        name="management",
        label="Management",
        contributors="repo",
        timing="day",
        drilldown="summary",
        show_author_names=True,
        show_commit_messages=False,
    ),
    "developer": ViewConfig(
        name="developer",
        label="Developer",
        contributors="individual",
        timing="hour",
        drilldown="commits",
    ),
}


def resolve_view(level: str | None) -> ViewConfig:
    """View config for ``level``; anything unknown gets the most granular view."""
    return VIEW_LEVELS.get(level or "", VIEW_LEVELS[DEFAULT_VIEW_LEVEL])
