from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from commit_lens.filters import default_filter_spec, load_filter_spec
from commit_lens.models import FilterSpec, Settings
from commit_lens.views import DEFAULT_VIEW_LEVEL, VIEW_LEVELS

logger = logging.getLogger(__name__)

DEFAULT_WORK_HOUR_START = 8
DEFAULT_WORK_HOUR_END = 17


@dataclass
class SessionState:
    filters: FilterSpec = field(default_factory=default_filter_spec)
    view_level: str = DEFAULT_VIEW_LEVEL
    use_utc: bool = False
    work_hour_start: int = DEFAULT_WORK_HOUR_START
    work_hour_end: int = DEFAULT_WORK_HOUR_END

    def settings(self, sanitize: bool = False) -> Settings:
        return Settings(
            use_utc=self.use_utc,
            work_hour_start=self.work_hour_start,
            work_hour_end=self.work_hour_end,
            sanitize=sanitize,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "filters": self.filters.to_dict(),
            "view_level": self.view_level,
            "use_utc": self.use_utc,
            "work_hour_start": self.work_hour_start,
            "work_hour_end": self.work_hour_end,
        }


def _pick(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _hour(value: Any, default: int, low: int, high: int, name: str) -> int:
    if value is None:
        return default
    if isinstance(value, int) and not isinstance(value, bool) and low <= value <= high:
        return value
    logger.warning("Ignoring persisted %s=%r, using %d", name, value, default)
    return default


def state_from_dict(raw: Any, defaults: SessionState | None = None) -> SessionState:
    """Session state with each field validated on its own.

    Missing or invalid fields take their value from ``defaults`` (the built-in
    defaults when not given).
    """
    defaults = defaults or SessionState()
    if not isinstance(raw, dict):
        logger.warning("Persisted session state is not an object, using defaults")
        return replace(defaults)

    view_level = _pick(raw, "view_level", "viewLevel")
    if view_level is not None and view_level not in VIEW_LEVELS:
        logger.warning("Ignoring unknown persisted view level %r", view_level)
        view_level = None

    use_utc = _pick(raw, "use_utc", "useUTC")
    if use_utc is not None and not isinstance(use_utc, bool):
        logger.warning("Ignoring persisted use_utc=%r", use_utc)
        use_utc = None

    start = _hour(_pick(raw, "work_hour_start", "workHourStart"), defaults.work_hour_start, 0, 23, "work_hour_start")
    end = _hour(_pick(raw, "work_hour_end", "workHourEnd"), defaults.work_hour_end, 1, 24, "work_hour_end")
    if start >= end:
        logger.warning("Persisted work hours %d-%d are empty, using defaults", start, end)
        start, end = defaults.work_hour_start, defaults.work_hour_end

    filters = defaults.filters if raw.get("filters") is None else load_filter_spec(raw["filters"])
    return SessionState(
        filters=filters,
        view_level=view_level or defaults.view_level,
        use_utc=defaults.use_utc if use_utc is None else use_utc,
        work_hour_start=start,
        work_hour_end=end,
    )


def load_state(path: str | Path, defaults: SessionState | None = None) -> SessionState:
    path = Path(path)
    if not path.exists():
        return replace(defaults) if defaults else SessionState()
    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Cannot read session state from %s (%s), using defaults", path, e)
        return replace(defaults) if defaults else SessionState()
    return state_from_dict(raw, defaults)


def save_state(state: SessionState, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(state.to_dict(), f, indent=2)
    logger.debug("Saved session state to %s", path)
