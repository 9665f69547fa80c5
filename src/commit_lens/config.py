from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

from commit_lens.errors import ConfigError
from commit_lens.holidays import HolidayCalendar, HolidayPredicate
from commit_lens.state import DEFAULT_WORK_HOUR_END, DEFAULT_WORK_HOUR_START, SessionState
from commit_lens.views import DEFAULT_VIEW_LEVEL, VIEW_LEVELS

DEFAULT_STATE_FILE = ".commit-lens/state.json"
TIMEZONES = ("local", "utc")


@dataclass
class DataConfig:
    files: list[str] = field(default_factory=list)


@dataclass
class ViewDefaults:
    level: str = DEFAULT_VIEW_LEVEL
    timezone: str = "local"
    work_hour_start: int = DEFAULT_WORK_HOUR_START
    work_hour_end: int = DEFAULT_WORK_HOUR_END


@dataclass
class HolidayConfig:
    enabled: bool = True
    first_year: int = 2020
    last_year: int = 2030


@dataclass
class Config:
    data: DataConfig = field(default_factory=DataConfig)
    view: ViewDefaults = field(default_factory=ViewDefaults)
    holidays: HolidayConfig = field(default_factory=HolidayConfig)
    state_file: str = DEFAULT_STATE_FILE
    sanitize: bool = False

    def session_defaults(self) -> SessionState:
        return SessionState(
            view_level=self.view.level,
            use_utc=self.view.timezone == "utc",
            work_hour_start=self.view.work_hour_start,
            work_hour_end=self.view.work_hour_end,
        )

    def holiday_calendar(self) -> HolidayPredicate | None:
        if not self.holidays.enabled:
            return None
        return HolidayCalendar.south_africa(self.holidays.first_year, self.holidays.last_year)


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _int(raw: dict, key: str, default: int) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError("Expected an integer", {"key": key, "value": str(value)})
    return value


def _section(raw: dict, key: str) -> dict:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError("Expected a mapping", {"key": key})
    return value


def _resolve(base: Path, path: str) -> str:
    return str((base / path).resolve())


def _validate(config: Config) -> None:
    if config.view.level not in VIEW_LEVELS:
        raise ConfigError("Unknown view level", {"level": config.view.level})
    if config.view.timezone not in TIMEZONES:
        raise ConfigError("Timezone must be local or utc", {"timezone": config.view.timezone})
    start, end = config.view.work_hour_start, config.view.work_hour_end
    if not (0 <= start < end <= 24):
        raise ConfigError("Invalid work hours", {"start": str(start), "end": str(end)})
    if config.holidays.first_year > config.holidays.last_year:
        raise ConfigError("Holiday year range is empty")


def load_config(config_path: str | Path | None = None) -> Config:
    """Configuration from an optional YAML file, then environment overrides.

    Paths in the file are resolved against the file's directory.
    """
    load_dotenv()

    raw: dict = {}
    base = Path.cwd()
    if config_path is not None:
        config_path = Path(config_path)
        base = config_path.parent
        try:
            with config_path.open() as f:
                raw = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError("Cannot read config file", {"path": str(config_path)}) from e
        except yaml.YAMLError as e:
            raise ConfigError("Config file is not valid YAML", {"path": str(config_path)}) from e
        if not isinstance(raw, dict):
            raise ConfigError("Config file must be a mapping", {"path": str(config_path)})

    data_raw = _section(raw, "data")
    files = data_raw.get("files", [])
    if isinstance(files, str):
        files = [files]
    data = DataConfig(files=[_resolve(base, p) for p in files])

    view_raw = _section(raw, "view")
    hours_raw = _section(view_raw, "work_hours")
    view = ViewDefaults(
        level=view_raw.get("level", DEFAULT_VIEW_LEVEL),
        timezone=view_raw.get("timezone", "local"),
        work_hour_start=_int(hours_raw, "start", DEFAULT_WORK_HOUR_START),
        work_hour_end=_int(hours_raw, "end", DEFAULT_WORK_HOUR_END),
    )

    hol_raw = _section(raw, "holidays")
    holidays = HolidayConfig(
        enabled=hol_raw.get("enabled", True),
        first_year=_int(hol_raw, "first_year", 2020),
        last_year=_int(hol_raw, "last_year", 2030),
    )

    config = Config(
        data=data,
        view=view,
        holidays=holidays,
        state_file=_resolve(base, raw.get("state_file", DEFAULT_STATE_FILE)),
        sanitize=_section(raw, "privacy").get("sanitize", False),
    )

    # Environment overrides
    env_files = os.environ.get("COMMIT_LENS_DATA_FILES")
    if env_files:
        config.data.files = [str(Path(p).resolve()) for p in env_files.split(os.pathsep) if p]
    if os.environ.get("COMMIT_LENS_STATE_FILE"):
        config.state_file = str(Path(os.environ["COMMIT_LENS_STATE_FILE"]).resolve())
    if os.environ.get("COMMIT_LENS_VIEW_LEVEL"):
        config.view.level = os.environ["COMMIT_LENS_VIEW_LEVEL"]
    if os.environ.get("COMMIT_LENS_TIMEZONE"):
        config.view.timezone = os.environ["COMMIT_LENS_TIMEZONE"].lower()
    if os.environ.get("COMMIT_LENS_SANITIZE"):
        config.sanitize = _flag(os.environ["COMMIT_LENS_SANITIZE"])

    _validate(config)
    return config
