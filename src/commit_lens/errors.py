from __future__ import annotations


class CommitLensError(Exception):
    """Base class for every error raised by commit-lens."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class DatasetLoadError(CommitLensError):
    """A dataset file could not be read, parsed, or is not a commit collection.

    Raised at the load boundary only. Aggregations never raise for data-shape
    problems inside individual commits.
    """


class FilterValidationError(CommitLensError, ValueError):
    """A filter spec is structurally invalid (unknown key, bad mode, bad date)."""


class ConfigError(CommitLensError):
    pass


class UnknownMetricError(CommitLensError, KeyError):
    pass


class UnknownDetailTargetError(CommitLensError, ValueError):
    pass
