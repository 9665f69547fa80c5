from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from commit_lens.errors import DatasetLoadError
from commit_lens.models import CommitRecord, Dataset

logger = logging.getLogger(__name__)

# Metadata keys recomputed, or moved onto commits, when datasets are combined.
_DERIVED_KEYS = ("repo_name", "generated_at", "total_commits", "repo_id", "repository")


def _resolve_author(commit: CommitRecord, authors: dict[str, Any]) -> CommitRecord:
    author_id = commit.get("author_id")
    if isinstance(commit.get("author"), dict) or not isinstance(author_id, str):
        return commit
    entry = authors.get(author_id)
    if not isinstance(entry, dict):
        return commit
    resolved = dict(commit)
    resolved["author"] = {"name": entry.get("name"), "email": entry.get("email")}
    return resolved


def parse_dataset(raw: Any, source: str = "<memory>") -> Dataset:
    """Validate a decoded dataset document and normalize its commits.

    ``metadata.authors`` entries are copied onto commits that only carry an
    ``author_id``; the input document is left untouched.
    """
    if not isinstance(raw, dict):
        raise DatasetLoadError("Dataset must be a JSON object", {"source": source})
    commits = raw.get("commits")
    if not isinstance(commits, list):
        raise DatasetLoadError("Dataset has no commits list", {"source": source})
    metadata = raw.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise DatasetLoadError("Dataset metadata must be an object", {"source": source})

    records = [c for c in commits if isinstance(c, dict)]
    if len(records) != len(commits):
        logger.warning("Skipped %d non-object commit entries in %s", len(commits) - len(records), source)

    authors = metadata.get("authors")
    if isinstance(authors, dict) and authors:
        records = [_resolve_author(c, authors) for c in records]

    return Dataset(commits=records, metadata=dict(metadata))


def read_dataset(path: str | Path) -> Dataset:
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise DatasetLoadError("Cannot read dataset file", {"path": str(path), "error": e.strerror or str(e)}) from e
    except json.JSONDecodeError as e:
        raise DatasetLoadError("Dataset file is not valid JSON", {"path": str(path), "error": str(e)}) from e
    dataset = parse_dataset(raw, source=str(path))
    logger.info("Read %d commits from %s", len(dataset.commits), path)
    return dataset


def _repo_names(metadata: dict[str, Any]) -> list[Any]:
    names = metadata.get("repo_name")
    if not names:
        return []
    return list(names) if isinstance(names, list) else [names]


def _with_repo(commit: CommitRecord, repo_id: Any) -> CommitRecord:
    if not repo_id or commit.get("repo_id"):
        return commit
    tagged = dict(commit)
    tagged["repo_id"] = repo_id
    return tagged


def combine_datasets(datasets: list[Dataset], now: datetime | None = None) -> Dataset | None:
    """Merge datasets in order. A single dataset is returned as is; none gives None.

    Commits without a ``repo_id`` take their file's ``metadata.repo_id`` (or
    ``metadata.repository``), so one file per repository still groups by repo.
    """
    if not datasets:
        return None
    if len(datasets) == 1:
        return datasets[0]

    commits: list[CommitRecord] = []
    names: list[Any] = []
    metadata: dict[str, Any] = {}
    for dataset in datasets:
        repo_id = dataset.metadata.get("repo_id") or dataset.metadata.get("repository")
        commits.extend(_with_repo(c, repo_id) for c in dataset.commits)
        for name in _repo_names(dataset.metadata):
            if name not in names:
                names.append(name)
        for key, value in dataset.metadata.items():
            if key not in _DERIVED_KEYS:
                metadata[key] = value

    if names:
        metadata["repo_name"] = names[0] if len(names) == 1 else names
    metadata["generated_at"] = (now or datetime.now(timezone.utc)).isoformat()
    metadata["total_commits"] = len(commits)
    return Dataset(commits=commits, metadata=metadata)


class DatasetStore:
    """Holds the installed dataset and swaps it only on a fully successful load."""

    def __init__(self, dataset: Dataset | None = None) -> None:
        self.dataset = dataset

    @property
    def commits(self) -> list[CommitRecord]:
        return self.dataset.commits if self.dataset else []

    def install(self, datasets: list[Dataset]) -> Dataset:
        combined = combine_datasets(datasets)
        if combined is None:
            raise DatasetLoadError("No datasets to load")
        self.dataset = combined
        return combined

    def load_files(self, paths: Iterable[str | Path]) -> Dataset:
        paths = list(paths)
        if not paths:
            raise DatasetLoadError("No dataset files given")
        try:
            parsed = [read_dataset(p) for p in paths]
        except DatasetLoadError as e:
            logger.error("Dataset load rejected, keeping the previous dataset: %s", e)
            raise
        dataset = self.install(parsed)
        logger.info("Loaded %d commits from %d file(s)", len(dataset.commits), len(paths))
        return dataset
