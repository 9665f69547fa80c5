from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any


def _default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(data: Any) -> str:
    raw = asdict(data) if is_dataclass(data) and not isinstance(data, type) else data
    return json.dumps(raw, indent=2, default=_default)


def serialize(data: Any, output_path: str | Path) -> None:
    output_path = Path(output_path)
    raw = asdict(data) if is_dataclass(data) and not isinstance(data, type) else data
    with output_path.open("w") as f:
        json.dump(raw, f, indent=2, default=_default)
