from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, List

from .models import HIGH, Process


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a process registry from a JSON or CSV file.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, Iterable) or isinstance(raw, (str, dict)):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _optional_int(mapping, key: str):
    value = mapping.get(key)
    if value in (None, ""):
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"Invalid {key} in process entry: {mapping!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {key} in process entry: {mapping!r}") from exc


def _required_int(mapping, key: str) -> int:
    value = _optional_int(mapping, key)
    if value is None:
        raise ValueError(f"Missing {key} in process entry: {mapping!r}")
    return value


def _process_from_mapping(mapping) -> Process:
    if not hasattr(mapping, "get"):
        raise ValueError(f"Process entry must be an object, got {mapping!r}")
    pid = mapping.get("pid")
    if pid in (None, ""):
        raise ValueError(f"Missing pid in process entry: {mapping!r}")
    pid = str(pid)
    queue_class = _optional_int(mapping, "queue")

    return Process(
        pid=pid,
        name=str(mapping.get("name") or pid),
        arrival_time=_required_int(mapping, "arrival_time"),
        burst_time=_required_int(mapping, "burst_time"),
        priority=_optional_int(mapping, "priority"),
        queue_class=HIGH if queue_class is None else queue_class,
        color=mapping.get("color") or None,
    )
