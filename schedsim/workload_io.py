from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, List, Mapping, Optional

from .errors import WorkloadFormatError
from .models import Number, Process


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise WorkloadFormatError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadFormatError(f"{path}: invalid JSON ({exc})") from exc

    if not isinstance(raw, list):
        raise WorkloadFormatError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _number(value: Any) -> Number:
    """
    Parse a workload number, keeping integral values as ``int``.
    """
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def _optional_number(value: Any) -> Optional[Number]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _number(value)


def _process_from_mapping(mapping: Mapping[str, Any]) -> Process:
    try:
        pid_value = mapping.get("process_id", mapping.get("pid"))
        if pid_value is None:
            raise KeyError("process_id")
        burst_time = _number(mapping["burst_time"])
        arrival_time = _optional_number(mapping.get("arrival_time"))
        priority = _optional_number(mapping.get("priority"))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise WorkloadFormatError(f"Invalid process entry: {mapping!r}") from exc

    return Process(
        process_id=str(pid_value).strip(),
        burst_time=burst_time,
        arrival_time=arrival_time if arrival_time is not None else 0,
        priority=priority,
    )
