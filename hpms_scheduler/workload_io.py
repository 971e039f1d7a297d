from __future__ import annotations

import csv
import json
import logging
import re
from pathlib import Path
from typing import List

from .errors import WorkloadError
from .models import ProcessDescriptor
from .scenarios import Workload, build_workload

logger = logging.getLogger(__name__)

# Lowest urgency used by the built-in scenarios; applied when a file omits it.
DEFAULT_PRIORITY = 5

_INT_TEXT = re.compile(r"^[+-]?\d+$")


def load_workload(path: str | Path) -> Workload:
    """
    Load a workload from a JSON or CSV file into validated process descriptors.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".json":
            processes = _load_json(path)
        elif suffix == ".csv":
            processes = _load_csv(path)
        else:
            raise WorkloadError(f"Unsupported workload format: {suffix} (use .json or .csv)")
    except (OSError, UnicodeDecodeError) as exc:
        raise WorkloadError(f"Cannot read workload {path}: {exc}") from exc

    logger.info("Loaded %d processes from %s", len(processes), path)
    return build_workload(processes)


def _load_json(path: Path) -> List[ProcessDescriptor]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[ProcessDescriptor]:
    processes: List[ProcessDescriptor] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _as_int(value, field: str, mapping) -> int:
    """
    Accept JSON integers and CSV digit strings only; fractions, booleans and
    anything else would change the workload if coerced.
    """
    if isinstance(value, bool):
        raise WorkloadError(f"Field '{field}' must be an integer in process entry: {mapping!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_TEXT.match(value.strip()):
        return int(value.strip())
    raise WorkloadError(f"Field '{field}' must be an integer in process entry: {mapping!r}")


def _process_from_mapping(mapping) -> ProcessDescriptor:
    if not isinstance(mapping, dict):
        raise WorkloadError(f"Invalid process entry: {mapping!r}")

    try:
        pid = _as_int(mapping["pid"], "pid", mapping)
        arrival_time = _as_int(mapping["arrival_time"], "arrival_time", mapping)
        burst_time = _as_int(mapping["burst_time"], "burst_time", mapping)
    except KeyError as exc:
        raise WorkloadError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    if priority_val in (None, ""):
        priority = DEFAULT_PRIORITY
    else:
        priority = _as_int(priority_val, "priority", mapping)

    return ProcessDescriptor(
        pid=pid,
        name=str(mapping.get("name") or f"P{pid}"),
        classification=str(mapping.get("classification") or ""),
        priority=priority,
        arrival_time=arrival_time,
        burst_time=burst_time,
    )
