"""JSON-ready rendering of snapshots with the stable camelCase field contract."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from enum import Enum
from typing import Any

from .models import MetricsSnapshot


VIEWS = ("dashboard", "cpu", "memory", "disks", "networks", "processes", "alerts")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel(k) if isinstance(k, str) else k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def snapshot_to_dict(snapshot: MetricsSnapshot) -> dict[str, Any]:
    return _jsonable(asdict(snapshot))


def snapshot_view(snapshot: MetricsSnapshot, view: str) -> dict[str, Any]:
    """One slice of the snapshot paired with its capture time."""
    if view not in VIEWS:
        raise ValueError(f"unknown view {view!r}; expected one of {', '.join(VIEWS)}")
    full = snapshot_to_dict(snapshot)
    out = {view: full[view], "timestamp": full["systemInfo"]["timestamp"]}
    if view == "dashboard":
        out["alerts"] = full["alerts"]
    return out
