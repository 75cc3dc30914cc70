"""Observer protocol and shared types."""

from __future__ import annotations

import enum
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from stockpile.errors import SideChannelUnavailable

if TYPE_CHECKING:
    from stockpile.manager import RecordManager
    from stockpile.records.base import Record


class ObserverCategory(str, enum.Enum):
    """Which dispatches an observer takes part in."""

    GENERAL = "general"
    THRESHOLD_ALERT = "threshold_alert"


@dataclass(frozen=True)
class UpdateEvent:
    """One applied record update, routed to a single observer category.

    ``routing`` is decided by the manager when the update is applied; the hub
    only reads it.
    """

    subject: RecordManager
    record: Record
    snapshot: dict[str, Any]
    previous: dict[str, Any] = field(default_factory=dict)
    routing: ObserverCategory = ObserverCategory.GENERAL

    @property
    def is_threshold_alert(self) -> bool:
        return self.routing is ObserverCategory.THRESHOLD_ALERT


@runtime_checkable
class Observer(Protocol):
    """Protocol that all update observers must implement."""

    @property
    def category(self) -> ObserverCategory: ...

    def update(self, event: UpdateEvent) -> None:
        """Handle an update event. Must not raise; log failures instead."""
        ...


def check_side_channel(path: Path | str) -> Path:
    """Validate an append-only log path at observer construction."""
    if not str(path):
        raise SideChannelUnavailable("Side-channel log path cannot be empty.")
    path = Path(path)
    if path.is_dir():
        raise SideChannelUnavailable(f"Side-channel log {path} is a directory.")
    if path.exists() and not os.access(path, os.W_OK):
        raise SideChannelUnavailable(f"Side-channel log {path} must be writable.")
    return path


def append_json_line(path: Path, payload: dict[str, Any]) -> None:
    """Append one JSON record to ``path``, creating it (and its parent) if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(payload, ensure_ascii=False) + "\n")
