"""Shared fixtures: a manager on a temp store plus recording observers."""

from __future__ import annotations

from pathlib import Path

import pytest

from stockpile.manager import RecordManager
from stockpile.notify.base import ObserverCategory, UpdateEvent


class RecordingObserver:
    category = ObserverCategory.GENERAL

    def __init__(self) -> None:
        self.events: list[UpdateEvent] = []

    def update(self, event: UpdateEvent) -> None:
        self.events.append(event)

    @property
    def snapshots(self) -> list[dict]:
        return [e.snapshot for e in self.events]


class RecordingAlertObserver(RecordingObserver):
    category = ObserverCategory.THRESHOLD_ALERT


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "store.json"


@pytest.fixture
def manager(store_path: Path) -> RecordManager:
    return RecordManager(store_path)


@pytest.fixture
def general(manager: RecordManager) -> RecordingObserver:
    observer = RecordingObserver()
    manager.attach(observer)
    return observer


@pytest.fixture
def alerts(manager: RecordManager) -> RecordingAlertObserver:
    observer = RecordingAlertObserver()
    manager.attach(observer)
    return observer
