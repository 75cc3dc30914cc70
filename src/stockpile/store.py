"""Whole-file persistent store for record snapshots.

The backing file holds one JSON document. It is read once when the store is
opened and rewritten in full on every ``save``; there are no incremental
writes. Layout::

    {"records": [{"type": "InventoryItem", "key": "abc-4589", "fields": {...}}, ...]}

Entries are stored as a list rather than a nested object so that non-string
primary keys survive the round trip.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from stockpile.errors import PersistFailed, StoreUnavailable

logger = logging.getLogger(__name__)


class PersistentStore:
    """entity type → primary key → field snapshot, loaded and saved wholesale."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._data: dict[str, dict[Any, dict[str, Any]]] = {}
        self._ensure_initialized()
        self._load()

    # ── Open ─────────────────────────────────────────────────

    def _ensure_initialized(self) -> None:
        """Create an empty backing file if none exists and check access."""
        if not self.path.exists():
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.touch()
            except OSError as e:
                raise StoreUnavailable(
                    f"Could not create data store file {self.path}: {e}"
                ) from e
            logger.info("Created empty data store: %s", self.path)
        if not os.access(self.path, os.R_OK | os.W_OK):
            raise StoreUnavailable(f"Data store file {self.path} must be readable/writable.")

    def _load(self) -> None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreUnavailable(f"Read of data store file {self.path} failed: {e}") from e
        if not raw.strip():
            return
        try:
            document = json.loads(raw)
            for entry in document["records"]:
                self.put(entry["type"], entry["key"], entry["fields"])
        except (ValueError, KeyError, TypeError) as e:
            raise StoreUnavailable(f"Data store file {self.path} is corrupt: {e}") from e
        logger.debug("Loaded %d entity type(s) from %s", len(self._data), self.path)

    # ── Access ───────────────────────────────────────────────

    def get(self, entity_type: str, primary_key: Any) -> dict[str, Any] | None:
        return self._data.get(entity_type, {}).get(primary_key)

    def put(self, entity_type: str, primary_key: Any, snapshot: dict[str, Any]) -> None:
        self._data.setdefault(entity_type, {})[primary_key] = dict(snapshot)

    def remove(self, entity_type: str, primary_key: Any) -> None:
        items = self._data.get(entity_type)
        if items is None or primary_key not in items:
            return
        del items[primary_key]
        if not items:
            del self._data[entity_type]

    def list_entity_types(self) -> list[str]:
        return list(self._data)

    def list_keys(self, entity_type: str) -> list[Any]:
        return list(self._data.get(entity_type, {}))

    def __len__(self) -> int:
        return sum(len(items) for items in self._data.values())

    # ── Save ─────────────────────────────────────────────────

    def _serialize(self) -> str:
        records = [
            {"type": entity_type, "key": key, "fields": fields}
            for entity_type, items in self._data.items()
            for key, fields in items.items()
        ]
        return json.dumps({"records": records}, ensure_ascii=False, indent=2)

    def save(self) -> None:
        """Replace the backing file with the full current mapping."""
        tmp_name: str | None = None
        try:
            content = self._serialize()
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            if self.path.exists():
                shutil.copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise PersistFailed(f"Write of data store file {self.path} failed: {e}") from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        logger.info("Saved %d record(s) to %s", len(self), self.path)
