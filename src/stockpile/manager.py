"""Record manager — identity map, unit of work and update dispatch.

Responsibilities:
1. Identity map — runtime id ↔ (entity type, primary key), kept in lockstep
2. Unit of work — runtime ids whose snapshot has not been flushed yet
3. Record lifecycle — create / update / delete, including primary-key changes
4. Notification — build an UpdateEvent per applied update and hand it to the hub
5. Flush — write pending snapshots into the store and save it wholesale
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from stockpile.errors import DuplicatePrimaryKey, RecordRetired, UnknownRecord
from stockpile.notify.base import Observer, ObserverCategory, UpdateEvent
from stockpile.notify.hub import NotificationHub
from stockpile.records.base import Record, resolve_entity_type
from stockpile.store import PersistentStore

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 5

PrimaryRef = tuple[str, Any]  # (entity type, primary key)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def crosses_threshold(old: Any, new: Any, threshold: int = LOW_STOCK_THRESHOLD) -> bool:
    """True when a quantity drops from at/above ``threshold`` to below it."""
    return _is_number(old) and _is_number(new) and old >= threshold and new < threshold


class RecordManager:
    """Owns the live records of one store and everything that happens to them."""

    def __init__(
        self,
        store: PersistentStore | Path | str,
        hub: NotificationHub | None = None,
    ) -> None:
        self.store = store if isinstance(store, PersistentStore) else PersistentStore(store)
        self.hub = hub or NotificationHub()
        self.update_result: dict[str, Any] = {}
        self._records: dict[int, Record] = {}
        self._id_to_primary: dict[int, PrimaryRef] = {}
        self._primary_to_id: dict[PrimaryRef, int] = {}
        self._pending_save: dict[int, None] = {}  # ordered set
        self._next_id = 1
        self._rehydrate()

    def _rehydrate(self) -> None:
        for entity_type in self.store.list_entity_types():
            for key in self.store.list_keys(entity_type):
                self.create(entity_type, self.store.get(entity_type, key), from_store=True)
        logger.info("Rehydrated %d record(s) from %s", len(self._records), self.store.path)

    # ── Observer management ──────────────────────────────────

    def attach(self, observer: Observer) -> None:
        self.hub.attach(observer)

    def detach(self, observer: Observer) -> None:
        self.hub.detach(observer)

    # ── Identity map ─────────────────────────────────────────

    @property
    def pending_save(self) -> frozenset[int]:
        return frozenset(self._pending_save)

    def __len__(self) -> int:
        return len(self._records)

    def records(self, entity_type: str | type[Record] | None = None) -> Iterator[Record]:
        """Iterate live records in creation order, optionally of one type."""
        name = resolve_entity_type(entity_type).__name__ if entity_type else None
        for record in list(self._records.values()):
            if name is None or record.entity_type == name:
                yield record

    def get(self, runtime_id: int) -> Record | None:
        return self._records.get(runtime_id)

    def find_by_primary_key(self, entity_type: str | type[Record], primary_key: Any) -> Record | None:
        name = resolve_entity_type(entity_type).__name__
        runtime_id = self._primary_to_id.get((name, primary_key))
        if runtime_id is None:
            return None
        return self._records.get(runtime_id)

    def _require_live(self, record: Record, action: str) -> int:
        if record.is_retired:
            raise RecordRetired(record.entity_type, action)
        runtime_id = record._runtime_id
        if self._records.get(runtime_id) is not record:
            raise UnknownRecord(record.entity_type, runtime_id)
        return runtime_id

    def _register(self, runtime_id: int, ref: PrimaryRef) -> None:
        self._id_to_primary[runtime_id] = ref
        self._primary_to_id[ref] = runtime_id

    def _check_unique(self, ref: PrimaryRef, runtime_id: int | None = None) -> None:
        holder = self._primary_to_id.get(ref)
        if holder is not None and holder != runtime_id:
            raise DuplicatePrimaryKey(*ref)

    # ── Lifecycle ────────────────────────────────────────────

    def create(
        self,
        entity_type: str | type[Record],
        snapshot: Mapping[str, Any],
        from_store: bool = False,
    ) -> Record:
        """Create a live record. Fresh records are queued for the next flush."""
        record_type = resolve_entity_type(entity_type)
        fields = record_type.normalize(snapshot)
        ref = (record_type.__name__, fields[record_type.PRIMARY])
        self._check_unique(ref)

        runtime_id = self._next_id
        self._next_id += 1
        record = record_type(self, runtime_id, fields)
        self._records[runtime_id] = record
        self._register(runtime_id, ref)
        if not from_store:
            self._pending_save[runtime_id] = None
        logger.debug("Created %r%s", record, " (from store)" if from_store else "")
        return record

    def update(self, record: Record, snapshot: Mapping[str, Any]) -> Record:
        """Replace ``record``'s whole snapshot, then notify observers.

        An update equal to the current snapshot does nothing. The snapshot must
        name every declared member; partial snapshots raise IncompleteSnapshot.
        """
        runtime_id = self._require_live(record, "update")
        record_type = type(record)
        old = record._fields
        new = record_type.normalize(snapshot, complete=True)
        if new == old:
            return record

        old_ref = self._id_to_primary[runtime_id]
        new_ref = (record.entity_type, new[record_type.PRIMARY])
        if new_ref != old_ref:
            self._check_unique(new_ref, runtime_id)
            self.store.remove(*old_ref)
            del self._primary_to_id[old_ref]
            self._register(runtime_id, new_ref)
            logger.info("Re-keyed %s %r -> %r", record.entity_type, old_ref[1], new_ref[1])

        self._pending_save[runtime_id] = None

        routing = ObserverCategory.GENERAL
        if record_type.QUANTITY is not None and crosses_threshold(
            old[record_type.QUANTITY], new[record_type.QUANTITY]
        ):
            routing = ObserverCategory.THRESHOLD_ALERT

        record._replace(new)
        self.update_result = dict(new)
        self.hub.dispatch(
            UpdateEvent(
                subject=self,
                record=record,
                snapshot=dict(new),
                previous=dict(old),
                routing=routing,
            )
        )
        return record

    def delete(self, record: Record) -> None:
        """Retire ``record``: drop it from the identity map, the unit of work and the store."""
        runtime_id = self._require_live(record, "delete")
        ref = self._id_to_primary.pop(runtime_id)
        del self._primary_to_id[ref]
        del self._records[runtime_id]
        self._pending_save.pop(runtime_id, None)
        self.store.remove(*ref)
        record._retire()
        logger.debug("Deleted %s %r (#%d)", ref[0], ref[1], runtime_id)
        return None

    # ── Persistence ──────────────────────────────────────────

    def flush(self) -> int:
        """Write every pending record to the store and save it. Returns records written.

        The pending set is cleared only after the store saved successfully, so a
        failed flush can simply be retried.
        """
        pending = list(self._pending_save)
        for runtime_id in pending:
            record = self._records[runtime_id]
            entity_type, primary_key = self._id_to_primary[runtime_id]
            self.store.put(entity_type, primary_key, record._fields)
        self.store.save()
        for runtime_id in pending:
            self._pending_save.pop(runtime_id, None)
        logger.info("Flushed %d pending record(s)", len(pending))
        return len(pending)
