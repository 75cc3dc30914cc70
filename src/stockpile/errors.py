"""Error types raised by records, the manager and the store."""

from __future__ import annotations

from typing import Any


class StockpileError(Exception):
    """Base class for all stockpile errors."""


class UnknownMember(StockpileError, AttributeError):
    """Get/set of a field the entity type does not declare."""

    def __init__(self, entity_type: str, member: str, action: str = "Get") -> None:
        super().__init__(
            f"{action} failed. Entity type {entity_type} does not have a member named {member}."
        )
        self.entity_type = entity_type
        self.member = member


class RecordRetired(StockpileError):
    """Operation on a record that has already been deleted."""

    def __init__(self, entity_type: str, action: str = "access") -> None:
        super().__init__(f"Cannot {action} a deleted {entity_type} record.")
        self.entity_type = entity_type


class UnknownRecord(StockpileError):
    """The manager does not recognise the record as one of its live records."""

    def __init__(self, entity_type: str, runtime_id: int | None) -> None:
        super().__init__(f"{entity_type} record #{runtime_id} is not live in this manager.")
        self.entity_type = entity_type
        self.runtime_id = runtime_id


class DuplicatePrimaryKey(StockpileError, ValueError):
    """Another live record of the same type already holds the primary key."""

    def __init__(self, entity_type: str, primary_key: Any) -> None:
        super().__init__(f"{entity_type} with primary key {primary_key!r} already exists.")
        self.entity_type = entity_type
        self.primary_key = primary_key


class StoreUnavailable(StockpileError):
    """The backing store file cannot be created, read or written."""


class PersistFailed(StockpileError):
    """Writing the store snapshot to disk failed."""


class SideChannelUnavailable(StockpileError):
    """An observer's append-only log path cannot be used."""


class UnknownEntityType(StockpileError, KeyError):
    """No record class is registered under the given entity type name."""

    def __init__(self, entity_type: str) -> None:
        super().__init__(entity_type)
        self.entity_type = entity_type

    def __str__(self) -> str:
        return f"No entity type registered as {self.entity_type!r}."


class IncompleteSnapshot(StockpileError, ValueError):
    """An update snapshot leaves out declared members."""

    def __init__(self, entity_type: str, missing: list[str]) -> None:
        super().__init__(
            f"Update of {entity_type} must supply every member; missing {', '.join(missing)}."
        )
        self.entity_type = entity_type
        self.missing = missing
