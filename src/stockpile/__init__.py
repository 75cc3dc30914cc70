"""stockpile — an in-process record store with dirty tracking and update observers."""

from stockpile.errors import (
    DuplicatePrimaryKey,
    IncompleteSnapshot,
    PersistFailed,
    RecordRetired,
    SideChannelUnavailable,
    StockpileError,
    StoreUnavailable,
    UnknownEntityType,
    UnknownMember,
    UnknownRecord,
)
from stockpile.manager import LOW_STOCK_THRESHOLD, RecordManager
from stockpile.notify import (
    FileLogger,
    MailMessenger,
    NotificationHub,
    Observer,
    ObserverCategory,
    UpdateEvent,
)
from stockpile.records import InventoryItem, Record
from stockpile.store import PersistentStore

__all__ = [
    "LOW_STOCK_THRESHOLD",
    "DuplicatePrimaryKey",
    "FileLogger",
    "IncompleteSnapshot",
    "InventoryItem",
    "MailMessenger",
    "NotificationHub",
    "Observer",
    "ObserverCategory",
    "PersistFailed",
    "PersistentStore",
    "Record",
    "RecordManager",
    "RecordRetired",
    "SideChannelUnavailable",
    "StockpileError",
    "StoreUnavailable",
    "UnknownEntityType",
    "UnknownMember",
    "UnknownRecord",
    "UpdateEvent",
]
