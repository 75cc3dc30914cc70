"""Record types.

Every concrete entity type subclasses ``Record`` and declares its member set,
its primary-key member and (optionally) the quantity member watched by the
low-stock rule. Subclasses register themselves by class name so stored
snapshots can be rehydrated.
"""

from stockpile.records.base import Record, entity_types, resolve_entity_type
from stockpile.records.inventory import InventoryItem

__all__ = ["InventoryItem", "Record", "entity_types", "resolve_entity_type"]
