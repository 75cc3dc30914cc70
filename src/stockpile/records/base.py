"""Schema-checked record base class and the entity-type registry."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from stockpile.errors import IncompleteSnapshot, RecordRetired, UnknownEntityType, UnknownMember

if TYPE_CHECKING:
    from stockpile.manager import RecordManager

_REGISTRY: dict[str, type[Record]] = {}

RECORD_ATTRIBUTES = ("entity_type", "primary_key", "runtime_id")


def entity_types() -> Mapping[str, type[Record]]:
    """Read-only view of every registered entity type, keyed by name."""
    return MappingProxyType(_REGISTRY)


def resolve_entity_type(entity_type: str | type[Record]) -> type[Record]:
    if isinstance(entity_type, type) and issubclass(entity_type, Record):
        return entity_type
    try:
        return _REGISTRY[entity_type]
    except KeyError:
        raise UnknownEntityType(str(entity_type)) from None


class Record:
    """One business entity: a fixed, declared field set bound to a manager.

    Fields are read and written by name, case-insensitively, either through
    ``get``/``set`` or as attributes (``item.qoh``, ``item.qoh = 3``). Every
    write becomes a whole-snapshot ``update`` on the owning manager, so dirty
    tracking and notification are never bypassed.
    """

    MEMBERS: ClassVar[tuple[str, ...]] = ()
    PRIMARY: ClassVar[str] = ""
    QUANTITY: ClassVar[str | None] = None

    _member_lookup: ClassVar[Mapping[str, str]] = MappingProxyType({})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.MEMBERS:
            return  # abstract intermediate
        cls._member_lookup = MappingProxyType({m.lower(): m for m in cls.MEMBERS})
        for designated in (cls.PRIMARY, cls.QUANTITY):
            if designated is not None and designated.lower() not in cls._member_lookup:
                raise TypeError(f"{cls.__name__}: {designated!r} is not a declared member")
        cls.PRIMARY = cls._member_lookup[cls.PRIMARY.lower()]
        if cls.QUANTITY is not None:
            cls.QUANTITY = cls._member_lookup[cls.QUANTITY.lower()]
        _REGISTRY[cls.__name__] = cls

    def __init__(self, manager: RecordManager, runtime_id: int, fields: dict[str, Any]) -> None:
        object.__setattr__(self, "_manager", manager)
        object.__setattr__(self, "_runtime_id", runtime_id)
        object.__setattr__(self, "_fields", fields)

    # ── Schema ───────────────────────────────────────────────

    @classmethod
    def member_name(cls, name: str) -> str | None:
        """Return the declared spelling of ``name``, or None if undeclared."""
        return cls._member_lookup.get(name.lower())

    @classmethod
    def normalize(cls, snapshot: Mapping[str, Any], complete: bool = False) -> dict[str, Any]:
        """Map ``snapshot`` onto the declared member set, in declaration order.

        Undeclared keys raise UnknownMember. Absent members become None, unless
        ``complete`` is set, in which case they raise IncompleteSnapshot.
        """
        canonical: dict[str, Any] = {}
        for key, value in snapshot.items():
            member = cls.member_name(key)
            if member is None:
                raise UnknownMember(cls.__name__, key, action="Set")
            canonical[member] = value
        if complete:
            missing = [m for m in cls.MEMBERS if m not in canonical]
            if missing:
                raise IncompleteSnapshot(cls.__name__, missing)
        return {m: canonical.get(m) for m in cls.MEMBERS}

    # ── Record-level attributes ──────────────────────────────

    @property
    def entity_type(self) -> str:
        return type(self).__name__

    @property
    def runtime_id(self) -> int:
        self._require_live("read")
        return self._runtime_id

    @property
    def primary_key(self) -> Any:
        self._require_live("read")
        return self._fields[self.PRIMARY]

    @property
    def manager(self) -> RecordManager:
        self._require_live("read")
        return self._manager

    @property
    def is_retired(self) -> bool:
        return self._manager is None

    def _require_live(self, action: str) -> None:
        if self._manager is None:
            raise RecordRetired(self.entity_type, action)

    # ── Field access ─────────────────────────────────────────

    def get(self, name: str) -> Any:
        self._require_live("read")
        member = self.member_name(name)
        if member is not None:
            return self._fields[member]
        if name in RECORD_ATTRIBUTES:
            return getattr(self, name)
        raise UnknownMember(self.entity_type, name)

    def set(self, name: str, value: Any) -> None:
        self._require_live("write")
        member = self.member_name(name)
        if member is None:
            raise UnknownMember(self.entity_type, name, action="Set")
        snapshot = dict(self._fields)
        snapshot[member] = value
        self._manager.update(self, snapshot)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails.
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self.set(name, value)

    def read(self) -> dict[str, Any]:
        """Copy of the current field snapshot."""
        self._require_live("read")
        return dict(self._fields)

    # ── Manager delegation ───────────────────────────────────

    def update(self, snapshot: Mapping[str, Any]) -> Record:
        self._require_live("update")
        return self._manager.update(self, snapshot)

    def delete(self) -> None:
        self._require_live("delete")
        return self._manager.delete(self)

    # ── Manager hooks ────────────────────────────────────────

    def _replace(self, fields: dict[str, Any]) -> None:
        object.__setattr__(self, "_fields", fields)

    def _retire(self) -> None:
        object.__setattr__(self, "_manager", None)
        object.__setattr__(self, "_runtime_id", None)
        object.__setattr__(self, "_fields", None)

    def __repr__(self) -> str:
        if self.is_retired:
            return f"<{self.entity_type} (deleted)>"
        return f"<{self.entity_type} #{self._runtime_id} {self.PRIMARY}={self.primary_key!r}>"
