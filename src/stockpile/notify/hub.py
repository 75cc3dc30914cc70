"""Subject side of the update notification protocol."""

from __future__ import annotations

import logging

from stockpile.notify.base import Observer, ObserverCategory, UpdateEvent

logger = logging.getLogger(__name__)


def _category_of(observer: Observer) -> ObserverCategory:
    return ObserverCategory(getattr(observer, "category", ObserverCategory.GENERAL))


class NotificationHub:
    """Holds registered observers and routes update events to them.

    A threshold-alert event reaches only THRESHOLD_ALERT observers; any other
    event reaches every observer except those. Observers are called in
    registration order and isolated from each other: one failing observer is
    logged and skipped.
    """

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def attach(self, observer: Observer) -> None:
        if not any(o is observer for o in self._observers):
            self._observers.append(observer)
            logger.info(
                "Attached observer: %s (%s)", type(observer).__name__, _category_of(observer).value
            )

    def detach(self, observer: Observer) -> None:
        self._observers = [o for o in self._observers if o is not observer]

    @property
    def observers(self) -> tuple[Observer, ...]:
        return tuple(self._observers)

    def __len__(self) -> int:
        return len(self._observers)

    def _targets(self, event: UpdateEvent) -> list[Observer]:
        if event.is_threshold_alert:
            return [o for o in self._observers if _category_of(o) is ObserverCategory.THRESHOLD_ALERT]
        return [o for o in self._observers if _category_of(o) is not ObserverCategory.THRESHOLD_ALERT]

    def dispatch(self, event: UpdateEvent) -> int:
        """Deliver ``event`` to its routed observers. Returns successful deliveries."""
        delivered = 0
        for observer in self._targets(event):
            try:
                observer.update(event)
            except Exception:
                logger.exception(
                    "Observer %s failed on %s update", type(observer).__name__, event.record.entity_type
                )
                continue
            delivered += 1
        logger.debug("Dispatched %s event to %d observer(s)", event.routing.value, delivered)
        return delivered
