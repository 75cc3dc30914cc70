"""General observer: append every applied snapshot to a JSON-lines log."""

from __future__ import annotations

import logging
from pathlib import Path

from stockpile.notify.base import ObserverCategory, UpdateEvent, append_json_line, check_side_channel

logger = logging.getLogger(__name__)


class FileLogger:
    """Writes ``event.snapshot`` as one JSON line per dispatch it receives."""

    category = ObserverCategory.GENERAL

    def __init__(self, log_path: Path | str) -> None:
        self.log_path = check_side_channel(log_path)

    def update(self, event: UpdateEvent) -> None:
        logger.debug("FileLogger: %s update", event.record.entity_type)
        try:
            append_json_line(self.log_path, event.snapshot)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Write of change log %s failed: %s", self.log_path, e)
