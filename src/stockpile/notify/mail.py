"""Threshold-alert observer: announce stock dipping below the threshold.

Each alert is appended as a JSON line to the messenger's log. When an outbox
directory is configured, the outgoing message is also rendered there as a
Markdown file whose YAML front matter carries the mail headers::

    ---
    from: webmaster@hostwhere.com
    reply-to: webmaster@hostwhere.com
    subject: qoh dips five
    to: mailto@hostwhere.com
    x-mailer: stockpile
    ---
    {"sku": "eer-4521", "qoh": 4}

Handing the outbox to an actual mail transport is left to the deployment.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import frontmatter

from stockpile.notify.base import ObserverCategory, UpdateEvent, append_json_line, check_side_channel

logger = logging.getLogger(__name__)

DEFAULT_MAIL_TO = "mailto@hostwhere.com"
DEFAULT_MAIL_FROM = "webmaster@hostwhere.com"
ALERT_SUBJECT = "qoh dips five"
WRAP_WIDTH = 70


def wrap_json(payload: dict[str, Any], width: int) -> str:
    """Render ``payload`` as JSON, breaking lines only between members.

    A member longer than ``width`` gets a line of its own and is never split,
    so the result always parses back to ``payload``.
    """
    members = [
        f"{json.dumps(key, ensure_ascii=False)}: {json.dumps(value, ensure_ascii=False)}"
        for key, value in payload.items()
    ]
    if not members:
        return "{}"
    lines = ["{" + members[0]]
    for member in members[1:]:
        lines[-1] += ","
        # +1 for the separating space, +1 for the trailing comma or brace
        if len(lines[-1]) + len(member) + 2 > width:
            lines.append(member)
        else:
            lines[-1] += " " + member
    lines[-1] += "}"
    return "\n".join(lines)


class MailMessenger:
    """Receives only threshold-alert dispatches."""

    category = ObserverCategory.THRESHOLD_ALERT

    def __init__(
        self,
        log_path: Path | str,
        outbox_dir: Path | str | None = None,
        mail_to: str = DEFAULT_MAIL_TO,
        mail_from: str = DEFAULT_MAIL_FROM,
    ) -> None:
        self.log_path = check_side_channel(log_path)
        self.outbox_dir = Path(outbox_dir) if outbox_dir else None
        self.mail_to = mail_to
        self.mail_from = mail_from

    def update(self, event: UpdateEvent) -> None:
        logger.debug("MailMessenger: %s alert", event.record.entity_type)
        payload = self._alert_payload(event)
        try:
            if self.outbox_dir is not None:
                self._write_outbox(payload)
            append_json_line(self.log_path, payload)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Low-stock alert for %s not recorded: %s", payload, e)
            return
        logger.info("Low-stock alert sent to %s: %s", self.mail_to, payload)

    def _alert_payload(self, event: UpdateEvent) -> dict[str, Any]:
        record_type = type(event.record)
        payload = {record_type.PRIMARY: event.snapshot.get(record_type.PRIMARY)}
        if record_type.QUANTITY is not None:
            payload[record_type.QUANTITY] = event.snapshot.get(record_type.QUANTITY)
        return payload

    def render_message(self, payload: dict[str, Any]) -> str:
        body = wrap_json(payload, WRAP_WIDTH)
        post = frontmatter.Post(
            body,
            to=self.mail_to,
            subject=ALERT_SUBJECT,
        )
        post["from"] = self.mail_from
        post["reply-to"] = self.mail_from
        post["x-mailer"] = "stockpile"
        return frontmatter.dumps(post)

    def _write_outbox(self, payload: dict[str, Any]) -> Path:
        """Render the message into the outbox; never overwrites an existing file."""
        self.outbox_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%dT%H%M%S")
        path = self.outbox_dir / f"{ts}.md"
        counter = 2
        while path.exists():
            path = self.outbox_dir / f"{ts}-{counter}.md"
            counter += 1
        path.write_text(self.render_message(payload) + "\n", encoding="utf-8")
        return path
