"""Tests for the notification hub and the bundled observers."""

from __future__ import annotations

import json
from pathlib import Path

import frontmatter
import pytest

from stockpile.errors import SideChannelUnavailable
from stockpile.notify import FileLogger, MailMessenger, NotificationHub, ObserverCategory, UpdateEvent
from stockpile.notify.mail import wrap_json
from stockpile.records import InventoryItem


def _event(manager, routing=ObserverCategory.GENERAL) -> UpdateEvent:
    item = manager.create(InventoryItem, {"sku": "eer-4521", "qoh": 4})
    return UpdateEvent(subject=manager, record=item, snapshot=item.read(), routing=routing)


class Boom:
    category = ObserverCategory.GENERAL

    def update(self, event):
        raise RuntimeError("broken observer")


class TestHub:
    def test_attach_is_idempotent(self, general):
        hub = NotificationHub()
        hub.attach(general)
        hub.attach(general)
        assert len(hub) == 1
        hub.detach(general)
        hub.detach(general)
        assert len(hub) == 0

    def test_general_event_skips_alert_observers(self, manager, general, alerts):
        assert manager.hub.dispatch(_event(manager)) == 1
        assert len(general.events) == 1
        assert alerts.events == []

    def test_alert_event_is_exclusive(self, manager, general, alerts):
        event = _event(manager, ObserverCategory.THRESHOLD_ALERT)
        manager.hub.dispatch(event)
        assert alerts.events == [event]
        assert general.events == []

    def test_failing_observer_is_isolated(self, manager, general, caplog):
        hub = NotificationHub()
        hub.attach(Boom())
        hub.attach(general)
        assert hub.dispatch(_event(manager)) == 1
        assert len(general.events) == 1
        assert "broken observer" in caplog.text

    def test_observer_detaching_during_dispatch(self, manager, general):
        hub = manager.hub

        class SelfDetaching:
            category = ObserverCategory.GENERAL

            def update(self, event):
                hub.detach(self)

        hub.detach(general)
        hub.attach(SelfDetaching())
        hub.attach(general)
        hub.dispatch(_event(manager))
        assert len(general.events) == 1

    def test_string_category(self, manager):
        received = []

        class Legacy:
            category = "threshold_alert"

            def update(self, event):
                received.append(event)

        manager.attach(Legacy())
        manager.hub.dispatch(_event(manager, ObserverCategory.THRESHOLD_ALERT))
        assert len(received) == 1


class TestFileLogger:
    def test_appends_json_lines(self, manager, tmp_path: Path):
        log = tmp_path / "logs" / "changes.jsonl"
        manager.attach(FileLogger(log))
        item = manager.create(InventoryItem, {"sku": "a", "qoh": 0})
        item.items_received(2)
        item.items_received(3)
        lines = log.read_text().splitlines()
        assert [json.loads(line)["qoh"] for line in lines] == [2, 5]

    def test_empty_path_rejected(self):
        with pytest.raises(SideChannelUnavailable):
            FileLogger("")

    def test_directory_rejected(self, tmp_path: Path):
        with pytest.raises(SideChannelUnavailable):
            FileLogger(tmp_path)

    def test_write_failure_does_not_raise(self, manager, tmp_path: Path, caplog):
        log = tmp_path / "changes.jsonl"
        logger = FileLogger(log)
        log.mkdir()
        logger.update(_event(manager))
        assert "change log" in caplog.text


class TestMailMessenger:
    def test_logs_alert_payload(self, manager, tmp_path: Path):
        log = tmp_path / "alerts.jsonl"
        MailMessenger(log).update(_event(manager, ObserverCategory.THRESHOLD_ALERT))
        assert json.loads(log.read_text()) == {"sku": "eer-4521", "qoh": 4}

    def test_outbox_message(self, manager, tmp_path: Path):
        outbox = tmp_path / "outbox"
        messenger = MailMessenger(tmp_path / "alerts.jsonl", outbox_dir=outbox, mail_to="ops@example.com")
        messenger.update(_event(manager, ObserverCategory.THRESHOLD_ALERT))
        messenger.update(_event_again(manager))

        messages = sorted(outbox.glob("*.md"))
        assert len(messages) == 2
        post = frontmatter.load(str(messages[0]))
        assert post["to"] == "ops@example.com"
        assert post["subject"] == "qoh dips five"
        assert post["from"] == "webmaster@hostwhere.com"
        assert json.loads(post.content) == {"sku": "eer-4521", "qoh": 4}

    def test_render_keeps_body_valid_json(self, tmp_path: Path):
        messenger = MailMessenger(tmp_path / "alerts.jsonl")
        payload = {"sku": "abc-4589-" + "x" * 80, "qoh": 1, "note": "ships in two weeks from the north warehouse"}
        body = frontmatter.loads(messenger.render_message(payload)).content
        assert json.loads(body) == payload
        assert payload["sku"] in body

    def test_render_wraps_between_members(self):
        payload = {f"field{i}": f"value-{i}" for i in range(10)}
        body = wrap_json(payload, 70)
        assert len(body.splitlines()) > 1
        assert all(len(line) <= 70 for line in body.splitlines())
        assert json.loads(body) == payload

    def test_render_short_payload_on_one_line(self):
        assert wrap_json({"sku": "eer-4521", "qoh": 4}, 70) == '{"sku": "eer-4521", "qoh": 4}'
        assert wrap_json({}, 70) == "{}"


def _event_again(manager) -> UpdateEvent:
    item = manager.find_by_primary_key(InventoryItem, "eer-4521")
    return UpdateEvent(
        subject=manager, record=item, snapshot=item.read(), routing=ObserverCategory.THRESHOLD_ALERT
    )
