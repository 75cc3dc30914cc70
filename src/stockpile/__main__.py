"""Entry point: python -m stockpile [demo|show]

- No args / "demo": run the inventory demo against the configured store
- "show":           print every stored record
"""

from __future__ import annotations

import logging
import sys

from stockpile.config import StockpileConfig, load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_manager(config: StockpileConfig):
    """Open the store and attach the configured observers."""
    from stockpile.manager import RecordManager
    from stockpile.notify import FileLogger, MailMessenger

    manager = RecordManager(config.store_path)
    manager.attach(FileLogger(config.observers.change_log))
    manager.attach(
        MailMessenger(
            config.observers.alert_log,
            outbox_dir=config.observers.outbox_dir,
            mail_to=config.observers.mail_to,
            mail_from=config.observers.mail_from,
        )
    )
    return manager


DEMO_ITEMS = [
    {"sku": "abc-4589", "qoh": 0, "cost": "5.67", "salePrice": "7.27"},
    {"sku": "hjg-3821", "qoh": 0, "cost": "7.89", "salePrice": "12.00"},
    {"sku": "xrf-3827", "qoh": 0, "cost": "15.27", "salePrice": "19.99"},
    {"sku": "eer-4521", "qoh": 0, "cost": "8.45", "salePrice": "1.03"},
    {"sku": "qws-6783", "qoh": 0, "cost": "3.00", "salePrice": "4.97"},
]


def run_demo(manager) -> list:
    """Receive and ship stock for five items, then flush. Returns the items."""
    from stockpile.records import InventoryItem

    items = []
    for snapshot in DEMO_ITEMS:
        existing = manager.find_by_primary_key(InventoryItem, snapshot["sku"])
        if existing is not None:
            existing.delete()
        items.append(manager.create(InventoryItem, snapshot))
    item1, item2, item3, item4, item5 = items

    item1.items_received(4)
    item2.items_received(2)
    item3.items_received(12)
    item4.items_received(20)
    item5.items_received(1)

    item3.items_have_shipped(5)
    item4.items_have_shipped(16)

    item4.change_sale_price(0.87)

    manager.flush()
    return items


def _run_demo() -> None:
    config = load_config()
    _setup_logging(config.log_level)
    manager = build_manager(config)
    for item in run_demo(manager):
        print(f"{item.sku}: qoh={item.qoh} saleprice={item.saleprice}")


def _run_show() -> None:
    config = load_config()
    _setup_logging(config.log_level)
    from stockpile.manager import RecordManager

    manager = RecordManager(config.store_path)
    for record in manager.records():
        print(f"{record.entity_type} {record.primary_key}: {record.read()}")


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "demo"

    if cmd == "demo":
        _run_demo()
    elif cmd == "show":
        _run_show()
    else:
        print("Usage: python -m stockpile [demo|show]")
        print("  demo  — Run the inventory demo and flush to the store (default)")
        print("  show  — List every stored record")
        sys.exit(1)


if __name__ == "__main__":
    main()
