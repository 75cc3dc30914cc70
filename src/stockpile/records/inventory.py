"""Inventory items: stock on hand, cost and sale price per SKU."""

from __future__ import annotations

from typing import Any

from stockpile.records.base import Record


class InventoryItem(Record):
    MEMBERS = ("sku", "qoh", "cost", "saleprice")
    PRIMARY = "sku"
    QUANTITY = "qoh"

    def items_received(self, number_received: int) -> None:
        """Increase quantity on hand; one update regardless of count."""
        snapshot = self.read()
        snapshot["qoh"] = (snapshot["qoh"] or 0) + number_received
        self.update(snapshot)

    def items_have_shipped(self, number_shipped: int) -> None:
        snapshot = self.read()
        snapshot["qoh"] = (snapshot["qoh"] or 0) - number_shipped
        self.update(snapshot)

    def change_sale_price(self, sale_price: Any) -> None:
        snapshot = self.read()
        snapshot["saleprice"] = sale_price
        self.update(snapshot)
