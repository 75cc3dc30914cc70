"""Tests for the record base class and InventoryItem."""

from __future__ import annotations

import pytest

from stockpile.errors import IncompleteSnapshot, RecordRetired, UnknownEntityType, UnknownMember
from stockpile.records import InventoryItem, Record, entity_types, resolve_entity_type


@pytest.fixture
def item(manager) -> InventoryItem:
    return manager.create(
        InventoryItem, {"sku": "abc-4589", "qoh": 0, "cost": "5.67", "salePrice": "7.27"}
    )


class TestSchema:
    def test_registered_by_name(self):
        assert entity_types()["InventoryItem"] is InventoryItem
        assert resolve_entity_type("InventoryItem") is InventoryItem
        assert resolve_entity_type(InventoryItem) is InventoryItem

    def test_unknown_entity_type(self):
        with pytest.raises(UnknownEntityType):
            resolve_entity_type("Widget")

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            entity_types()["Widget"] = InventoryItem

    def test_normalize_case_insensitive_and_ordered(self):
        fields = InventoryItem.normalize({"SKU": "x", "salePrice": 1, "qoh": 2})
        assert list(fields) == ["sku", "qoh", "cost", "saleprice"]
        assert fields == {"sku": "x", "qoh": 2, "cost": None, "saleprice": 1}

    def test_normalize_rejects_undeclared(self):
        with pytest.raises(UnknownMember):
            InventoryItem.normalize({"sku": "x", "colour": "red"})

    def test_normalize_complete_requires_every_member(self):
        with pytest.raises(IncompleteSnapshot) as exc_info:
            InventoryItem.normalize({"QOH": 3}, complete=True)
        assert exc_info.value.missing == ["sku", "cost", "saleprice"]
        full = {"sku": "x", "qoh": 3, "cost": None, "saleprice": None}
        assert InventoryItem.normalize(full, complete=True) == full

    def test_primary_must_be_declared(self):
        with pytest.raises(TypeError):

            class Broken(Record):
                MEMBERS = ("a",)
                PRIMARY = "b"

        assert "Broken" not in entity_types()


class TestFieldAccess:
    def test_get_member(self, item):
        assert item.get("sku") == "abc-4589"
        assert item.get("SalePrice") == "7.27"
        assert item.qoh == 0
        assert item.salePrice == "7.27"

    def test_get_record_attributes(self, item):
        assert item.get("entity_type") == "InventoryItem"
        assert item.get("primary_key") == "abc-4589"
        assert item.get("runtime_id") == item.runtime_id

    def test_get_unknown(self, item):
        with pytest.raises(UnknownMember):
            item.get("colour")
        with pytest.raises(AttributeError):
            item.colour

    def test_set_goes_through_manager(self, manager, item, general):
        manager.flush()
        item.set("cost", "6.00")
        assert item.cost == "6.00"
        assert item.runtime_id in manager.pending_save
        assert general.snapshots[-1]["cost"] == "6.00"

    def test_attribute_assignment(self, item):
        item.saleprice = "9.99"
        assert item.read()["saleprice"] == "9.99"

    def test_set_unknown(self, item):
        with pytest.raises(UnknownMember):
            item.set("colour", "red")
        with pytest.raises(UnknownMember):
            item.colour = "red"

    def test_read_is_a_copy(self, item):
        snapshot = item.read()
        snapshot["qoh"] = 99
        assert item.qoh == 0


class TestRetired:
    def test_every_access_fails(self, item):
        item.delete()
        assert item.is_retired
        with pytest.raises(RecordRetired):
            item.get("sku")
        with pytest.raises(RecordRetired):
            item.qoh
        with pytest.raises(RecordRetired):
            item.set("qoh", 1)
        with pytest.raises(RecordRetired):
            item.update({"sku": "abc-4589", "qoh": 1, "cost": "5.67", "saleprice": "7.27"})
        with pytest.raises(RecordRetired):
            item.delete()
        assert "deleted" in repr(item)


class TestInventoryItem:
    def test_items_received_is_one_update(self, item, general):
        item.items_received(20)
        assert item.qoh == 20
        assert len(general.events) == 1

    def test_items_have_shipped(self, item):
        item.items_received(12)
        item.items_have_shipped(5)
        assert item.qoh == 7

    def test_change_sale_price(self, item):
        item.change_sale_price(0.87)
        assert item.saleprice == 0.87
