# tests/test_merge.py
import pytest

from sous_chef.core.merge import apply_merge
from sous_chef.core.models import InventoryItem, Inventory


def test_merge_adds_quantities_for_same_key():
    inventory = Inventory(items=[InventoryItem(id="t1", name="Tomato", quantity=2, unit="g")])
    incoming = [InventoryItem(name="tomato!", quantity=3, unit="grams")]
    out = apply_merge(inventory, incoming)
    assert len(out.items) == 1
    assert out.items[0].quantity == 5
    assert out.items[0].id == "t1"
    assert out.items[0].normalized_unit() == "g"
    assert inventory.items[0].quantity == 2


def test_merge_keeps_distinct_units_separate():
    inventory = Inventory(items=[InventoryItem(name="Milk", quantity=500, unit="ml")])
    incoming = [InventoryItem(name="milk", quantity=1, unit="l")]
    out = apply_merge(inventory, incoming)
    assert len(out.items) == 2
    names_units = {(i.normalized_name(), i.normalized_unit()) for i in out.items}
    assert ("milk", "ml") in names_units
    assert ("milk", "l") in names_units


def test_merge_inserts_new_items_when_absent():
    out = apply_merge(Inventory(items=[]), [InventoryItem(name="Onion", quantity=2, unit="piece")])
    assert len(out.items) == 1
    assert out.items[0].name == "Onion"
    assert out.items[0].quantity == 2


def test_merge_skips_zero_quantities():
    out = apply_merge(Inventory(items=[]), [InventoryItem(name="Onion", quantity=0)])
    assert out.items == []


def test_merge_is_deterministically_sorted():
    incoming = [
        InventoryItem(name="Bananas", quantity=1, unit="piece"),
        InventoryItem(name="apple", quantity=1, unit="piece"),
        InventoryItem(name="Carrot", quantity=1, unit="g"),
    ]
    out = apply_merge(Inventory(items=[]), incoming)
    assert [i.normalized_name() for i in out.items] == ["apple", "bananas", "carrot"]


def test_merge_rejects_unknown_strategy():
    with pytest.raises(ValueError):
        apply_merge(Inventory(), [], strategy="replace")


def test_merge_keeps_existing_rows_that_share_a_key():
    inventory = Inventory(items=[
        InventoryItem(id="fridge", name="Milk", quantity=1, unit="l", location="fridge"),
        InventoryItem(id="garage", name="milk", quantity=2, unit="l", location="garage"),
    ])
    out = apply_merge(inventory, [InventoryItem(name="Rice", quantity=1, unit="kg")])
    milk = {i.id: i.quantity for i in out.items if i.normalized_name() == "milk"}
    assert milk == {"fridge": 1, "garage": 2}
    assert len(out.items) == 3


def test_merge_adds_into_first_row_of_a_shared_key():
    inventory = Inventory(items=[
        InventoryItem(id="fridge", name="Milk", quantity=1, unit="l"),
        InventoryItem(id="garage", name="milk", quantity=2, unit="l"),
    ])
    out = apply_merge(inventory, [InventoryItem(name="MILK", quantity=0.5, unit="liters")])
    milk = {i.id: i.quantity for i in out.items}
    assert milk == {"fridge": 1.5, "garage": 2}


def test_merge_sums_incoming_rows_that_share_a_new_key():
    out = apply_merge(Inventory(), [
        InventoryItem(name="Eggs", quantity=6, unit="pieces"),
        InventoryItem(name="eggs", quantity=6, unit="pcs"),
    ])
    assert [(i.name, i.quantity) for i in out.items] == [("Eggs", 12)]
