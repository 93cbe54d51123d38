from __future__ import annotations

from typing import Iterable, List, Tuple

from .models import Inventory, InventoryItem


class MergeStrategy:
    """
    Only 'add' exists today: quantities for the same key are summed.
    """
    ADD = "add"


def merge_items(
    current: Iterable[InventoryItem],
    incoming: Iterable[InventoryItem],
    strategy: str = MergeStrategy.ADD,
) -> List[InventoryItem]:
    """
    Deterministically merge `incoming` rows into the `current` inventory.

    Rules (ADD):
    - Same (normalized label, canonical unit) => quantities are **summed** into the
      first existing row with that key, which keeps its id, display name and location.
    - Existing rows that share a key (say milk in the fridge and milk in the garage)
      are all kept as they are; only the first one receives incoming stock.
    - Rows with different units are never cross-summed ("500 ml" and "1 l" stay apart).
    - An incoming row with quantity 0 is a no-op.

    Output list is stable-sorted by (normalized name, normalized unit, display name).
    """
    if strategy != MergeStrategy.ADD:
        raise ValueError(f"Unsupported merge strategy: {strategy}")

    merged = [it.model_copy() for it in current]
    first_by_key: dict[Tuple[str, str | None], InventoryItem] = {}
    for it in merged:
        first_by_key.setdefault(it.key(), it)

    for inc in incoming:
        if inc.quantity == 0:
            continue
        target = first_by_key.get(inc.key())
        if target is not None:
            target.quantity = round(target.quantity + inc.quantity, 6)  # avoid float drift
        else:
            row = inc.model_copy()
            merged.append(row)
            first_by_key[row.key()] = row

    merged.sort(key=lambda it: (it.normalized_name(), it.normalized_unit() or "", it.name))
    return merged


def apply_merge(
    inventory: Inventory,
    incoming_items: Iterable[InventoryItem],
    strategy: str = MergeStrategy.ADD,
) -> Inventory:
    """Helper that returns a **new** Inventory with merged rows."""
    return Inventory(items=merge_items(inventory.items, incoming_items, strategy=strategy))
