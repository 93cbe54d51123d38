from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from .cookability import bucket_for_missing_count, compute_recipe_cookability, is_optional, resolve_label, title_case_bucket
from .models import (
    IngredientMapping,
    Inventory,
    InventoryItem,
    Recipe,
    RecipeCookabilityView,
    RecipeIngredient,
    RecipeWithCookability,
    ShoppingList,
    ShoppingListItem,
)
from .normalize import normalize_label, normalize_unit

MAPPING_NOTE_PREFIX = "MAPPING:"


class MissingIngredient(BaseModel):
    name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None


class Deduction(BaseModel):
    item_id: str
    new_quantity: float


class CookPlan(BaseModel):
    deductions: List[Deduction] = Field(default_factory=list)
    missing: List[MissingIngredient] = Field(default_factory=list)


def resolve_mapping(ingredient: RecipeIngredient, linked_item_name: Optional[str] = None) -> RecipeIngredient:
    """
    Fill in `mapping` for an ingredient stored without one.

    A note of the form "MAPPING: <label>" wins, then the name of a linked inventory
    item. Ingredients that already carry a mapping are returned unchanged.
    """
    if ingredient.mapping is not None:
        return ingredient
    label: Optional[str] = None
    if ingredient.note and ingredient.note.startswith(MAPPING_NOTE_PREFIX):
        label = ingredient.note[len(MAPPING_NOTE_PREFIX):].strip()
    elif linked_item_name:
        label = linked_item_name
    if not label:
        return ingredient
    return ingredient.model_copy(update={"mapping": IngredientMapping(inventory_item_label=label, suggested=False)})


def prepare_ingredients(ingredients: Iterable[RecipeIngredient], inventory: Inventory) -> List[RecipeIngredient]:
    """Resolve mappings for stored ingredients, using linked inventory rows by id."""
    names_by_id = {it.id: it.name for it in inventory.items}
    return [
        resolve_mapping(ing, names_by_id.get(ing.inventory_item_id) if ing.inventory_item_id else None)
        for ing in ingredients
    ]


def _index_inventory(items: Iterable[InventoryItem]) -> Dict[str, InventoryItem]:
    idx: Dict[str, InventoryItem] = {}
    for it in items:
        # first row wins when two rows normalize to the same label
        idx.setdefault(it.normalized_name(), it)
    return idx


def find_missing_ingredients(
    ingredients: Iterable[RecipeIngredient],
    inventory: Inventory,
) -> List[MissingIngredient]:
    """Non-optional ingredients with no inventory row, in recipe order, not deduplicated."""
    idx = _index_inventory(inventory.items)
    out: List[MissingIngredient] = []
    for ing in ingredients:
        label = resolve_label(ing)
        key = normalize_label(label)
        if not key or is_optional(ing):
            continue
        if key not in idx:
            out.append(MissingIngredient(name=label, quantity=ing.quantity, unit=ing.unit))
    return out


def plan_cook(ingredients: Iterable[RecipeIngredient], inventory: Inventory) -> CookPlan:
    """
    Work out what cooking a recipe does to the inventory.

    An ingredient with quantity and unit is deducted from its matching row when the
    canonical units agree and enough stock remains; otherwise it goes on the missing
    list. Matched ingredients without quantity or unit leave stock alone. Stock is
    tracked across ingredients so two lines drawing on one row cannot overdraw it.
    """
    idx = _index_inventory(inventory.items)
    remaining: Dict[str, float] = {}
    plan = CookPlan()

    for ing in ingredients:
        label = resolve_label(ing)
        key = normalize_label(label)
        if not key or is_optional(ing):
            continue

        row = idx.get(key)
        if row is None:
            plan.missing.append(MissingIngredient(name=label, quantity=ing.quantity, unit=ing.unit))
            continue
        if not ing.quantity or not ing.unit:
            continue

        stock = remaining.get(row.id, row.quantity)
        if normalize_unit(ing.unit) == row.normalized_unit() and stock >= ing.quantity:
            remaining[row.id] = round(stock - ing.quantity, 6)
        else:
            plan.missing.append(MissingIngredient(name=label, quantity=ing.quantity, unit=ing.unit))

    plan.deductions = [Deduction(item_id=item_id, new_quantity=qty) for item_id, qty in remaining.items()]
    return plan


def apply_deductions(inventory: Inventory, deductions: Iterable[Deduction]) -> Inventory:
    """Return a new Inventory with the deducted quantities applied."""
    by_id = {d.item_id: d.new_quantity for d in deductions}
    items = [
        it.model_copy(update={"quantity": by_id[it.id]}) if it.id in by_id else it
        for it in inventory.items
    ]
    return Inventory(items=items)


def add_missing_to_shopping_list(
    shopping_list: ShoppingList,
    missing: Iterable[MissingIngredient],
    recipe_id: Optional[str] = None,
) -> Tuple[ShoppingList, List[ShoppingListItem]]:
    """
    Append missing ingredients to the shopping list as "from-recipe" rows.

    An ingredient is skipped when an unchecked row with the same normalized name is
    already on the list, including rows added earlier in this call.
    """
    open_keys = {normalize_label(it.name) for it in shopping_list.items if not it.checked}
    added: List[ShoppingListItem] = []
    for m in missing:
        key = normalize_label(m.name)
        if not key or key in open_keys:
            continue
        open_keys.add(key)
        added.append(ShoppingListItem(
            name=m.name,
            quantity=m.quantity,
            unit=m.unit,
            source="from-recipe",
            recipe_id=recipe_id,
        ))
    return ShoppingList(items=[*shopping_list.items, *added]), added


def annotate_recipe(recipe: Recipe, inventory: Inventory) -> RecipeWithCookability:
    """Attach cookability, bucket and bucket label for the recipe views."""
    cookability = compute_recipe_cookability(prepare_ingredients(recipe.ingredients, inventory), inventory.snapshot())
    bucket = bucket_for_missing_count(cookability.missing_count)
    return RecipeWithCookability(
        **recipe.model_dump(),
        cookability=RecipeCookabilityView(
            **cookability.model_dump(),
            bucket=bucket,
            bucket_label=title_case_bucket(bucket),
        ),
    )
