from sous_chef.core.cooking import (
    MissingIngredient,
    add_missing_to_shopping_list,
    annotate_recipe,
    apply_deductions,
    find_missing_ingredients,
    plan_cook,
    prepare_ingredients,
    resolve_mapping,
)
from sous_chef.core.models import (
    IngredientMapping,
    Inventory,
    InventoryItem,
    Recipe,
    RecipeIngredient,
    ShoppingList,
    ShoppingListItem,
)


def inv(*rows):
    return Inventory(items=[InventoryItem(id=f"i{n}", name=name, quantity=qty, unit=unit) for n, (name, qty, unit) in enumerate(rows)])


def test_resolve_mapping_from_note_prefix():
    out = resolve_mapping(RecipeIngredient(name="Large eggs", note="MAPPING:  Eggs "))
    assert out.mapping.inventory_item_label == "Eggs"
    assert out.mapping.suggested is False


def test_resolve_mapping_from_linked_item():
    out = resolve_mapping(RecipeIngredient(name="Cheddar"), linked_item_name="Cheese")
    assert out.mapping.inventory_item_label == "Cheese"


def test_resolve_mapping_keeps_explicit_mapping():
    ingredient = RecipeIngredient(name="x", note="MAPPING: y", mapping=IngredientMapping(inventory_item_label="z"))
    assert resolve_mapping(ingredient, linked_item_name="w") is ingredient


def test_resolve_mapping_without_hints_is_a_no_op():
    ingredient = RecipeIngredient(name="Rice", note="rinsed")
    assert resolve_mapping(ingredient).mapping is None


def test_prepare_ingredients_uses_linked_inventory_row():
    inventory = inv(("Whole milk", 1, "l"))
    out = prepare_ingredients([RecipeIngredient(name="Milk", inventory_item_id="i0")], inventory)
    assert out[0].mapping.inventory_item_label == "Whole milk"


def test_find_missing_ingredients_skips_optional_and_present():
    ingredients = [
        RecipeIngredient(name="Flour", quantity=200, unit="g"),
        RecipeIngredient(name="Sugar", quantity=50, unit="g"),
        RecipeIngredient(name="Salt", note="to taste"),
        RecipeIngredient(name="sugar"),
    ]
    missing = find_missing_ingredients(ingredients, inv(("flour", 1, "kg")))
    assert missing == [
        MissingIngredient(name="Sugar", quantity=50, unit="g"),
        MissingIngredient(name="sugar"),
    ]


def test_plan_cook_deducts_when_units_agree():
    inventory = inv(("Rice", 500, "grams"))
    plan = plan_cook([RecipeIngredient(name="rice", quantity=200, unit="g")], inventory)
    assert [(d.item_id, d.new_quantity) for d in plan.deductions] == [("i0", 300)]
    assert plan.missing == []


def test_plan_cook_reports_unit_mismatch_and_short_stock_as_missing():
    inventory = inv(("Milk", 1, "l"), ("Butter", 50, "g"))
    plan = plan_cook(
        [
            RecipeIngredient(name="Milk", quantity=250, unit="ml"),
            RecipeIngredient(name="Butter", quantity=100, unit="g"),
        ],
        inventory,
    )
    assert plan.deductions == []
    assert [m.name for m in plan.missing] == ["Milk", "Butter"]


def test_plan_cook_tracks_stock_across_lines():
    inventory = inv(("Eggs", 3, "pieces"))
    plan = plan_cook(
        [
            RecipeIngredient(name="Eggs", quantity=2, unit="piece"),
            RecipeIngredient(name="eggs", quantity=2, unit="pcs", note="for the glaze"),
        ],
        inventory,
    )
    assert [(d.item_id, d.new_quantity) for d in plan.deductions] == [("i0", 1)]
    assert [m.name for m in plan.missing] == ["eggs"]


def test_plan_cook_leaves_stock_alone_without_quantity():
    plan = plan_cook([RecipeIngredient(name="Oil")], inv(("oil", 1, "l")))
    assert plan.deductions == [] and plan.missing == []


def test_plan_cook_missing_and_optional():
    plan = plan_cook(
        [RecipeIngredient(name="Saffron", quantity=1, unit="g"), RecipeIngredient(name="Chili", note="optional")],
        inv(),
    )
    assert [m.name for m in plan.missing] == ["Saffron"]


def test_apply_deductions_returns_new_inventory():
    inventory = inv(("Rice", 500, "g"), ("Beans", 2, "cups"))
    plan = plan_cook([RecipeIngredient(name="rice", quantity=200, unit="g")], inventory)
    updated = apply_deductions(inventory, plan.deductions)
    assert [it.quantity for it in updated.items] == [300, 2]
    assert inventory.items[0].quantity == 500


def test_add_missing_skips_open_duplicates():
    existing = ShoppingList(items=[
        ShoppingListItem(name="Sugar"),
        ShoppingListItem(name="Milk", checked=True),
    ])
    missing = [MissingIngredient(name="sugar!"), MissingIngredient(name="Milk"), MissingIngredient(name="milk", quantity=1, unit="l")]
    updated, added = add_missing_to_shopping_list(existing, missing, recipe_id="r1")
    assert [a.name for a in added] == ["Milk"]
    assert added[0].source == "from-recipe"
    assert added[0].recipe_id == "r1"
    assert len(updated.items) == 3
    assert len(existing.items) == 2


def test_annotate_recipe():
    recipe = Recipe(
        title="Pancakes",
        ingredients=[
            RecipeIngredient(name="Flour"),
            RecipeIngredient(name="Large eggs", note="MAPPING: Eggs"),
            RecipeIngredient(name="Buttermilk"),
        ],
    )
    out = annotate_recipe(recipe, inv(("flour", 1, "kg"), ("eggs", 6, None)))
    assert out.cookability.missing_labels == ["Buttermilk"]
    assert out.cookability.available_count == 2
    assert out.cookability.bucket == "almost"
    assert out.cookability.bucket_label == "Almost"
    assert out.title == "Pancakes"
