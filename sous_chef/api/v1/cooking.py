from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from sous_chef.api.deps import (
    get_event_repo,
    get_inventory_repo,
    get_metrics,
    get_recipe_repo,
    get_shopping_list_repo,
    record_event,
)
from sous_chef.core.cooking import (
    add_missing_to_shopping_list,
    annotate_recipe,
    apply_deductions,
    find_missing_ingredients,
    plan_cook,
    prepare_ingredients,
)
from sous_chef.core.models import CookabilityBucket, Recipe, WhatCanICookResponse
from sous_chef.services.exceptions import RepoError
from sous_chef.services.metrics import MetricsLogger
from sous_chef.services.repo.json_repo import (
    JSONEventRepo,
    JSONInventoryRepo,
    JSONRecipeRepo,
    JSONShoppingListRepo,
)

router = APIRouter(tags=["cooking"])
logger = logging.getLogger(__name__)


# ---- Models ------------------------------------------------------------------

class AddMissingRequest(BaseModel):
    recipe_id: str = Field(..., min_length=1)


class AddMissingResponse(BaseModel):
    success: bool = True
    added: int


class CookRecipeRequest(BaseModel):
    recipe_id: str = Field(..., min_length=1)
    add_missing_to_list: bool = True


class CookRecipeResponse(BaseModel):
    success: bool = True
    inventory_updated: int
    missing_added: int


def _recipe_or_404(repo: JSONRecipeRepo, recipe_id: str) -> Recipe:
    recipe = repo.get(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


# ---- Routes ------------------------------------------------------------------

@router.get("/api/cooking/what-can-i-cook", response_model=WhatCanICookResponse)
def what_can_i_cook(
    bucket: Optional[CookabilityBucket] = Query(None, description="Only recipes in this bucket"),
    recipes: JSONRecipeRepo = Depends(get_recipe_repo),
    inventory_repo: JSONInventoryRepo = Depends(get_inventory_repo),
    metrics: MetricsLogger = Depends(get_metrics),
    request: Request = None,
):
    try:
        all_recipes = recipes.list()
        inventory = inventory_repo.load()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))

    corr_id = request.headers.get("X-Correlation-Id") if request else None
    timing = {"recipes": len(all_recipes), "pantry": len(inventory.items), "corr": corr_id}
    with metrics.timed("what_can_i_cook", timing):
        annotated = [annotate_recipe(r, inventory) for r in all_recipes]

    suggested_tags: List[str] = []
    for r in all_recipes:
        for t in r.tags:
            if t not in suggested_tags:
                suggested_tags.append(t)

    if bucket is not None:
        annotated = [r for r in annotated if r.cookability.bucket == bucket]

    return WhatCanICookResponse(
        recipes=annotated,
        pantry_snapshot=inventory.snapshot(),
        suggested_tags=suggested_tags,
    )


@router.post("/api/cooking/add-missing-to-shopping-list", response_model=AddMissingResponse)
def add_missing(
    body: AddMissingRequest,
    recipes: JSONRecipeRepo = Depends(get_recipe_repo),
    inventory_repo: JSONInventoryRepo = Depends(get_inventory_repo),
    shopping_repo: JSONShoppingListRepo = Depends(get_shopping_list_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        recipe = _recipe_or_404(recipes, body.recipe_id)
        inventory = inventory_repo.load()
        missing = find_missing_ingredients(prepare_ingredients(recipe.ingredients, inventory), inventory)
        with shopping_repo.locked():
            shopping_list, added = add_missing_to_shopping_list(shopping_repo.load(), missing, recipe_id=recipe.id)
            if added:
                shopping_repo.save(shopping_list)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))

    record_event(events, "shopping", {"mode": "from-recipe", "recipe_id": recipe.id, "added": len(added)})
    return AddMissingResponse(added=len(added))


@router.post("/api/cooking/cook-recipe", response_model=CookRecipeResponse)
def cook_recipe(
    body: CookRecipeRequest,
    recipes: JSONRecipeRepo = Depends(get_recipe_repo),
    inventory_repo: JSONInventoryRepo = Depends(get_inventory_repo),
    shopping_repo: JSONShoppingListRepo = Depends(get_shopping_list_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        # lock order: recipes, inventory, shopping list
        with recipes.locked(), inventory_repo.locked(), shopping_repo.locked():
            recipe = _recipe_or_404(recipes, body.recipe_id)
            inventory = inventory_repo.load()
            plan = plan_cook(prepare_ingredients(recipe.ingredients, inventory), inventory)

            if plan.deductions:
                inventory_repo.save(apply_deductions(inventory, plan.deductions))

            added = []
            if body.add_missing_to_list and plan.missing:
                shopping_list, added = add_missing_to_shopping_list(shopping_repo.load(), plan.missing, recipe_id=recipe.id)
                if added:
                    shopping_repo.save(shopping_list)

            recipe.last_cooked_at = datetime.utcnow()
            recipes.upsert(recipe)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(
        "cooked recipe %s: %d inventory rows updated, %d missing added",
        recipe.id, len(plan.deductions), len(added),
    )
    record_event(events, "cook", {
        "recipe_id": recipe.id,
        "deductions": [d.model_dump() for d in plan.deductions],
        "missing": [m.name for m in plan.missing],
    })
    return CookRecipeResponse(inventory_updated=len(plan.deductions), missing_added=len(added))
