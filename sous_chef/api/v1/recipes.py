from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from sous_chef.api.deps import get_event_repo, get_inventory_repo, get_recipe_repo, record_event
from sous_chef.core.cooking import annotate_recipe
from sous_chef.core.models import Recipe, RecipeIn, RecipeWithCookability
from sous_chef.services.exceptions import RepoError
from sous_chef.services.repo.json_repo import JSONEventRepo, JSONInventoryRepo, JSONRecipeRepo

router = APIRouter(tags=["recipes"])


def _get_or_404(repo: JSONRecipeRepo, recipe_id: str) -> Recipe:
    recipe = repo.get(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


# ---- Routes ------------------------------------------------------------------

@router.get("/api/recipes", response_model=List[Recipe])
def list_recipes(
    tag: Optional[str] = Query(None, description="Only recipes carrying this tag"),
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
):
    try:
        recipes = repo.list()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if tag:
        wanted = tag.lower()
        recipes = [r for r in recipes if any(t.lower() == wanted for t in r.tags)]
    return recipes


@router.post("/api/recipes", response_model=Recipe, status_code=status.HTTP_201_CREATED)
def create_recipe(
    payload: RecipeIn,
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    recipe = Recipe(**payload.model_dump())
    try:
        repo.upsert(recipe)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "recipe", {"mode": "create", "id": recipe.id, "title": recipe.title})
    return recipe


@router.get("/api/recipes/{recipe_id}", response_model=RecipeWithCookability)
def get_recipe(
    recipe_id: str,
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    inventory_repo: JSONInventoryRepo = Depends(get_inventory_repo),
):
    try:
        recipe = _get_or_404(repo, recipe_id)
        inventory = inventory_repo.load()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return annotate_recipe(recipe, inventory)


@router.put("/api/recipes/{recipe_id}", response_model=Recipe)
def update_recipe(
    recipe_id: str,
    payload: RecipeIn,
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        with repo.locked():
            existing = _get_or_404(repo, recipe_id)
            updated = Recipe.model_validate({**existing.model_dump(), **payload.model_dump(), "updated_at": datetime.utcnow()})
            repo.upsert(updated)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "recipe", {"mode": "update", "id": recipe_id})
    return updated


@router.delete("/api/recipes/{recipe_id}")
def delete_recipe(
    recipe_id: str,
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        removed = repo.delete(recipe_id)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail="Recipe not found")
    record_event(events, "recipe", {"mode": "delete", "id": recipe_id})
    return {"ok": True}


@router.post("/api/recipes/{recipe_id}/favorite", response_model=Recipe)
def toggle_favorite(
    recipe_id: str,
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
):
    try:
        with repo.locked():
            recipe = _get_or_404(repo, recipe_id)
            recipe.favorite = not recipe.favorite
            repo.upsert(recipe)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return recipe
