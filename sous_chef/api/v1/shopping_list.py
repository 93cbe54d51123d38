from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from sous_chef.api.deps import get_event_repo, get_shopping_list_repo, record_event
from sous_chef.core.models import ShoppingList, ShoppingListItem, ShoppingListItemIn, ShoppingListItemPatch
from sous_chef.services.exceptions import RepoError
from sous_chef.services.repo.json_repo import JSONEventRepo, JSONShoppingListRepo

router = APIRouter(tags=["shopping-list"])


@router.get("/api/shopping-list", response_model=ShoppingList)
def get_shopping_list(repo: JSONShoppingListRepo = Depends(get_shopping_list_repo)):
    try:
        return repo.load()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/shopping-list/items", response_model=ShoppingListItem, status_code=status.HTTP_201_CREATED)
def add_item(
    payload: ShoppingListItemIn,
    repo: JSONShoppingListRepo = Depends(get_shopping_list_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    item = ShoppingListItem(**payload.model_dump(), source="manual")
    try:
        with repo.locked():
            current = repo.load()
            repo.save(ShoppingList(items=[*current.items, item]))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "shopping", {"mode": "add", "name": item.name})
    return item


@router.patch("/api/shopping-list/items/{item_id}", response_model=ShoppingListItem)
def update_item(
    item_id: str,
    patch: ShoppingListItemPatch,
    repo: JSONShoppingListRepo = Depends(get_shopping_list_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        with repo.locked():
            current = repo.load()
            existing = next((it for it in current.items if it.id == item_id), None)
            if existing is None:
                raise HTTPException(status_code=404, detail="Shopping list item not found")
            try:
                updated = ShoppingListItem.model_validate({**existing.model_dump(), **patch.model_dump(exclude_unset=True)})
            except ValidationError as e:
                raise HTTPException(status_code=422, detail=str(e))
            repo.save(ShoppingList(items=[updated if it.id == item_id else it for it in current.items]))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "shopping", {"mode": "update", "id": item_id, "changes": patch.model_dump(mode="json", exclude_unset=True)})
    return updated


@router.delete("/api/shopping-list/items/{item_id}")
def delete_item(
    item_id: str,
    repo: JSONShoppingListRepo = Depends(get_shopping_list_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        with repo.locked():
            current = repo.load()
            kept = [it for it in current.items if it.id != item_id]
            if len(kept) == len(current.items):
                raise HTTPException(status_code=404, detail="Shopping list item not found")
            repo.save(ShoppingList(items=kept))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "shopping", {"mode": "delete", "id": item_id})
    return {"ok": True}


@router.post("/api/shopping-list/clear-checked", response_model=ShoppingList)
def clear_checked(
    repo: JSONShoppingListRepo = Depends(get_shopping_list_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        with repo.locked():
            current = repo.load()
            remaining = ShoppingList(items=[it for it in current.items if not it.checked])
            repo.save(remaining)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "shopping", {"mode": "clear-checked", "removed": len(current.items) - len(remaining.items)})
    return remaining
