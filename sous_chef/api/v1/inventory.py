from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from sous_chef.api.deps import get_event_repo, get_inventory_repo, record_event
from sous_chef.core.merge import apply_merge
from sous_chef.core.models import Inventory, InventoryItem, InventoryItemPatch
from sous_chef.services.exceptions import RepoError
from sous_chef.services.repo.json_repo import JSONEventRepo, JSONInventoryRepo

router = APIRouter(tags=["inventory"])
logger = logging.getLogger(__name__)


# ---- Routes ------------------------------------------------------------------

@router.get("/api/inventory", response_model=Inventory)
def get_inventory(repo: JSONInventoryRepo = Depends(get_inventory_repo)):
    try:
        return repo.load()
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/api/inventory", response_model=Inventory, status_code=status.HTTP_200_OK)
def replace_inventory(
    inventory: Inventory,
    repo: JSONInventoryRepo = Depends(get_inventory_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        repo.save(inventory)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "inventory", {"mode": "replace", "count": len(inventory.items)})
    return inventory


@router.post("/api/inventory/items", response_model=InventoryItem, status_code=status.HTTP_201_CREATED)
def add_inventory_item(
    item: InventoryItem,
    repo: JSONInventoryRepo = Depends(get_inventory_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        with repo.locked():
            current = repo.load()
            if any(it.id == item.id for it in current.items):
                raise HTTPException(status_code=409, detail=f"Inventory item {item.id} already exists")
            repo.save(Inventory(items=[*current.items, item]))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "inventory", {"mode": "add", "item": item.model_dump(mode="json")})
    return item


@router.post("/api/inventory/merge", response_model=Inventory, status_code=status.HTTP_200_OK)
def merge_into_inventory(
    items: List[InventoryItem],
    repo: JSONInventoryRepo = Depends(get_inventory_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        with repo.locked():
            merged = apply_merge(repo.load(), items)
            repo.save(merged)
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "inventory", {"mode": "merge", "delta": [i.model_dump(mode="json") for i in items]})
    logger.info("merged %d rows into inventory (%d total)", len(items), len(merged.items))
    return merged


@router.patch("/api/inventory/items/{item_id}", response_model=InventoryItem)
def update_inventory_item(
    item_id: str,
    patch: InventoryItemPatch,
    repo: JSONInventoryRepo = Depends(get_inventory_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        with repo.locked():
            current = repo.load()
            existing = next((it for it in current.items if it.id == item_id), None)
            if existing is None:
                raise HTTPException(status_code=404, detail="Inventory item not found")
            changes = patch.model_dump(exclude_unset=True)
            # re-validate so name/unit stripping applies to patched values
            try:
                updated = InventoryItem.model_validate({**existing.model_dump(), **changes})
            except ValidationError as e:
                raise HTTPException(status_code=422, detail=str(e))
            repo.save(Inventory(items=[updated if it.id == item_id else it for it in current.items]))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "inventory", {"mode": "update", "id": item_id, "changes": patch.model_dump(mode="json", exclude_unset=True)})
    return updated


@router.delete("/api/inventory/items/{item_id}")
def delete_inventory_item(
    item_id: str,
    repo: JSONInventoryRepo = Depends(get_inventory_repo),
    events: JSONEventRepo = Depends(get_event_repo),
):
    try:
        with repo.locked():
            current = repo.load()
            kept = [it for it in current.items if it.id != item_id]
            if len(kept) == len(current.items):
                raise HTTPException(status_code=404, detail="Inventory item not found")
            repo.save(Inventory(items=kept))
    except RepoError as e:
        raise HTTPException(status_code=500, detail=str(e))
    record_event(events, "inventory", {"mode": "delete", "id": item_id})
    return {"ok": True}
