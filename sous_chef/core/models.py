from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional, List
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from .normalize import normalize_label, normalize_unit


def new_id() -> str:
    return uuid4().hex


CookabilityBucket = Literal["cook-now", "almost", "missing"]


# ---------- Matching inputs / outputs ----------

class PantrySnapshotItem(BaseModel):
    """Read-only projection of an inventory row at match time."""
    id: str
    name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None


class IngredientMapping(BaseModel):
    inventory_item_label: str = Field(..., description="Pantry label to match instead of the ingredient name")
    location_hint: Optional[str] = None
    suggested: Optional[bool] = None


class RecipeIngredient(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    note: Optional[str] = None
    mapping: Optional[IngredientMapping] = None
    inventory_item_id: Optional[str] = Field(None, description="Inventory row this ingredient is linked to")


class RecipeCookability(BaseModel):
    missing_count: int = Field(0, ge=0)
    missing_labels: List[str] = Field(default_factory=list)
    available_count: int = Field(0, ge=0)


# ---------- Inventory ----------

class InventoryItem(BaseModel):
    """A single inventory row."""
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, description="Display name of the item")
    quantity: float = Field(0, ge=0, description="Non-negative quantity")
    unit: Optional[str] = Field(None, description="Unit as entered, e.g. 'g', 'cups', 'pieces'")
    location: Optional[str] = Field(None, description="Where it lives, e.g. 'fridge', 'pantry'")
    expires_at: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("InventoryItem.name cannot be blank")
        return v

    @field_validator("unit")
    @classmethod
    def _strip_unit(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    def key(self) -> tuple[str, Optional[str]]:
        """
        Merge key: (normalized_name, normalized_unit).
        Unit is part of the key so 500 ml of milk is never summed into 1 l.
        """
        return (self.normalized_name(), self.normalized_unit())

    def normalized_name(self) -> str:
        return normalize_label(self.name)

    def normalized_unit(self) -> Optional[str]:
        return normalize_unit(self.unit)

    def to_snapshot(self) -> PantrySnapshotItem:
        return PantrySnapshotItem(id=self.id, name=self.name, quantity=self.quantity, unit=self.unit)


class InventoryItemPatch(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    location: Optional[str] = None
    expires_at: Optional[date] = None
    notes: Optional[str] = None


class Inventory(BaseModel):
    items: List[InventoryItem] = Field(default_factory=list)

    def snapshot(self) -> List[PantrySnapshotItem]:
        return [it.to_snapshot() for it in self.items]


# ---------- Recipes ----------

class RecipeIn(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    servings: Optional[int] = Field(None, ge=1)
    total_time_minutes: Optional[int] = Field(None, ge=0)
    ingredients: List[RecipeIngredient] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)


class Recipe(RecipeIn):
    id: str = Field(default_factory=new_id)
    favorite: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_cooked_at: Optional[datetime] = None


class RecipeCookabilityView(RecipeCookability):
    bucket: CookabilityBucket
    bucket_label: str


class RecipeWithCookability(Recipe):
    cookability: RecipeCookabilityView


class WhatCanICookResponse(BaseModel):
    recipes: List[RecipeWithCookability]
    pantry_snapshot: List[PantrySnapshotItem]
    suggested_tags: List[str]


# ---------- Shopping list ----------

class ShoppingListItemIn(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None


class ShoppingListItem(ShoppingListItemIn):
    id: str = Field(default_factory=new_id)
    checked: bool = False
    source: Literal["manual", "from-recipe"] = "manual"
    recipe_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ShoppingListItemPatch(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    checked: Optional[bool] = None


class ShoppingList(BaseModel):
    items: List[ShoppingListItem] = Field(default_factory=list)


# ---------- Auditing / events ----------

class KitchenEvent(BaseModel):
    ts: datetime = Field(default_factory=datetime.utcnow)
    type: Literal["inventory", "recipe", "shopping", "cook"]
    payload: dict
    schema_version: int = 1
