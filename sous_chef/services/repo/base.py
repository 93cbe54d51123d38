from __future__ import annotations
from abc import ABC, abstractmethod
from sous_chef.core.models import Inventory, KitchenEvent, Recipe, ShoppingList
from typing import List, Optional

class InventoryRepo(ABC):
    @abstractmethod
    def load(self) -> Inventory: ...
    @abstractmethod
    def save(self, inventory: Inventory) -> None: ...

class RecipeRepo(ABC):
    @abstractmethod
    def list(self) -> List[Recipe]: ...
    @abstractmethod
    def get(self, recipe_id: str) -> Optional[Recipe]: ...
    @abstractmethod
    def upsert(self, recipe: Recipe) -> None: ...
    @abstractmethod
    def delete(self, recipe_id: str) -> bool: ...

class ShoppingListRepo(ABC):
    @abstractmethod
    def load(self) -> ShoppingList: ...
    @abstractmethod
    def save(self, shopping_list: ShoppingList) -> None: ...

class EventRepo(ABC):
    @abstractmethod
    def append(self, event: KitchenEvent) -> None: ...
