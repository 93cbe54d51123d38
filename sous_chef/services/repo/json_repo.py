from __future__ import annotations

import io
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError

from sous_chef.config import Settings
from sous_chef.core.models import Inventory, KitchenEvent, Recipe, ShoppingList
from sous_chef.services.exceptions import RepoError
from .base import EventRepo, InventoryRepo, RecipeRepo, ShoppingListRepo

logger = logging.getLogger(__name__)


# Cross-platform file lock (fcntl for *nix; msvcrt for Windows)
@contextmanager
def _locked(path: str) -> Iterator[io.FileIO]:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    try:
        f = open(path, "a+b")  # create if missing
    except OSError as e:
        raise RepoError(f"Could not open lock file {path}: {e}") from e
    locker = None
    try:
        try:
            import fcntl  # type: ignore
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            locker = "fcntl"
        except ImportError:
            try:
                import msvcrt  # type: ignore
                f.seek(0)
                msvcrt.locking(f.fileno(), msvcrt.LK_LOCK, 1)
                locker = "msvcrt"
            except (ImportError, OSError) as e:
                raise RepoError(f"Could not lock file {path}: {e}") from e
        yield f
    finally:
        try:
            if locker == "fcntl":
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            elif locker == "msvcrt":
                f.seek(0)
                msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, 1)
        except OSError as e:
            # closing the handle releases the lock anyway
            logger.debug("unlock failed for %s: %s", path, e)
        f.close()


_held = threading.local()


@contextmanager
def _exclusive(path: str) -> Iterator[None]:
    """
    Hold the lock file at `path` for a whole read-modify-write.

    Reentrant within a thread, so a repo method that takes the lock can run inside
    a caller that already holds it. Other threads and processes wait.
    """
    counts: Dict[str, int] = getattr(_held, "counts", None) or {}
    _held.counts = counts
    if counts.get(path):
        counts[path] += 1
        try:
            yield
        finally:
            counts[path] -= 1
        return
    with _locked(path):
        counts[path] = 1
        try:
            yield
        finally:
            del counts[path]


def _atomic_write(path: str, data: bytes) -> None:
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=d)
    try:
        with os.fdopen(fd, "wb") as w:
            w.write(data)
            w.flush()
            os.fsync(w.fileno())
        os.replace(tmp, path)
    except OSError as e:
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise RepoError(f"Atomic write failed for {path}: {e}") from e


class _JSONDocument:
    """
    One JSON object per file, replaced atomically on write.

    Writers serialise on a sidecar "<file>.lock" rather than the document itself,
    since `os.replace` swaps the inode a lock on the document would be held on.
    Readers take no lock: they see either the old or the new file, never a torn one.
    """

    def __init__(self, path: str):
        self.path = path
        self.lock_path = path + ".lock"

    def locked(self):
        return _exclusive(self.lock_path)

    def read(self) -> dict[str, Any]:
        try:
            with open(self.path, "rb") as f:
                raw = f.read() or b"{}"
            return json.loads(raw.decode("utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RepoError(f"Failed to read {self.path}: {e}") from e

    def write(self, obj: Any) -> None:
        try:
            payload = json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=str).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise RepoError(f"Failed to encode {self.path}: {e}") from e
        with self.locked():
            _atomic_write(self.path, payload)


class JSONInventoryRepo(InventoryRepo):
    def __init__(self, settings: Settings):
        self._doc = _JSONDocument(settings.inventory_file)

    def locked(self):
        """Hold the inventory write lock across a load and save."""
        return self._doc.locked()

    def load(self) -> Inventory:
        obj = self._doc.read()
        try:
            return Inventory.model_validate({"items": obj.get("items", [])})
        except ValidationError as e:
            raise RepoError(f"Inventory in {self._doc.path} is malformed: {e}") from e

    def save(self, inventory: Inventory) -> None:
        self._doc.write(inventory.model_dump(mode="json"))
        logger.debug("saved %d inventory rows", len(inventory.items))


class JSONRecipeRepo(RecipeRepo):
    def __init__(self, settings: Settings):
        self._doc = _JSONDocument(settings.recipes_file)

    def locked(self):
        return self._doc.locked()

    def _load_all(self) -> List[Recipe]:
        obj = self._doc.read()
        try:
            return [Recipe.model_validate(r) for r in obj.get("recipes", [])]
        except ValidationError as e:
            raise RepoError(f"Recipes in {self._doc.path} are malformed: {e}") from e

    def _save_all(self, recipes: List[Recipe]) -> None:
        self._doc.write({"recipes": [r.model_dump(mode="json") for r in recipes]})

    def list(self) -> List[Recipe]:
        """All recipes, most recently updated first."""
        recipes = self._load_all()
        recipes.sort(key=lambda r: r.updated_at, reverse=True)
        return recipes

    def get(self, recipe_id: str) -> Optional[Recipe]:
        return next((r for r in self._load_all() if r.id == recipe_id), None)

    def upsert(self, recipe: Recipe) -> None:
        with self.locked():
            recipes = [r for r in self._load_all() if r.id != recipe.id]
            recipes.append(recipe)
            self._save_all(recipes)

    def delete(self, recipe_id: str) -> bool:
        with self.locked():
            recipes = self._load_all()
            kept = [r for r in recipes if r.id != recipe_id]
            if len(kept) == len(recipes):
                return False
            self._save_all(kept)
        return True


class JSONShoppingListRepo(ShoppingListRepo):
    def __init__(self, settings: Settings):
        self._doc = _JSONDocument(settings.shopping_list_file)

    def locked(self):
        return self._doc.locked()

    def load(self) -> ShoppingList:
        obj = self._doc.read()
        try:
            return ShoppingList.model_validate({"items": obj.get("items", [])})
        except ValidationError as e:
            raise RepoError(f"Shopping list in {self._doc.path} is malformed: {e}") from e

    def save(self, shopping_list: ShoppingList) -> None:
        self._doc.write(shopping_list.model_dump(mode="json"))


class JSONEventRepo(EventRepo):
    def __init__(self, settings: Settings):
        self.path = settings.events_file

    def append(self, event: KitchenEvent) -> None:
        try:
            line = (event.model_dump_json() + "\n").encode("utf-8")
            with _locked(self.path) as f:
                f.seek(0, os.SEEK_END)
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise RepoError(f"Failed to append event to {self.path}: {e}") from e
