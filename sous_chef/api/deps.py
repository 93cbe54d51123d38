from __future__ import annotations

import logging

from fastapi import Depends

from sous_chef.config import Settings
from sous_chef.core.models import KitchenEvent
from sous_chef.services.exceptions import RepoError
from sous_chef.services.metrics import MetricsLogger
from sous_chef.services.repo.base import EventRepo
from sous_chef.services.repo.json_repo import (
    JSONEventRepo,
    JSONInventoryRepo,
    JSONRecipeRepo,
    JSONShoppingListRepo,
)

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    return Settings()


def get_inventory_repo(settings: Settings = Depends(get_settings)) -> JSONInventoryRepo:
    return JSONInventoryRepo(settings)


def get_recipe_repo(settings: Settings = Depends(get_settings)) -> JSONRecipeRepo:
    return JSONRecipeRepo(settings)


def get_shopping_list_repo(settings: Settings = Depends(get_settings)) -> JSONShoppingListRepo:
    return JSONShoppingListRepo(settings)


def get_event_repo(settings: Settings = Depends(get_settings)) -> JSONEventRepo:
    return JSONEventRepo(settings)


def get_metrics(settings: Settings = Depends(get_settings)) -> MetricsLogger:
    return MetricsLogger(settings)


def record_event(events: EventRepo, type: str, payload: dict) -> None:
    """Append to the kitchen log; a failed append never fails the request."""
    try:
        events.append(KitchenEvent(type=type, payload=payload))
    except RepoError as e:
        logger.warning("could not record %s event: %s", type, e)
