from __future__ import annotations

import re
from typing import Iterable, List

from .models import CookabilityBucket, PantrySnapshotItem, RecipeCookability, RecipeIngredient
from .normalize import normalize_label

# Plain substring test, so "not optional" matches too.
_OPTIONAL_NOTE = re.compile(r"optional|to taste", re.IGNORECASE)

ALMOST_MAX_MISSING = 3

_BUCKET_LABELS = {
    "cook-now": "Cook now",
    "almost": "Almost",
    "missing": "Missing too much",
}


def resolve_label(ingredient: RecipeIngredient) -> str:
    """Label used for pantry lookups: the mapped inventory label when set, else the name."""
    if ingredient.mapping is not None and ingredient.mapping.inventory_item_label:
        return ingredient.mapping.inventory_item_label
    return ingredient.name


def is_optional(ingredient: RecipeIngredient) -> bool:
    return bool(ingredient.note and _OPTIONAL_NOTE.search(ingredient.note))


def dedupe_labels(labels: Iterable[str]) -> List[str]:
    """Drop labels whose normalized form was already seen; first spelling wins."""
    seen: set[str] = set()
    out: List[str] = []
    for label in labels:
        key = normalize_label(label)
        if key in seen:
            continue
        seen.add(key)
        out.append(label)
    return out


def compute_recipe_cookability(
    ingredients: Iterable[RecipeIngredient],
    pantry: Iterable[PantrySnapshotItem],
) -> RecipeCookability:
    """
    Match a recipe's ingredients against a pantry snapshot.

    Matching is presence-only on normalized labels; quantities and units are ignored.
    Ingredients whose note says "optional" or "to taste" count as available without
    looking at the pantry. Ingredients whose label normalizes to "" are skipped.
    Missing labels keep first-seen order and are deduplicated by normalized label.
    """
    pantry_keys = {normalize_label(p.name) for p in pantry}

    missing: List[str] = []
    available_count = 0

    for ing in ingredients:
        label = resolve_label(ing)
        key = normalize_label(label)
        if not key:
            continue

        if is_optional(ing):
            available_count += 1
            continue

        if key in pantry_keys:
            available_count += 1
        else:
            missing.append(label)

    missing_labels = dedupe_labels(missing)
    return RecipeCookability(
        missing_count=len(missing_labels),
        missing_labels=missing_labels,
        available_count=available_count,
    )


def bucket_for_missing_count(missing_count: int) -> CookabilityBucket:
    if missing_count == 0:
        return "cook-now"
    if missing_count <= ALMOST_MAX_MISSING:
        return "almost"
    return "missing"


def title_case_bucket(bucket: CookabilityBucket) -> str:
    return _BUCKET_LABELS[bucket]

