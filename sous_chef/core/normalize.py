from __future__ import annotations

import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")
_NON_LABEL_CHARS = re.compile(r"[^\w\s-]")

# Unit aliases -> canonical unit. Unknown units pass through lower-cased.
UNIT_CANON = {
    "grams": "g", "gram": "g", "g": "g",
    "kilogram": "kg", "kilograms": "kg", "kg": "kg",
    "ml": "ml", "millilitre": "ml", "milliliter": "ml", "milliliters": "ml",
    "l": "l", "litre": "l", "liter": "l", "liters": "l",
    "cup": "cup", "cups": "cup",
    "tbsp": "tbsp", "tablespoon": "tbsp", "tablespoons": "tbsp",
    "tsp": "tsp", "teaspoon": "tsp", "teaspoons": "tsp",
    "oz": "oz", "ounce": "oz", "ounces": "oz",
    "lb": "lb", "lbs": "lb", "pound": "lb", "pounds": "lb",
    "pcs": "piece", "piece": "piece", "pieces": "piece",
    "unit": "piece", "units": "piece",
}


def normalize_label(label: Optional[str]) -> str:
    """
    Canonical comparison key for a free-text ingredient or pantry label.

    Lower-cases, trims, collapses whitespace runs to one space and drops
    anything that is not a word character, whitespace or a hyphen.
    Idempotent: normalize_label(normalize_label(x)) == normalize_label(x).
    """
    s = (label or "").lower().strip()
    s = _WHITESPACE.sub(" ", s)
    s = _NON_LABEL_CHARS.sub("", s)
    # dropped punctuation can leave "a  b" or a trailing space behind
    return _WHITESPACE.sub(" ", s).strip()


def normalize_unit(unit: Optional[str]) -> Optional[str]:
    if unit is None:
        return None
    u = unit.lower().strip().rstrip(".")
    if not u:
        return None
    return UNIT_CANON.get(u, u)
