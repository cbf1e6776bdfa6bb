# kvikk_app/services/shipping/units.py
"""
Package arithmetic shared by rate quotes and shipment creation.

Line items are plain dicts as Shopify sends them (carrier-service rate items or
order line_items). Missing numbers never raise: weight falls back to 100 g,
quantity and price fall back to 0.
"""

import math
from typing import Any, Dict, Iterable, Mapping

DEFAULT_ITEM_WEIGHT = 100  # grams
VOLUME_PER_UNIT = 1000  # cm3 per unit of quantity

MIN_LENGTH = 15
MIN_WIDTH = 10
MIN_HEIGHT = 5


def _to_number(value: Any) -> float:
    """Parse ints, floats and numeric strings; anything else counts as 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except ValueError:
        return 0


def item_quantity(item: Mapping[str, Any]) -> float:
    return _to_number(item.get("quantity"))


def item_weight(item: Mapping[str, Any]) -> float:
    # 0 g counts as missing
    return _to_number(item.get("grams")) or _to_number(item.get("weight")) or DEFAULT_ITEM_WEIGHT


def item_price(item: Mapping[str, Any]) -> float:
    return _to_number(item.get("unit_price")) or _to_number(item.get("price")) or 0


def total_weight(items: Iterable[Mapping[str, Any]]) -> float:
    """Sum of weight x quantity, in grams."""
    return sum(item_weight(item) * item_quantity(item) for item in items)


def package_dimensions(items: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    """
    Cube-shaped estimate from the item count.

    The width and height floors are applied to the unfloored side, so a side of 10
    gives (15, 10, 6) rather than scaling the floored length.
    """
    volume = sum(item_quantity(item) * VOLUME_PER_UNIT for item in items)
    side = math.ceil(volume ** (1 / 3)) if volume > 0 else 0

    return {
        "length": max(side, MIN_LENGTH),
        "width": max(side * 0.8, MIN_WIDTH),
        "height": max(side * 0.6, MIN_HEIGHT),
    }


def total_value(items: Iterable[Mapping[str, Any]]) -> float:
    """Sum of unit price x quantity."""
    return sum(item_price(item) * item_quantity(item) for item in items)


def rate_contents(items: Iterable[Mapping[str, Any]]) -> str:
    return ", ".join(str(item.get("name") or item.get("title") or "") for item in items)


def shipment_contents(items: Iterable[Mapping[str, Any]]) -> str:
    return ", ".join(f"{item.get('title')} x{item.get('quantity')}" for item in items)
