"""Stock mutations applied by purchases, sales and manual corrections.

The functions here change ingredient objects in memory and report what they
did; they never touch the database. ``crud.purchases``/``crud.sales`` wrap
them in a single transaction together with the record that caused them.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..core.units import convert_quantity, normalize_unit
from .costing import is_direct_cost
from .inventory import required_stock

logger = logging.getLogger(__name__)


class StockChange:
    """Outcome of one stock mutation on one ingredient."""

    def __init__(self, ingredient: Any, previous_stock: float, requested_change: float) -> None:
        self.ingredient = ingredient
        self.previous_stock = previous_stock
        self.requested_change = requested_change

    @property
    def new_stock(self) -> float:
        return self.ingredient.current_stock

    @property
    def change(self) -> float:
        return self.new_stock - self.previous_stock

    @property
    def clamped(self) -> bool:
        return abs(self.change - self.requested_change) > 1e-9

    def __repr__(self) -> str:
        return (
            f"StockChange({self.ingredient.name!r}, {self.previous_stock} -> {self.new_stock}"
            f" {self.ingredient.unit}, requested {self.requested_change})"
        )


def apply_purchase(ingredient: Any, quantity: float, unit: str | None, price_per_kg: float) -> StockChange:
    """Add a purchased quantity to stock and take the purchase price.

    The price replaces the previous one outright (last purchase wins, no
    averaging).
    """

    previous = ingredient.current_stock or 0.0
    added = convert_quantity(quantity, normalize_unit(unit), ingredient.unit)
    ingredient.current_stock = previous + added
    ingredient.price_per_kg = price_per_kg
    return StockChange(ingredient, previous, added)


def apply_sale_decrement(product: Any, quantity_sold: float, ingredients_by_id: Mapping[str, Any]) -> list[StockChange]:
    """Consume the recipe of ``quantity_sold`` products from stock.

    Stock is clamped at zero; an oversell shows up as a clamped change
    rather than a rejected sale. Recipe lines whose ingredient is gone are
    skipped.
    """

    changes: list[StockChange] = []
    if is_direct_cost(product):
        return changes
    for line in product.ingredients or []:
        ingredient = ingredients_by_id.get(line.ingredient_id)
        if ingredient is None:
            logger.warning(
                "stock.decrement.missing_ingredient",
                extra={"extra_data": {"product_id": product.id, "ingredient_id": line.ingredient_id}},
            )
            continue
        used = required_stock(line, ingredient, quantity_sold)
        previous = ingredient.current_stock or 0.0
        ingredient.current_stock = max(0.0, previous - used)
        change = StockChange(ingredient, previous, -used)
        if change.clamped:
            logger.warning(
                "stock.decrement.clamped",
                extra={
                    "extra_data": {
                        "product_id": product.id,
                        "ingredient_id": ingredient.id,
                        "needed": used,
                        "had": previous,
                    }
                },
            )
        changes.append(change)
    return changes


def apply_adjustment(ingredient: Any, change: float) -> StockChange:
    """Manual correction, clamped at zero like a sale."""

    previous = ingredient.current_stock or 0.0
    ingredient.current_stock = max(0.0, previous + change)
    return StockChange(ingredient, previous, change)


__all__ = [
    "StockChange",
    "apply_adjustment",
    "apply_purchase",
    "apply_sale_decrement",
]
