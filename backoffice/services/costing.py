"""Ingredient and product costing.

Every function here is pure: it reads ingredient/product objects (ORM rows
or anything with the same attributes) and returns numbers. Nothing is
persisted, so cost breakdowns can be refreshed as often as needed.

Missing ingredient references contribute nothing to a cost. A deleted
ingredient therefore drops out of a product's cost instead of failing the
whole calculation. Producibility (see ``services.inventory``) treats the same
gap as a hard stop.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..core.catalog_types import PRODUCT_TYPE_DIRECT_COST
from ..core.units import to_canonical


def index_ingredients(ingredients: Iterable[Any]) -> dict[str, Any]:
    """Key ingredient rows by id for the lookups below."""

    return {ingredient.id: ingredient for ingredient in ingredients}


def is_direct_cost(product: Any) -> bool:
    return getattr(product, "product_type", None) == PRODUCT_TYPE_DIRECT_COST


def line_cost(ingredient: Any | None, quantity: float, unit: str | None) -> float:
    """Cost of ``quantity`` ``unit`` of ``ingredient`` at its per-kg price."""

    if ingredient is None:
        return 0.0
    return to_canonical(quantity, unit) * (ingredient.price_per_kg or 0.0)


def product_cost(product: Any, ingredients_by_id: Mapping[str, Any]) -> float:
    if is_direct_cost(product):
        return product.cost_price or 0.0
    total = 0.0
    for line in product.ingredients or []:
        total += line_cost(ingredients_by_id.get(line.ingredient_id), line.quantity, line.unit)
    return total


def profit(cost: float, selling_price: float) -> float:
    return selling_price - cost


def profit_margin(cost: float, selling_price: float) -> float:
    """Margin on the selling price, as a percentage.

    Returns ``0`` when either value is zero rather than a division result.
    A free item and a zero-cost item both report 0%.
    """

    if selling_price == 0 or cost == 0:
        return 0.0
    return ((selling_price - cost) / selling_price) * 100


def profit_percentage(cost: float, selling_price: float) -> float:
    """Markup on cost, as a percentage (0 when cost is zero)."""

    if cost == 0:
        return 0.0
    return ((selling_price - cost) / cost) * 100


def recalculate_product(product: Any, ingredients_by_id: Mapping[str, Any]) -> Any:
    """Refresh the cached ``cost_price`` and ``profit_margin`` in place.

    Running it twice against the same ingredients gives the same result.
    The product is returned for chaining; the caller commits.
    """

    cost = product_cost(product, ingredients_by_id)
    product.cost_price = cost
    if product.selling_price:
        product.profit_margin = profit_margin(cost, product.selling_price)
    else:
        product.profit_margin = None
    return product


def cost_breakdown(product: Any, ingredients_by_id: Mapping[str, Any]) -> list[dict[str, object]]:
    """Per-line cost rows for display, flagging lines whose ingredient is gone."""

    rows: list[dict[str, object]] = []
    if is_direct_cost(product):
        return rows
    for line in product.ingredients or []:
        ingredient = ingredients_by_id.get(line.ingredient_id)
        rows.append(
            {
                "ingredient_id": line.ingredient_id,
                "name": ingredient.name if ingredient is not None else (line.name or line.ingredient_id),
                "quantity": line.quantity,
                "unit": line.unit,
                "price_per_kg": ingredient.price_per_kg if ingredient is not None else None,
                "cost": line_cost(ingredient, line.quantity, line.unit),
                "missing": ingredient is None,
            }
        )
    return rows


__all__ = [
    "cost_breakdown",
    "index_ingredients",
    "is_direct_cost",
    "line_cost",
    "product_cost",
    "profit",
    "profit_margin",
    "profit_percentage",
    "recalculate_product",
]
