"""Inventory projection and stock checks.

These helpers answer "how many can we make?" and "do we have enough for this
sale?". Unlike costing, a recipe line whose ingredient no longer exists is
treated as zero stock: it never lets a product look more sellable than it is.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from ..core.units import convert_quantity, to_canonical, to_grams
from .costing import is_direct_cost, product_cost, profit, profit_margin, profit_percentage

STOCK_OUT = "out_of_stock"
STOCK_LOW = "low_stock"
STOCK_OK = "in_stock"


def _limit_for_line(line: Any, ingredient: Any | None) -> dict[str, Any]:
    base = {
        "ingredient_id": line.ingredient_id,
        "required_per_unit": line.quantity,
        "required_unit": line.unit,
    }
    if ingredient is None:
        return {
            **base,
            "name": line.name or line.ingredient_id,
            "current_stock": 0.0,
            "current_stock_unit": None,
            "units": 0,
            "missing": True,
        }
    required = to_grams(line.quantity, line.unit)
    if required <= 0:
        units = None
    else:
        units = math.floor(to_grams(ingredient.current_stock or 0.0, ingredient.unit) / required)
    return {
        **base,
        "name": ingredient.name,
        "current_stock": ingredient.current_stock,
        "current_stock_unit": ingredient.unit,
        "units": units,
        "missing": False,
    }


def max_units(product: Any, ingredients_by_id: Mapping[str, Any]) -> dict[str, Any]:
    """Maximum units of ``product`` the current stock can produce.

    Direct-cost products are unconstrained and report ``max_units=None``.
    Lines that require no quantity do not constrain the result. The limiting
    ingredient is the first recipe line reaching the minimum.
    """

    if is_direct_cost(product):
        return {"max_units": None, "limiting_ingredient": None}
    lines = list(product.ingredients or [])
    limits = [_limit_for_line(line, ingredients_by_id.get(line.ingredient_id)) for line in lines]
    constraining = [limit for limit in limits if limit["units"] is not None]
    if not constraining:
        return {"max_units": 0, "limiting_ingredient": None}
    lowest = min(limit["units"] for limit in constraining)
    limiting = next(limit for limit in constraining if limit["units"] == lowest)
    return {"max_units": lowest, "limiting_ingredient": limiting}


def project_product(product: Any, ingredients_by_id: Mapping[str, Any]) -> dict[str, Any]:
    """Cost, profit and sales potential of one product at current stock."""

    cost = product_cost(product, ingredients_by_id)
    selling_price = product.selling_price or 0.0
    projection = max_units(product, ingredients_by_id)
    units = projection["max_units"]
    if selling_price and units:
        potential_revenue = units * selling_price
        potential_profit = units * profit(cost, selling_price)
    else:
        potential_revenue = 0.0
        potential_profit = 0.0
    return {
        "product_id": product.id,
        "name": product.name,
        "product_type": product.product_type,
        "cost": cost,
        "selling_price": product.selling_price,
        "profit": profit(cost, selling_price) if selling_price else 0.0,
        "margin": profit_margin(cost, selling_price) if selling_price else 0.0,
        "markup": profit_percentage(cost, selling_price) if selling_price else 0.0,
        "max_units": units,
        "limiting_ingredient": projection["limiting_ingredient"],
        "potential_revenue": potential_revenue,
        "potential_profit": potential_profit,
    }


def required_stock(line: Any, ingredient: Any, quantity: float) -> float:
    """Stock consumed by ``quantity`` products, in the ingredient's unit."""

    return convert_quantity(line.quantity * quantity, line.unit, ingredient.unit)


def check_availability(product: Any, quantity: float, ingredients_by_id: Mapping[str, Any]) -> dict[str, Any]:
    """Read-only pre-check before committing a sale.

    The result is advisory; callers decide whether a shortfall blocks the
    sale. Missing ingredients are reported as a shortfall with nothing on
    hand.
    """

    shortfalls: list[dict[str, Any]] = []
    if is_direct_cost(product):
        return {"sufficient": True, "shortfalls": shortfalls}
    for line in product.ingredients or []:
        ingredient = ingredients_by_id.get(line.ingredient_id)
        if ingredient is None:
            shortfalls.append(
                {
                    "ingredient_id": line.ingredient_id,
                    "ingredient_name": line.name or line.ingredient_id,
                    "needed": line.quantity * quantity,
                    "have": 0.0,
                    "unit": line.unit,
                    "missing": True,
                }
            )
            continue
        needed = required_stock(line, ingredient, quantity)
        have = ingredient.current_stock or 0.0
        if have < needed:
            shortfalls.append(
                {
                    "ingredient_id": ingredient.id,
                    "ingredient_name": ingredient.name,
                    "needed": needed,
                    "have": have,
                    "unit": ingredient.unit,
                    "missing": False,
                }
            )
    return {"sufficient": not shortfalls, "shortfalls": shortfalls}


def stock_status(ingredient: Any) -> str:
    current = ingredient.current_stock or 0.0
    if current <= 0:
        return STOCK_OUT
    if current <= (ingredient.minimum_stock or 0.0):
        return STOCK_LOW
    return STOCK_OK


def stock_value(ingredient: Any) -> float:
    return to_canonical(ingredient.current_stock or 0.0, ingredient.unit) * (ingredient.price_per_kg or 0.0)


def inventory_summary(ingredients: Iterable[Any]) -> dict[str, Any]:
    items = []
    counts = {STOCK_OUT: 0, STOCK_LOW: 0, STOCK_OK: 0}
    total_value = 0.0
    for ingredient in ingredients:
        status = stock_status(ingredient)
        value = stock_value(ingredient)
        counts[status] += 1
        total_value += value
        items.append(
            {
                "ingredient_id": ingredient.id,
                "name": ingredient.name,
                "category": ingredient.category,
                "unit": ingredient.unit,
                "current_stock": ingredient.current_stock,
                "minimum_stock": ingredient.minimum_stock,
                "stock_value": value,
                "status": status,
            }
        )
    items.sort(key=lambda item: (item["name"] or "").casefold())
    return {
        "total_ingredients": len(items),
        "total_inventory_value": total_value,
        "out_of_stock_count": counts[STOCK_OUT],
        "low_stock_count": counts[STOCK_LOW],
        "well_stocked_count": counts[STOCK_OK],
        "items": items,
    }


def cost_analysis(products: Iterable[Any], ingredients_by_id: Mapping[str, Any]) -> dict[str, Any]:
    rows = [project_product(product, ingredients_by_id) for product in products]
    return {
        "total_products": len(rows),
        "total_inventory_value": sum(stock_value(ing) for ing in ingredients_by_id.values()),
        "total_potential_revenue": sum(row["potential_revenue"] for row in rows),
        "total_potential_profit": sum(row["potential_profit"] for row in rows),
        "products": rows,
    }


def aggregate_ingredients(lines: Iterable[Any], products_by_id: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Kitchen prep list: total recipe quantities for a set of ordered lines.

    ``lines`` are anything with ``product_id`` and ``quantity``. Quantities are
    summed per (ingredient, unit) in first-seen order.
    """

    aggregated: dict[tuple[str, str], dict[str, Any]] = {}
    for item in lines:
        product = products_by_id.get(item.product_id)
        if product is None or is_direct_cost(product):
            continue
        for line in product.ingredients or []:
            key = (line.ingredient_id, line.unit)
            entry = aggregated.get(key)
            if entry is None:
                entry = aggregated[key] = {
                    "ingredient_id": line.ingredient_id,
                    "name": line.name or line.ingredient_id,
                    "quantity": 0.0,
                    "unit": line.unit,
                    "products": [],
                }
            entry["quantity"] += line.quantity * item.quantity
            if product.name not in entry["products"]:
                entry["products"].append(product.name)
    return list(aggregated.values())


__all__ = [
    "STOCK_LOW",
    "STOCK_OK",
    "STOCK_OUT",
    "aggregate_ingredients",
    "check_availability",
    "cost_analysis",
    "inventory_summary",
    "max_units",
    "project_product",
    "required_stock",
    "stock_status",
    "stock_value",
]
