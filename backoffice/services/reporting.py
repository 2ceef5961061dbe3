from __future__ import annotations

import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping

from ..core.catalog_types import PURCHASE_TYPE_SUPPLY
from .costing import product_cost
from .totals import quantize_currency, to_decimal


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse the ISO dates and ``...Z`` timestamps stored on records."""

    if not value:
        return None
    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1]
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def window_start(days: int | None, now: datetime | None = None) -> datetime | None:
    """Start of a trailing ``days`` window, to the second; ``None`` means no window."""

    if days is None:
        return None
    return (now or datetime.utcnow()) - timedelta(days=days)


def within_window(value: str | None, cutoff: datetime | None) -> bool:
    if cutoff is None:
        return True
    parsed = parse_timestamp(value)
    return parsed is not None and parsed >= cutoff


def _money(value: Decimal) -> float:
    return float(quantize_currency(value))


def _ranked(buckets: Dict[str, Decimal], key_name: str) -> list[dict[str, Any]]:
    rows = [{key_name: key, "total": _money(total)} for key, total in buckets.items()]
    rows.sort(key=lambda row: (-row["total"], row[key_name]))
    return rows


def purchase_stats(
    purchases: Iterable[Any],
    ingredients_by_id: Mapping[str, Any],
    *,
    recent_days: int,
    now: datetime | None = None,
    top: int = 5,
) -> Dict[str, Any]:
    """Spending overview across ingredient and supply purchases."""

    cutoff = window_start(recent_days, now)

    total_spent = Decimal("0")
    recent_spent = Decimal("0")
    count = 0
    by_supplier: Dict[str, Decimal] = defaultdict(Decimal)
    by_category: Dict[str, Decimal] = defaultdict(Decimal)
    by_ingredient: Dict[str, Decimal] = defaultdict(Decimal)

    for purchase in purchases:
        count += 1
        amount = to_decimal(purchase.total_cost)
        total_spent += amount
        if within_window(purchase.purchase_date, cutoff):
            recent_spent += amount
        by_supplier[(purchase.supplier or "").strip() or "Unknown"] += amount
        if purchase.purchase_type == PURCHASE_TYPE_SUPPLY:
            by_category[purchase.supply_category or "other"] += amount
            continue
        ingredient = ingredients_by_id.get(purchase.ingredient_id or "")
        category = getattr(ingredient, "category", None) or "other"
        by_category[category] += amount
        name = getattr(ingredient, "name", None) or purchase.ingredient_name or purchase.ingredient_id or "Unknown"
        by_ingredient[name] += amount

    return {
        "purchase_count": count,
        "total_spent": _money(total_spent),
        "recent_spent": _money(recent_spent),
        "recent_days": recent_days,
        "by_supplier": _ranked(by_supplier, "supplier"),
        "by_category": _ranked(by_category, "category"),
        "top_ingredients": _ranked(by_ingredient, "ingredient")[:top],
    }


def sales_summary(
    sales: Iterable[Any],
    *,
    days: int | None = None,
    now: datetime | None = None,
) -> Dict[str, Any]:
    """Revenue, cost and profit over recorded sales, optionally windowed."""

    cutoff = window_start(days, now)

    count = 0
    revenue = Decimal("0")
    taxes = Decimal("0")
    cost = Decimal("0")
    profit = Decimal("0")
    flagged = 0
    products: Dict[str, Dict[str, Any]] = {}

    for sale in sales:
        if not within_window(sale.sale_date, cutoff):
            continue
        count += 1
        revenue += to_decimal(sale.subtotal) - to_decimal(sale.discount_amount)
        taxes += to_decimal(sale.tax_total)
        cost += to_decimal(sale.cost_total)
        profit += to_decimal(sale.profit_total)
        if sale.low_stock_flag:
            flagged += 1
        for line in sale.products or []:
            entry = products.setdefault(
                line.product_id,
                {"product_id": line.product_id, "name": line.name, "units": 0.0, "revenue": Decimal("0")},
            )
            entry["units"] += line.quantity
            entry["revenue"] += to_decimal(line.sale_price) * to_decimal(line.quantity)

    by_product = [{**entry, "revenue": _money(entry["revenue"])} for entry in products.values()]
    by_product.sort(key=lambda row: (-row["revenue"], row["name"]))

    return {
        "sale_count": count,
        "days": days,
        "revenue": _money(revenue),
        "tax_collected": _money(taxes),
        "cost": _money(cost),
        "profit": _money(profit),
        "average_order_value": _money(revenue / count) if count else 0.0,
        "low_stock_sales": flagged,
        "by_product": by_product,
    }


def _in_month(value: str | None, month: date) -> bool:
    parsed = parse_timestamp(value)
    return parsed is not None and (parsed.year, parsed.month) == (month.year, month.month)


def monthly_expenses(expenses: Iterable[Any], month: date | None = None) -> float:
    """Expenses charged to ``month`` (default: the current one).

    An expense counts when it is dated inside the month or is recurring,
    whatever its date.
    """

    month = month or datetime.utcnow().date()
    total = Decimal("0")
    for expense in expenses:
        if expense.recurring or _in_month(expense.date, month):
            total += to_decimal(expense.amount)
    return _money(total)


def expenses_by_category(expenses: Iterable[Any]) -> list[dict[str, Any]]:
    buckets: Dict[str, Decimal] = defaultdict(Decimal)
    for expense in expenses:
        buckets[expense.category or "other"] += to_decimal(expense.amount)
    return _ranked(buckets, "category")


def expense_report(expenses: Iterable[Any], month: date | None = None) -> Dict[str, Any]:
    month = month or datetime.utcnow().date()
    rows = list(expenses)
    return {
        "month": f"{month.year:04d}-{month.month:02d}",
        "expense_count": len(rows),
        "total": _money(sum((to_decimal(row.amount) for row in rows), Decimal("0"))),
        "monthly_total": monthly_expenses(rows, month),
        "recurring_total": _money(sum((to_decimal(row.amount) for row in rows if row.recurring), Decimal("0"))),
        "by_category": expenses_by_category(rows),
    }


def break_even(
    products: Iterable[Any],
    ingredients_by_id: Mapping[str, Any],
    fixed_costs: float,
) -> Dict[str, Any] | None:
    """Units and revenue needed to cover ``fixed_costs`` with an average sale.

    Products without a selling price or without a cost are ignored. The
    average contribution margin is taken across the remaining products; when
    none remain or that margin is not positive there is no break-even point
    and ``None`` is returned.
    """

    valid = []
    for product in products:
        cost = product_cost(product, ingredients_by_id)
        if product.selling_price and cost:
            valid.append((product, cost))
    if not valid:
        return None

    count = len(valid)
    avg_selling = sum(product.selling_price for product, _ in valid) / count
    avg_cost = sum(cost for _, cost in valid) / count
    avg_margin = avg_selling - avg_cost
    if avg_margin <= 0:
        return None

    units = math.ceil(fixed_costs / avg_margin)
    return {
        "fixed_costs": _money(to_decimal(fixed_costs)),
        "product_count": count,
        "products": [product.name for product, _ in valid],
        "average_selling_price": _money(to_decimal(avg_selling)),
        "average_cost": _money(to_decimal(avg_cost)),
        "average_contribution_margin": _money(to_decimal(avg_margin)),
        "break_even_units": units,
        "break_even_revenue": _money(to_decimal(units * avg_selling)),
    }


__all__ = [
    "break_even",
    "expense_report",
    "expenses_by_category",
    "monthly_expenses",
    "parse_timestamp",
    "purchase_stats",
    "sales_summary",
    "window_start",
    "within_window",
]
