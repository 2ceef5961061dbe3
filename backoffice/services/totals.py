from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

TWOPLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Best-effort conversion of incoming values to Decimal for currency math."""

    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return Decimal("0")
        cleaned = cleaned.replace("$", "").replace(",", "")
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return Decimal("0")
    return Decimal("0")


def quantize_currency(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP) if value else Decimal("0.00")


def money(value: Any) -> float:
    """Round a float amount to cents."""

    return float(quantize_currency(to_decimal(value)))


def sale_totals(
    lines: Iterable[dict[str, Any]],
    *,
    discount: Any = 0,
    gst_rate: float,
    qst_rate: float,
) -> dict[str, float]:
    """Order totals for line dicts carrying ``quantity``, ``sale_price``, ``cost_price``.

    Taxes apply to the discounted subtotal and are rounded to cents each.
    The discount is capped at the subtotal.
    """

    subtotal = Decimal("0")
    cost_total = Decimal("0")
    for line in lines:
        quantity = to_decimal(line.get("quantity"))
        subtotal += to_decimal(line.get("sale_price")) * quantity
        cost_total += to_decimal(line.get("cost_price")) * quantity
    discount_amount = min(max(to_decimal(discount), Decimal("0")), subtotal)
    taxable = subtotal - discount_amount
    gst = quantize_currency(taxable * to_decimal(gst_rate))
    qst = quantize_currency(taxable * to_decimal(qst_rate))
    return {
        "subtotal": float(quantize_currency(subtotal)),
        "discount_amount": float(quantize_currency(discount_amount)),
        "gst": float(gst),
        "qst": float(qst),
        "tax_total": float(gst + qst),
        "total_amount": float(quantize_currency(taxable + gst + qst)),
        "cost_total": float(quantize_currency(cost_total)),
        "profit_total": float(quantize_currency(taxable - cost_total)),
    }


__all__ = ["money", "quantize_currency", "sale_totals", "to_decimal"]
