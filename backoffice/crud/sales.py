"""Sale recording.

The sale record, its lines, every ingredient decrement and the matching
ledger rows go into one transaction. Availability is checked first but only
blocks the sale when the caller opts out of ``allow_insufficient_stock``.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import desc, select, update
from sqlalchemy.orm import Session

from ..core.catalog_types import MOVEMENT_SOURCE_SALE
from ..core.config import settings
from ..core.errors import InsufficientStockError
from ..db.transactions import commit, utcnow
from ..models.ingredient import new_id
from ..models.inventory import StockMovement
from ..models.product import Product
from ..models.sale import Sale, SaleLine
from ..services.costing import is_direct_cost, product_cost
from ..services.inventory import required_stock
from ..services.reporting import window_start, within_window
from ..services.stock import apply_sale_decrement
from ..services.totals import money, sale_totals
from .ingredients import ingredients_by_id

logger = logging.getLogger(__name__)


def list_sales(
    db: Session,
    *,
    days: int | None = None,
    now: datetime | None = None,
    limit: int | None = None,
    offset: int = 0,
):
    """Sales newest first, optionally limited to the trailing ``days`` window.

    The window matches ``services.reporting.sales_summary`` to the second. The
    SQL filter only narrows by calendar day; the exact cut happens in Python.
    """

    stmt = select(Sale).order_by(desc(Sale.sale_date), desc(Sale.created_at))
    cutoff = window_start(days, now)
    if cutoff is None:
        stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return db.execute(stmt).scalars().all()
    stmt = stmt.where(Sale.sale_date >= cutoff.date().isoformat())
    sales = [sale for sale in db.execute(stmt).scalars() if within_window(sale.sale_date, cutoff)]
    end = None if limit is None else offset + limit
    return sales[offset:end]


def get_sale(db: Session, sale_id: str) -> Sale | None:
    return db.get(Sale, sale_id)


def _resolve_items(db: Session, raw_items: list[dict] | None) -> list[tuple[Product, dict]]:
    if not raw_items:
        raise ValueError("a sale needs at least one product line")
    resolved = []
    for raw in raw_items:
        product_id = (raw.get("product_id") or "").strip()
        product = db.get(Product, product_id) if product_id else None
        if product is None:
            raise LookupError(f"Product {product_id or '?'} not found")
        quantity = float(raw.get("quantity") or 0.0)
        if quantity <= 0:
            raise ValueError("sold quantity must be greater than zero")
        resolved.append((product, {**raw, "quantity": quantity}))
    return resolved


def order_shortfalls(items: list[tuple[Product, dict]], known: dict) -> list[dict]:
    """Stock the whole order lacks, per ingredient.

    Demand is totalled across every line in the ingredient's unit before it
    is compared with stock, so two dishes sharing an ingredient are checked
    together. Missing ingredients are reported with nothing on hand.
    """

    demand: dict[str, dict] = {}
    for product, item in items:
        if is_direct_cost(product):
            continue
        for line in product.ingredients or []:
            ingredient = known.get(line.ingredient_id)
            entry = demand.get(line.ingredient_id)
            if entry is None:
                entry = demand[line.ingredient_id] = {
                    "ingredient_id": line.ingredient_id,
                    "ingredient_name": ingredient.name if ingredient is not None else (line.name or line.ingredient_id),
                    "needed": 0.0,
                    "have": (ingredient.current_stock or 0.0) if ingredient is not None else 0.0,
                    "unit": ingredient.unit if ingredient is not None else line.unit,
                    "missing": ingredient is None,
                    "products": [],
                }
            if ingredient is None:
                entry["needed"] += line.quantity * item["quantity"]
            else:
                entry["needed"] += required_stock(line, ingredient, item["quantity"])
            if product.name not in entry["products"]:
                entry["products"].append(product.name)
    return [entry for entry in demand.values() if entry["missing"] or entry["have"] < entry["needed"]]


def record_sale(db: Session, payload: dict) -> Sale:
    items = _resolve_items(db, payload.get("products"))
    known = ingredients_by_id(db)

    shortfalls = order_shortfalls(items, known)
    allow_insufficient = payload.get("allow_insufficient_stock")
    if shortfalls and allow_insufficient is False:
        raise InsufficientStockError(
            "Not enough stock for this sale",
            details={"shortfalls": shortfalls},
        )

    line_values = []
    for product, item in items:
        selling_price = product.selling_price or 0.0
        sale_price = item.get("sale_price")
        line_values.append(
            {
                "product": product,
                "quantity": item["quantity"],
                "sale_price": float(sale_price) if sale_price is not None else selling_price,
                "original_price": selling_price,
                "cost_price": money(product_cost(product, known)),
            }
        )
    totals = sale_totals(
        line_values,
        discount=payload.get("discount_amount") or 0,
        gst_rate=settings.GST_RATE,
        qst_rate=settings.QST_RATE,
    )

    now = utcnow()
    sale = Sale(
        id=new_id(),
        order_id=(payload.get("order_id") or "").strip() or None,
        sale_date=(payload.get("sale_date") or "").strip() or now,
        customer_name=(payload.get("customer_name") or "").strip() or None,
        customer_email=(payload.get("customer_email") or "").strip() or None,
        sale_type=(payload.get("sale_type") or "").strip() or "in_store",
        payment_status=(payload.get("payment_status") or "").strip() or "paid",
        created_at=now,
        **totals,
    )
    sale.products = [
        SaleLine(
            position=position,
            product_id=values["product"].id,
            name=values["product"].name,
            quantity=values["quantity"],
            sale_price=values["sale_price"],
            original_price=values["original_price"],
            cost_price=values["cost_price"],
        )
        for position, values in enumerate(line_values)
    ]
    db.add(sale)

    clamped = False
    for product, item in items:
        for change in apply_sale_decrement(product, item["quantity"], known):
            change.ingredient.updated_at = now
            clamped = clamped or change.clamped
            db.add(
                StockMovement(
                    ingredient_id=change.ingredient.id,
                    ingredient_name=change.ingredient.name,
                    unit=change.ingredient.unit,
                    change=change.change,
                    requested_change=change.requested_change,
                    stock_after=change.new_stock,
                    source=MOVEMENT_SOURCE_SALE,
                    sale_id=sale.id,
                    note=product.name,
                    created_at=now,
                )
            )
    sale.low_stock_flag = bool(shortfalls) or clamped

    commit(db, "sale.record", sale_id=sale.id, order_id=sale.order_id)
    db.refresh(sale)
    log = logger.warning if sale.low_stock_flag else logger.info
    log(
        "sale.recorded",
        extra={
            "extra_data": {
                "sale_id": sale.id,
                "order_id": sale.order_id,
                "total_amount": sale.total_amount,
                "low_stock": sale.low_stock_flag,
            }
        },
    )
    return sale


def delete_sale(db: Session, sale: Sale) -> None:
    """Delete the record only; consumed stock is not put back."""

    sale_id = sale.id
    db.execute(update(StockMovement).where(StockMovement.sale_id == sale_id).values(sale_id=None))
    db.delete(sale)
    commit(db, "sale.delete", sale_id=sale_id)
