"""Purchase recording.

An ingredient purchase, the stock increase it causes and its ledger entry are
committed together or not at all.
"""

from __future__ import annotations

import logging

from sqlalchemy import desc, select, update
from sqlalchemy.orm import Session

from ..core.catalog_types import (
    MOVEMENT_SOURCE_PURCHASE,
    PURCHASE_TYPE_CHOICES,
    PURCHASE_TYPE_INGREDIENT,
    PURCHASE_TYPE_SUPPLY,
    SUPPLY_CATEGORY_CHOICES,
)
from ..core.units import normalize_unit, to_canonical, to_grams
from ..db.transactions import commit, utcnow
from ..models.ingredient import Ingredient, new_id
from ..models.inventory import StockMovement
from ..models.purchase import Purchase
from ..services.stock import apply_purchase
from ..services.totals import money

logger = logging.getLogger(__name__)


def list_purchases(db: Session, *, purchase_type: str | None = None, limit: int | None = None, offset: int = 0):
    stmt = select(Purchase).order_by(desc(Purchase.purchase_date), desc(Purchase.created_at)).offset(offset)
    if purchase_type:
        stmt = stmt.where(Purchase.purchase_type == purchase_type)
    if limit is not None:
        stmt = stmt.limit(limit)
    return db.execute(stmt).scalars().all()


def get_purchase(db: Session, purchase_id: str) -> Purchase | None:
    return db.get(Purchase, purchase_id)


def _positive(value: object, field: str) -> float:
    number = float(value or 0.0)
    if number <= 0:
        raise ValueError(f"{field} must be greater than zero")
    return number


def _common_fields(payload: dict, now: str) -> dict:
    return {
        "supplier": (payload.get("supplier") or "").strip() or None,
        "purchase_date": (payload.get("purchase_date") or "").strip() or now,
        "delivery_date": (payload.get("delivery_date") or "").strip() or None,
        "invoice_number": (payload.get("invoice_number") or "").strip() or None,
        "notes": (payload.get("notes") or "").strip() or None,
        "created_at": now,
    }


def _record_ingredient_purchase(db: Session, payload: dict, now: str) -> Purchase:
    ingredient_id = (payload.get("ingredient_id") or "").strip()
    if not ingredient_id:
        raise ValueError("ingredient_id is required for ingredient purchases")
    quantity = _positive(payload.get("quantity"), "quantity")
    price_per_kg = _positive(payload.get("price_per_kg"), "price_per_kg")
    ingredient = db.get(Ingredient, ingredient_id)
    if ingredient is None:
        raise LookupError(f"Ingredient {ingredient_id} not found")
    unit = normalize_unit(payload.get("unit")) or ingredient.unit

    change = apply_purchase(ingredient, quantity, unit, price_per_kg)
    ingredient.updated_at = now
    purchase = Purchase(
        id=new_id(),
        purchase_type=PURCHASE_TYPE_INGREDIENT,
        ingredient_id=ingredient.id,
        ingredient_name=ingredient.name,
        quantity=quantity,
        unit=unit,
        price_per_kg=price_per_kg,
        total_cost=money(to_canonical(quantity, unit) * price_per_kg),
        quantity_grams=to_grams(quantity, unit),
        **_common_fields(payload, now),
    )
    db.add(purchase)
    db.add(
        StockMovement(
            ingredient_id=ingredient.id,
            ingredient_name=ingredient.name,
            unit=ingredient.unit,
            change=change.change,
            requested_change=change.requested_change,
            stock_after=change.new_stock,
            source=MOVEMENT_SOURCE_PURCHASE,
            purchase_id=purchase.id,
            created_at=now,
        )
    )
    return purchase


def _record_supply_purchase(payload: dict, now: str) -> Purchase:
    supply_name = (payload.get("supply_name") or "").strip()
    if not supply_name:
        raise ValueError("supply_name is required for supply purchases")
    category = (payload.get("supply_category") or "other").strip().lower()
    if category not in SUPPLY_CATEGORY_CHOICES:
        raise ValueError(f"supply_category must be one of: {', '.join(SUPPLY_CATEGORY_CHOICES)}")
    total_cost = _positive(payload.get("total_cost"), "total_cost")
    return Purchase(
        purchase_type=PURCHASE_TYPE_SUPPLY,
        supply_name=supply_name,
        supply_category=category,
        quantity=float(payload.get("quantity") or 1.0),
        unit=normalize_unit(payload.get("unit")) or "unit",
        price_per_kg=0.0,
        total_cost=money(total_cost),
        quantity_grams=0.0,
        **_common_fields(payload, now),
    )


def record_purchase(db: Session, payload: dict) -> Purchase:
    """Persist a purchase and, for ingredients, the stock increase it causes."""

    purchase_type = (payload.get("purchase_type") or PURCHASE_TYPE_INGREDIENT).strip().lower()
    now = utcnow()
    if purchase_type == PURCHASE_TYPE_INGREDIENT:
        purchase = _record_ingredient_purchase(db, payload, now)
    elif purchase_type == PURCHASE_TYPE_SUPPLY:
        purchase = _record_supply_purchase(payload, now)
        db.add(purchase)
    else:
        raise ValueError(f"purchase_type must be one of: {', '.join(PURCHASE_TYPE_CHOICES)}")
    commit(db, "purchase.record", ingredient_id=purchase.ingredient_id, supply_name=purchase.supply_name)
    db.refresh(purchase)
    logger.info(
        "purchase.recorded",
        extra={
            "extra_data": {
                "purchase_id": purchase.id,
                "purchase_type": purchase.purchase_type,
                "ingredient_id": purchase.ingredient_id,
                "total_cost": purchase.total_cost,
            }
        },
    )
    return purchase


def delete_purchase(db: Session, purchase: Purchase) -> None:
    """Delete the record only. Stock it added stays; ledger rows lose the link."""

    purchase_id = purchase.id
    db.execute(
        update(StockMovement).where(StockMovement.purchase_id == purchase_id).values(purchase_id=None)
    )
    db.delete(purchase)
    commit(db, "purchase.delete", purchase_id=purchase_id)
