"""Stock ledger queries and manual stock corrections."""

from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.catalog_types import MOVEMENT_SOURCE_MANUAL
from ..db.transactions import commit, utcnow
from ..models.ingredient import Ingredient
from ..models.inventory import StockMovement
from ..services.stock import apply_adjustment


def list_movements(
    db: Session,
    *,
    ingredient_id: str | None = None,
    source: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[StockMovement]:
    """Fetch a page of ledger rows, newest first."""

    stmt = select(StockMovement).order_by(desc(StockMovement.created_at), desc(StockMovement.id))
    if ingredient_id:
        stmt = stmt.where(StockMovement.ingredient_id == ingredient_id)
    if source:
        stmt = stmt.where(StockMovement.source == source)
    return db.execute(stmt.limit(limit).offset(offset)).scalars().all()


def record_adjustment(db: Session, *, ingredient_id: str, change: float, note: str | None = None) -> StockMovement:
    """Apply a manual stock correction in the ingredient's unit."""

    if not change:
        raise ValueError("change must be non-zero")
    ingredient = db.get(Ingredient, ingredient_id)
    if ingredient is None:
        raise LookupError(f"Ingredient {ingredient_id} not found")
    now = utcnow()
    result = apply_adjustment(ingredient, change)
    ingredient.updated_at = now
    movement = StockMovement(
        ingredient_id=ingredient.id,
        ingredient_name=ingredient.name,
        unit=ingredient.unit,
        change=result.change,
        requested_change=result.requested_change,
        stock_after=result.new_stock,
        source=MOVEMENT_SOURCE_MANUAL,
        note=(note or "").strip() or None,
        created_at=now,
    )
    db.add(movement)
    commit(db, "inventory.adjust", ingredient_id=ingredient.id)
    db.refresh(movement)
    return movement
