"""Ingredient CRUD helpers."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.units import normalize_unit
from ..db.transactions import commit, utcnow
from ..models.ingredient import Ingredient
from ..services.costing import index_ingredients

EDITABLE_FIELDS = ("name", "price_per_kg", "unit", "category", "supplier", "minimum_stock", "current_stock")


def _clean(data: dict) -> dict:
    cleaned = dict(data)
    if "name" in cleaned:
        name = (cleaned.get("name") or "").strip()
        if not name:
            raise ValueError("name is required")
        cleaned["name"] = name
    if "unit" in cleaned:
        cleaned["unit"] = normalize_unit(cleaned.get("unit")) or "kg"
    if "category" in cleaned:
        cleaned["category"] = (cleaned.get("category") or "").strip() or "other"
    if "supplier" in cleaned:
        cleaned["supplier"] = (cleaned.get("supplier") or "").strip() or None
    for key in ("price_per_kg", "minimum_stock", "current_stock"):
        if key in cleaned:
            value = float(cleaned.get(key) or 0.0)
            if value < 0:
                raise ValueError(f"{key} cannot be negative")
            cleaned[key] = value
    return cleaned


def list_ingredients(db: Session, limit: int | None = None, offset: int = 0) -> list[Ingredient]:
    stmt = select(Ingredient).order_by(Ingredient.name).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return db.execute(stmt).scalars().all()


def get_ingredient(db: Session, ingredient_id: str) -> Ingredient | None:
    return db.get(Ingredient, ingredient_id)


def ingredients_by_id(db: Session) -> dict[str, Ingredient]:
    return index_ingredients(list_ingredients(db))


def create_ingredient(db: Session, payload: dict) -> Ingredient:
    data = _clean({key: payload.get(key) for key in EDITABLE_FIELDS if key in payload})
    if "name" not in data:
        raise ValueError("name is required")
    now = utcnow()
    ingredient = Ingredient(**data, created_at=now, updated_at=now)
    db.add(ingredient)
    commit(db, "ingredient.create", name=data["name"])
    db.refresh(ingredient)
    return ingredient


def update_ingredient(db: Session, ingredient: Ingredient, payload: dict) -> Ingredient:
    """Apply a partial update. Cached product costs are not refreshed here.

    Fields sent as null are left unchanged.
    """

    data = _clean({key: payload[key] for key in EDITABLE_FIELDS if payload.get(key) is not None})
    for key, value in data.items():
        setattr(ingredient, key, value)
    ingredient.updated_at = utcnow()
    commit(db, "ingredient.update", ingredient_id=ingredient.id)
    db.refresh(ingredient)
    return ingredient


def delete_ingredient(db: Session, ingredient: Ingredient) -> None:
    """Delete the ingredient; recipe lines pointing at it are left alone."""

    ingredient_id = ingredient.id
    db.delete(ingredient)
    commit(db, "ingredient.delete", ingredient_id=ingredient_id)
