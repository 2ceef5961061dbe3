"""CRUD helpers for products and their recipe lines."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.catalog_types import PRODUCT_TYPE_DIRECT_COST, normalize_product_type
from ..core.units import normalize_unit
from ..db.transactions import commit, utcnow
from ..models.product import Product, ProductIngredient
from ..services import media
from ..services.costing import recalculate_product
from .ingredients import ingredients_by_id

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("description", "preparation", "category", "portion_size")
FLAG_FIELDS = ("is_active", "featured")


def list_products(db: Session, *, active_only: bool = False, limit: int | None = None, offset: int = 0):
    stmt = select(Product).order_by(Product.name).offset(offset)
    if active_only:
        stmt = stmt.where(Product.is_active.is_(True))
    if limit is not None:
        stmt = stmt.limit(limit)
    return db.execute(stmt).scalars().all()


def get_product(db: Session, product_id: str) -> Product | None:
    return db.get(Product, product_id)


def products_by_id(db: Session) -> dict[str, Product]:
    return {product.id: product for product in list_products(db)}


def _optional_price(value: object, field: str) -> float | None:
    if value is None or value == "":
        return None
    price = float(value)
    if price < 0:
        raise ValueError(f"{field} cannot be negative")
    return price


def _build_lines(raw_lines: list[dict] | None, known: dict) -> list[ProductIngredient]:
    lines: list[ProductIngredient] = []
    for position, raw in enumerate(raw_lines or []):
        ingredient_id = (raw.get("ingredient_id") or "").strip()
        if not ingredient_id:
            raise ValueError("ingredient_id is required on every recipe line")
        quantity = float(raw.get("quantity") or 0.0)
        if quantity < 0:
            raise ValueError("recipe quantities cannot be negative")
        ingredient = known.get(ingredient_id)
        name = (raw.get("name") or "").strip() or (ingredient.name if ingredient is not None else None)
        lines.append(
            ProductIngredient(
                ingredient_id=ingredient_id,
                name=name,
                quantity=quantity,
                unit=normalize_unit(raw.get("unit")) or "g",
                position=position,
            )
        )
    return lines


def _apply_fields(product: Product, payload: dict) -> None:
    for key in TEXT_FIELDS:
        if key in payload:
            setattr(product, key, (payload.get(key) or "").strip() or None)
    for key in FLAG_FIELDS:
        if key in payload and payload[key] is not None:
            setattr(product, key, bool(payload[key]))
    if "tags" in payload:
        product.tags = payload.get("tags") or []
    if "preparation_time" in payload:
        value = payload.get("preparation_time")
        product.preparation_time = int(value) if value not in (None, "") else None
    if "selling_price" in payload:
        product.selling_price = _optional_price(payload.get("selling_price"), "selling_price")


def _apply_costing(db: Session, product: Product, payload: dict) -> None:
    """Rebuild recipe lines and refresh the cached cost/margin.

    A direct-cost product never keeps recipe lines; its cost is whatever was
    entered as ``direct_cost_price``.
    """

    known = ingredients_by_id(db)
    if product.product_type == PRODUCT_TYPE_DIRECT_COST:
        product.ingredients = []
        if "direct_cost_price" in payload:
            product.cost_price = _optional_price(payload.get("direct_cost_price"), "direct_cost_price")
    elif "ingredients" in payload:
        product.ingredients = _build_lines(payload.get("ingredients"), known)
    recalculate_product(product, known)


def create_product(db: Session, payload: dict) -> Product:
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValueError("name is required")
    now = utcnow()
    product = Product(
        name=name,
        product_type=normalize_product_type(payload.get("product_type")),
        is_active=True,
        featured=False,
        created_at=now,
        updated_at=now,
    )
    _apply_fields(product, payload)
    _apply_costing(db, product, payload)
    db.add(product)
    commit(db, "product.create", name=name)
    db.refresh(product)
    return product


def update_product(db: Session, product: Product, payload: dict) -> Product:
    if "name" in payload:
        name = (payload.get("name") or "").strip()
        if not name:
            raise ValueError("name is required")
        product.name = name
    if "product_type" in payload and payload["product_type"] is not None:
        product.product_type = normalize_product_type(payload.get("product_type"))
    _apply_fields(product, payload)
    _apply_costing(db, product, payload)
    product.updated_at = utcnow()
    commit(db, "product.update", product_id=product.id)
    db.refresh(product)
    return product


def recalculate(db: Session, product: Product) -> Product:
    recalculate_product(product, ingredients_by_id(db))
    product.updated_at = utcnow()
    commit(db, "product.recalculate", product_id=product.id)
    db.refresh(product)
    return product


def recalculate_all(db: Session) -> list[Product]:
    """Refresh every cached product cost against current ingredient prices."""

    known = ingredients_by_id(db)
    products = list_products(db)
    now = utcnow()
    for product in products:
        recalculate_product(product, known)
        product.updated_at = now
    commit(db, "product.recalculate_all", count=len(products))
    logger.info("product.recalculated", extra={"extra_data": {"count": len(products)}})
    return products


def add_media(db: Session, product: Product, kind: str, url: str) -> Product:
    if kind == media.KIND_IMAGES:
        product.image_urls = product.image_urls + [url]
    else:
        previous = product.preparation_video_url
        product.preparation_video_url = url
        if previous and previous != url:
            media.delete_media(previous)
    product.updated_at = utcnow()
    commit(db, "product.media", product_id=product.id)
    db.refresh(product)
    return product


def remove_media(db: Session, product: Product, url: str) -> bool:
    """Detach ``url`` from the product and delete the file. Unknown URLs return False."""

    if url in product.image_urls:
        product.image_urls = [item for item in product.image_urls if item != url]
    elif url and url == product.preparation_video_url:
        product.preparation_video_url = None
    else:
        return False
    product.updated_at = utcnow()
    commit(db, "product.media", product_id=product.id)
    media.delete_media(url)
    return True


def delete_product(db: Session, product: Product) -> None:
    product_id = product.id
    db.delete(product)
    commit(db, "product.delete", product_id=product_id)
    media.delete_product_media(product_id)
