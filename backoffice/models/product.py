"""SQLAlchemy models for sellable products and their recipe lines."""

from __future__ import annotations

import json

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..core.catalog_types import PRODUCT_TYPE_INGREDIENT_BASED
from ..db.session import Base
from .ingredient import new_id


def _decode_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        decoded = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return []
    if not isinstance(decoded, list):
        return []
    return [str(item) for item in decoded if item is not None]


def _encode_list(values: list[str] | None) -> str | None:
    cleaned = [str(v) for v in (values or []) if v is not None and str(v).strip()]
    return json.dumps(cleaned) if cleaned else None


class Product(Base):
    __tablename__ = "products"
    __allow_unmapped__ = True

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    preparation = Column(Text, nullable=True)
    category = Column(Text, nullable=True)
    portion_size = Column(Text, nullable=True)
    product_type = Column(String(32), nullable=False, default=PRODUCT_TYPE_INGREDIENT_BASED)
    cost_price = Column(Float, nullable=True)
    selling_price = Column(Float, nullable=True)
    profit_margin = Column(Float, nullable=True)
    preparation_time = Column(Integer, nullable=True)
    tags_blob = Column("tags", Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)
    image_urls_blob = Column("image_urls", Text, nullable=True)
    preparation_video_url = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    ingredients = relationship(
        "ProductIngredient",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductIngredient.position",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return _decode_list(self.tags_blob)

    @tags.setter
    def tags(self, value: list[str] | None) -> None:
        self.tags_blob = _encode_list([str(v).strip() for v in (value or [])])

    @property
    def image_urls(self) -> list[str]:
        return _decode_list(self.image_urls_blob)

    @image_urls.setter
    def image_urls(self, value: list[str] | None) -> None:
        self.image_urls_blob = _encode_list(value)


class ProductIngredient(Base):
    """One recipe line.

    ``ingredient_id`` is a soft reference and may point at an ingredient that
    has since been deleted.
    """

    __tablename__ = "product_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(String(32), ForeignKey("products.id"), nullable=False, index=True)
    ingredient_id = Column(String(32), nullable=False, index=True)
    name = Column(Text, nullable=True)
    quantity = Column(Float, nullable=False)
    unit = Column(String(16), nullable=False, default="g")
    position = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="ingredients")


__all__ = ["Product", "ProductIngredient"]
