"""SQLAlchemy model for stocked ingredients."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Float, Integer, String, Text

from ..core.units import to_grams
from ..db.session import Base


def new_id() -> str:
    return uuid4().hex


class Ingredient(Base):
    """An ingredient with its stock level and latest purchase price.

    ``current_stock`` and ``minimum_stock`` are expressed in ``unit``.
    ``price_per_kg`` is always per kilogram-equivalent whatever the stocking
    unit, so costs stay comparable across ingredients.
    """

    __tablename__ = "ingredients"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    price_per_kg = Column(Float, nullable=False, default=0.0)
    unit = Column(String(16), nullable=False, default="kg")
    category = Column(Text, nullable=False, default="other")
    supplier = Column(Text, nullable=True)
    minimum_stock = Column(Float, nullable=False, default=0.0)
    current_stock = Column(Float, nullable=False, default=0.0)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def stock_grams(self) -> float:
        """Stock in grams (or a count), derived so it can never drift."""

        return to_grams(self.current_stock or 0.0, self.unit)


__all__ = ["Ingredient", "new_id"]
