"""SQLAlchemy model for purchase records (append-only)."""

from __future__ import annotations

from sqlalchemy import Column, Float, String, Text

from ..core.catalog_types import PURCHASE_TYPE_INGREDIENT
from ..db.session import Base
from .ingredient import new_id


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(String(32), primary_key=True, default=new_id)
    purchase_type = Column(String(16), nullable=False, default=PURCHASE_TYPE_INGREDIENT)
    ingredient_id = Column(String(32), nullable=True, index=True)
    ingredient_name = Column(Text, nullable=True)
    supply_name = Column(Text, nullable=True)
    supply_category = Column(Text, nullable=True)
    quantity = Column(Float, nullable=False)
    unit = Column(String(16), nullable=False)
    price_per_kg = Column(Float, nullable=False, default=0.0)
    total_cost = Column(Float, nullable=False, default=0.0)
    # Gram snapshot of ``quantity`` at purchase time; never updated afterwards.
    quantity_grams = Column(Float, nullable=False, default=0.0)
    supplier = Column(Text, nullable=True)
    purchase_date = Column(Text, nullable=False)
    delivery_date = Column(Text, nullable=True)
    invoice_number = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)


__all__ = ["Purchase"]
