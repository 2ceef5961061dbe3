"""Stock movement ledger."""

from __future__ import annotations

from sqlalchemy import Column, Float, Integer, String, Text

from ..db.session import Base


class StockMovement(Base):
    """A change to one ingredient's stock.

    ``change`` is what was actually applied, in the ingredient's unit at the
    time of the movement. ``requested_change`` is what the caller asked for;
    the two differ when a sale decrement was clamped at zero. The purchase or
    sale reference is cleared when that record is deleted, the movement
    itself stays.
    """

    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    ingredient_id = Column(String(32), nullable=False, index=True)
    ingredient_name = Column(Text, nullable=True)
    unit = Column(String(16), nullable=True)
    change = Column(Float, nullable=False)
    requested_change = Column(Float, nullable=False)
    stock_after = Column(Float, nullable=False)
    source = Column(Text, nullable=False, default="manual")
    purchase_id = Column(String(32), nullable=True, index=True)
    sale_id = Column(String(32), nullable=True, index=True)
    note = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)

    @property
    def clamped(self) -> bool:
        return abs(self.change - self.requested_change) > 1e-9


__all__ = ["StockMovement"]
