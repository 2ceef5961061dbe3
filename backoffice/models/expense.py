"""SQLAlchemy model for business expenses (rent, salaries, utilities...)."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Float, String, Text

from ..db.session import Base
from .ingredient import new_id


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String(32), nullable=False, default="other", index=True)
    date = Column(Text, nullable=False)
    # Recurring expenses count towards every month.
    recurring = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)


__all__ = ["Expense"]
