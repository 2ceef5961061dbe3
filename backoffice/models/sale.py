"""SQLAlchemy models for order-level sale records and their line items."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..db.session import Base
from .ingredient import new_id


class Sale(Base):
    __tablename__ = "sales"

    id = Column(String(32), primary_key=True, default=new_id)
    order_id = Column(Text, nullable=True, index=True)
    subtotal = Column(Float, nullable=False, default=0.0)
    discount_amount = Column(Float, nullable=False, default=0.0)
    gst = Column(Float, nullable=False, default=0.0)
    qst = Column(Float, nullable=False, default=0.0)
    tax_total = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)
    cost_total = Column(Float, nullable=False, default=0.0)
    profit_total = Column(Float, nullable=False, default=0.0)
    sale_date = Column(Text, nullable=False, index=True)
    customer_name = Column(Text, nullable=True)
    customer_email = Column(Text, nullable=True)
    sale_type = Column(Text, nullable=False, default="in_store")
    payment_status = Column(Text, nullable=False, default="paid")
    low_stock_flag = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False)

    products = relationship(
        "SaleLine",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleLine.position",
        lazy="selectin",
    )

    @property
    def units_sold(self) -> float:
        return sum(line.quantity for line in self.products or [])


class SaleLine(Base):
    __tablename__ = "sale_lines"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(String(32), ForeignKey("sales.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(String(32), nullable=False, index=True)
    name = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False)
    sale_price = Column(Float, nullable=False)
    original_price = Column(Float, nullable=True)
    cost_price = Column(Float, nullable=True)

    sale = relationship("Sale", back_populates="products")

    @property
    def line_total(self) -> float:
        return self.sale_price * self.quantity


__all__ = ["Sale", "SaleLine"]
