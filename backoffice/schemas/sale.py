"""Pydantic schemas for sale payloads and the kitchen prep list."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class SaleLineIn(BaseModel):
    product_id: str
    quantity: float = Field(gt=0)
    sale_price: Optional[float] = Field(default=None, ge=0)


class SaleCreate(BaseModel):
    products: list[SaleLineIn] = Field(min_length=1)
    order_id: Optional[str] = None
    sale_date: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    sale_type: Optional[str] = None
    payment_status: Optional[str] = None
    discount_amount: float = Field(default=0.0, ge=0)
    # False turns a stock shortfall into a 409 instead of a flagged sale
    allow_insufficient_stock: bool = True


class SaleLineOut(BaseModel):
    product_id: str
    name: str
    quantity: float
    sale_price: float
    original_price: Optional[float] = None
    cost_price: Optional[float] = None
    line_total: float

    class Config:
        from_attributes = True


class SaleOut(BaseModel):
    id: str
    order_id: Optional[str] = None
    products: list[SaleLineOut] = Field(default_factory=list)
    subtotal: float
    discount_amount: float
    gst: float
    qst: float
    tax_total: float
    total_amount: float
    cost_total: float
    profit_total: float
    units_sold: float
    sale_date: str
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    sale_type: str
    payment_status: str
    low_stock_flag: bool
    created_at: str

    class Config:
        from_attributes = True


class PrepListRequest(BaseModel):
    products: list[SaleLineIn] = Field(min_length=1)


class PrepListItem(BaseModel):
    ingredient_id: str
    name: str
    quantity: float
    unit: str
    products: list[str]
