from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class PurchaseCreate(BaseModel):
    purchase_type: str = "ingredient"
    ingredient_id: Optional[str] = None
    supply_name: Optional[str] = None
    supply_category: Optional[str] = None
    quantity: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = None
    price_per_kg: Optional[float] = Field(default=None, gt=0)
    total_cost: Optional[float] = Field(default=None, gt=0)
    supplier: Optional[str] = None
    purchase_date: Optional[str] = None
    delivery_date: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None


class PurchaseOut(BaseModel):
    id: str
    purchase_type: str
    ingredient_id: Optional[str] = None
    ingredient_name: Optional[str] = None
    supply_name: Optional[str] = None
    supply_category: Optional[str] = None
    quantity: float
    unit: str
    price_per_kg: float
    total_cost: float
    quantity_grams: float
    supplier: Optional[str] = None
    purchase_date: str
    delivery_date: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: str

    class Config:
        from_attributes = True
