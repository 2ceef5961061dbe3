"""Pydantic schemas for ingredient payloads."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class IngredientBase(BaseModel):
    name: str
    price_per_kg: float = Field(default=0.0, ge=0)
    unit: str = "kg"
    category: Optional[str] = None
    supplier: Optional[str] = None
    minimum_stock: float = Field(default=0.0, ge=0)
    current_stock: float = Field(default=0.0, ge=0)


class IngredientCreate(IngredientBase):
    pass


class IngredientUpdate(BaseModel):
    name: Optional[str] = None
    price_per_kg: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    category: Optional[str] = None
    supplier: Optional[str] = None
    minimum_stock: Optional[float] = Field(default=None, ge=0)
    current_stock: Optional[float] = Field(default=None, ge=0)


class IngredientOut(IngredientBase):
    id: str
    unit: str
    category: str
    stock_grams: float
    created_at: str
    updated_at: str
    version: int

    class Config:
        from_attributes = True
