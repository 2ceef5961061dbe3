"""Pydantic schemas that describe product and recipe payloads."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ProductIngredientIn(BaseModel):
    ingredient_id: str
    name: Optional[str] = None
    quantity: float = Field(ge=0)
    unit: str = "g"


class ProductIngredientOut(BaseModel):
    ingredient_id: str
    name: Optional[str] = None
    quantity: float
    unit: str

    class Config:
        from_attributes = True


class ProductBase(BaseModel):
    name: str
    description: Optional[str] = None
    preparation: Optional[str] = None
    category: Optional[str] = None
    portion_size: Optional[str] = None
    product_type: str = "ingredientBased"
    selling_price: Optional[float] = Field(default=None, ge=0)
    preparation_time: Optional[int] = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)


class ProductCreate(ProductBase):
    ingredients: list[ProductIngredientIn] = Field(default_factory=list)
    direct_cost_price: Optional[float] = Field(default=None, ge=0)
    is_active: bool = True
    featured: bool = False


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    preparation: Optional[str] = None
    category: Optional[str] = None
    portion_size: Optional[str] = None
    product_type: Optional[str] = None
    selling_price: Optional[float] = Field(default=None, ge=0)
    preparation_time: Optional[int] = Field(default=None, ge=0)
    tags: Optional[list[str]] = None
    ingredients: Optional[list[ProductIngredientIn]] = None
    direct_cost_price: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    featured: Optional[bool] = None


class ProductOut(ProductBase):
    id: str
    cost_price: Optional[float] = None
    profit_margin: Optional[float] = None
    is_active: bool
    featured: bool
    image_urls: list[str] = Field(default_factory=list)
    preparation_video_url: Optional[str] = None
    ingredients: list[ProductIngredientOut] = Field(default_factory=list)
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True
