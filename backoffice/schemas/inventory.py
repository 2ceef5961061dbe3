from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class StockAdjustment(BaseModel):
    ingredient_id: str
    change: float
    note: Optional[str] = None


class StockMovementOut(BaseModel):
    id: int
    ingredient_id: str
    ingredient_name: Optional[str] = None
    unit: Optional[str] = None
    change: float
    requested_change: float
    stock_after: float
    clamped: bool
    source: str
    purchase_id: Optional[str] = None
    sale_id: Optional[str] = None
    note: Optional[str] = None
    created_at: str

    class Config:
        from_attributes = True


class InventoryItem(BaseModel):
    ingredient_id: str
    name: str
    category: Optional[str] = None
    unit: str
    current_stock: float
    minimum_stock: float
    stock_value: float
    status: str


class InventorySummary(BaseModel):
    total_ingredients: int
    total_inventory_value: float
    out_of_stock_count: int
    low_stock_count: int
    well_stocked_count: int
    items: list[InventoryItem] = Field(default_factory=list)


class LimitingIngredient(BaseModel):
    ingredient_id: str
    name: Optional[str] = None
    required_per_unit: float
    required_unit: str
    current_stock: float
    current_stock_unit: Optional[str] = None
    units: Optional[int] = None
    missing: bool = False


class ProductProjection(BaseModel):
    product_id: str
    name: str
    product_type: str
    cost: float
    selling_price: Optional[float] = None
    profit: float
    margin: float
    markup: float = 0.0
    max_units: Optional[int] = None
    limiting_ingredient: Optional[LimitingIngredient] = None
    potential_revenue: float
    potential_profit: float


class CostLine(BaseModel):
    ingredient_id: str
    name: Optional[str] = None
    quantity: float
    unit: str
    price_per_kg: Optional[float] = None
    cost: float
    missing: bool = False


class ProductCostDetail(ProductProjection):
    breakdown: list[CostLine] = Field(default_factory=list)


class Shortfall(BaseModel):
    ingredient_id: str
    ingredient_name: Optional[str] = None
    needed: float
    have: float
    unit: Optional[str] = None
    missing: bool = False


class Availability(BaseModel):
    product_id: str
    quantity: float
    sufficient: bool
    shortfalls: list[Shortfall] = Field(default_factory=list)


class CostAnalysis(BaseModel):
    total_products: int
    total_inventory_value: float
    total_potential_revenue: float
    total_potential_profit: float
    products: list[ProductProjection] = Field(default_factory=list)
