from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class SpendRow(BaseModel):
    total: float
    supplier: Optional[str] = None
    category: Optional[str] = None
    ingredient: Optional[str] = None


class PurchaseStats(BaseModel):
    purchase_count: int
    total_spent: float
    recent_spent: float
    recent_days: int
    by_supplier: list[SpendRow] = Field(default_factory=list)
    by_category: list[SpendRow] = Field(default_factory=list)
    top_ingredients: list[SpendRow] = Field(default_factory=list)


class ProductSales(BaseModel):
    product_id: str
    name: str
    units: float
    revenue: float


class SalesSummary(BaseModel):
    sale_count: int
    days: Optional[int] = None
    revenue: float
    tax_collected: float
    cost: float
    profit: float
    average_order_value: float
    low_stock_sales: int
    by_product: list[ProductSales] = Field(default_factory=list)


class ExpenseReport(BaseModel):
    month: str
    expense_count: int
    total: float
    monthly_total: float
    recurring_total: float
    by_category: list[SpendRow] = Field(default_factory=list)


class BreakEven(BaseModel):
    fixed_costs: float
    product_count: int
    products: list[str] = Field(default_factory=list)
    average_selling_price: float
    average_cost: float
    average_contribution_margin: float
    break_even_units: int
    break_even_revenue: float
