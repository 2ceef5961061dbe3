from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud.expenses import list_expenses
from ..crud.ingredients import ingredients_by_id
from ..crud.products import list_products, products_by_id
from ..crud.purchases import list_purchases
from ..crud.sales import list_sales
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.reports import BreakEven, ExpenseReport, PurchaseStats, SalesSummary
from ..services.reporting import break_even, expense_report, monthly_expenses, purchase_stats, sales_summary

router = APIRouter(prefix="/api/v1/reports", tags=["reports"], dependencies=[Depends(require_api_key)])


@router.get("/purchases", response_model=PurchaseStats)
def api_purchase_stats(db: Session = Depends(get_db)):
    return purchase_stats(list_purchases(db), ingredients_by_id(db), recent_days=settings.RECENT_DAYS)


@router.get("/sales", response_model=SalesSummary)
def api_sales_summary(days: int | None = Query(default=None, ge=0), db: Session = Depends(get_db)):
    return sales_summary(list_sales(db), days=days)


@router.get("/expenses", response_model=ExpenseReport)
def api_expense_report(month: str | None = None, db: Session = Depends(get_db)):
    """Expense totals; ``month`` is ``YYYY-MM`` and defaults to the current month."""

    try:
        target = datetime.strptime(month, "%Y-%m").date() if month else None
    except ValueError as exc:
        raise HTTPException(status_code=422, detail="month must look like YYYY-MM") from exc
    return expense_report(list_expenses(db), target)


@router.get("/break-even", response_model=Optional[BreakEven])
def api_break_even(
    product_id: list[str] | None = Query(default=None),
    fixed_costs: float | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    """Break-even point over the chosen products, or all active ones.

    Without ``fixed_costs`` the current month's expenses are used. The body
    is ``null`` when no product has both a price and a cost or the average
    margin is not positive.
    """

    if product_id:
        known = products_by_id(db)
        missing = [pid for pid in product_id if pid not in known]
        if missing:
            raise HTTPException(404, f"Product {missing[0]} not found")
        products = [known[pid] for pid in dict.fromkeys(product_id)]
    else:
        products = list_products(db, active_only=True)
    if fixed_costs is None:
        fixed_costs = monthly_expenses(list_expenses(db))
    return break_even(products, ingredients_by_id(db), fixed_costs)
