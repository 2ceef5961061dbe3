"""Business expense CRUD helpers."""

from __future__ import annotations

import logging

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.catalog_types import EXPENSE_CATEGORY_CHOICES
from ..db.transactions import commit, utcnow
from ..models.expense import Expense
from ..services.totals import money

logger = logging.getLogger(__name__)


def list_expenses(
    db: Session,
    *,
    category: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[Expense]:
    stmt = select(Expense).order_by(desc(Expense.date), desc(Expense.created_at)).offset(offset)
    if category:
        stmt = stmt.where(Expense.category == category.strip().lower())
    if limit is not None:
        stmt = stmt.limit(limit)
    return db.execute(stmt).scalars().all()


def get_expense(db: Session, expense_id: str) -> Expense | None:
    return db.get(Expense, expense_id)


def create_expense(db: Session, payload: dict) -> Expense:
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValueError("name is required")
    amount = float(payload.get("amount") or 0.0)
    if amount <= 0:
        raise ValueError("amount must be greater than zero")
    category = (payload.get("category") or "other").strip().lower()
    if category not in EXPENSE_CATEGORY_CHOICES:
        raise ValueError(f"category must be one of: {', '.join(EXPENSE_CATEGORY_CHOICES)}")

    now = utcnow()
    expense = Expense(
        name=name,
        amount=money(amount),
        category=category,
        date=(payload.get("date") or "").strip() or now[:10],
        recurring=bool(payload.get("recurring")),
        notes=(payload.get("notes") or "").strip() or None,
        created_at=now,
    )
    db.add(expense)
    commit(db, "expense.create", name=name, category=category)
    db.refresh(expense)
    logger.info(
        "expense.recorded",
        extra={
            "extra_data": {
                "expense_id": expense.id,
                "category": expense.category,
                "amount": expense.amount,
                "recurring": expense.recurring,
            }
        },
    )
    return expense


def delete_expense(db: Session, expense: Expense) -> None:
    expense_id = expense.id
    db.delete(expense)
    commit(db, "expense.delete", expense_id=expense_id)
