from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.expenses import create_expense, delete_expense, get_expense, list_expenses
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.expense import ExpenseCreate, ExpenseOut

router = APIRouter(prefix="/api/v1/expenses", tags=["expenses"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[ExpenseOut])
def api_list(
    category: str | None = None,
    limit: int | None = None,
    offset: int = 0,
    db: Session = Depends(get_db),
):
    return list_expenses(db, category=category, limit=limit, offset=offset)


@router.post("", response_model=ExpenseOut, status_code=201)
def api_create(payload: ExpenseCreate, db: Session = Depends(get_db)):
    try:
        return create_expense(db, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/{expense_id}")
def api_delete(expense_id: str, db: Session = Depends(get_db)):
    expense = get_expense(db, expense_id)
    if not expense:
        raise HTTPException(404, "Not found")
    delete_expense(db, expense)
    return {"status": "deleted"}
