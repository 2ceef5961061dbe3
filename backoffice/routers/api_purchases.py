from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.purchases import delete_purchase, get_purchase, list_purchases, record_purchase
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.purchase import PurchaseCreate, PurchaseOut

router = APIRouter(prefix="/api/v1/purchases", tags=["purchases"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[PurchaseOut])
def api_list(
    purchase_type: str | None = None,
    limit: int | None = None,
    offset: int = 0,
    db: Session = Depends(get_db),
):
    return list_purchases(db, purchase_type=purchase_type, limit=limit, offset=offset)


@router.post("", response_model=PurchaseOut, status_code=201)
def api_create(payload: PurchaseCreate, db: Session = Depends(get_db)):
    try:
        return record_purchase(db, payload.model_dump())
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/{purchase_id}", response_model=PurchaseOut)
def api_get(purchase_id: str, db: Session = Depends(get_db)):
    purchase = get_purchase(db, purchase_id)
    if not purchase:
        raise HTTPException(404, "Not found")
    return purchase


@router.delete("/{purchase_id}")
def api_delete(purchase_id: str, db: Session = Depends(get_db)):
    purchase = get_purchase(db, purchase_id)
    if not purchase:
        raise HTTPException(404, "Not found")
    delete_purchase(db, purchase)
    return {"status": "deleted"}
