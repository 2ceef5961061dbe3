from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..crud.products import products_by_id
from ..crud.sales import delete_sale, get_sale, list_sales, record_sale
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.sale import PrepListItem, PrepListRequest, SaleCreate, SaleOut
from ..services.inventory import aggregate_ingredients

router = APIRouter(prefix="/api/v1/sales", tags=["sales"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[SaleOut])
def api_list(
    days: int | None = Query(default=None, ge=0),
    limit: int | None = None,
    offset: int = 0,
    db: Session = Depends(get_db),
):
    return list_sales(db, days=days, limit=limit, offset=offset)


@router.post("", response_model=SaleOut, status_code=201)
def api_create(payload: SaleCreate, db: Session = Depends(get_db)):
    try:
        return record_sale(db, payload.model_dump())
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/prep-list", response_model=list[PrepListItem])
def api_prep_list(payload: PrepListRequest, db: Session = Depends(get_db)):
    return aggregate_ingredients(payload.products, products_by_id(db))


@router.get("/{sale_id}", response_model=SaleOut)
def api_get(sale_id: str, db: Session = Depends(get_db)):
    sale = get_sale(db, sale_id)
    if not sale:
        raise HTTPException(404, "Not found")
    return sale


@router.delete("/{sale_id}")
def api_delete(sale_id: str, db: Session = Depends(get_db)):
    sale = get_sale(db, sale_id)
    if not sale:
        raise HTTPException(404, "Not found")
    delete_sale(db, sale)
    return {"status": "deleted"}
