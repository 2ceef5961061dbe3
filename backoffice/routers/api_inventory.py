from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.ingredients import ingredients_by_id, list_ingredients
from ..crud.inventory import list_movements, record_adjustment
from ..crud.products import list_products
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.inventory import CostAnalysis, InventorySummary, StockAdjustment, StockMovementOut
from ..services.inventory import cost_analysis, inventory_summary

router = APIRouter(prefix="/api/v1/inventory", tags=["inventory"], dependencies=[Depends(require_api_key)])


@router.get("/summary", response_model=InventorySummary)
def api_inventory_summary(db: Session = Depends(get_db)):
    return inventory_summary(list_ingredients(db))


@router.get("/movements", response_model=list[StockMovementOut])
def api_movements(
    ingredient_id: str | None = None,
    source: str | None = None,
    limit: int = 100,
    offset: int = 0,
    db: Session = Depends(get_db),
):
    return list_movements(db, ingredient_id=ingredient_id, source=source, limit=limit, offset=offset)


@router.post("/adjust", response_model=StockMovementOut, status_code=201)
def api_adjust(payload: StockAdjustment, db: Session = Depends(get_db)):
    try:
        return record_adjustment(db, ingredient_id=payload.ingredient_id, change=payload.change, note=payload.note)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/cost-analysis", response_model=CostAnalysis)
def api_cost_analysis(active_only: bool = True, db: Session = Depends(get_db)):
    return cost_analysis(list_products(db, active_only=active_only), ingredients_by_id(db))
