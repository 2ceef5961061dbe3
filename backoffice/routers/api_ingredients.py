from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.ingredients import (
    create_ingredient,
    delete_ingredient,
    get_ingredient,
    list_ingredients,
    update_ingredient,
)
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.ingredient import IngredientCreate, IngredientOut, IngredientUpdate

router = APIRouter(prefix="/api/v1/ingredients", tags=["ingredients"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[IngredientOut])
def api_list(limit: int | None = None, offset: int = 0, db: Session = Depends(get_db)):
    return list_ingredients(db, limit=limit, offset=offset)


@router.post("", response_model=IngredientOut, status_code=201)
def api_create(payload: IngredientCreate, db: Session = Depends(get_db)):
    try:
        return create_ingredient(db, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/{ingredient_id}", response_model=IngredientOut)
def api_get(ingredient_id: str, db: Session = Depends(get_db)):
    ingredient = get_ingredient(db, ingredient_id)
    if not ingredient:
        raise HTTPException(404, "Not found")
    return ingredient


@router.patch("/{ingredient_id}", response_model=IngredientOut)
def api_update(ingredient_id: str, payload: IngredientUpdate, db: Session = Depends(get_db)):
    ingredient = get_ingredient(db, ingredient_id)
    if not ingredient:
        raise HTTPException(404, "Not found")
    try:
        return update_ingredient(db, ingredient, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/{ingredient_id}")
def api_delete(ingredient_id: str, db: Session = Depends(get_db)):
    ingredient = get_ingredient(db, ingredient_id)
    if not ingredient:
        raise HTTPException(404, "Not found")
    delete_ingredient(db, ingredient)
    return {"status": "deleted"}
