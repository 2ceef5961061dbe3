from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from ..crud import products as crud
from ..crud.ingredients import ingredients_by_id
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.inventory import Availability, ProductCostDetail
from ..schemas.product import ProductCreate, ProductOut, ProductUpdate
from ..services import media
from ..services.costing import cost_breakdown
from ..services.inventory import check_availability, project_product

router = APIRouter(prefix="/api/v1/products", tags=["products"], dependencies=[Depends(require_api_key)])


def _get_or_404(db: Session, product_id: str):
    product = crud.get_product(db, product_id)
    if not product:
        raise HTTPException(404, "Not found")
    return product


@router.get("", response_model=list[ProductOut])
def api_list(active_only: bool = False, limit: int | None = None, offset: int = 0, db: Session = Depends(get_db)):
    return crud.list_products(db, active_only=active_only, limit=limit, offset=offset)


@router.post("", response_model=ProductOut, status_code=201)
def api_create(payload: ProductCreate, db: Session = Depends(get_db)):
    try:
        return crud.create_product(db, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/recalculate", response_model=list[ProductOut])
def api_recalculate_all(db: Session = Depends(get_db)):
    return crud.recalculate_all(db)


@router.get("/{product_id}", response_model=ProductOut)
def api_get(product_id: str, db: Session = Depends(get_db)):
    return _get_or_404(db, product_id)


@router.patch("/{product_id}", response_model=ProductOut)
def api_update(product_id: str, payload: ProductUpdate, db: Session = Depends(get_db)):
    product = _get_or_404(db, product_id)
    try:
        return crud.update_product(db, product, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/{product_id}")
def api_delete(product_id: str, db: Session = Depends(get_db)):
    product = _get_or_404(db, product_id)
    crud.delete_product(db, product)
    return {"status": "deleted"}


@router.post("/{product_id}/recalculate", response_model=ProductOut)
def api_recalculate(product_id: str, db: Session = Depends(get_db)):
    product = _get_or_404(db, product_id)
    return crud.recalculate(db, product)


@router.get("/{product_id}/projection", response_model=ProductCostDetail)
def api_projection(product_id: str, db: Session = Depends(get_db)):
    product = _get_or_404(db, product_id)
    known = ingredients_by_id(db)
    return {**project_product(product, known), "breakdown": cost_breakdown(product, known)}


@router.get("/{product_id}/availability", response_model=Availability)
def api_availability(product_id: str, quantity: float = Query(default=1, gt=0), db: Session = Depends(get_db)):
    product = _get_or_404(db, product_id)
    result = check_availability(product, quantity, ingredients_by_id(db))
    return {"product_id": product.id, "quantity": quantity, **result}


async def _upload(db: Session, product_id: str, kind: str, file: UploadFile):
    product = _get_or_404(db, product_id)
    if not (file.filename or "").strip():
        await file.close()
        raise HTTPException(status_code=400, detail="A file upload is required")
    try:
        media.validate_upload(kind, file.content_type, file.size, existing_images=len(product.image_urls))
        url = media.store_media(product.id, kind, file.filename, file.file)
    finally:
        await file.close()
    return crud.add_media(db, product, kind, url)


@router.post("/{product_id}/images", response_model=ProductOut, status_code=201)
async def api_add_image(product_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    return await _upload(db, product_id, media.KIND_IMAGES, file)


@router.post("/{product_id}/video", response_model=ProductOut, status_code=201)
async def api_set_video(product_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    return await _upload(db, product_id, media.KIND_VIDEO, file)


@router.delete("/{product_id}/media")
def api_delete_media(product_id: str, url: str, db: Session = Depends(get_db)):
    product = _get_or_404(db, product_id)
    if not crud.remove_media(db, product, url):
        raise HTTPException(404, "Media not found")
    return {"status": "deleted"}
