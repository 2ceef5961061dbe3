from __future__ import annotations

import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ..deps.auth import require_api_key
from ..services.media import resolve_media_path

router = APIRouter(prefix="/api/v1/media", tags=["media"], dependencies=[Depends(require_api_key)])


@router.get("/products/{product_id}/{kind}/{filename}", response_class=FileResponse)
def api_get_media(product_id: str, kind: str, filename: str):
    path = resolve_media_path(product_id, kind, filename)
    if path is None or not path.exists():
        raise HTTPException(404, "Media not found")
    media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return FileResponse(path, media_type=media_type)
