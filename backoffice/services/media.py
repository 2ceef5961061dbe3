"""Product image and preparation-video storage on the local data volume.

Files live under ``DATA_DIR/media/products/<product_id>/<kind>/`` with
random names; the product row keeps the public URL. Deleting works from the
URL alone, which is all a client ever holds.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import IO
from uuid import uuid4

from ..core.config import settings
from ..core.errors import MediaError

logger = logging.getLogger(__name__)

MEDIA_URL_PREFIX = "/api/v1/media/products"
KIND_IMAGES = "images"
KIND_VIDEO = "video"
MEDIA_KINDS = (KIND_IMAGES, KIND_VIDEO)

ALLOWED_IMAGE_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/gif",
    "image/webp",
}


def _products_root() -> Path:
    return settings.media_dir / "products"


def _product_media_dir(product_id: str, kind: str, *, ensure: bool = False) -> Path:
    path = _products_root() / product_id / kind
    if ensure:
        path.mkdir(parents=True, exist_ok=True)
    return path


def media_url(product_id: str, kind: str, storage_name: str) -> str:
    return f"{MEDIA_URL_PREFIX}/{product_id}/{kind}/{storage_name}"


def resolve_media_path(product_id: str, kind: str, storage_name: str) -> Path | None:
    """Map URL segments onto a stored file, refusing anything outside the media root."""

    if kind not in MEDIA_KINDS:
        return None
    safe_name = Path(storage_name).name
    if not safe_name or safe_name != storage_name:
        return None
    path = _product_media_dir(product_id, kind) / safe_name
    root = _products_root().resolve()
    try:
        path.resolve().relative_to(root)
    except ValueError:
        return None
    return path


def parse_media_url(url: str) -> tuple[str, str, str] | None:
    prefix = MEDIA_URL_PREFIX + "/"
    if not url or not url.startswith(prefix):
        return None
    parts = url[len(prefix):].split("/")
    if len(parts) != 3 or not all(parts):
        return None
    product_id, kind, storage_name = parts
    return product_id, kind, storage_name


def validate_upload(kind: str, content_type: str | None, size: int | None, existing_images: int = 0) -> None:
    content_type = (content_type or "").lower()
    if kind == KIND_IMAGES:
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise MediaError(f"Unsupported image type: {content_type or 'unknown'}")
        if size is not None and size > settings.MEDIA_MAX_IMAGE_BYTES:
            raise MediaError("Image exceeds the maximum allowed size")
        if existing_images >= settings.MEDIA_MAX_IMAGES:
            raise MediaError(f"A product can have at most {settings.MEDIA_MAX_IMAGES} images")
        return
    if kind == KIND_VIDEO:
        if not content_type.startswith("video/"):
            raise MediaError(f"Unsupported video type: {content_type or 'unknown'}")
        if size is not None and size > settings.MEDIA_MAX_VIDEO_BYTES:
            raise MediaError("Video exceeds the maximum allowed size")
        return
    raise MediaError(f"Unknown media kind: {kind}")


def store_media(product_id: str, kind: str, filename: str | None, file_data: IO[bytes]) -> str:
    """Copy an upload into the media volume and return its URL."""

    ext = Path(filename or "").suffix.lower()
    storage_name = f"{uuid4().hex}{ext}"
    dest = _product_media_dir(product_id, kind, ensure=True) / storage_name
    try:
        file_data.seek(0)
    except (AttributeError, OSError):
        pass
    with dest.open("wb") as buffer:
        shutil.copyfileobj(file_data, buffer)
    logger.info(
        "media.stored",
        extra={"extra_data": {"product_id": product_id, "kind": kind, "size": dest.stat().st_size}},
    )
    return media_url(product_id, kind, storage_name)


def delete_media(url: str) -> bool:
    """Remove the file behind ``url``; returns whether a file was deleted."""

    parsed = parse_media_url(url)
    if not parsed:
        return False
    path = resolve_media_path(*parsed)
    if path is None or not path.exists():
        return False
    path.unlink()
    return True


def delete_product_media(product_id: str) -> None:
    root = _products_root() / Path(product_id).name
    if root.exists():
        shutil.rmtree(root)


__all__ = [
    "ALLOWED_IMAGE_TYPES",
    "KIND_IMAGES",
    "KIND_VIDEO",
    "MEDIA_KINDS",
    "delete_media",
    "delete_product_media",
    "media_url",
    "parse_media_url",
    "resolve_media_path",
    "store_media",
    "validate_upload",
]
