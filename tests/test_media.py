import io

import pytest

from backoffice.core.config import settings
from backoffice.core.errors import MediaError
from backoffice.services.media import (
    KIND_IMAGES,
    KIND_VIDEO,
    delete_media,
    delete_product_media,
    parse_media_url,
    resolve_media_path,
    store_media,
    validate_upload,
)


def test_store_and_delete_image(media_root):
    url = store_media("p1", KIND_IMAGES, "Dish.PNG", io.BytesIO(b"png-bytes"))

    product_id, kind, name = parse_media_url(url)
    assert (product_id, kind) == ("p1", "images")
    assert name.endswith(".png")
    path = resolve_media_path(product_id, kind, name)
    assert path.read_bytes() == b"png-bytes"
    assert path.parent == media_root / "products" / "p1" / "images"

    assert delete_media(url) is True
    assert not path.exists()
    assert delete_media(url) is False


def test_resolve_rejects_traversal(media_root):
    assert resolve_media_path("p1", KIND_IMAGES, "../secret") is None
    assert resolve_media_path("..", KIND_VIDEO, "x.mp4") is None
    assert resolve_media_path("p1", "documents", "x.pdf") is None
    assert parse_media_url("/elsewhere/p1/images/a.png") is None


def test_delete_product_media(media_root):
    store_media("p2", KIND_VIDEO, "prep.mp4", io.BytesIO(b"video"))
    delete_product_media("p2")
    assert not (media_root / "products" / "p2").exists()


def test_validate_upload_limits(monkeypatch):
    monkeypatch.setattr(settings, "MEDIA_MAX_IMAGES", 2)
    monkeypatch.setattr(settings, "MEDIA_MAX_IMAGE_BYTES", 100)

    validate_upload(KIND_IMAGES, "image/png", 50, existing_images=1)
    validate_upload(KIND_VIDEO, "video/mp4", 1000)

    with pytest.raises(MediaError):
        validate_upload(KIND_IMAGES, "application/pdf", 10)
    with pytest.raises(MediaError):
        validate_upload(KIND_IMAGES, "image/png", 101)
    with pytest.raises(MediaError):
        validate_upload(KIND_IMAGES, "image/png", 10, existing_images=2)
    with pytest.raises(MediaError):
        validate_upload(KIND_VIDEO, "image/png", 10)
