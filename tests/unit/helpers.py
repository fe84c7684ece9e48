"""Shared builders for catalog fixtures on a temporary media root."""

from pathlib import Path

from src.core import config
from src.core.catalog import GalleryEntry, Product


def write_media(media_root: Path, file_ref: str, content: bytes) -> Path:
    path = media_root.joinpath(*config.PRODUCT_MEDIA_SUBDIR.split('/'), file_ref.lstrip('/'))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def make_product(image=config.NO_SELECTION, entries=(), sku="SKU1", product_id=1) -> Product:
    gallery = [GalleryEntry(file=f, types=list(t), id=i + 1, position=i) for i, (f, t) in enumerate(entries)]
    return Product(id=product_id, sku=sku, image=image, media_gallery_entries=gallery)
