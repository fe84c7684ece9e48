"""
Deduplication Utilities
=======================

Media path resolution, filesystem primitives, and image metadata
helpers used by the detector and the removal coordinator.
"""

import os
from PIL import Image
from typing import Dict, Any, Callable

from src.core import config


def resolve_media_path(media_root: str, file_ref: str) -> str:
    """
    Maps a gallery file reference to its location on disk.

    Gallery references are stored with a leading slash ("/a/b/ab.jpg")
    relative to <media_root>/catalog/product.
    """
    base = os.path.join(media_root, *config.PRODUCT_MEDIA_SUBDIR.split('/'))
    return os.path.join(base, file_ref.lstrip('/'))


def make_path_resolver(media_root: str) -> Callable[[str], str]:
    """Returns a resolver bound to one media root."""
    def _resolve(file_ref: str) -> str:
        return resolve_media_path(media_root, file_ref)
    return _resolve


class LocalFileAccessor:
    """
    Existence and delete primitives on the local filesystem.
    """

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def delete(self, path: str) -> None:
        os.remove(path)


def get_image_metadata(image_path: str) -> Dict[str, Any]:
    """
    Retrieves metadata for an image file, including file size, modification time,
    dimensions, and format.
    Returns a dictionary with keys: 'file_size', 'mtime', 'width', 'height', 'format', 'mode'.
    Failures are reported under the 'error' key.
    """
    metadata = {}
    try:
        stat = os.stat(image_path)
        metadata['file_size'] = stat.st_size
        metadata['mtime'] = stat.st_mtime

        with Image.open(image_path) as img:
            metadata['width'] = img.width
            metadata['height'] = img.height
            metadata['format'] = img.format
            metadata['mode'] = img.mode

    except Exception as e:
        metadata['error'] = str(e)

    return metadata


def format_file_size(num_bytes: int) -> str:
    """
    Formats a file size in bytes to a human-readable string (e.g. '1.5 MB').
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if abs(num_bytes) < 1024.0:
            return f"{num_bytes:3.1f} {unit}"
        num_bytes /= 1024.0
    return f"{num_bytes:.1f} PB"
