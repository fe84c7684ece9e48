"""
Catalog Data Model
==================

Plain dataclasses describing a catalog product and its media gallery, as
returned by the Magento 2 REST API. Conversion helpers map the JSON payload
to these classes and back, preserving the fields this tool does not touch so
that saving a gallery never drops data.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.core import config


@dataclass
class GalleryEntry:
    """
    One row of a product's media gallery.

    Attributes:
        file: Path of the image relative to the product media folder
            (e.g. "/a/b/ab.jpg").
        types: Role assignments such as "image", "small_image", "thumbnail"
            or "swatch_image". Empty when the entry serves no role.
    """
    file: str
    types: List[str] = field(default_factory=list)
    id: Optional[int] = None
    label: Optional[str] = None
    position: Optional[int] = None
    disabled: bool = False
    media_type: str = "image"
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_roles(self) -> bool:
        return bool(self.types)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "GalleryEntry":
        known = {'id', 'file', 'types', 'label', 'position', 'disabled', 'media_type'}
        return cls(
            file=data.get('file', ''),
            types=list(data.get('types') or []),
            id=data.get('id'),
            label=data.get('label'),
            position=data.get('position'),
            disabled=bool(data.get('disabled', False)),
            media_type=data.get('media_type') or "image",
            extra={k: v for k, v in data.items() if k not in known}
        )

    def to_api(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            'media_type': self.media_type,
            'label': self.label,
            'position': self.position,
            'disabled': self.disabled,
            'types': list(self.types),
            'file': self.file,
        })
        if self.id is not None:
            data['id'] = self.id
        return data


@dataclass
class Product:
    """A catalog product with its base image reference and ordered gallery."""
    id: int
    sku: str
    image: Optional[str] = None
    media_gallery_entries: List[GalleryEntry] = field(default_factory=list)

    @property
    def base_image(self) -> Optional[str]:
        """The base image reference, or None when no image is selected."""
        if not self.image or self.image == config.NO_SELECTION:
            return None
        return self.image

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Product":
        image = None
        for attribute in data.get('custom_attributes') or []:
            if attribute.get('attribute_code') == 'image':
                image = attribute.get('value')
                break

        entries = [GalleryEntry.from_api(e) for e in data.get('media_gallery_entries') or []]
        return cls(
            id=int(data['id']),
            sku=data.get('sku', ''),
            image=image,
            media_gallery_entries=entries
        )

    def __str__(self):
        return self.sku
