"""
Catalog Deduplication Processor
===============================

Applies the detector's decisions to a product in two independent steps:

1. Detach: save the product with the surviving gallery (skipped in dry-run).
2. Unlink: delete each removed file from the media folder (only when
   unlinking is requested and the run is not a dry-run).
   Files the product still points to (the base image or a surviving
   gallery row) are never deleted.

A failed save does not stop the unlink step; a failed delete does not stop
the remaining deletes. Both are reported and recorded, never raised.

Usage:
------
    from src.core.dedup_processor import RemovalCoordinator

    coordinator = RemovalCoordinator(catalog_client, output=print)
    report = coordinator.apply(product, detection, dry_run=False, unlink=True)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from src.core import config
from src.core.catalog import Product
from src.core.dedup import (
    DetectionResult,
    LocalFileAccessor,
    format_file_size,
    get_image_metadata
)

logger = logging.getLogger(__name__)


class FileAction(Enum):
    """Actions recorded for each removed duplicate."""
    DETACHED = "detached"   # Gallery reference removed and saved
    DELETED = "deleted"     # File removed from disk
    SKIPPED = "skipped"     # Nothing done (dry-run, missing file, save failed)
    ERROR = "error"         # Deletion failed


@dataclass
class FileActionRecord:
    sku: str
    path: str
    action: FileAction
    message: str = ""
    byte_size: int = 0


@dataclass
class PersistenceResult:
    """Outcome of saving a product's gallery."""
    success: bool
    error: Optional[str] = None
    attempted: bool = True

    @classmethod
    def not_attempted(cls) -> "PersistenceResult":
        return cls(success=False, attempted=False)


@dataclass
class RemovalReport:
    """What the coordinator did for one product."""
    sku: str
    persistence: PersistenceResult = field(default_factory=PersistenceResult.not_attempted)
    actions: List[FileActionRecord] = field(default_factory=list)

    @property
    def detached(self) -> int:
        return sum(1 for a in self.actions if a.action == FileAction.DETACHED)

    @property
    def deleted(self) -> int:
        return sum(1 for a in self.actions if a.action == FileAction.DELETED)

    @property
    def bytes_reclaimed(self) -> int:
        return sum(a.byte_size for a in self.actions if a.action == FileAction.DELETED)


class RemovalCoordinator:
    """
    Detaches removable duplicates from a product and optionally deletes them.
    """

    def __init__(
        self,
        catalog_client,
        output: Optional[Callable[[str], None]] = None,
        file_accessor: Optional[LocalFileAccessor] = None
    ):
        """
        Args:
            catalog_client: Object exposing save_product(product, gallery)
            output: Callback receiving each report line
            file_accessor: Filesystem primitives (local disk by default)
        """
        self.client = catalog_client
        self.output = output or (lambda line: None)
        self.files = file_accessor or LocalFileAccessor()

    def _emit(self, line: str):
        logger.info(line)
        self.output(line)

    def apply(
        self,
        product: Product,
        detection: DetectionResult,
        dry_run: bool = True,
        unlink: bool = False
    ) -> RemovalReport:
        """
        Apply the detection result to a product.

        Args:
            product: The product the detection was computed for
            detection: Detector output
            dry_run: Report only, never save or delete
            unlink: Delete removed files from disk

        Returns:
            RemovalReport with the persistence outcome and per-file actions
        """
        report = RemovalReport(sku=product.sku)

        for decision in detection.protected:
            self._emit(config.MSG_PROTECTED.format(file=decision.entry.file, sku=product.sku))

        if not detection.has_removals:
            return report

        for _ in detection.removable:
            self._emit(config.MSG_REMOVED.format(sku=product.sku))

        if not dry_run:
            report.persistence = self._persist(product, detection)
            if not report.persistence.success:
                self._emit(config.MSG_SAVE_FAILED.format(error=report.persistence.error))

        for path in detection.removable_paths:
            if path in detection.referenced_paths:
                logger.info(f"Keeping {path}: still referenced by {product.sku}")
                report.actions.append(FileActionRecord(product.sku, path, FileAction.SKIPPED, "still referenced"))
                continue
            report.actions.append(self._unlink(product, path, dry_run, unlink, report.persistence))

        return report

    def _persist(self, product: Product, detection: DetectionResult) -> PersistenceResult:
        try:
            self.client.save_product(product, detection.surviving_gallery)
            logger.info(f"Detached {len(detection.removable)} duplicate(s) from {product.sku}")
            return PersistenceResult(success=True)
        except Exception as e:
            logger.error(f"Could not save product {product.sku}: {e}", exc_info=True)
            return PersistenceResult(success=False, error=str(e))

    def _unlink(
        self,
        product: Product,
        path: str,
        dry_run: bool,
        unlink: bool,
        persistence: PersistenceResult
    ) -> FileActionRecord:
        detached = persistence.attempted and persistence.success

        if not (self.files.exists(path) and self.files.is_file(path)):
            logger.debug(f"Duplicate file already gone: {path}")
            return FileActionRecord(product.sku, path, FileAction.DETACHED if detached else FileAction.SKIPPED,
                                    "file missing")

        if not unlink:
            return FileActionRecord(product.sku, path, FileAction.DETACHED if detached else FileAction.SKIPPED,
                                    "unlink disabled")

        if dry_run:
            self._emit(config.MSG_DELETED_FILE.format(path=path))
            return FileActionRecord(product.sku, path, FileAction.SKIPPED, "dry-run")

        metadata = get_image_metadata(path)
        byte_size = metadata.get('file_size', 0)
        try:
            self.files.delete(path)
        except OSError as e:
            self._emit(config.MSG_DELETE_FAILED.format(path=path, error=e))
            return FileActionRecord(product.sku, path, FileAction.ERROR, str(e))

        if 'width' in metadata:
            logger.debug(
                f"Deleted {metadata['width']}x{metadata['height']} {metadata.get('format')} "
                f"({format_file_size(byte_size)}): {path}"
            )
        self._emit(config.MSG_DELETED_FILE.format(path=path))
        return FileActionRecord(product.sku, path, FileAction.DELETED, byte_size=byte_size)
