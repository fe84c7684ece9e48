"""
Deduplication Engine
====================

Finds byte-identical images within one product's image set. The base
image is fingerprinted first, then the gallery in its stored order, so
the earliest holder of a content always survives. Fingerprint state is
local to a single call and never shared between products.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from src.core import config
from src.core.catalog import GalleryEntry, Product
from src.core.dedup.hash_calculator import ContentHashCalculator, FileUnreadableError
from src.core.dedup.dedup_strategies import (
    DedupDecision,
    RemovalDecision,
    REASON_BASE_IMAGE,
    REASON_FILE_MISSING,
    REASON_UNREADABLE,
    decide_entry
)
from src.core.dedup.utils import LocalFileAccessor

logger = logging.getLogger(__name__)


@dataclass
class DetectionResult:
    """
    Outcome of scanning one product.

    ``surviving_gallery`` is a fresh list holding every entry that is
    not removable, in the original order. ``referenced_paths`` holds the
    resolved files the product still points to afterwards: the base image
    and every surviving entry.
    """
    decisions: List[DedupDecision] = field(default_factory=list)
    removable: List[DedupDecision] = field(default_factory=list)
    surviving_gallery: List[GalleryEntry] = field(default_factory=list)
    referenced_paths: Set[str] = field(default_factory=set)

    @property
    def protected(self) -> List[DedupDecision]:
        return [d for d in self.decisions if d.decision == RemovalDecision.PROTECTED]

    @property
    def removable_paths(self) -> List[str]:
        return [d.file_path for d in self.removable]

    @property
    def duplicates_found(self) -> int:
        return sum(1 for d in self.decisions if d.is_duplicate)

    @property
    def has_removals(self) -> bool:
        return bool(self.removable)


class GalleryDuplicateDetector:
    """
    Engine for finding exact duplicate images in a product gallery.
    """
    def __init__(
        self,
        algorithm: str = config.DEFAULT_HASH_ALGORITHM,
        calculator: Optional[ContentHashCalculator] = None,
        file_accessor: Optional[LocalFileAccessor] = None
    ):
        self.algorithm = algorithm
        self.calculator = calculator or ContentHashCalculator()
        self.files = file_accessor or LocalFileAccessor()

    def _is_present(self, path: str) -> bool:
        return self.files.exists(path) and self.files.is_file(path)

    def detect(self, product: Product, resolve_path: Callable[[str], str]) -> DetectionResult:
        """
        Decides which gallery entries of ``product`` are removable duplicates.

        Args:
            product: Product with its base image reference and gallery.
            resolve_path: Maps a gallery file reference to a filesystem path.

        Returns:
            DetectionResult with one decision per gallery entry.
        """
        seen_hashes = set()
        base_image = product.base_image
        base_path = resolve_path(base_image) if base_image is not None else None
        result = DetectionResult()

        if base_path is not None:
            result.referenced_paths.add(base_path)
            if self._is_present(base_path):
                try:
                    seen_hashes.add(self.calculator.calculate_file_hash(base_path, self.algorithm).hash_value)
                except FileUnreadableError as e:
                    logger.warning(f"Base image of {product.sku} could not be hashed: {e}")
            else:
                logger.debug(f"Base image of {product.sku} not found at {base_path}")

        for entry in product.media_gallery_entries:
            # "a.jpg" and "/a.jpg" name the same file
            if base_path is not None and resolve_path(entry.file) == base_path:
                decision = DedupDecision(entry, RemovalDecision.KEEP, REASON_BASE_IMAGE)
            else:
                decision = self._decide(product, entry, resolve_path, seen_hashes)

            result.decisions.append(decision)
            if decision.decision == RemovalDecision.REMOVABLE:
                result.removable.append(decision)
            else:
                result.surviving_gallery.append(entry)
                result.referenced_paths.add(resolve_path(entry.file))

        logger.debug(
            f"Scanned {product.sku}: {len(result.decisions)} entries, "
            f"{result.duplicates_found} duplicates, {len(result.removable)} removable"
        )
        return result

    def _decide(self, product: Product, entry: GalleryEntry, resolve_path, seen_hashes: set) -> DedupDecision:
        file_path = resolve_path(entry.file)
        if not self._is_present(file_path):
            logger.debug(f"Gallery file of {product.sku} missing: {file_path}")
            return DedupDecision(entry, RemovalDecision.KEEP, REASON_FILE_MISSING, file_path)

        try:
            hash_result = self.calculator.calculate_file_hash(file_path, self.algorithm)
        except FileUnreadableError as e:
            logger.warning(f"Skipping gallery file of {product.sku}: {e}")
            return DedupDecision(entry, RemovalDecision.KEEP, REASON_UNREADABLE, file_path)

        return decide_entry(entry, hash_result, seen_hashes, file_path)
