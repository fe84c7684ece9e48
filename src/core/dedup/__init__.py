"""
Deduplication Module
====================

This module detects byte-identical images within a single product's
image set using cryptographic content hashes.

Usage:
------
    from src.core.dedup import GalleryDuplicateDetector, make_path_resolver

    detector = GalleryDuplicateDetector(algorithm='md5')
    result = detector.detect(product, make_path_resolver('/var/www/pub/media'))
    for decision in result.removable:
        print(decision.file_path)
"""

from src.core.dedup.hash_calculator import ContentHashCalculator, HashResult, FileUnreadableError
from src.core.dedup.dedup_strategies import (
    RemovalDecision,
    DedupDecision,
    classify_duplicate,
    decide_entry
)
from src.core.dedup.dedup_engine import GalleryDuplicateDetector, DetectionResult
from src.core.dedup.utils import (
    LocalFileAccessor,
    resolve_media_path,
    make_path_resolver,
    get_image_metadata,
    format_file_size
)

__all__ = [
    # Hash calculation
    'ContentHashCalculator',
    'HashResult',
    'FileUnreadableError',

    # Decisions
    'RemovalDecision',
    'DedupDecision',
    'classify_duplicate',
    'decide_entry',

    # Deduplication engine
    'GalleryDuplicateDetector',
    'DetectionResult',

    # Utilities
    'LocalFileAccessor',
    'resolve_media_path',
    'make_path_resolver',
    'get_image_metadata',
    'format_file_size',
]
