"""
Deduplication Strategies
========================

Decision rules applied to each gallery entry once its fingerprint is
known. The keep strategy is fixed: the first holder of a given content
(base image first, then gallery order) is kept, and later copies are
removable unless they carry a role assignment.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional

from src.core.catalog import GalleryEntry
from src.core.dedup.hash_calculator import HashResult


class RemovalDecision(Enum):
    KEEP = "keep"
    PROTECTED = "protected"
    REMOVABLE = "removable"


REASON_FIRST_SEEN = "First occurrence of content"
REASON_BASE_IMAGE = "Base image"
REASON_FILE_MISSING = "File missing"
REASON_UNREADABLE = "File unreadable"
REASON_HAS_ROLES = "has role assignments"
REASON_DUPLICATE = "Duplicate content"


@dataclass
class DedupDecision:
    entry: GalleryEntry
    decision: RemovalDecision
    reason: str
    file_path: Optional[str] = None
    hash_result: Optional[HashResult] = None

    @property
    def is_duplicate(self) -> bool:
        return self.decision in (RemovalDecision.PROTECTED, RemovalDecision.REMOVABLE)


def classify_duplicate(entry: GalleryEntry) -> RemovalDecision:
    """Entries serving a role (thumbnail, swatch, ...) are never removed."""
    if entry.has_roles:
        return RemovalDecision.PROTECTED
    return RemovalDecision.REMOVABLE


def decide_entry(
    entry: GalleryEntry,
    hash_result: HashResult,
    seen_hashes: set,
    file_path: Optional[str] = None
) -> DedupDecision:
    """
    Decide the fate of one entry and record its fingerprint when new.

    ``seen_hashes`` is updated in place so that the first holder of a
    content wins.
    """
    if hash_result.hash_value in seen_hashes:
        decision = classify_duplicate(entry)
        reason = REASON_HAS_ROLES if decision == RemovalDecision.PROTECTED else REASON_DUPLICATE
        return DedupDecision(entry, decision, reason, file_path, hash_result)

    seen_hashes.add(hash_result.hash_value)
    return DedupDecision(entry, RemovalDecision.KEEP, REASON_FIRST_SEEN, file_path, hash_result)
