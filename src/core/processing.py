"""
Processing Pipeline Module
===========================

This module runs a deduplication pass over the catalog. It selects the
candidate products, then for each one in turn:

1. Reloads the full product (gallery included) from the catalog
2. Runs the duplicate detector over the base image and gallery
3. Hands the result to the removal coordinator
4. Folds the per-product report into the run totals

Products are processed sequentially and share no state: a failure on one
product is reported and the run moves on. A run that stops half way leaves
already processed products modified; there is no rollback.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from . import config
from .catalog import Product
from .catalog_client import CatalogAPIError
from .dedup import GalleryDuplicateDetector, make_path_resolver
from .dedup_processor import FileActionRecord, RemovalCoordinator, RemovalReport
from .session import Session


@dataclass
class RunOutcome:
    """Aggregate counters and per-file action log of one run."""
    dry_run: bool = True
    products_total: int = 0
    products_scanned: int = 0
    duplicates_found: int = 0
    duplicates_protected: int = 0
    duplicates_removable: int = 0
    duplicates_removed: int = 0
    save_failures: int = 0
    product_errors: int = 0
    bytes_reclaimed: int = 0
    file_actions: List[FileActionRecord] = field(default_factory=list)

    def add(self, report: RemovalReport, found: int, protected: int, removable: int):
        self.duplicates_found += found
        self.duplicates_protected += protected
        self.duplicates_removable += removable
        if report.persistence.attempted:
            if report.persistence.success:
                self.duplicates_removed += removable
            else:
                self.save_failures += 1
        self.bytes_reclaimed += report.bytes_reclaimed
        self.file_actions.extend(report.actions)


class DuplicateRemovalManager:
    """
    Orchestrates a deduplication run over the catalog.

    Attributes:
        session: Session holding catalog settings, run options and client
        output: Callback receiving each report line
        detector: Duplicate detector used for every product
        coordinator: Removal coordinator used for every product
    """

    def __init__(
        self,
        session: Session,
        output: Optional[Callable[[str], None]] = None,
        detector: Optional[GalleryDuplicateDetector] = None,
        coordinator: Optional[RemovalCoordinator] = None
    ):
        self.session = session
        self.client = session.catalog_client
        self.output = output or print
        self.logger = logging.getLogger(__name__)

        self.detector = detector or GalleryDuplicateDetector(algorithm=session.run.algorithm)
        self.coordinator = coordinator or RemovalCoordinator(self.client, output=self.output)
        self.resolve_path = make_path_resolver(session.catalog.media_root)

    def log(self, line: str):
        self.logger.info(line)
        self.output(line)

    def select_candidates(self, skus: Optional[List[str]] = None) -> List[Product]:
        """
        Explicit SKUs restrict the run to exactly those products; otherwise
        every product with at least two gallery rows is a candidate.
        """
        if skus:
            self.logger.info(f"Selecting products by SKU: {', '.join(skus)}")
            return self.client.get_products_by_skus(list(skus))
        return self.client.find_products_with_multiple_images(config.MIN_GALLERY_IMAGES)

    def run(self, skus: Optional[List[str]] = None) -> RunOutcome:
        """
        Run the deduplication pass.

        Args:
            skus: Optional list of SKUs to restrict processing to

        Returns:
            RunOutcome with totals and the per-file action log

        Raises:
            CatalogAPIError: If the candidate list cannot be fetched
        """
        options = self.session.run
        outcome = RunOutcome(dry_run=options.dry_run)

        self.logger.info(
            f"Run options - dry_run: {options.dry_run}, unlink: {options.unlink}, "
            f"algorithm: {options.algorithm}, media_root: {self.session.catalog.media_root}"
        )

        candidates = self.select_candidates(skus)
        outcome.products_total = len(candidates)

        if options.dry_run:
            self.log(config.MSG_DRY_RUN_START)
        self.log(config.MSG_PRODUCTS_FOUND.format(total=outcome.products_total))

        for index, candidate in enumerate(candidates, start=1):
            self._process_product(candidate, index, outcome)

        if options.dry_run:
            self.log(config.MSG_DRY_RUN_END)
        else:
            self.log(config.MSG_LIVE_END)

        self.log(config.MSG_SUMMARY.format(
            scanned=outcome.products_scanned,
            found=outcome.duplicates_found,
            protected=outcome.duplicates_protected,
            removed=outcome.duplicates_removable if options.dry_run else outcome.duplicates_removed
        ))
        self.logger.info(
            f"Run complete: {outcome.save_failures} save failures, {outcome.product_errors} product errors, "
            f"{outcome.bytes_reclaimed} bytes reclaimed"
        )
        return outcome

    def _process_product(self, candidate: Product, index: int, outcome: RunOutcome):
        options = self.session.run
        self.log(config.MSG_PROCESSING.format(index=index, total=outcome.products_total))

        try:
            product = self.client.get_product_by_id(candidate.id)
        except CatalogAPIError as e:
            self.logger.error(f"Failed to load product {candidate.id} ({candidate.sku}): {e}")
            self.output(config.MSG_LOAD_FAILED.format(product_id=candidate.id, error=e))
            outcome.product_errors += 1
            return

        detection = self.detector.detect(product, self.resolve_path)
        report = self.coordinator.apply(product, detection, dry_run=options.dry_run, unlink=options.unlink)

        outcome.products_scanned += 1
        outcome.add(
            report,
            found=detection.duplicates_found,
            protected=len(detection.protected),
            removable=len(detection.removable)
        )
