"""
Unit tests for the gallery duplicate detector.

Covers the keep-first rule (base image first, then gallery order), role
protection, missing files, and idempotence on the surviving gallery.
"""

import unittest
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

from src.core.catalog import Product
from src.core.dedup import (
    GalleryDuplicateDetector,
    RemovalDecision,
    make_path_resolver,
)
from src.core.dedup.hash_calculator import FileUnreadableError
from tests.unit.helpers import make_product, write_media


class TestGalleryDuplicateDetector(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.media_root = Path(self._tmp.name)
        self.resolve = make_path_resolver(str(self.media_root))
        self.detector = GalleryDuplicateDetector()

    def tearDown(self):
        self._tmp.cleanup()

    def test_base_duplicate_without_roles_is_removable(self):
        write_media(self.media_root, "/a.jpg", b"H1")
        write_media(self.media_root, "/b.jpg", b"H1")
        write_media(self.media_root, "/c.jpg", b"H2")
        product = make_product(image="/a.jpg", entries=[("/a.jpg", ["image"]), ("/b.jpg", []), ("/c.jpg", [])])

        result = self.detector.detect(product, self.resolve)

        self.assertEqual([d.entry.file for d in result.removable], ["/b.jpg"])
        self.assertEqual([e.file for e in result.surviving_gallery], ["/a.jpg", "/c.jpg"])
        self.assertEqual(result.removable_paths, [self.resolve("/b.jpg")])
        self.assertEqual(result.duplicates_found, 1)

    def test_duplicate_with_role_is_protected(self):
        write_media(self.media_root, "/a.jpg", b"H1")
        write_media(self.media_root, "/b.jpg", b"H1")
        product = make_product(image="/a.jpg", entries=[("/a.jpg", []), ("/b.jpg", ["thumbnail"])])

        result = self.detector.detect(product, self.resolve)

        self.assertEqual(result.removable, [])
        self.assertEqual(len(result.protected), 1)
        self.assertEqual(result.protected[0].entry.file, "/b.jpg")
        self.assertEqual(result.protected[0].reason, "has role assignments")
        self.assertEqual(result.duplicates_found, 1)
        self.assertEqual(len(result.surviving_gallery), 2)

    def test_no_base_and_distinct_content_yields_nothing(self):
        for i in range(4):
            write_media(self.media_root, f"/img{i}.jpg", f"content-{i}".encode())
        product = make_product(entries=[(f"/img{i}.jpg", []) for i in range(4)])

        result = self.detector.detect(product, self.resolve)

        self.assertEqual(result.removable, [])
        self.assertEqual(result.duplicates_found, 0)
        self.assertTrue(all(d.decision == RemovalDecision.KEEP for d in result.decisions))

    def test_no_base_single_entry_yields_nothing(self):
        write_media(self.media_root, "/only.jpg", b"x")
        result = self.detector.detect(make_product(entries=[("/only.jpg", [])]), self.resolve)
        self.assertEqual(result.removable, [])

    def test_no_base_empty_gallery(self):
        result = self.detector.detect(make_product(entries=[]), self.resolve)
        self.assertEqual(result.decisions, [])
        self.assertFalse(result.has_removals)

    def test_first_gallery_occurrence_wins_without_base(self):
        write_media(self.media_root, "/first.jpg", b"same")
        write_media(self.media_root, "/second.jpg", b"same")
        write_media(self.media_root, "/third.jpg", b"same")
        product = make_product(image=None, entries=[("/first.jpg", []), ("/second.jpg", []), ("/third.jpg", [])])

        result = self.detector.detect(product, self.resolve)

        self.assertEqual([d.entry.file for d in result.removable], ["/second.jpg", "/third.jpg"])
        self.assertEqual([e.file for e in result.surviving_gallery], ["/first.jpg"])

    def test_protected_entry_still_claims_nothing_new(self):
        # A protected duplicate does not become the holder; later copies are still removable
        write_media(self.media_root, "/a.jpg", b"H1")
        write_media(self.media_root, "/b.jpg", b"H1")
        write_media(self.media_root, "/c.jpg", b"H1")
        product = make_product(image="/a.jpg", entries=[("/b.jpg", ["swatch_image"]), ("/c.jpg", [])])

        result = self.detector.detect(product, self.resolve)

        self.assertEqual([d.decision for d in result.decisions],
                         [RemovalDecision.PROTECTED, RemovalDecision.REMOVABLE])

    def test_base_reference_matches_regardless_of_leading_slash(self):
        write_media(self.media_root, "/a.jpg", b"H1")
        product = make_product(image="/a.jpg", entries=[("a.jpg", []), ("/a.jpg", [])])

        result = self.detector.detect(product, self.resolve)

        self.assertEqual(result.removable, [])
        self.assertEqual([d.reason for d in result.decisions], ["Base image", "Base image"])
        self.assertIn(self.resolve("/a.jpg"), result.referenced_paths)

    def test_referenced_paths_cover_surviving_entries(self):
        write_media(self.media_root, "/a.jpg", b"H1")
        write_media(self.media_root, "/b.jpg", b"H1")
        write_media(self.media_root, "/c.jpg", b"H2")
        product = make_product(image="/a.jpg", entries=[("/b.jpg", []), ("/c.jpg", [])])

        result = self.detector.detect(product, self.resolve)

        self.assertEqual(result.referenced_paths, {self.resolve("/a.jpg"), self.resolve("/c.jpg")})

    def test_missing_base_file_is_skipped(self):
        write_media(self.media_root, "/b.jpg", b"H1")
        write_media(self.media_root, "/c.jpg", b"H1")
        product = make_product(image="/missing.jpg", entries=[("/b.jpg", []), ("/c.jpg", [])])

        result = self.detector.detect(product, self.resolve)

        # /b.jpg becomes the first holder once the base image is unavailable
        self.assertEqual([d.entry.file for d in result.removable], ["/c.jpg"])

    def test_missing_gallery_file_is_kept(self):
        write_media(self.media_root, "/a.jpg", b"H1")
        product = make_product(image="/a.jpg", entries=[("/gone.jpg", [])])

        result = self.detector.detect(product, self.resolve)

        self.assertEqual(result.removable, [])
        self.assertEqual(result.decisions[0].reason, "File missing")
        self.assertEqual([e.file for e in result.surviving_gallery], ["/gone.jpg"])

    def test_unreadable_gallery_file_is_kept(self):
        write_media(self.media_root, "/a.jpg", b"H1")
        write_media(self.media_root, "/b.jpg", b"H1")
        calculator = MagicMock()
        calculator.calculate_file_hash.side_effect = [
            MagicMock(hash_value="h1"),
            FileUnreadableError("/b.jpg", "permission denied"),
        ]
        detector = GalleryDuplicateDetector(calculator=calculator)
        product = make_product(image="/a.jpg", entries=[("/b.jpg", [])])

        result = detector.detect(product, self.resolve)

        self.assertEqual(result.removable, [])
        self.assertEqual(result.decisions[0].decision, RemovalDecision.KEEP)

    def test_detection_is_idempotent_on_surviving_gallery(self):
        write_media(self.media_root, "/a.jpg", b"H1")
        write_media(self.media_root, "/b.jpg", b"H1")
        write_media(self.media_root, "/c.jpg", b"H2")
        write_media(self.media_root, "/d.jpg", b"H2")
        product = make_product(image="/a.jpg",
                               entries=[("/a.jpg", []), ("/b.jpg", []), ("/c.jpg", []), ("/d.jpg", [])])

        first = self.detector.detect(product, self.resolve)
        self.assertEqual(len(first.removable), 2)

        cleaned = Product(id=product.id, sku=product.sku, image=product.image,
                          media_gallery_entries=first.surviving_gallery)
        second = self.detector.detect(cleaned, self.resolve)

        self.assertEqual(second.removable, [])
        self.assertEqual(second.duplicates_found, 0)

    def test_gallery_is_not_mutated(self):
        write_media(self.media_root, "/a.jpg", b"H1")
        write_media(self.media_root, "/b.jpg", b"H1")
        product = make_product(image="/a.jpg", entries=[("/a.jpg", []), ("/b.jpg", [])])

        self.detector.detect(product, self.resolve)

        self.assertEqual([e.file for e in product.media_gallery_entries], ["/a.jpg", "/b.jpg"])


if __name__ == '__main__':
    unittest.main()
