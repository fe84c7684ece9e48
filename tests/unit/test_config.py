"""
Unit tests for application configuration.
"""

import unittest
from src.core import config
from src.core.dedup import ContentHashCalculator


class TestConfig(unittest.TestCase):
    """Test cases for global configuration constants."""

    def test_default_algorithm_is_supported(self):
        """The default hash must be one the calculator accepts."""
        self.assertIn(config.DEFAULT_HASH_ALGORITHM, ContentHashCalculator.SUPPORTED_CRYPTO_ALGOS)

    def test_catalog_conventions(self):
        self.assertEqual(config.NO_SELECTION, "no_selection")
        self.assertEqual(config.PRODUCT_MEDIA_SUBDIR, "catalog/product")
        self.assertEqual(config.MIN_GALLERY_IMAGES, 2)

    def test_message_templates(self):
        """Verify report lines render as expected."""
        self.assertEqual(config.MSG_PROCESSING.format(index=2, total=5), "Processing product 2 of 5")
        self.assertEqual(config.MSG_PRODUCTS_FOUND.format(total=7), "7 products found with 2 images or more.")
        self.assertEqual(config.MSG_REMOVED.format(sku="ABC"), "Removed duplicate image from ABC")
        self.assertEqual(config.MSG_DELETED_FILE.format(path="/m/x.jpg"), "Deleted file: /m/x.jpg")


if __name__ == "__main__":
    unittest.main()
