"""
Application Configuration and Constants
=======================================

This module contains the global configuration values, constants, and defaults
used throughout the catalog deduplication tool. It serves as a single source
of truth for:

- Catalog conventions (media layout, "no selection" sentinel)
- Hashing parameters
- Magento REST API defaults
- Console report messages

Note:
    All constants use UPPER_SNAKE_CASE naming convention. Modify these values to
    change application-wide behavior without touching business logic.
"""

# ============================================================================
# APPLICATION SETTINGS
# ============================================================================

APP_NAME = "Catalog Gallery Dedup"
COMMAND_NAME = "duplicate:remove"

# ============================================================================
# CATALOG CONVENTIONS
# ============================================================================
# Magento stores the base image of a product as a path relative to the
# product media folder, or the literal "no_selection" when none is chosen.

NO_SELECTION = "no_selection"

# Product images live below <media_root>/catalog/product
PRODUCT_MEDIA_SUBDIR = "catalog/product"

# Products need at least this many gallery rows to be scanned by default
MIN_GALLERY_IMAGES = 2

# ============================================================================
# HASHING CONFIGURATION
# ============================================================================

# md5 matches the digests produced by the catalog's own tooling (md5_file)
DEFAULT_HASH_ALGORITHM = "md5"

# Files are hashed in blocks to keep memory flat on large originals
HASH_READ_BLOCK_SIZE = 65536

# ============================================================================
# MAGENTO REST API DEFAULTS
# ============================================================================

# "all" is the admin/global scope (store id 0), so gallery changes apply globally
DEFAULT_STORE_CODE = "all"

# Number of products requested per searchCriteria page
DEFAULT_PAGE_SIZE = 100

# Maximum time to wait for network responses before timing out
NETWORK_TIMEOUT_SECONDS = 30

# Minimum seconds between API calls
RATE_LIMIT_SECONDS = 0.0

# ============================================================================
# REPORT MESSAGES
# ============================================================================

MSG_DRY_RUN_START = "THIS IS A DRY-RUN, NO CHANGES WILL BE MADE!"
MSG_DRY_RUN_END = "THIS WAS A DRY-RUN, NO CHANGES WERE MADE!"
MSG_LIVE_END = "Duplicate images are removed"
MSG_PRODUCTS_FOUND = "{total} products found with 2 images or more."
MSG_PROCESSING = "Processing product {index} of {total}"
MSG_REMOVED = "Removed duplicate image from {sku}"
MSG_PROTECTED = "Skipped duplicate image {file} on {sku}: has role assignments"
MSG_DELETED_FILE = "Deleted file: {path}"
MSG_DELETE_FAILED = "Could not delete file: {path}: {error}"
MSG_SAVE_FAILED = "Could not save product: {error}"
MSG_LOAD_FAILED = "Could not load product {product_id}: {error}"
MSG_SUMMARY = (
    "Summary: {scanned} products scanned, {found} duplicates found "
    "({protected} protected), {removed} removed."
)
