"""
Session Management Module
==========================

This module defines the configuration structures for a deduplication run.
The Session class holds:
- Catalog connection settings (where products and images live)
- Run options (dry-run, unlink, hash algorithm)
- The catalog client, once connected

The catalog settings are persisted between runs using the config_manager utility.
"""

from dataclasses import dataclass
from typing import Optional, List
import logging

from src.core import config
from src.core.catalog_client import MagentoCatalogClient

# ============================================================================
# CONFIGURATION DATACLASSES
# ============================================================================

@dataclass
class CatalogConfig:
    """
    Connection settings for the Magento catalog.

    Attributes:
        base_url: Shop base URL (e.g., https://shop.example.com)
        access_token: Integration access token (sent as a Bearer header)
        store_code: Store scope for REST calls; "all" edits the global scope
        media_root: Absolute path of the shop's pub/media directory
        timeout: Request timeout in seconds
        page_size: Products fetched per search page
    """
    base_url: str = ""
    access_token: str = ""
    store_code: str = config.DEFAULT_STORE_CODE
    media_root: str = ""
    timeout: int = config.NETWORK_TIMEOUT_SECONDS
    page_size: int = config.DEFAULT_PAGE_SIZE


@dataclass
class RunOptions:
    """
    Behaviour of a single run.

    Attributes:
        dry_run: Report only; nothing is saved or deleted
        unlink: Delete duplicate files after detaching them
        algorithm: Content hash algorithm
    """
    dry_run: bool = True
    unlink: bool = False
    algorithm: str = config.DEFAULT_HASH_ALGORITHM


# ============================================================================
# SESSION CLASS
# ============================================================================

class Session:
    """
    Holds the configuration and catalog connection of one run.

    Attributes:
        catalog: Catalog connection settings
        run: Run options
        catalog_client: Active catalog client (set by connect_catalog)
    """

    def __init__(self):
        """Initialize a new session with default configuration."""
        self.logger = logging.getLogger(__name__)

        self.catalog = CatalogConfig()
        self.run = RunOptions()
        self.catalog_client: Optional[MagentoCatalogClient] = None

    def validate(self) -> List[str]:
        """
        Return the names of required settings that are missing.
        """
        missing = []
        if not self.catalog.base_url:
            missing.append("base_url")
        if not self.catalog.access_token:
            missing.append("access_token")
        if not self.catalog.media_root:
            missing.append("media_root")
        if missing:
            self.logger.warning(f"Missing configuration: {', '.join(missing)}")
        return missing

    def connect_catalog(self) -> MagentoCatalogClient:
        """Create the catalog client from the current settings."""
        self.logger.info(f"Connecting to catalog at {self.catalog.base_url} (store: {self.catalog.store_code})")
        self.catalog_client = MagentoCatalogClient(
            base_url=self.catalog.base_url,
            access_token=self.catalog.access_token,
            store_code=self.catalog.store_code,
            timeout=self.catalog.timeout,
            page_size=self.catalog.page_size
        )
        return self.catalog_client

    def close(self):
        if self.catalog_client is not None:
            self.catalog_client.close()
            self.catalog_client = None
