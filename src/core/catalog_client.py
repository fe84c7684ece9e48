"""
Magento Catalog REST Client
===========================

Client for the Magento 2 REST API covering the product operations the
deduplication run needs: loading products by id or SKU, scanning for
products whose media gallery holds several images, and saving a
product's gallery.

Saves are last-writer-wins: the API offers no optimistic concurrency
check, so a concurrent edit of the same product between load and save
is overwritten.

Usage:
    ```python
    client = MagentoCatalogClient("https://shop.example.com", access_token)
    for stub in client.find_products_with_multiple_images():
        product = client.get_product_by_id(stub.id)
    ```
"""

import logging
import time
import urllib.parse
from typing import Any, Dict, Iterable, List, Optional

import requests

from src.core import config
from src.core.catalog import GalleryEntry, Product
from src.utils.logger import log_api_request, log_api_response


# ============================================================================
# EXCEPTIONS
# ============================================================================

class CatalogAPIError(Exception):
    """Base exception for all catalog API errors."""
    pass


class CatalogAuthenticationError(CatalogAPIError):
    """Raised when the access token is rejected."""
    pass


class CatalogNetworkError(CatalogAPIError):
    """Raised when network operations fail."""
    pass


class CatalogRateLimitError(CatalogAPIError):
    """Raised when rate limit is exceeded."""
    pass


class CatalogNotFoundError(CatalogAPIError):
    """Raised when a resource is not found (404)."""
    pass


class CatalogPermissionError(CatalogAPIError):
    """Raised when the integration lacks permissions for an operation."""
    pass


# ============================================================================
# MAIN API CLIENT
# ============================================================================

class MagentoCatalogClient:
    """
    Magento 2 REST client for catalog product and gallery operations.

    Attributes:
        base_url: Shop base URL, without the /rest suffix.
        store_code: Store scope used in request paths ("all" is global).
        page_size: Products requested per search page.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        store_code: str = config.DEFAULT_STORE_CODE,
        timeout: int = config.NETWORK_TIMEOUT_SECONDS,
        page_size: int = config.DEFAULT_PAGE_SIZE,
        rate_limit: float = config.RATE_LIMIT_SECONDS
    ):
        self.base_url = base_url.rstrip('/')
        self.store_code = store_code
        self.timeout = timeout
        self.page_size = page_size
        self.rate_limit = rate_limit
        self.logger = logging.getLogger(__name__)

        self._last_request_time = 0.0
        self._request_count = 0

        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })
        if access_token:
            self.session.headers.update({"Authorization": f"Bearer {access_token}"})

    # ------------------------------------------------------------------------
    # REQUEST HANDLING
    # ------------------------------------------------------------------------

    def _enforce_rate_limit(self):
        """Enforce rate limiting between API calls."""
        if self.rate_limit > 0:
            elapsed = time.time() - self._last_request_time
            if elapsed < self.rate_limit:
                time.sleep(self.rate_limit - elapsed)
        self._last_request_time = time.time()

    def get_request_count(self) -> int:
        return self._request_count

    def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        data: Optional[Dict] = None,
        params: Optional[Dict] = None
    ) -> Any:
        """
        Make an API request against the configured store scope.

        Args:
            endpoint: API endpoint below /rest/<store>/ (e.g. "/V1/products")
            method: HTTP method
            data: Optional JSON body
            params: Optional query parameters

        Returns:
            Parsed JSON response

        Raises:
            CatalogAPIError: For various API errors
        """
        self._enforce_rate_limit()

        url = f"{self.base_url}/rest/{self.store_code}{endpoint}"
        log_api_request(self.logger, method, url, data=data, params=params)

        start = time.time()
        try:
            response = self.session.request(method, url, json=data, params=params, timeout=self.timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise CatalogNetworkError(f"Network error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise CatalogAPIError(f"Request failed: {e}") from e
        finally:
            self._request_count += 1

        elapsed = time.time() - start

        if response.status_code >= 400:
            log_api_response(self.logger, response.status_code, elapsed_time=elapsed)
            error_msg = f"HTTP {response.status_code}: {self._error_message(response)}"

            if response.status_code == 401:
                raise CatalogAuthenticationError(f"Authentication required: {error_msg}")
            elif response.status_code == 403:
                raise CatalogPermissionError(f"Permission denied: {error_msg}")
            elif response.status_code == 404:
                raise CatalogNotFoundError(f"Resource not found: {error_msg}")
            elif response.status_code == 429:
                raise CatalogRateLimitError(f"Rate limit exceeded: {error_msg}")
            else:
                raise CatalogAPIError(f"API request failed: {error_msg}")

        try:
            result = response.json()
        except ValueError as e:
            raise CatalogAPIError(f"Invalid JSON response: {e}") from e

        log_api_response(self.logger, response.status_code, result, elapsed)
        return result

    @staticmethod
    def _error_message(response) -> str:
        """Expand Magento's "%1"-style parameterised error messages."""
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason or ""

        message = body.get('message', '') if isinstance(body, dict) else str(body)
        parameters = body.get('parameters') if isinstance(body, dict) else None
        if isinstance(parameters, dict):
            for key, value in parameters.items():
                message = message.replace(f"%{key}", str(value))
        elif isinstance(parameters, list):
            for index, value in enumerate(parameters, start=1):
                message = message.replace(f"%{index}", str(value))
        return message

    # ------------------------------------------------------------------------
    # SEARCH
    # ------------------------------------------------------------------------

    @staticmethod
    def _search_params(
        field_name: Optional[str] = None,
        value: Optional[str] = None,
        condition: str = "eq",
        page: int = 1,
        page_size: int = config.DEFAULT_PAGE_SIZE,
        fields: Optional[str] = None
    ) -> Dict[str, Any]:
        params = {
            "searchCriteria[currentPage]": page,
            "searchCriteria[pageSize]": page_size,
        }
        if field_name is not None:
            prefix = "searchCriteria[filterGroups][0][filters][0]"
            params[f"{prefix}[field]"] = field_name
            params[f"{prefix}[value]"] = value
            params[f"{prefix}[conditionType]"] = condition
        if fields:
            params["fields"] = fields
        return params

    def _search_products(
        self,
        field_name: Optional[str] = None,
        value: Optional[str] = None,
        condition: str = "eq",
        fields: Optional[str] = None
    ) -> Iterable[Dict[str, Any]]:
        """Yield raw product dicts across all result pages."""
        page = 1
        while True:
            params = self._search_params(field_name, value, condition, page, self.page_size, fields)
            result = self._make_request("/V1/products", params=params)

            items = result.get('items') or []
            for item in items:
                yield item

            total = result.get('total_count')
            if not items or len(items) < self.page_size:
                break
            if total is not None and page * self.page_size >= total:
                break
            page += 1

    # ------------------------------------------------------------------------
    # PRODUCT OPERATIONS
    # ------------------------------------------------------------------------

    def get_product_by_id(self, product_id: int) -> Product:
        """
        Load a full product, including its gallery, by entity id.

        Raises:
            CatalogNotFoundError: If no product has this id
        """
        params = self._search_params("entity_id", str(product_id), "eq", page_size=1)
        result = self._make_request("/V1/products", params=params)
        items = result.get('items') or []
        if not items:
            raise CatalogNotFoundError(f"Product {product_id} not found")
        return Product.from_api(items[0])

    def get_products_by_skus(self, skus: List[str]) -> List[Product]:
        """Return the products whose SKU exactly matches one of ``skus``."""
        if not skus:
            return []
        wanted = set(skus)
        products = []
        for item in self._search_products("sku", ",".join(skus), "in"):
            # "in" is case-insensitive on most MySQL collations
            if item.get('sku') in wanted:
                products.append(Product.from_api(item))
        self.logger.info(f"Matched {len(products)} of {len(wanted)} requested SKUs")
        return products

    def find_products_with_multiple_images(self, min_images: int = config.MIN_GALLERY_IMAGES) -> List[Product]:
        """
        Return product stubs (id, SKU, gallery ids) having at least
        ``min_images`` gallery rows.
        """
        candidates = []
        fields = "items[id,sku,media_gallery_entries[id,file]],total_count"
        for item in self._search_products(fields=fields):
            if len(item.get('media_gallery_entries') or []) >= min_images:
                candidates.append(Product.from_api(item))
        self.logger.info(f"Found {len(candidates)} products with at least {min_images} gallery images")
        return candidates

    def save_product(self, product: Product, gallery: Optional[List[GalleryEntry]] = None) -> Product:
        """
        Persist a product's media gallery.

        Only the SKU and the gallery are sent, so other attributes are left
        as stored. Entries missing from ``gallery`` are removed from the
        product.
        """
        entries = product.media_gallery_entries if gallery is None else gallery
        payload = {
            "product": {
                "sku": product.sku,
                "media_gallery_entries": [entry.to_api() for entry in entries],
            }
        }
        endpoint = f"/V1/products/{urllib.parse.quote(product.sku, safe='')}"
        result = self._make_request(endpoint, method="PUT", data=payload)
        self.logger.info(f"Saved gallery of {product.sku} ({len(entries)} entries)")
        return Product.from_api(result) if isinstance(result, dict) and 'id' in result else product

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"<MagentoCatalogClient base_url={self.base_url} store={self.store_code}>"
