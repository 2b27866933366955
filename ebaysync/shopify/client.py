"""
Shopify Admin REST API client.
Read-only: fetches product records for listing field resolution.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ..db.models import normalize_product_id
from ..errors import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


class ShopifyClientError(UpstreamError):
    """Base exception for Shopify client errors."""
    pass


class ShopifyAuthError(ShopifyClientError):
    """Authentication error."""
    pass


class ShopifyRateLimitError(ShopifyClientError):
    """Rate limit exceeded."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class ShopifyClient:
    """
    Async HTTP client for the Shopify Admin REST API.

    Handles authentication, rate limiting, and retries.
    """

    API_VERSION = "2024-01"
    MAX_RETRIES = 5
    BASE_RETRY_DELAY = 1.0  # seconds

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Shopify client.

        Args:
            shop_domain: Store domain (e.g., "mystore.myshopify.com")
            access_token: Admin API access token
            transport: Optional httpx transport (used by tests)
        """
        domain = shop_domain
        if domain.startswith("https://"):
            domain = domain[8:]
        elif domain.startswith("http://"):
            domain = domain[7:]
        domain = domain.rstrip("/")

        self.shop_domain = domain
        self.access_token = access_token
        self.base_url = f"https://{domain}/admin/api/{self.API_VERSION}"

        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(60.0, connect=10.0),
                headers={
                    "Content-Type": "application/json",
                    "X-Shopify-Access-Token": self.access_token,
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def get(self, path: str) -> Dict[str, Any]:
        """
        GET a REST resource with retry logic.

        Args:
            path: Path below the versioned API root, e.g. "/products/1.json"

        Returns:
            Parsed JSON body

        Raises:
            NotFoundError: If the resource does not exist
            ShopifyAuthError: If authentication fails
            ShopifyRateLimitError: If rate limit exceeded after retries
            ShopifyClientError: For other errors
        """
        client = await self._get_client()
        url = f"{self.base_url}{path}"
        last_error: Optional[Exception] = None

        for attempt in range(self.MAX_RETRIES):
            try:
                response = await client.get(url)

                if response.status_code == 401:
                    raise ShopifyAuthError(f"Authentication failed for {self.shop_domain}")

                if response.status_code == 404:
                    raise NotFoundError(f"Shopify resource not found: {path}")

                if response.status_code == 429:
                    retry_after = float(
                        response.headers.get("Retry-After", self.BASE_RETRY_DELAY)
                    )
                    raise ShopifyRateLimitError("Rate limit exceeded", retry_after=retry_after)

                response.raise_for_status()
                return response.json()

            except (ShopifyAuthError, NotFoundError):
                # Don't retry
                raise

            except ShopifyRateLimitError as e:
                last_error = e
                delay = e.retry_after or (self.BASE_RETRY_DELAY * (2 ** attempt))
                logger.warning(
                    f"Rate limited, waiting {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self.MAX_RETRIES})"
                )
                await asyncio.sleep(delay)

            except httpx.RequestError as e:
                last_error = ShopifyClientError(f"Request error: {e}")
                delay = self.BASE_RETRY_DELAY * (2 ** attempt)
                logger.warning(f"Request error, retrying in {delay:.1f}s: {e}")
                await asyncio.sleep(delay)

            except httpx.HTTPStatusError as e:
                raise ShopifyClientError(
                    f"HTTP {e.response.status_code} from {self.shop_domain}"
                ) from e

        # All retries exhausted
        raise last_error or ShopifyClientError("Max retries exceeded")

    async def get_product(self, product_id: str) -> Dict[str, Any]:
        """Fetch one product record (with variants) by ID or GID."""
        data = await self.get(f"/products/{normalize_product_id(product_id)}.json")
        product = data.get("product")
        if not product:
            raise NotFoundError(f"Product not found: {product_id}")
        return product

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
