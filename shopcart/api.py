"""
Shop API Client

Reads stock quantities and product metadata from the shop backend.
Any transport error, non-2xx status or malformed payload is reported
uniformly as a SourceUnavailableError subclass.
"""

from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shopcart.config import Settings
from shopcart.errors import CatalogFetchError, StockFetchError
from shopcart.logging import get_logger
from shopcart.models import ProductResponse, StockResponse

logger = get_logger(__name__)


class StockSource(Protocol):
    async def get_stock(self, product_id: int) -> int: ...


class ProductCatalogSource(Protocol):
    async def get_product(self, product_id: int) -> Dict[str, Any]: ...


class ShopApiClient:
    """
    httpx-based implementation of StockSource and ProductCatalogSource.

    Stock is never cached: every call goes to the network.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retries: int = 2,
        backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.retries = retries
        self.backoff = backoff
        self._timeout = httpx.Timeout(timeout, connect=min(timeout, 5.0))
        self._transport = transport
        # Lazily created, shared between requests
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ShopApiClient":
        return cls(
            settings.api_url,
            timeout=settings.api_timeout,
            retries=settings.api_retries,
            **kwargs,
        )

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._http_client

    async def _get_json(self, path: str) -> Any:
        """GET path, retrying transport errors only (timeouts included)."""
        client = await self._get_http_client()
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retries),
            wait=wait_exponential(multiplier=self.backoff, max=4),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        ):
            with attempt:
                response = await client.get(path)
        response.raise_for_status()
        return response.json()

    async def get_stock(self, product_id: int) -> int:
        """Current stock amount for a product."""
        try:
            payload = await self._get_json(f"/stock/{product_id}")
            stock = StockResponse.model_validate(payload)
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.warning(f"Stock lookup failed for product {product_id}: {e}")
            raise StockFetchError(product_id, str(e)) from e
        return stock.amount

    async def get_product(self, product_id: int) -> Dict[str, Any]:
        """Product metadata as returned by the backend (including "id")."""
        try:
            payload = await self._get_json(f"/products/{product_id}")
            product = ProductResponse.model_validate(payload)
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.warning(f"Product lookup failed for product {product_id}: {e}")
            raise CatalogFetchError(product_id, str(e)) from e
        return product.model_dump()

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "ShopApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = ["StockSource", "ProductCatalogSource", "ShopApiClient"]
