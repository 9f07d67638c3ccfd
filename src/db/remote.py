# client for the product / order REST collection (json-server style)
from __future__ import annotations

import asyncio
import os
from typing import Any, Callable, List, Optional, TypeVar

import requests

from db.models import Order, Product, ProductId
from utils.errors import NotFoundError, TransportError
from utils.logger import get_logger

_logger = get_logger(__name__)

API_BASE_URL = os.getenv("SHOPVISTA_API_URL", "http://localhost:5000")
# unset means no timeout, i.e. whatever requests does by default
_timeout_env = os.getenv("SHOPVISTA_HTTP_TIMEOUT")
HTTP_TIMEOUT = float(_timeout_env) if _timeout_env else None

T = TypeVar("T")


class ProductStore:
    """
    Remote products and orders.

    requests is blocking, so every call runs in a worker thread and the
    Textual event loop stays responsive while it is in flight.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = HTTP_TIMEOUT,
    ):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Any] = None,
        not_found: Optional[str] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        _logger.debug(f"{method} {url}")
        try:
            response = await asyncio.to_thread(
                self._session.request,
                method,
                url,
                json=payload,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            _logger.error(f"{method} {url} failed: {e}")
            raise TransportError(
                f"Could not reach the store at {self.base_url}. Is the server running?"
            ) from e

        if response.status_code == 404 and not_found:
            raise NotFoundError(not_found)
        if not response.ok:
            _logger.error(f"{method} {url} answered {response.status_code}")
            raise TransportError(
                f"HTTP error! status: {response.status_code} for {method} {url}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Malformed response from {method} {url}") from e

    def _decode(self, what: str, decoder: Callable[[Any], T], data: Any) -> T:
        # a 2xx body of the wrong shape is as unusable as a failed request
        try:
            return decoder(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            _logger.error(f"Malformed {what} from {self.base_url}: {e!r}")
            raise TransportError(f"Malformed {what} received from the store.") from e

    def _decode_list(self, what: str, decoder: Callable[[Any], T], data: Any) -> List[T]:
        if data is None:
            return []
        if not isinstance(data, list):
            _logger.error(f"Expected a list of {what} from {self.base_url}")
            raise TransportError(f"Malformed {what} received from the store.")
        return self._decode(what, lambda items: [decoder(d) for d in items], data)

    async def list_products(self) -> List[Product]:
        data = await self._request("GET", "/products")
        return self._decode_list("products", Product.from_dict, data)

    async def get_product(self, product_id: ProductId) -> Product:
        data = await self._request(
            "GET",
            f"/products/{product_id}",
            not_found=f"Product with ID {product_id} not found.",
        )
        if not data:
            raise NotFoundError(f"Product with ID {product_id} not found.")
        return self._decode("product", Product.from_dict, data)

    async def replace_product(self, product: Product) -> Product:
        """Full replace (PUT) of a product document; last write wins."""
        data = await self._request(
            "PUT",
            f"/products/{product.id}",
            payload=product.to_dict(),
            not_found=f"Product with ID {product.id} not found.",
        )
        return self._decode("product", Product.from_dict, data) if data else product

    async def list_orders(self) -> List[Order]:
        data = await self._request("GET", "/orders")
        return self._decode_list("orders", Order.from_dict, data)

    async def create_order(self, order: Order) -> Order:
        data = await self._request("POST", "/orders", payload=order.to_dict())
        return self._decode("order", Order.from_dict, data) if data else order

    async def close(self) -> None:
        self._session.close()
