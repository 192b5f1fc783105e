"""Product store - load, transform, save.

Every operation reads the whole catalog file, works on the in-memory list and,
when it mutates, writes the whole list back. Nothing is cached between calls.

``CsvProductStore`` serializes its operations behind one lock, so two
requests in the same process can never interleave a load with another
request's save. Separate processes sharing a file are not coordinated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
import logging
from pathlib import Path
from typing import Any

import anyio
from opentelemetry.trace import Span

from product_catalog.adapters.csv_codec import (
    CsvDecodeError,
    CsvEncodeError,
    decode_products,
    encode_products,
)
from product_catalog.domain.errors import ProductNotFound, StoreError
from product_catalog.domain.model import Product
from product_catalog.observability.metrics import STORE_ERRORS, STORE_OPERATION_LATENCY, track_latency
from product_catalog.observability.tracing import create_span
from product_catalog.service_layer.listing import apply_listing


logger = logging.getLogger(__name__)


@contextmanager
def _observe(operation: str, **attributes: Any) -> Generator[Span, None, None]:
    span_attributes = {"store.operation": operation}
    span_attributes.update({k: v for k, v in attributes.items() if v is not None})
    with (
        track_latency(STORE_OPERATION_LATENCY, operation=operation),
        create_span(f"store.{operation}", attributes=span_attributes) as span,
    ):
        yield span


def _index_of(products: list[Product], key: str) -> int | None:
    for index, product in enumerate(products):
        if product.key == key:
            return index
    return None


class AbstractProductStore(ABC):
    """Create, read, update, delete and list products."""

    @abstractmethod
    async def create(self, product: Product) -> Product:
        """Append ``product`` to the catalog and return it unchanged."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, key: str) -> Product:
        """Return the first product whose key equals ``key``.

        Raises:
            ProductNotFound: no product has that key
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, key: str, product: Product) -> Product:
        """Replace the first product with ``key`` in place.

        The replacement's own key is stored as given, even when it differs
        from ``key``.

        Raises:
            ProductNotFound: no product has that key
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove every product whose key equals ``key``.

        Raises:
            ProductNotFound: no product has that key
        """
        raise NotImplementedError

    @abstractmethod
    async def list(
        self,
        *,
        page: int,
        page_size: int,
        filter_text: str | None = None,
        sort: str | None = None,
    ) -> list[Product]:
        """Return one page of the filtered, sorted catalog."""
        raise NotImplementedError

    @abstractmethod
    async def count(self) -> int:
        """Count products in the catalog."""
        raise NotImplementedError


class CsvProductStore(AbstractProductStore):
    """Product store backed by a single CSV file.

    Errors from the codec are logged and re-raised as ``StoreError`` with the
    original exception chained.
    """

    def __init__(self, data_file: Path):
        self.data_file = data_file.expanduser()
        self._lock = anyio.Lock()

    async def create(self, product: Product) -> Product:
        with _observe("create", **{"product.key": product.key}):
            async with self._lock:
                products = await self._load("create")
                products.append(product)
                await self._save("create", products)
        logger.info("Created product %s", product.key, extra={"product_count": len(products)})
        return product

    async def get(self, key: str) -> Product:
        with _observe("get", **{"product.key": key}):
            async with self._lock:
                products = await self._load("get")
            index = _index_of(products, key)
            if index is None:
                raise ProductNotFound(key)
            return products[index]

    async def update(self, key: str, product: Product) -> Product:
        with _observe("update", **{"product.key": key}):
            async with self._lock:
                products = await self._load("update")
                index = _index_of(products, key)
                if index is None:
                    raise ProductNotFound(key)
                if product.key != key:
                    logger.warning("Update of product %s stores a different key %s", key, product.key)
                products[index] = product
                await self._save("update", products)
        logger.info("Updated product %s at position %d", key, index)
        return product

    async def delete(self, key: str) -> None:
        with _observe("delete", **{"product.key": key}):
            async with self._lock:
                products = await self._load("delete")
                remaining = [product for product in products if product.key != key]
                if len(remaining) == len(products):
                    raise ProductNotFound(key)
                await self._save("delete", remaining)
        logger.info("Deleted %d product(s) with key %s", len(products) - len(remaining), key)

    async def list(
        self,
        *,
        page: int,
        page_size: int,
        filter_text: str | None = None,
        sort: str | None = None,
    ) -> list[Product]:
        with _observe("list", page=page, page_size=page_size, filter=filter_text, sort=sort) as span:
            async with self._lock:
                products = await self._load("list")
            selected = apply_listing(
                products,
                page=page,
                page_size=page_size,
                filter_text=filter_text,
                sort=sort,
            )
            span.set_attribute("store.result_count", len(selected))
            return selected

    async def count(self) -> int:
        with _observe("count"):
            async with self._lock:
                products = await self._load("count")
            return len(products)

    async def _load(self, operation: str) -> list[Product]:
        try:
            return await anyio.to_thread.run_sync(decode_products, self.data_file)
        except CsvDecodeError as exc:
            self._record_failure(operation, exc)
            raise StoreError(operation, str(exc)) from exc

    async def _save(self, operation: str, products: list[Product]) -> None:
        try:
            await anyio.to_thread.run_sync(encode_products, products, self.data_file)
        except CsvEncodeError as exc:
            self._record_failure(operation, exc)
            raise StoreError(operation, str(exc)) from exc

    def _record_failure(self, operation: str, exc: Exception) -> None:
        STORE_ERRORS.labels(operation=operation, error_type=type(exc).__name__).inc()
        logger.error("Store %s failed for %s: %s", operation, self.data_file, exc)


class FakeProductStore(AbstractProductStore):
    """In-memory store for testing the HTTP layer."""

    def __init__(self, products: list[Product] | None = None):
        self.products: list[Product] = list(products or [])

    async def create(self, product: Product) -> Product:
        self.products.append(product)
        return product

    async def get(self, key: str) -> Product:
        index = _index_of(self.products, key)
        if index is None:
            raise ProductNotFound(key)
        return self.products[index]

    async def update(self, key: str, product: Product) -> Product:
        index = _index_of(self.products, key)
        if index is None:
            raise ProductNotFound(key)
        self.products[index] = product
        return product

    async def delete(self, key: str) -> None:
        remaining = [product for product in self.products if product.key != key]
        if len(remaining) == len(self.products):
            raise ProductNotFound(key)
        self.products = remaining

    async def list(
        self,
        *,
        page: int,
        page_size: int,
        filter_text: str | None = None,
        sort: str | None = None,
    ) -> list[Product]:
        return apply_listing(self.products, page=page, page_size=page_size, filter_text=filter_text, sort=sort)

    async def count(self) -> int:
        return len(self.products)
