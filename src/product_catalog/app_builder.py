"""Composable builder for the product catalog HTTP service."""

from __future__ import annotations

from contextlib import asynccontextmanager
import json
import logging
from typing import TYPE_CHECKING, Any

import anyio
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.schemas import SchemaGenerator

from product_catalog import __version__
from product_catalog.adapters.csv_codec import CsvEncodeError, write_empty_catalog
from product_catalog.config import Settings, get_settings
from product_catalog.domain.errors import ProductNotFound, StoreError
from product_catalog.observability import (
    TraceContextMiddleware,
    configure_logging,
    configure_trace_exporter,
    get_metrics,
    get_metrics_content_type,
    init_tracing,
    trace_request,
)
from product_catalog.runtime.health import build_health_endpoint
from product_catalog.schemas import ErrorResponse, dump_product, validate_product_payload
from product_catalog.service_layer.product_store import AbstractProductStore, CsvProductStore


if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from starlette.requests import Request


logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "internal error"


def _error_response(status_code: int, message: str, details: list[dict[str, Any]] | None = None) -> JSONResponse:
    payload = ErrorResponse(code=status_code, message=message, details=details)
    return JSONResponse(payload.model_dump(exclude_none=True), status_code=status_code)


def _positive_int(raw: str | None, default: int) -> int:
    """Parse a query parameter, falling back to ``default`` when absent, invalid or below 1."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 1 else default


class AppBuilder:
    """Builds the ASGI app around a product store."""

    def __init__(self, settings: Settings | None = None, store: AbstractProductStore | None = None) -> None:
        self.settings = settings or get_settings()
        self.store = store or CsvProductStore(self.settings.data_path())
        self.schema_generator = SchemaGenerator(
            {"openapi": "3.0.0", "info": {"title": "Product Catalog API", "version": __version__}}
        )

    def build(self) -> Starlette:
        """Configure logging and tracing, then build the Starlette application."""
        configure_logging(
            level=self.settings.log_level,
            json_output=self.settings.log_json,
            log_file=self.settings.log_path(),
            access_log=self.settings.access_log,
        )
        init_tracing(service_name=self.settings.service_name)
        configure_trace_exporter(self.settings)
        return self.build_app()

    def build_app(self) -> Starlette:
        """Build the Starlette application without touching global logging or tracing."""
        app = Starlette(
            debug=self.settings.is_debug(),
            routes=self._build_routes(),
            middleware=[
                Middleware(TraceContextMiddleware),
                Middleware(BaseHTTPMiddleware, dispatch=trace_request),
            ],
            lifespan=self._build_lifespan_manager(),
        )
        app.state.store = self.store
        app.state.settings = self.settings
        logger.info("Product catalog initialized with data file %s", self.settings.data_file)
        return app

    def _build_routes(self) -> list[Route]:
        list_products = self._build_list_endpoint()
        create_product = self._build_create_endpoint()
        return [
            Route("/products/", endpoint=list_products, methods=["GET"]),
            Route("/products/", endpoint=create_product, methods=["POST"]),
            Route("/products", endpoint=list_products, methods=["GET"], include_in_schema=False),
            Route("/products", endpoint=create_product, methods=["POST"], include_in_schema=False),
            Route("/products/{id}", endpoint=self._build_get_endpoint(), methods=["GET"]),
            Route("/products/{id}", endpoint=self._build_update_endpoint(), methods=["PUT"]),
            Route("/products/{id}", endpoint=self._build_delete_endpoint(), methods=["DELETE"]),
            Route("/health", endpoint=build_health_endpoint(self.store, self.settings), methods=["GET"]),
            Route("/metrics", endpoint=self._build_metrics_endpoint(), methods=["GET"], include_in_schema=False),
            Route("/openapi.json", endpoint=self._build_openapi_endpoint(), methods=["GET"], include_in_schema=False),
        ]

    def _build_lifespan_manager(self):
        settings = self.settings

        @asynccontextmanager
        async def lifespan(app: Starlette) -> AsyncIterator[None]:
            data_path = settings.data_path()
            if settings.create_data_file_if_missing and not data_path.exists():
                try:
                    await anyio.to_thread.run_sync(write_empty_catalog, data_path)
                except CsvEncodeError as exc:
                    logger.error("Could not create catalog file: %s", exc)
                    raise
                logger.info("Created empty catalog file %s", data_path)
            elif not data_path.exists():
                logger.warning("Catalog file %s does not exist; store operations will fail", data_path)
            yield
            logger.info("Product catalog shutting down")

        return lifespan

    def _store_failure(self, exc: StoreError) -> JSONResponse:
        logger.error("Store %s failed: %s", exc.operation, exc, exc_info=exc)
        message = INTERNAL_ERROR_MESSAGE if self.settings.mask_error_details else str(exc)
        return _error_response(500, message)

    async def _read_product(self, request: Request) -> Any:
        """Decode and validate the JSON body; returns a product or an error response."""
        try:
            body = await request.json()
        except ValueError:
            return _error_response(400, "Invalid input")
        try:
            return validate_product_payload(body)
        except ValidationError as exc:
            details = json.loads(exc.json(include_url=False, include_input=False))
            return _error_response(400, "Invalid input", details)

    def _build_list_endpoint(self):
        store = self.store
        default_page_size = self.settings.default_page_size

        async def list_products(request: Request) -> Response:
            """
            summary: List products
            description: Returns one page of products, optionally filtered and sorted.
            parameters:
              - {name: page, in: query, schema: {type: integer, default: 1}}
              - {name: pageSize, in: query, schema: {type: integer, default: 10}}
              - {name: filter, in: query, schema: {type: string}}
              - {name: sort, in: query, schema: {type: string, enum: [price, name, key]}}
            responses:
              200: {description: Array of products}
              500: {description: Storage failure}
            """
            params = request.query_params
            page = _positive_int(params.get("page"), 1)
            page_size = _positive_int(params.get("pageSize"), default_page_size)
            try:
                products = await store.list(
                    page=page,
                    page_size=page_size,
                    filter_text=params.get("filter", ""),
                    sort=params.get("sort", ""),
                )
            except StoreError as exc:
                return self._store_failure(exc)
            return JSONResponse([dump_product(product) for product in products])

        return list_products

    def _build_create_endpoint(self):
        store = self.store

        async def create_product(request: Request) -> Response:
            """
            summary: Create a product
            description: Appends a product to the catalog file.
            responses:
              201: {description: The created product}
              400: {description: Invalid input}
              500: {description: Storage failure}
            """
            product = await self._read_product(request)
            if isinstance(product, Response):
                return product
            try:
                created = await store.create(product)
            except StoreError as exc:
                return self._store_failure(exc)
            return JSONResponse(dump_product(created), status_code=201)

        return create_product

    def _build_get_endpoint(self):
        store = self.store

        async def get_product(request: Request) -> Response:
            """
            summary: Get a product by key
            parameters:
              - {name: id, in: path, required: true, schema: {type: string}}
            responses:
              200: {description: The product}
              404: {description: Product not found}
              500: {description: Storage failure}
            """
            try:
                product = await store.get(request.path_params["id"])
            except ProductNotFound as exc:
                return _error_response(404, str(exc))
            except StoreError as exc:
                return self._store_failure(exc)
            return JSONResponse(dump_product(product))

        return get_product

    def _build_update_endpoint(self):
        store = self.store

        async def update_product(request: Request) -> Response:
            """
            summary: Update a product by key
            description: Replaces the first product with the key in place. The body's productKey is stored as sent.
            parameters:
              - {name: id, in: path, required: true, schema: {type: string}}
            responses:
              200: {description: The stored product}
              400: {description: Invalid input}
              404: {description: Product not found}
              500: {description: Storage failure}
            """
            product = await self._read_product(request)
            if isinstance(product, Response):
                return product
            try:
                updated = await store.update(request.path_params["id"], product)
            except ProductNotFound as exc:
                return _error_response(404, str(exc))
            except StoreError as exc:
                return self._store_failure(exc)
            return JSONResponse(dump_product(updated))

        return update_product

    def _build_delete_endpoint(self):
        store = self.store

        async def delete_product(request: Request) -> Response:
            """
            summary: Delete a product by key
            description: Removes every product with the key.
            parameters:
              - {name: id, in: path, required: true, schema: {type: string}}
            responses:
              204: {description: Deleted}
              404: {description: Product not found}
              500: {description: Storage failure}
            """
            try:
                await store.delete(request.path_params["id"])
            except ProductNotFound as exc:
                return _error_response(404, str(exc))
            except StoreError as exc:
                return self._store_failure(exc)
            return Response(status_code=204)

        return delete_product

    def _build_metrics_endpoint(self):
        async def metrics_endpoint(request: Request) -> Response:
            return Response(get_metrics(), media_type=get_metrics_content_type())

        return metrics_endpoint

    def _build_openapi_endpoint(self):
        schema_generator = self.schema_generator

        async def openapi_schema(request: Request) -> JSONResponse:
            return JSONResponse(schema_generator.get_schema(routes=request.app.routes))

        return openapi_schema
