"""Health endpoint factory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from product_catalog.domain.errors import StoreError


if TYPE_CHECKING:
    from starlette.requests import Request

    from product_catalog.config import Settings
    from product_catalog.service_layer.product_store import AbstractProductStore


logger = logging.getLogger(__name__)


def build_health_endpoint(store: AbstractProductStore, settings: Settings):
    """Return a coroutine function that reports whether the catalog file loads."""

    async def health_check(request: Request) -> JSONResponse:
        """
        summary: Service health
        description: Loads the catalog file and reports how many products it holds.
        responses:
          200: {description: Catalog readable}
          503: {description: Catalog missing or unreadable}
        """
        try:
            product_count = await store.count()
        except StoreError as exc:
            logger.warning("Health check failed: %s", exc)
            message = "catalog unavailable" if settings.mask_error_details else str(exc)
            return JSONResponse(
                {"status": "unhealthy", "data_file": settings.data_file, "error": message},
                status_code=503,
            )

        return JSONResponse(
            {"status": "healthy", "data_file": settings.data_file, "products": product_count},
        )

    return health_check
