"""Main ASGI application entry point.

Usage:
    python -m product_catalog

    # or under any ASGI server
    uvicorn product_catalog.app:create_app --factory

Configuration comes from environment variables (see ``config.Settings``),
e.g. ``DATA_FILE=/srv/products.csv PORT=9000 python -m product_catalog``.
"""

import logging

from starlette.applications import Starlette

from .app_builder import AppBuilder
from .config import Settings, get_settings


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> Starlette:
    """Create the ASGI application with logging and tracing configured."""
    return AppBuilder(settings=settings).build()


def main() -> None:
    """Run the service under uvicorn."""
    import uvicorn

    settings = get_settings()
    app = create_app(settings)

    logger.info("Starting product catalog on %s:%d", settings.host, settings.port)
    logger.info("Health check: http://%s:%d/health", settings.host, settings.port)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # keep the logging configured by create_app
        access_log=settings.access_log,
    )


if __name__ == "__main__":
    main()
