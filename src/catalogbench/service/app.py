"""Application assembly and process entry point for the catalog service."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from aiohttp import web

from catalogbench._internal.logging import get_logger, setup_logging
from catalogbench.service.middleware import (
    access_log_middleware,
    cors_middleware,
    error_middleware,
)
from catalogbench.service.products import STORE_KEY, setup_routes
from catalogbench.service.store import open_store

if TYPE_CHECKING:
    from catalogbench._internal.config import ServiceSettings
    from catalogbench.service.store import ProductStore

logger = get_logger("service.app")

HEALTH_PATH = "/health"


def _utc_timestamp() -> str:
    now = datetime.now(tz=UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def health(request: web.Request) -> web.Response:
    """Liveness probe. Never touches the store."""
    return web.json_response({"status": "ok", "timestamp": _utc_timestamp()})


async def _close_store(app: web.Application) -> None:
    await app[STORE_KEY].close()
    logger.debug("Product store closed")


def create_app(store: ProductStore) -> web.Application:
    """Build the service application around an opened store.

    Args:
        store: Backing product store. Closed when the application shuts down.

    Returns:
        The configured aiohttp application.
    """
    app = web.Application(
        middlewares=[access_log_middleware, cors_middleware, error_middleware],
    )
    app[STORE_KEY] = store
    app.router.add_get(HEALTH_PATH, health)
    setup_routes(app)
    app.on_cleanup.append(_close_store)
    return app


async def _build_app(settings: ServiceSettings) -> web.Application:
    # Opened inside the server's event loop so the driver binds to it.
    return create_app(open_store(settings.mongodb_uri))


def run_server(settings: ServiceSettings) -> None:
    """Run the catalog service until interrupted.

    Args:
        settings: Listening address, store URI and logging options.

    Raises:
        ConfigError: If the store URI is not usable.
    """
    setup_logging(settings.log_level, json_format=settings.log_json)
    logger.info("Starting server on %s:%d", settings.host, settings.port)
    web.run_app(
        _build_app(settings),
        host=settings.host,
        port=settings.port,
        access_log=None,
        print=None,
    )
