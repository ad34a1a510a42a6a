"""aiohttp server for Modview.

Application factory and route registration for standalone server mode.
"""

import logging
from collections.abc import Awaitable, Callable

import httpx
from aiohttp import web

from modview.api.modules import create_module_routes
from modview.app_keys import (
    enricher_key,
    gateway_key,
    http_client_key,
    resolver_key,
    storage_key,
)
from modview.config import Config
from modview.core.enricher import PageEnricher
from modview.core.errors import UpstreamError
from modview.core.gateway import PageGateway
from modview.core.observer import ResolutionObserver
from modview.core.resolver import RedirectResolver
from modview.core.storage import RegistryStorage

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def upstream_error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Turn upstream failures into 502 responses without partial content."""
    try:
        return await handler(request)
    except UpstreamError as e:
        logger.exception(f"Upstream failure for {request.method} {request.rel_url}")
        return web.Response(status=502, text=f"Bad Gateway: {e}")


def create_app(
    config: Config,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    observer: ResolutionObserver | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        transport: Optional httpx transport for upstream calls (tests use a mock)
        observer: Optional resolution observer (default: log decisions)

    Returns:
        Configured aiohttp application
    """
    app = web.Application(middlewares=[upstream_error_middleware])

    client = httpx.AsyncClient(transport=transport, timeout=config.upstream.timeout)
    storage = RegistryStorage(client, config.upstream.cdn_url, config.upstream.storage_url)

    app[http_client_key] = client
    app[gateway_key] = PageGateway(client, config.upstream.api_url)
    app[storage_key] = storage
    app[resolver_key] = RedirectResolver(observer)
    app[enricher_key] = PageEnricher(storage)

    app.router.add_routes(create_module_routes())
    app.on_cleanup.append(_close_http_client)

    return app


async def _close_http_client(app: web.Application) -> None:
    """Close the shared upstream client on application cleanup."""
    await app[http_client_key].aclose()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
