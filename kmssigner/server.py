"""Litestar server setup with Granian ASGI server."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from granian import Granian
from granian.constants import Interfaces
from litestar import Litestar
from litestar.datastructures import State
from litestar.di import Provide

from .authority import build_authority
from .errors import SigningError
from .handlers import get_routers
from .signer import SigningAdapter

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from .config import Config

logger = logging.getLogger(__name__)


def provide_adapter(state: State) -> SigningAdapter:
    """Provide the SigningAdapter from application state.

    Handlers receive the adapter via dependency injection instead of
    reaching into request.app.state.
    """
    result: SigningAdapter = state["adapter"]
    return result


def create_app(
    config: Config | None = None,
    adapter: SigningAdapter | None = None,
) -> Litestar:
    """Create and configure the Litestar application.

    Either pass a ready adapter (tests) or a config to build one from.
    """
    if adapter is None:
        if config is None:
            raise ValueError("create_app requires a config or an adapter")
        adapter = SigningAdapter(build_authority(config), canonical_s=config.canonical_s)

    @asynccontextmanager
    async def lifespan(_app: Litestar) -> AsyncGenerator[None]:
        """Warm the public key cache so a misconfigured key fails at startup."""
        logger.info("Starting kmssigner server")
        try:
            await adapter.derive_public_key()
        except SigningError:
            logger.exception("Unable to fetch the signing public key")
            raise
        yield
        logger.info("Stopping kmssigner server")

    return Litestar(
        route_handlers=get_routers(),
        lifespan=[lifespan],
        debug=False,
        state=State({"adapter": adapter}),
        dependencies={
            "adapter": Provide(provide_adapter, sync_to_thread=False),
        },
    )


def run_server(config: Config) -> None:
    """Run the Litestar server with Granian."""
    logger.info(f"Starting kmssigner on {config.host}:{config.port} ({config.workers} workers)")

    from . import asgi

    asgi.store_config_in_env(config)

    server = Granian(
        target="kmssigner.asgi:app",
        address=config.host,
        port=config.port,
        interface=Interfaces.ASGI,
        workers=config.workers,
        log_level=config.log_level.lower(),
    )

    metrics_server = None
    if config.metrics_enabled:
        from .metrics import MetricsServer

        metrics_server = MetricsServer(host=config.metrics_host, port=config.metrics_port)
        metrics_server.start()

    try:
        server.serve()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        if metrics_server is not None:
            metrics_server.stop()
