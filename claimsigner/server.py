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

from .handlers import get_routers
from .metrics import MetricsServer
from .metrics_middleware import metrics_middleware
from .signer import ClaimSigner

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from .config import Config

logger = logging.getLogger(__name__)


# Dependency providers for Litestar DI


def provide_signer(state: State) -> ClaimSigner:
    """Provide ClaimSigner from application state.

    This dependency provider allows handlers to receive the ClaimSigner
    via dependency injection instead of accessing request.app.state directly.
    """
    result: ClaimSigner = state["signer"]
    return result


def create_signer(config: Config) -> ClaimSigner:
    """Build the signer from configuration, loading the key if one is configured."""
    private_key = config.load_private_key()
    if private_key is None:
        logger.warning("No signing key configured; /api/v1/claims/sign is disabled")
    return ClaimSigner(private_key=private_key, message_format=config.message_format)


def create_app(
    config: Config | None = None,
    signer: ClaimSigner | None = None,
) -> Litestar:
    """Create and configure the Litestar application."""
    if signer is None:
        signer = create_signer(config) if config is not None else ClaimSigner()

    metrics_server = None
    if config is not None and config.metrics_enabled:
        metrics_server = MetricsServer(host=config.metrics_host, port=config.metrics_port)

    @asynccontextmanager
    async def lifespan(_app: Litestar) -> AsyncGenerator[None]:
        """Lifespan context manager for startup/shutdown."""
        logger.info("Starting claimsigner server")
        if metrics_server is not None:
            metrics_server.start()
        try:
            yield
        finally:
            if metrics_server is not None:
                metrics_server.stop()
            logger.info("Stopping claimsigner server")

    return Litestar(
        route_handlers=get_routers(),
        lifespan=[lifespan],
        middleware=[metrics_middleware],
        debug=False,
        state=State({"signer": signer}),
        dependencies={
            "signer": Provide(provide_signer, sync_to_thread=False),
        },
    )


def run_server(config: Config) -> None:
    """Run the Litestar server with Granian."""
    logger.info(f"Starting claimsigner on {config.host}:{config.port}")

    # Workers rebuild the app from the serialized config
    from . import asgi

    asgi.store_config_in_env(config)

    server = Granian(
        target="claimsigner.asgi:app",
        address=config.host,
        port=config.port,
        interface=Interfaces.ASGI,
        workers=config.workers,
        log_level=config.log_level.lower(),
    )

    try:
        server.serve()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
