"""ASGI entry point for Granian.

This module provides the ASGI application for Granian.
Configuration is loaded from an environment variable set by the main process.
"""

import logging
import os
from typing import TYPE_CHECKING, Any

import msgspec

from .config import Config
from .server import create_app

if TYPE_CHECKING:
    from collections.abc import Callable

    from litestar import Litestar
    from litestar.types import LifeSpanScope, Scope

logger = logging.getLogger(__name__)

CONFIG_ENV = "CLAIMSIGNER_CONFIG"


def load_config_from_env() -> Config | None:
    """Load configuration from environment variable."""
    config_json = os.environ.get(CONFIG_ENV)
    if not config_json:
        return None

    try:
        return msgspec.json.decode(config_json, type=Config)
    except (msgspec.ValidationError, msgspec.DecodeError) as e:
        logger.error(f"Failed to load config from environment: {e}")
        return None


def store_config_in_env(config: Config) -> None:
    """Store configuration in environment variable for worker processes.

    Only the key file path is serialized, never the key itself.
    """
    os.environ[CONFIG_ENV] = msgspec.json.encode(config).decode("utf-8")


# Global app instance (created once per worker)
_app_instance: "Litestar | None" = None


def get_app() -> "Litestar":
    """Get or create the Litestar app instance."""
    global _app_instance
    if _app_instance is None:
        config = load_config_from_env()
        if config is None:
            raise RuntimeError(
                "Configuration not found. Use 'claimsigner serve' to start the server properly.",
            )

        # Setup logging
        logging.basicConfig(
            level=getattr(logging, config.normalized_log_level),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        _app_instance = create_app(config)

    return _app_instance


# ASGI application callable
# Granian calls this with (scope, receive, send)
async def app(
    scope: "Scope | LifeSpanScope",
    receive: "Callable[..., Any]",
    send: "Callable[..., Any]",
) -> None:
    """ASGI application entry point."""
    litestar_app = get_app()
    await litestar_app(scope, receive, send)
