"""ASGI entry point for Granian multi-worker support.

Granian imports this module in every worker process. The configuration is
handed over by the main process as JSON in the KMSSIGNER_CONFIG environment
variable, and each worker builds its own adapter from it.
"""

from __future__ import annotations

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

CONFIG_ENV_VAR = "KMSSIGNER_CONFIG"


def load_config_from_env() -> Config | None:
    """Load configuration from environment variable."""
    config_json = os.environ.get(CONFIG_ENV_VAR)
    if not config_json:
        return None

    try:
        return msgspec.json.decode(config_json, type=Config)
    except msgspec.DecodeError as e:
        logger.error(f"Failed to load config from environment: {e}")
        return None


def store_config_in_env(config: Config) -> None:
    """Store configuration in environment variable for worker processes."""
    os.environ[CONFIG_ENV_VAR] = msgspec.json.encode(config).decode()


# Global app instance (created once per worker)
_app_instance: Litestar | None = None


def get_app() -> Litestar:
    """Get or create the Litestar app instance."""
    global _app_instance
    if _app_instance is None:
        config = load_config_from_env()
        if config is None:
            raise RuntimeError(
                "Configuration not found. Use the 'kmssigner' command to start the server.",
            )

        logging.basicConfig(
            level=getattr(logging, config.normalized_log_level),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        _app_instance = create_app(config)

    return _app_instance


async def app(
    scope: Scope | LifeSpanScope,
    receive: Callable[..., Any],
    send: Callable[..., Any],
) -> None:
    """ASGI application entry point."""
    litestar_app = get_app()
    await litestar_app(scope, receive, send)
