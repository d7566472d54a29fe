"""HTTP route handlers with Litestar.

This package provides controller modules for different API endpoints:
- health: Health check endpoint
- signing: Remote signing API endpoints
"""

from litestar import Router

from .health import HealthController
from .signing import SigningController


def get_routers() -> list[Router]:
    """Get all routers for the application."""
    return [
        Router(path="/", route_handlers=[HealthController]),
        Router(path="/", route_handlers=[SigningController]),
    ]


__all__ = [
    "HealthController",
    "SigningController",
    "get_routers",
]
