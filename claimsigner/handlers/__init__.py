"""HTTP route handlers for the claim signing API with Litestar.

This package provides controller modules for different API endpoints:
- health: Health check endpoints
- claims: Claim message, signing and recovery endpoints
"""

from litestar import Router

from .claims import ClaimsController
from .health import HealthController


def get_routers() -> list[Router]:
    """Get all routers for the application."""
    return [
        Router(path="/", route_handlers=[HealthController]),
        Router(path="/", route_handlers=[ClaimsController]),
    ]


__all__ = [
    "ClaimsController",
    "HealthController",
    "get_routers",
]
