"""ASGI middleware for Prometheus metrics.

This module provides middleware for tracking HTTP request metrics.
"""

import logging
import time
from typing import TYPE_CHECKING

from .metrics import HTTP_REQUEST_DURATION_SECONDS, HTTP_REQUESTS_TOTAL

if TYPE_CHECKING:
    from litestar.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


def metrics_middleware(app: "ASGIApp") -> "ASGIApp":
    """Wrap an ASGI app to track HTTP request metrics.

    Tracks:
    - Total requests by method, path, and status code
    - Request duration by method and path

    None of the API routes take path parameters, so the raw path is a
    bounded label.
    """

    async def middleware(scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        start_time = time.perf_counter()
        status = "500"

        async def send_wrapper(message: "Message") -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = str(message["status"])
            await send(message)

        try:
            await app(scope, receive, send_wrapper)
        finally:
            duration = time.perf_counter() - start_time
            method = scope.get("method", "")
            endpoint = scope["path"]

            HTTP_REQUEST_DURATION_SECONDS.labels(method=method, endpoint=endpoint).observe(duration)
            HTTP_REQUESTS_TOTAL.labels(method=method, endpoint=endpoint, status=status).inc()

    return middleware
