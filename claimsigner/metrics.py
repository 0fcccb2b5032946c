"""Prometheus metrics for claimsigner with standalone HTTP server.

This module defines and exposes all Prometheus metrics used by claimsigner.
Metrics are served on a separate port using prometheus_client's built-in HTTP server.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from litestar import Controller, get
from litestar.response import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    generate_latest,
    start_http_server,
)

if TYPE_CHECKING:
    from http.server import ThreadingHTTPServer
    from wsgiref.simple_server import WSGIServer

logger = logging.getLogger(__name__)

REGISTRY = CollectorRegistry()

# Application info
APP_INFO = Info(
    "claimsigner_build_info",
    "Build information about claimsigner",
    registry=REGISTRY,
)
APP_INFO.info({"version": "0.1.0", "name": "claimsigner"})

# Signing metrics
SIGNING_REQUESTS_TOTAL = Counter(
    "signing_requests_total",
    "Total number of claim signing requests",
    ["key_type"],
    registry=REGISTRY,
)

SIGNING_DURATION_SECONDS = Histogram(
    "signing_duration_seconds",
    "Time spent building, hashing and signing claims",
    ["key_type"],
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
    registry=REGISTRY,
)

SIGNING_ERRORS_TOTAL = Counter(
    "signing_errors_total",
    "Total number of claim signing errors",
    ["error_type"],
    registry=REGISTRY,
)

# Chain metrics
CLAIMS_SUBMITTED_TOTAL = Counter(
    "claims_submitted_total",
    "Total number of extrinsics submitted to the airdrop pallet",
    ["call", "outcome"],
    registry=REGISTRY,
)

# HTTP metrics
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "Time spent processing HTTP requests",
    ["method", "endpoint"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
    registry=REGISTRY,
)


def get_metrics_output() -> bytes:
    """Generate Prometheus-formatted metrics output."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST


class MetricsController(Controller):  # type: ignore[misc]
    """Prometheus metrics HTTP endpoints.

    In production, metrics are served on a separate port via the standalone
    metrics server; this controller mounts the same output on an app for tests.
    """

    path = "/"

    @get("/metrics")  # type: ignore[untyped-decorator]
    async def metrics(self) -> Response:
        """Handler for the /metrics endpoint."""
        return Response(
            content=get_metrics_output(),
            headers={"Content-Type": get_metrics_content_type()},
        )


class MetricsServer:
    """Standalone Prometheus metrics HTTP server using prometheus_client.start_http_server.

    This runs the metrics endpoint on a separate port from the main API,
    allowing metrics to be scraped independently.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8081) -> None:
        self._host = host
        self._port = port
        self._httpd: WSGIServer | ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the metrics server and wait until it is listening."""
        # start_http_server returns a tuple of (server, thread)
        try:
            server, thread = start_http_server(
                port=self._port,
                addr=self._host,
                registry=REGISTRY,
            )
        except Exception:
            logger.exception("Failed to start metrics server")
            raise
        self._httpd = server
        self._thread = thread
        logger.info(
            f"Metrics server started at http://{self._host}:{self._port}/metrics",
        )

    def stop(self) -> None:
        """Stop the metrics server."""
        if self._httpd is not None:
            try:
                self._httpd.shutdown()
                self._httpd.server_close()
            except Exception:
                logger.exception("Error stopping metrics server")
            finally:
                self._httpd = None

        if self._thread is not None:
            self._thread.join(timeout=2)
            self._thread = None

        logger.info("Metrics server stopped")
