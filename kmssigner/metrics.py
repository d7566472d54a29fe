"""Prometheus metrics for kmssigner with standalone HTTP server.

Metrics are served on a separate port using prometheus_client's built-in HTTP
server. When PROMETHEUS_MULTIPROC_DIR is set (multiple Granian workers) the
metrics server aggregates the per-process files written by each worker.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    generate_latest,
    start_http_server,
)
from prometheus_client.multiprocess import MultiProcessCollector

from . import __version__

if TYPE_CHECKING:
    from http.server import ThreadingHTTPServer
    from wsgiref.simple_server import WSGIServer

logger = logging.getLogger(__name__)


# Workers write values to PROMETHEUS_MULTIPROC_DIR on their own, so the
# in-process registry never needs the multi-process collector.
REGISTRY = CollectorRegistry()

APP_INFO = Info(
    "kmssigner_build_info",
    "Build information about kmssigner",
    registry=REGISTRY,
)
APP_INFO.info({"version": __version__, "name": "kmssigner"})

# Signing metrics, labelled by adapter operation ("sign" or "public_key")
SIGNING_REQUESTS_TOTAL = Counter(
    "signing_requests_total",
    "Total number of adapter operations",
    ["operation"],
    registry=REGISTRY,
)

SIGNING_DURATION_SECONDS = Histogram(
    "signing_duration_seconds",
    "Time spent in adapter operations, including the authority round trip",
    ["operation"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=REGISTRY,
)

SIGNING_ERRORS_TOTAL = Counter(
    "signing_errors_total",
    "Total number of failed adapter operations",
    ["operation", "error_type"],
    registry=REGISTRY,
)

PUBLIC_KEY_CACHE_HITS_TOTAL = Counter(
    "public_key_cache_hits_total",
    "Public key requests served from the adapter cache",
    registry=REGISTRY,
)


def get_metrics_output() -> bytes:
    """Generate Prometheus-formatted metrics output."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST


class MetricsServer:
    """Standalone Prometheus metrics HTTP server.

    Runs the metrics endpoint on a separate port from the signing API so it
    can be scraped without exposing the signing routes.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8081) -> None:
        self._host = host
        self._port = port
        self._httpd: WSGIServer | ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start serving metrics in a background thread.

        In multi-process mode the server aggregates the files written by the
        workers instead of this process's own registry.
        """
        registry = REGISTRY
        multiproc_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
        if multiproc_dir:
            registry = CollectorRegistry()
            MultiProcessCollector(registry, path=multiproc_dir)  # type: ignore[no-untyped-call]

        server, thread = start_http_server(
            port=self._port,
            addr=self._host,
            registry=registry,
        )
        self._httpd = server
        self._thread = thread
        logger.info(f"Metrics server started at http://{self._host}:{self._port}/metrics")

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
