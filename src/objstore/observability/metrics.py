"""Prometheus metrics for monitoring and observability."""

import re
import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    Info,
    generate_latest,
)
from starlette.requests import Request
from starlette.responses import Response


class MetricsRegistry:
    """Central registry for application metrics."""

    def __init__(self):
        self._setup_metrics()

    def _setup_metrics(self) -> None:
        """Initialize Prometheus metrics."""

        self.app_info = Info("objstore_app", "objstore application information")

        # HTTP request metrics
        self.http_requests_total = Counter(
            "objstore_http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
        )

        self.http_request_duration_seconds = Histogram(
            "objstore_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
        )

        # Object store metrics
        self.object_operations_total = Counter(
            "objstore_object_operations_total",
            "Total object store operations",
            ["operation", "outcome"],  # operation: save, load, list
        )

        self.object_operation_duration_seconds = Histogram(
            "objstore_object_operation_duration_seconds",
            "Object store operation duration in seconds, lock wait included",
            ["operation"],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
        )

        self.cache_lookups_total = Counter(
            "objstore_cache_lookups_total",
            "Object cache lookups",
            ["result"],  # hit, miss
        )

    def record_http_request(
        self,
        method: str,
        endpoint: str,
        status_code: int,
        duration: float,
    ) -> None:
        """Record HTTP request metrics."""
        self.http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code),
        ).inc()

        self.http_request_duration_seconds.labels(
            method=method, endpoint=endpoint
        ).observe(duration)

    def record_object_operation(
        self, operation: str, outcome: str, duration: float
    ) -> None:
        """Record an object store operation."""
        self.object_operations_total.labels(
            operation=operation, outcome=outcome
        ).inc()

        self.object_operation_duration_seconds.labels(operation=operation).observe(
            duration
        )

    def record_cache_lookup(self, hit: bool) -> None:
        self.cache_lookups_total.labels(result="hit" if hit else "miss").inc()


# Global metrics registry
metrics_registry = MetricsRegistry()


def setup_metrics(app_name: str, version: str) -> None:
    """Set up application info metrics."""
    metrics_registry.app_info.info({"app_name": app_name, "version": version})


class MetricsMiddleware:
    """Middleware to automatically collect HTTP request metrics."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        status_code = 200

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            status_code = 500
            raise
        finally:
            metrics_registry.record_http_request(
                method=scope.get("method", "UNKNOWN"),
                endpoint=self._normalize_path(scope.get("path", "/unknown")),
                status_code=status_code,
                duration=time.time() - start_time,
            )

    def _normalize_path(self, path: str) -> str:
        """Collapse object keys so label cardinality stays bounded."""
        return re.sub(r"^/(upload|download)/.*$", r"/\1/{key}", path)


def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics endpoint."""
    return Response(generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
