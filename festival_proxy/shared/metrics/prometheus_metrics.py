"""Prometheus metrics definitions and helpers.

Provides the metric set recorded by the edge proxy.
"""

from typing import Callable

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CollectorRegistry,
)


class ProxyMetrics:
    """Edge proxy metrics."""

    def __init__(self, registry: CollectorRegistry) -> None:
        """Initialize proxy metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.registry = registry

        # Requests handled, by dispatcher route
        self.requests = Counter(
            "festival_proxy_requests_total",
            "Total number of requests handled",
            ["route", "method", "status"],
            registry=registry,
        )

        # Handling duration
        self.request_duration = Histogram(
            "festival_proxy_request_duration_seconds",
            "Time spent handling requests",
            ["route"],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=registry,
        )

        # Upstream failures (exceptions, not non-2xx statuses)
        self.upstream_errors = Counter(
            "festival_proxy_upstream_errors_total",
            "Upstream requests that raised instead of returning a response",
            ["route", "error_type"],
            registry=registry,
        )

        # Beverage types found per discovery
        self.beverage_types_discovered = Histogram(
            "festival_proxy_beverage_types_discovered",
            "Number of beverage types found in a festival directory listing",
            buckets=[0, 1, 2, 4, 8, 16, 32],
            registry=registry,
        )


def get_metrics_handler(registry: CollectorRegistry) -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Args:
        registry: Registry whose metrics are exposed

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(registry)

    return metrics_handler
