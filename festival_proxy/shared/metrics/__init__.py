"""Metrics module using Prometheus."""

from .prometheus_metrics import ProxyMetrics, get_metrics_handler

__all__ = [
    "ProxyMetrics",
    "get_metrics_handler",
]
