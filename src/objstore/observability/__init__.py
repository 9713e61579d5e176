"""Observability infrastructure for objstore."""

from objstore.observability.logging import configure_logging, get_logger
from objstore.observability.metrics import metrics_registry, setup_metrics

__all__ = ["configure_logging", "get_logger", "metrics_registry", "setup_metrics"]
