"""Monitoring module for structured logging and delivery metrics."""

from pipeline_alerts.monitoring.structured_logger import StructuredLogger, StructuredFormatter
from pipeline_alerts.monitoring.metrics import MetricsCollector

# Singleton instance shared by hooks that are not given their own collector
_metrics_instance = None


def get_metrics_collector(namespace: str = "pipeline_alerts") -> MetricsCollector:
    """Get or create metrics collector singleton."""
    global _metrics_instance
    if _metrics_instance is None:
        _metrics_instance = MetricsCollector(namespace=namespace)
    return _metrics_instance


__all__ = [
    "StructuredLogger",
    "StructuredFormatter",
    "MetricsCollector",
    "get_metrics_collector",
]
