"""Metrics collection for alert delivery."""

import logging
from typing import Dict, Any
from datetime import datetime, timezone
from collections import defaultdict

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collects and manages alert hook metrics.

    Each collector owns its registry so several hooks (or tests) can create
    collectors with the same namespace without clashing in the global
    Prometheus registry.
    """

    def __init__(self, namespace: str = "pipeline_alerts"):
        """Initialize metrics collector.

        Args:
            namespace: Metrics namespace.
        """
        self.namespace = namespace
        self.registry = CollectorRegistry()

        self.events_delivered = Counter(
            f"{namespace}_events_delivered_total",
            "Events accepted by the alert notification backend",
            labelnames=["severity"],
            registry=self.registry,
        )
        self.events_suppressed = Counter(
            f"{namespace}_events_suppressed_total",
            "Log records dropped by the severity filter",
            registry=self.registry,
        )
        self.events_failed = Counter(
            f"{namespace}_events_failed_total",
            "Events that could not be delivered",
            labelnames=["reason"],
            registry=self.registry,
        )
        self.delivery_duration = Histogram(
            f"{namespace}_delivery_duration_seconds",
            "Time spent sending one event",
            buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
            registry=self.registry,
        )

        # In-memory metrics
        self.custom_metrics: Dict[str, Any] = defaultdict(float)
        self.start_time = datetime.now(timezone.utc)

    def record_delivery(self, severity: str, duration_seconds: float) -> None:
        """Record a delivered event.

        Args:
            severity: Wire severity of the event.
            duration_seconds: Time taken by the send call.
        """
        self.events_delivered.labels(severity=severity).inc()
        self.delivery_duration.observe(duration_seconds)
        logger.debug(f"Delivered {severity} event in {duration_seconds:.3f}s")

    def record_suppressed(self) -> None:
        """Record a record dropped by the severity filter."""
        self.events_suppressed.inc()

    def record_failure(self, reason: str, duration_seconds: float = 0.0) -> None:
        """Record a failed delivery.

        Args:
            reason: Short failure classification (exception class name).
            duration_seconds: Time taken by the failed send call.
        """
        self.events_failed.labels(reason=reason).inc()
        if duration_seconds:
            self.delivery_duration.observe(duration_seconds)

    def set_custom_metric(self, name: str, value: float) -> None:
        """Set custom metric value.

        Args:
            name: Metric name.
            value: Metric value.
        """
        self.custom_metrics[name] = value

    def increment_custom_metric(self, name: str, amount: float = 1) -> None:
        """Increment custom metric.

        Args:
            name: Metric name.
            amount: Amount to increment.
        """
        self.custom_metrics[name] = self.custom_metrics.get(name, 0) + amount

    def _sample_total(self, metric_name: str) -> float:
        total = 0.0
        for metric in self.registry.collect():
            for sample in metric.samples:
                if sample.name == metric_name:
                    total += sample.value
        return total

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Get summary of all metrics.

        Returns:
            Dictionary with metrics summary.
        """
        uptime = (datetime.now(timezone.utc) - self.start_time).total_seconds()

        return {
            "uptime_seconds": uptime,
            "events_delivered": self._sample_total(f"{self.namespace}_events_delivered_total"),
            "events_suppressed": self._sample_total(f"{self.namespace}_events_suppressed_total"),
            "events_failed": self._sample_total(f"{self.namespace}_events_failed_total"),
            "custom_metrics": dict(self.custom_metrics),
        }

    def export_prometheus(self) -> bytes:
        """Export metrics in Prometheus format.

        Returns:
            Metrics in Prometheus text format.
        """
        return generate_latest(self.registry)

    def export_json(self) -> Dict[str, Any]:
        """Export metrics as JSON.

        Returns:
            Metrics as dictionary.
        """
        return self.get_metrics_summary()
