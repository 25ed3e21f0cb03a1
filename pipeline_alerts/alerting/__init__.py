"""Log-to-alert pipeline: event model, templates, filtering and delivery."""

from pipeline_alerts.alerting.event import (
    LogLevel,
    Severity,
    Category,
    Resource,
    Event,
)

from pipeline_alerts.alerting.template import (
    merge_with_template,
    apply_template,
    default_event,
    build_prototype,
)

from pipeline_alerts.alerting.severity import should_deliver
from pipeline_alerts.alerting.enricher import enrich, record_fields

from pipeline_alerts.alerting.client import (
    DeliveryClient,
    AlertNotificationClient,
    RecordingClient,
)

from pipeline_alerts.alerting.hook import AlertNotificationHook

__all__ = [
    "LogLevel",
    "Severity",
    "Category",
    "Resource",
    "Event",
    "merge_with_template",
    "apply_template",
    "default_event",
    "build_prototype",
    "should_deliver",
    "enrich",
    "record_fields",
    "DeliveryClient",
    "AlertNotificationClient",
    "RecordingClient",
    "AlertNotificationHook",
]
