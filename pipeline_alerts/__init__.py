"""Pipeline log-to-alert notification hook."""

from pipeline_alerts.alerting import AlertNotificationHook, Event
from pipeline_alerts.config import HookConfiguration
from pipeline_alerts.bootstrap import install_alert_hook

__version__ = "0.1.0"

__all__ = [
    "AlertNotificationHook",
    "Event",
    "HookConfiguration",
    "install_alert_hook",
]
