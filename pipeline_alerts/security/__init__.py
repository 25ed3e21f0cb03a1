"""Security module for service keys and OAuth tokens."""

from pipeline_alerts.security.service_key import ServiceKey, parse_service_key
from pipeline_alerts.security.token_provider import TokenProvider

__all__ = [
    "ServiceKey",
    "parse_service_key",
    "TokenProvider",
]
