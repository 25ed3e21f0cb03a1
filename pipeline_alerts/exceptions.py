"""Error kinds raised by the alert hook."""

from typing import Optional


class AlertHookError(Exception):
    """Base class for alert hook errors."""


class ConfigurationError(AlertHookError):
    """Credential material (service key) is malformed."""


class SetupValidationError(AlertHookError):
    """The backend is unreachable or the endpoint is misconfigured."""


class MalformedTemplateError(AlertHookError):
    """An event template document could not be parsed."""


class DeliveryError(AlertHookError):
    """An event could not be delivered to the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TokenError(DeliveryError):
    """An OAuth access token could not be obtained."""
