"""
Logging handler that forwards warning-and-above records to the alert
notification backend.

Construction runs once, before the handler is attached to any logger:

    parse service key -> build client -> merge templates -> check setup

Any failure in that sequence aborts construction. Once built, the hook stays
active: a failed delivery is returned from ``fire`` and reported through
``logging.Handler.handleError`` but never stops later records.
"""

from typing import List, Optional
import copy
import logging
import threading
import time

from .client import AlertNotificationClient, DeliveryClient
from .enricher import enrich, record_fields
from .event import Event, LogLevel
from .severity import should_deliver
from .template import build_prototype
from ..config import HookConfiguration
from ..exceptions import DeliveryError
from ..monitoring import MetricsCollector
from ..security import TokenProvider, parse_service_key


class AlertNotificationHook(logging.Handler):
    """Sends log records as events to the alert notification backend"""

    def __init__(
        self,
        client: DeliveryClient,
        prototype: Event,
        metrics: Optional[MetricsCollector] = None,
    ):
        super().__init__(level=logging.INFO)
        self.client = client
        self._prototype = prototype
        self.metrics = metrics
        self._local = threading.local()

    @classmethod
    def create(
        cls,
        configuration: HookConfiguration,
        correlation_id: str,
        client: Optional[DeliveryClient] = None,
        metrics: Optional[MetricsCollector] = None,
        timeout: Optional[float] = None,
    ) -> "AlertNotificationHook":
        """
        Build an active hook.

        Args:
            configuration: Service key and optional event templates
            correlation_id: Identifier correlating all events of one run
            client: Delivery client to use instead of the HTTP client
            metrics: Optional metrics collector
            timeout: HTTP timeout in seconds for the default client

        Returns:
            Active hook

        Raises:
            ConfigurationError: If the service key is malformed
            SetupValidationError: If the backend cannot be used
        """
        service_key = parse_service_key(configuration.service_key)
        owns_client = client is None
        if owns_client:
            token_provider = TokenProvider(
                oauth_url=service_key.oauth_url,
                client_id=service_key.client_id,
                client_secret=service_key.client_secret,
                timeout=timeout,
            )
            client = AlertNotificationClient(service_key.url, token_provider, timeout=timeout)

        prototype = build_prototype(
            correlation_id,
            template_file_path=configuration.event_template_file_path,
            template=configuration.event_template,
        )

        try:
            client.check_setup()
        except Exception:
            # A client built here is never handed out, so release its sessions
            if owns_client:
                client.close()
            raise
        return cls(client, prototype, metrics=metrics)

    @property
    def prototype(self) -> Event:
        """Copy of the prototype every event starts from"""
        return copy.deepcopy(self._prototype)

    def levels(self) -> List[LogLevel]:
        """Levels the hook subscribes to"""
        return [level for level in LogLevel if level >= LogLevel.INFO]

    def fire(self, record: logging.LogRecord) -> Optional[Exception]:
        """
        Filter, enrich and deliver one record.

        Returns:
            None when the record was delivered or suppressed, the delivery
            error otherwise
        """
        # Records logged while this thread is already delivering are dropped
        if getattr(self._local, "firing", False):
            return None
        self._local.firing = True
        try:
            return self._fire(record)
        finally:
            self._local.firing = False

    def _fire(self, record: logging.LogRecord) -> Optional[Exception]:
        message = record.getMessage()
        fields = record_fields(record)
        level, deliver = should_deliver(LogLevel.from_logging(record.levelno), message, fields)
        if not deliver:
            if self.metrics and message.strip():
                self.metrics.record_suppressed()
            return None

        event = enrich(self._prototype, record, level, fields)

        start = time.perf_counter()
        try:
            self.client.send(event)
        except DeliveryError as e:
            if self.metrics:
                self.metrics.record_failure(type(e).__name__, time.perf_counter() - start)
            return e

        if self.metrics:
            self.metrics.record_delivery(event.severity.value, time.perf_counter() - start)
        return None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            error = self.fire(record)
            if error is not None:
                raise error
        except Exception:
            # Written to stderr, never routed back through logging
            self.handleError(record)

    def close(self) -> None:
        close_client = getattr(self.client, "close", None)
        if callable(close_client):
            close_client()
        super().close()
