"""
Delivery clients for the alert notification backend.
"""

from typing import List, Optional
from abc import ABC, abstractmethod
from urllib.parse import urlparse
import copy
import threading

import requests

from .event import Event
from ..exceptions import DeliveryError, SetupValidationError, TokenError
from ..monitoring import StructuredLogger
from ..security import TokenProvider

logger = StructuredLogger("alerting_client", level="INFO")

RESOURCE_EVENTS_PATH = "/cf/producer/v1/resource-events"
MATCHED_EVENTS_PATH = "/cf/consumer/v1/matched-events"


def encode_event(event: Event) -> str:
    """Serialize an event for the wire; raise DeliveryError if a tag cannot be encoded"""
    try:
        return event.to_json()
    except (TypeError, ValueError) as e:
        raise DeliveryError(f"event could not be serialized: {e}") from e


class DeliveryClient(ABC):
    """Capability interface the hook needs from a backend client"""

    @abstractmethod
    def check_setup(self) -> None:
        """Validate endpoint and credentials; raise SetupValidationError if unusable"""

    @abstractmethod
    def send(self, event: Event) -> None:
        """Deliver one event; raise DeliveryError on failure"""


class AlertNotificationClient(DeliveryClient):
    """Sends events to the alert notification REST API"""

    def __init__(
        self,
        url: str,
        token_provider: TokenProvider,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.url = url
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = timeout

    def _endpoint(self, path: str) -> str:
        return self.url.rstrip("/") + path

    def _headers(self) -> dict:
        return {
            "Authorization": self.token_provider.authorization_header(),
            "Content-Type": "application/json",
        }

    def check_setup(self) -> None:
        """Check that the URL is well formed and the consumer API answers"""
        parsed = urlparse(self.url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise SetupValidationError(f"invalid alert notification service url '{self.url}'")

        endpoint = self._endpoint(MATCHED_EVENTS_PATH)
        try:
            response = self.session.get(endpoint, headers=self._headers(), timeout=self.timeout)
        except (requests.RequestException, TokenError) as e:
            raise SetupValidationError(
                f"alert notification service at '{endpoint}' is not reachable: {e}"
            ) from e

        if response.status_code != requests.codes.ok:
            raise SetupValidationError(
                f"alert notification service at '{endpoint}' answered with "
                f"status {response.status_code}, expected {requests.codes.ok}: {response.text}"
            )
        logger.info("Alert notification service setup verified", url=self.url)

    def send(self, event: Event) -> None:
        """Post the event once; no retries"""
        endpoint = self._endpoint(RESOURCE_EVENTS_PATH)
        payload = encode_event(event)
        try:
            response = self.session.post(
                endpoint,
                data=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise DeliveryError(f"sending event to '{endpoint}' failed: {e}") from e

        if response.status_code != requests.codes.accepted:
            if response.status_code == requests.codes.unauthorized:
                self.token_provider.invalidate()
            raise DeliveryError(
                f"sending event to '{endpoint}' failed with status "
                f"{response.status_code}: {response.text}",
                status_code=response.status_code,
            )

    def close(self) -> None:
        """Close the delivery session and the token provider's session"""
        self.session.close()
        close_tokens = getattr(self.token_provider, "close", None)
        if callable(close_tokens):
            close_tokens()


class RecordingClient(DeliveryClient):
    """In-memory client that records events instead of sending them"""

    def __init__(self, fail_send: bool = False, fail_setup: bool = False):
        self.fail_send = fail_send
        self.fail_setup = fail_setup
        self.events: List[Event] = []
        self.setup_checks = 0
        self._lock = threading.Lock()

    def check_setup(self) -> None:
        with self._lock:
            self.setup_checks += 1
        if self.fail_setup:
            raise SetupValidationError("recording client configured to fail setup")

    def send(self, event: Event) -> None:
        if self.fail_send:
            raise DeliveryError("recording client configured to fail delivery")
        encode_event(event)
        with self._lock:
            self.events.append(copy.deepcopy(event))
