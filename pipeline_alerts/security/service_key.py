# Service key parsing for the alert notification backend.
from dataclasses import dataclass
import json
import logging

from pipeline_alerts.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("url", "client_id", "client_secret", "oauth_url")


@dataclass(frozen=True)
class ServiceKey:
    """Credential and endpoint material of a backend service instance."""

    url: str
    client_id: str
    client_secret: str
    oauth_url: str

    def __repr__(self) -> str:
        return (
            f"ServiceKey(url={self.url!r}, client_id={self.client_id!r}, "
            f"oauth_url={self.oauth_url!r})"
        )


def parse_service_key(service_key_json: str) -> ServiceKey:
    """
    Parse a service key JSON document.

    Args:
        service_key_json: JSON text with url, client_id, client_secret and oauth_url

    Returns:
        Parsed ServiceKey

    Raises:
        ConfigurationError: If the document is not JSON or misses a field
    """
    try:
        data = json.loads(service_key_json)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(
            "cannot initialize alert notification hook due to faulty service key json"
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError("service key json must be an object")

    missing = [
        name for name in REQUIRED_FIELDS
        if not isinstance(data.get(name), str) or not data.get(name)
    ]
    if missing:
        raise ConfigurationError(
            f"service key json is missing required fields: {', '.join(missing)}"
        )

    key = ServiceKey(**{name: data[name] for name in REQUIRED_FIELDS})
    logger.debug(f"Parsed service key for {key.url}")
    return key
