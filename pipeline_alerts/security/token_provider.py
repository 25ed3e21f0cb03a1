"""OAuth client credentials tokens for the alert notification backend."""

import logging
import threading
import time
from typing import Optional

import requests

from pipeline_alerts.exceptions import TokenError

logger = logging.getLogger(__name__)


class TokenProvider:
    """Fetches and caches bearer tokens using the client credentials grant."""

    def __init__(
        self,
        oauth_url: str,
        client_id: str,
        client_secret: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        refresh_margin: float = 60,
    ):
        """
        Initialize token provider.

        Args:
            oauth_url: Base URL of the OAuth server
            client_id: OAuth client id
            client_secret: OAuth client secret
            session: HTTP session to use (a new one by default)
            timeout: Request timeout in seconds, None for no timeout
            refresh_margin: Seconds before expiry at which a token is renewed
        """
        self.oauth_url = oauth_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session or requests.Session()
        self.timeout = timeout
        self.refresh_margin = refresh_margin

        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._expires_at = 0.0

    @property
    def token_url(self) -> str:
        return self.oauth_url.rstrip("/") + "/oauth/token"

    def get_token(self) -> str:
        """
        Return a valid access token, fetching a new one when needed.

        Raises:
            TokenError: If the OAuth server rejects the request
        """
        with self._lock:
            if self._token and time.monotonic() < self._expires_at:
                return self._token
            self._token, self._expires_at = self._fetch_token()
            return self._token

    def authorization_header(self) -> str:
        return f"Bearer {self.get_token()}"

    def invalidate(self) -> None:
        """Drop the cached token."""
        with self._lock:
            self._token = None
            self._expires_at = 0.0

    def close(self) -> None:
        """Drop the cached token and close the HTTP session."""
        self.invalidate()
        self.session.close()

    def _fetch_token(self):
        try:
            response = self.session.post(
                self.token_url,
                params={"grant_type": "client_credentials", "response_type": "token"},
                auth=(self.client_id, self.client_secret),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            raise TokenError(f"fetching an access token failed: {e}", status_code=status) from e
        except ValueError as e:
            raise TokenError(f"token response is not valid JSON: {e}") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise TokenError("token response does not contain an access_token")

        expires_in = payload.get("expires_in") or 0
        try:
            lifetime = max(float(expires_in) - self.refresh_margin, 0)
        except (TypeError, ValueError):
            lifetime = 0
        logger.debug(f"Fetched access token valid for {expires_in}s")
        return token, time.monotonic() + lifetime
