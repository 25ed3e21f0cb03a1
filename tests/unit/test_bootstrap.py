"""Unit tests for the hook bootstrap and command line."""

import json
import logging

import pytest
from unittest.mock import MagicMock, patch

from pipeline_alerts.alerting import AlertNotificationHook, RecordingClient
from pipeline_alerts.bootstrap import install_alert_hook, main
from pipeline_alerts.config import HookConfiguration
from pipeline_alerts.exceptions import SetupValidationError
from pipeline_alerts.monitoring import StructuredLogger


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure no ANS_* variables leak in from the outer environment."""
    for name in ("ANS_SERVICE_KEY", "ANS_EVENT_TEMPLATE", "ANS_CORRELATION_ID", "ANS_REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def backend_session():
    """Create a mock session answering like a healthy backend."""
    token_response = MagicMock(status_code=200)
    token_response.json.return_value = {"access_token": "test_token", "expires_in": 3600}
    session = MagicMock()
    session.get.return_value = MagicMock(status_code=200)
    session.post.side_effect = lambda url, **kwargs: (
        token_response if url.endswith("/oauth/token") else MagicMock(status_code=202)
    )
    return session


@pytest.fixture
def config_dir(temp_dir, service_key):
    """Create a configuration directory with a service key."""
    config_dir = temp_dir / "config"
    config_dir.mkdir()
    with open(config_dir / "settings.yaml", "w") as f:
        f.write("ans:\n  correlation_id: cli-run\n  service_key: '%s'\n" % json.dumps(service_key))
    return config_dir


class TestInstallAlertHook:
    """Test install_alert_hook function."""

    def test_attaches_to_logger(self, hook_configuration):
        """Test the hook is attached to a standard logger."""
        logger = logging.getLogger("test.install")
        client = RecordingClient()

        hook = install_alert_hook(logger, hook_configuration, "abc-123", client=client)
        try:
            logger.warning("disk low", extra={"stepName": "build"})
        finally:
            logger.removeHandler(hook)

        assert isinstance(hook, AlertNotificationHook)
        assert client.events[0].tags["ans:correlationId"] == "abc-123"

    def test_attaches_to_structured_logger(self, hook_configuration):
        """Test the hook is attached to a StructuredLogger."""
        logger = StructuredLogger("test.install_structured")
        client = RecordingClient()

        hook = install_alert_hook(logger, hook_configuration, "abc-123", client=client)

        assert hook in logger.logger.handlers

    def test_failed_construction_attaches_nothing(self, hook_configuration):
        """Test construction errors propagate and leave the logger alone."""
        logger = logging.getLogger("test.install_failed")

        with pytest.raises(SetupValidationError):
            install_alert_hook(
                logger, hook_configuration, "abc-123", client=RecordingClient(fail_setup=True)
            )

        assert not any(isinstance(h, AlertNotificationHook) for h in logger.handlers)


class TestMain:
    """Test the command line."""

    def test_check(self, config_dir, backend_session):
        """Test a valid setup exits with 0."""
        with patch("requests.Session", return_value=backend_session):
            assert main(["--config-path", str(config_dir), "check"]) == 0

        backend_session.get.assert_called_once()

    def test_check_without_service_key(self, temp_dir):
        """Test a missing service key exits with 1."""
        assert main(["--config-path", str(temp_dir), "check"]) == 1

    def test_check_with_invalid_timeout(self, config_dir, backend_session, monkeypatch):
        """Test a non-numeric request timeout exits with 1."""
        monkeypatch.setenv("ANS_REQUEST_TIMEOUT", "five")

        with patch("requests.Session", return_value=backend_session):
            assert main(["--config-path", str(config_dir), "check"]) == 1

    def test_send(self, config_dir, backend_session):
        """Test sending one message."""
        with patch("requests.Session", return_value=backend_session):
            code = main([
                "--config-path", str(config_dir),
                "send", "disk low",
                "--step-name", "build",
                "--field", "volume=/data",
            ])

        assert code == 0
        send_call = backend_session.post.call_args_list[-1]
        payload = json.loads(send_call.kwargs["data"])
        assert payload["subject"] == "build"
        assert payload["tags"]["volume"] == "/data"
        assert payload["tags"]["ans:correlationId"] == "cli-run"

    def test_send_suppressed_level(self, config_dir, backend_session):
        """Test an info message is processed without delivery."""
        with patch("requests.Session", return_value=backend_session):
            code = main(["--config-path", str(config_dir), "send", "all good", "--level", "info"])

        assert code == 0
        urls = [c.args[0] for c in backend_session.post.call_args_list]
        assert not any(url.endswith("/resource-events") for url in urls)

    def test_send_delivery_failure(self, config_dir, backend_session):
        """Test a rejected event exits with 1."""
        token_response = MagicMock(status_code=200)
        token_response.json.return_value = {"access_token": "test_token", "expires_in": 3600}
        backend_session.post.side_effect = lambda url, **kwargs: (
            token_response if url.endswith("/oauth/token") else MagicMock(status_code=500)
        )

        with patch("requests.Session", return_value=backend_session):
            code = main(["--config-path", str(config_dir), "send", "disk low"])

        assert code == 1

    def test_invalid_field(self, config_dir, backend_session):
        """Test malformed --field values are rejected."""
        with patch("requests.Session", return_value=backend_session):
            with pytest.raises(SystemExit):
                main(["--config-path", str(config_dir), "send", "disk low", "--field", "novalue"])
