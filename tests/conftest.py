"""Pytest configuration and fixtures."""

import json
import logging
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pipeline_alerts.alerting import RecordingClient
from pipeline_alerts.config import HookConfiguration

# Configure logging for tests
logging.basicConfig(level=logging.DEBUG)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def service_key():
    """Provide service key content."""
    return {
        "url": "https://ans.example.com",
        "client_id": "test_client",
        "client_secret": "test_secret",
        "oauth_url": "https://auth.example.com",
    }


@pytest.fixture
def service_key_json(service_key):
    """Provide service key as JSON text."""
    return json.dumps(service_key)


@pytest.fixture
def hook_configuration(service_key_json):
    """Provide a hook configuration without templates."""
    return HookConfiguration(service_key=service_key_json)


@pytest.fixture
def recording_client():
    """Create a client that records events instead of sending them."""
    return RecordingClient()


@pytest.fixture
def make_record():
    """Factory for log records with structured fields."""

    def _make(message="disk low", level=logging.WARNING, fields=None, exc_info=None, created=None):
        record = logging.LogRecord(
            "pipeline", level, "step.py", 10, message, (), exc_info
        )
        if fields is not None:
            record.extra_fields = dict(fields)
        if created is not None:
            record.created = created
        return record

    return _make


@pytest.fixture
def mock_session():
    """Create a mock HTTP session answering like a healthy backend."""
    session = MagicMock()

    token_response = MagicMock()
    token_response.status_code = 200
    token_response.json.return_value = {
        "access_token": "test_token",
        "token_type": "bearer",
        "expires_in": 3600,
    }
    session.post.return_value = token_response

    get_response = MagicMock()
    get_response.status_code = 200
    session.get.return_value = get_response
    return session


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


@pytest.fixture
def env_vars(monkeypatch, service_key_json):
    """Set environment variables for testing."""
    monkeypatch.setenv("ANS_SERVICE_KEY", service_key_json)
    monkeypatch.setenv("ANS_CORRELATION_ID", "env-correlation")
    monkeypatch.setenv("ANS_REQUEST_TIMEOUT", "5")
    return monkeypatch
