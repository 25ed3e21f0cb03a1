"""Unit tests for configuration management."""

import json

import pytest

from pipeline_alerts.config import ConfigManager, HookConfiguration
from pipeline_alerts.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure no ANS_* variables leak in from the outer environment."""
    for name in (
        "ANS_SERVICE_KEY",
        "ANS_EVENT_TEMPLATE_FILE_PATH",
        "ANS_EVENT_TEMPLATE",
        "ANS_CORRELATION_ID",
        "ANS_REQUEST_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


def _write_config(config_dir, settings, env_settings=None, env="development"):
    config_dir.mkdir(exist_ok=True)
    with open(config_dir / "settings.yaml", "w") as f:
        f.write(settings)
    if env_settings is not None:
        env_dir = config_dir / "environments"
        env_dir.mkdir(exist_ok=True)
        with open(env_dir / f"{env}.yaml", "w") as f:
            f.write(env_settings)


class TestConfigManager:
    """Test ConfigManager class."""

    def test_yaml_layers(self, temp_dir):
        """Test environment YAML overrides the base settings."""
        config_dir = temp_dir / "config"
        _write_config(
            config_dir,
            """
ans:
  correlation_id: base-run
  event_template_file_path: templates/event.json
""",
            """
ans:
  correlation_id: dev-run
""",
        )

        manager = ConfigManager(env="development", config_path=str(config_dir))

        assert manager.get("ans.correlation_id") == "dev-run"
        assert manager.get("ans.event_template_file_path") == "templates/event.json"
        assert manager.get("ans.missing", "default") == "default"

    def test_missing_config_dir(self, temp_dir):
        """Test an absent configuration directory yields an empty config."""
        manager = ConfigManager(config_path=str(temp_dir / "nowhere"))

        assert manager.to_dict() == {}
        assert manager.get_hook_configuration() == HookConfiguration()
        assert manager.get_request_timeout() is None

    def test_env_vars_override_yaml(self, temp_dir, env_vars, service_key_json):
        """Test environment variables win over YAML."""
        config_dir = temp_dir / "config"
        _write_config(config_dir, "ans:\n  correlation_id: yaml-run\n")

        manager = ConfigManager(config_path=str(config_dir))

        assert manager.get_correlation_id() == "env-correlation"
        assert manager.get_request_timeout() == 5.0
        assert manager.get_hook_configuration().service_key == service_key_json

    def test_mapping_values_become_json(self, temp_dir, service_key):
        """Test YAML mappings for the service key and template are serialized."""
        config_dir = temp_dir / "config"
        _write_config(
            config_dir,
            f"""
ans:
  service_key:
    url: {service_key["url"]}
    client_id: {service_key["client_id"]}
    client_secret: {service_key["client_secret"]}
    oauth_url: {service_key["oauth_url"]}
  event_template:
    subject: Nightly build
    tags:
      team: platform
""",
        )

        configuration = ConfigManager(config_path=str(config_dir)).get_hook_configuration()

        assert json.loads(configuration.service_key) == service_key
        assert json.loads(configuration.event_template) == {
            "subject": "Nightly build",
            "tags": {"team": "platform"},
        }

    def test_dotenv_file(self, temp_dir, monkeypatch):
        """Test values from a .env file."""
        dotenv_file = temp_dir / ".env"
        dotenv_file.write_text("ANS_CORRELATION_ID=dotenv-run\n")

        manager = ConfigManager(config_path=str(temp_dir), dotenv_path=str(dotenv_file))

        assert manager.get_correlation_id() == "dotenv-run"

    def test_invalid_request_timeout(self, temp_dir, monkeypatch):
        """Test a non-numeric timeout raises ConfigurationError."""
        monkeypatch.setenv("ANS_REQUEST_TIMEOUT", "five")

        manager = ConfigManager(config_path=str(temp_dir))

        with pytest.raises(ConfigurationError, match="invalid request timeout 'five'"):
            manager.get_request_timeout()
