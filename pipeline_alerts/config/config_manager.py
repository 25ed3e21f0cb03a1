"""Configuration manager for the alert hook, from YAML files and the environment."""

import json
import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
import yaml
from dotenv import load_dotenv

from pipeline_alerts.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable -> dot-notation config key
ENV_OVERRIDES = {
    "ANS_SERVICE_KEY": "ans.service_key",
    "ANS_EVENT_TEMPLATE_FILE_PATH": "ans.event_template_file_path",
    "ANS_EVENT_TEMPLATE": "ans.event_template",
    "ANS_CORRELATION_ID": "ans.correlation_id",
    "ANS_REQUEST_TIMEOUT": "ans.request_timeout",
}


@dataclass
class HookConfiguration:
    """Options recognized by the alert notification hook."""

    service_key: str = ""
    event_template_file_path: Optional[str] = None
    event_template: Optional[str] = None


class ConfigManager:
    """Manages hook configuration from YAML files and environment variables."""

    def __init__(
        self,
        env: str = "development",
        config_path: str = "config",
        dotenv_path: Optional[str] = None,
    ):
        """Initialize configuration manager.

        Args:
            env: Environment name (development, production, staging).
            config_path: Path to configuration directory.
            dotenv_path: Optional .env file; the default lookup is used when omitted.
        """
        self.env = env
        self.config_path = config_path
        self.config: Dict[str, Any] = {}

        load_dotenv(dotenv_path)
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML files."""
        try:
            # Load base config
            base_config_file = os.path.join(self.config_path, "settings.yaml")
            if os.path.exists(base_config_file):
                with open(base_config_file) as f:
                    self.config = yaml.safe_load(f) or {}
                logger.info(f"Loaded base configuration from {base_config_file}")

            # Load environment-specific config
            env_config_file = os.path.join(self.config_path, "environments", f"{self.env}.yaml")
            if os.path.exists(env_config_file):
                with open(env_config_file) as f:
                    env_config = yaml.safe_load(f) or {}
                    self._deep_merge(self.config, env_config)
                    logger.info(f"Loaded {self.env} configuration from {env_config_file}")
            else:
                logger.debug(f"Environment config file not found: {env_config_file}")

            # Load environment variables
            self._load_env_vars()

        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Deep merge override into base dictionary."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _load_env_vars(self) -> None:
        """Load environment variables and override config."""
        for env_var, key in ENV_OVERRIDES.items():
            value = os.getenv(env_var)
            if not value:
                continue
            section, name = key.split(".")
            if not isinstance(self.config.get(section), dict):
                self.config[section] = {}
            self.config[section][name] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key (supports dot notation: "ans.service_key").
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_hook_configuration(self) -> HookConfiguration:
        """Get alert hook configuration.

        A service key given as a YAML mapping is serialized back to JSON,
        the form the hook expects.

        Returns:
            Hook configuration.
        """
        service_key = self.get("ans.service_key", "")
        if isinstance(service_key, dict):
            service_key = json.dumps(service_key)

        event_template = self.get("ans.event_template")
        if isinstance(event_template, dict):
            event_template = json.dumps(event_template)

        return HookConfiguration(
            service_key=service_key,
            event_template_file_path=self.get("ans.event_template_file_path"),
            event_template=event_template,
        )

    def get_correlation_id(self, default: str = "") -> str:
        return str(self.get("ans.correlation_id", default))

    def get_request_timeout(self) -> Optional[float]:
        """Request timeout in seconds, None when not configured.

        Raises:
            ConfigurationError: If the configured value is not a number.
        """
        timeout = self.get("ans.request_timeout")
        if timeout is None:
            return None
        try:
            return float(timeout)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"invalid request timeout '{timeout}'") from e

    def to_dict(self) -> Dict[str, Any]:
        """Get full configuration as dictionary.

        Returns:
            Configuration dictionary.
        """
        return self.config.copy()
