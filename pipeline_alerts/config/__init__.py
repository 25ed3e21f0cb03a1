"""Configuration management module."""

from pipeline_alerts.config.config_manager import ConfigManager, HookConfiguration

__all__ = ["ConfigManager", "HookConfiguration"]
