"""Client settings models and the YAML settings loader."""

from remote_config.config.loader import YamlConfigLoader
from remote_config.config.models import AppConfig, ClientSettings, ConfigLoadRequest, LoggingSettings

__all__ = [
    "AppConfig",
    "ClientSettings",
    "ConfigLoadRequest",
    "LoggingSettings",
    "YamlConfigLoader",
]
