from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from remote_config.config.models import AppConfig, ConfigLoadRequest

logger = logging.getLogger(__name__)

# Environment variable suffix (after the prefix) -> (section, field).
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "CLIENT__SERVICE": ("client", "service"),
    "CLIENT__LABEL": ("client", "label"),
    "CLIENT__APPLICATION": ("client", "application"),
    "CLIENT__TIMEOUT_SECONDS": ("client", "timeout_seconds"),
    "LOGGING__LEVEL": ("logging", "level"),
}


def _read_settings_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Top-level YAML must be a mapping, got: {type(data).__name__}")
    # A section written as a bare key ("client:") means "all defaults".
    return {section: values for section, values in data.items() if values is not None}


def _override_value(field: str, raw: str) -> Optional[str]:
    # An empty timeout disables it.
    if field == "timeout_seconds" and not raw.strip():
        return None
    return raw


def _collect_env_overrides(env_prefix: str) -> dict[str, dict[str, Any]]:
    overrides: dict[str, dict[str, Any]] = {}
    for name, raw in os.environ.items():
        if not name.startswith(env_prefix):
            continue
        target = _ENV_OVERRIDES.get(name[len(env_prefix) :].upper())
        if target is None:
            supported = ", ".join(f"{env_prefix}{suffix}" for suffix in sorted(_ENV_OVERRIDES))
            raise KeyError(f"Unsupported settings override: {name}. Supported: {supported}")
        section, field = target
        overrides.setdefault(section, {})[field] = _override_value(field, raw)
    return overrides


class YamlConfigLoader:
    """
    Builds the client settings.

    Precedence, lowest first: model defaults, the YAML settings file, ``.env``, then the
    supported ``{prefix}CLIENT__*`` / ``{prefix}LOGGING__LEVEL`` environment variables.
    Values are validated by the settings models, so a bad service URL or document name
    fails here rather than at the first load.
    """

    async def load(self, request: ConfigLoadRequest = ConfigLoadRequest()) -> AppConfig:
        data: dict[str, Any] = {}
        if request.yaml_path is not None:
            data = _read_settings_file(Path(request.yaml_path))

        if request.dotenv_path is not None and Path(request.dotenv_path).exists():
            load_dotenv(dotenv_path=request.dotenv_path, override=False)

        for section, values in _collect_env_overrides(request.env_prefix).items():
            current = data.get(section) or {}
            if not isinstance(current, dict):
                raise ValueError(f"Settings section '{section}' must be a mapping, got: {type(current).__name__}")
            data[section] = {**current, **values}

        config = AppConfig.model_validate(data)
        logger.debug(
            "Client settings loaded. application=%s label=%s timeout_seconds=%s",
            config.client.application,
            config.client.label,
            config.client.timeout_seconds,
        )
        return config
