"""Cached, task-safe access to documents served by a remote configuration service."""

from remote_config.errors import ConfigServiceError
from remote_config.handle import ConfigHandle

__all__ = ["ConfigHandle", "ConfigServiceError"]
