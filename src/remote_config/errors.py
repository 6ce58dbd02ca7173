from __future__ import annotations


class ConfigServiceError(RuntimeError):
    """Raised when the configuration service cannot produce a usable document."""

    def __init__(self, message: str) -> None:
        super().__init__(f"config service error: {message}")
        self.message = message
