"""Custom exception classes.

Malformed citation markup never raises: parsing recovers locally and
degrades to plain text. These exceptions are reserved for configuration
and programming errors (unknown render targets, bad config files).
"""

from typing import Any


class CitekitError(Exception):
    """Base citekit exception."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a serializable error payload."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class ConfigurationError(CitekitError):
    """Invalid or unreadable configuration."""

    def __init__(self, message: str, path: str | None = None, key: str | None = None):
        details = {"path": path, "key": key}
        details = {name: value for name, value in details.items() if value}
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details=details,
        )


class RenderTargetNotFoundError(CitekitError):
    """Requested render target is not registered."""

    def __init__(self, name: str, available: list[str]):
        super().__init__(
            message=f"Render target not found: {name}",
            code="RENDER_TARGET_NOT_FOUND",
            details={"name": name, "available": available},
        )
