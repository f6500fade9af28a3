"""Custom exception types used across the Cronitor MCP server."""

from __future__ import annotations

from typing import Optional


class CronitorMCPError(Exception):
    pass


class ConfigurationError(CronitorMCPError):
    """Raised when a required setting (the API key) is missing.

    Always raised before any network activity.
    """

    pass


class TransportError(CronitorMCPError):
    """Raised when the request never produced an HTTP response."""

    pass


class UpstreamError(CronitorMCPError):
    """Raised when Cronitor answers with anything other than HTTP 200."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Cronitor API returned HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class DecodeError(CronitorMCPError):
    pass


class ToolInputValidationError(CronitorMCPError, ValueError):
    """Raised when filter arguments fail local schema validation.

    The message is a single line naming the offending field so callers can
    correct the argument and retry.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        if field:
            super().__init__(f"{message} (field={field})")
        else:
            super().__init__(message)
        self.field = field


__all__ = [
    "ConfigurationError",
    "CronitorMCPError",
    "DecodeError",
    "ToolInputValidationError",
    "TransportError",
    "UpstreamError",
]
