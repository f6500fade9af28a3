"""Utilities for producing consistent tool-failure payloads.

The payload is what the tool decorator logs when a call fails; the exception
itself still propagates to the MCP layer unchanged.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict

import jsonschema

from cronitor_mcp.exceptions import (
    ConfigurationError,
    DecodeError,
    ToolInputValidationError,
    TransportError,
    UpstreamError,
)


def _summarize_exception(exc: BaseException) -> str:
    """Create a short human-readable message."""
    if isinstance(exc, jsonschema.ValidationError):
        path = list(exc.path)
        base_message = exc.message or exc.__class__.__name__
        if path:
            path_display = " -> ".join(str(p) for p in path)
            return f"{base_message} (at {path_display})"
        return base_message

    return str(exc) or exc.__class__.__name__


def _classify_category(exc: BaseException, message: str) -> str:
    """Best-effort category for client UX and retry decisions."""
    if isinstance(exc, ConfigurationError):
        return "configuration"

    if isinstance(exc, (jsonschema.ValidationError, ToolInputValidationError, ValueError, TypeError)):
        return "validation"

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return "timeout"

    if isinstance(exc, TransportError):
        lowered = (message or "").lower()
        if "timeout" in lowered or "timed out" in lowered:
            return "timeout"
        return "transport"

    if isinstance(exc, UpstreamError):
        return "upstream"

    if isinstance(exc, DecodeError):
        return "decode"

    return "unknown"


def _is_retryable(exc: BaseException, category: str) -> bool:
    if category in {"timeout", "transport"}:
        return True
    if isinstance(exc, UpstreamError):
        return exc.status_code == 429 or exc.status_code >= 500
    return False


def _hint(exc: BaseException, category: str) -> str:
    if category == "configuration":
        return "Set CRONITOR_API_KEY for the server process and restart it."
    if category == "validation":
        return "Check the tool arguments against the input schema and retry with corrected values."
    if isinstance(exc, UpstreamError):
        if exc.status_code in {401, 403}:
            return "Cronitor rejected the API key; verify CRONITOR_API_KEY."
        if exc.status_code == 429:
            return "Cronitor rate limit reached; retry later."
        if exc.status_code >= 500:
            return "Cronitor is failing upstream; retry later."
        return "Cronitor rejected the request; review the filters."
    if category in {"timeout", "transport"}:
        return "Could not reach Cronitor; retry shortly."
    if category == "decode":
        return "Cronitor returned a non-JSON body; review server logs."
    return "Review server logs."


def _structured_tool_error(exc: BaseException, *, context: str) -> Dict[str, Any]:
    """Build a serializable payload describing a failed tool call."""
    message = _summarize_exception(exc)
    category = _classify_category(exc, message)

    payload: Dict[str, Any] = {
        "error": exc.__class__.__name__,
        "message": message,
        "context": context,
        "category": category,
        "retryable": _is_retryable(exc, category),
        "hint": _hint(exc, category),
    }

    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        payload["status_code"] = status_code

    field = getattr(exc, "field", None)
    if field:
        payload["field"] = field

    return payload


__all__ = ["_structured_tool_error"]
