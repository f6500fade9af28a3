"""Decorator utilities for MCP tool registration and consistent tool telemetry.

``mcp_tool`` wraps an async tool function so every call emits:
- tool_call.start (tool name, call id, argument keys)
- tool_call.ok (duration, result type) or tool_call.error (duration, structured error)

Console lines stay short; the structured payload is attached as a compact JSON
string under ``tool_json``. Exceptions are always re-raised after logging.
"""

from __future__ import annotations

import functools
import inspect
import json
import logging
import time
import uuid
from typing import Any, Callable, Mapping, Optional

from mcp.types import ToolAnnotations

from cronitor_mcp.config import DETAILED_LEVEL, TOOLS_LOGGER
from cronitor_mcp.mcp_server.context import mcp
from cronitor_mcp.mcp_server.errors import _structured_tool_error
from cronitor_mcp.mcp_server.registry import _REGISTERED_MCP_TOOLS


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


def _extract_context(args: Mapping[str, Any]) -> dict[str, Any]:
    keys = sorted(k for k, v in args.items() if v is not None)
    return {"arg_keys": keys[:32], "arg_count": len(keys)}


def _log_tool_event(payload: Mapping[str, Any], *, level: Optional[int] = None) -> None:
    """Emit a single readable console line + attach full payload as JSON string."""

    safe = {k: _jsonable(v) for k, v in payload.items()}

    event = safe.get("event", "tool")
    status = safe.get("status", "")
    tool = safe.get("tool_name", "")
    call_id = safe.get("call_id", "")
    dur = safe.get("duration_ms")
    dur_s = f" {int(dur)}ms" if isinstance(dur, (int, float)) else ""

    msg = f"[tool] {tool} {status}{dur_s} ({event})"
    tool_json = json.dumps(safe, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    extra = {"event": "tool_json", "tool_json": tool_json, "tool_name": tool, "call_id": call_id}

    TOOLS_LOGGER.log(level if level is not None else DETAILED_LEVEL, msg, extra=extra)


def _bind_call_args(sig: inspect.Signature, args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
    try:
        bound = sig.bind_partial(*args, **kwargs)
    except TypeError:
        return dict(kwargs)
    bound.apply_defaults()
    return dict(bound.arguments)


def tool_telemetry(name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Wrap an async function with start/ok/error tool-call logging."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            call_id = str(uuid.uuid4())
            ctx = _extract_context(_bind_call_args(signature, args, kwargs))
            start = time.perf_counter()

            _log_tool_event(
                {
                    "event": "tool_call.start",
                    "status": "start",
                    "tool_name": name,
                    "call_id": call_id,
                    "arg_keys": ctx["arg_keys"],
                    "arg_count": ctx["arg_count"],
                }
            )

            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                duration_ms = int((time.perf_counter() - start) * 1000)
                _log_tool_event(
                    {
                        "event": "tool_call.error",
                        "status": "error",
                        "tool_name": name,
                        "call_id": call_id,
                        "duration_ms": duration_ms,
                        "error": _structured_tool_error(exc, context=name),
                    },
                    level=logging.ERROR,
                )
                raise

            duration_ms = int((time.perf_counter() - start) * 1000)
            _log_tool_event(
                {
                    "event": "tool_call.ok",
                    "status": "ok",
                    "tool_name": name,
                    "call_id": call_id,
                    "duration_ms": duration_ms,
                    "result_type": type(result).__name__,
                }
            )
            return result

        async_wrapper.__mcp_tool_name__ = name  # type: ignore[attr-defined]
        return async_wrapper

    return decorator


def mcp_tool(
    name: Optional[str] = None,
    description: Optional[str] = None,
    *,
    title: Optional[str] = None,
    read_only: bool = True,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Register an async function as an MCP tool with telemetry and annotations.

    The wrapped function is returned so callers (and tests) can invoke it
    directly; FastMCP derives the input schema from the original signature.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        tool_name = name or func.__name__
        wrapped = tool_telemetry(tool_name)(func)
        annotations = ToolAnnotations(title=title, readOnlyHint=read_only)
        mcp.tool(
            name=tool_name,
            description=description or inspect.getdoc(func),
            annotations=annotations,
        )(wrapped)
        _REGISTERED_MCP_TOOLS.append((tool_name, wrapped))
        return wrapped

    return decorator


__all__ = ["mcp_tool", "tool_telemetry"]
