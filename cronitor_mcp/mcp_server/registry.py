from __future__ import annotations

from typing import Any, Callable, Optional

_REGISTERED_MCP_TOOLS: list[tuple[str, Callable[..., Any]]] = []


def _find_registered_tool(tool_name: str) -> Optional[tuple[str, Callable[..., Any]]]:
    for name, func in _REGISTERED_MCP_TOOLS:
        if name == tool_name:
            return name, func
    return None
