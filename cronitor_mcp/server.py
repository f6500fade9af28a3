"""Shared server setup and decorator utilities for the Cronitor MCP.

This module is the stable public import surface.
Implementation lives under `cronitor_mcp.mcp_server.*`.
"""

from __future__ import annotations

from cronitor_mcp.mcp_server.context import mcp
from cronitor_mcp.mcp_server.decorators import mcp_tool
from cronitor_mcp.mcp_server.errors import _structured_tool_error
from cronitor_mcp.mcp_server.registry import (  # noqa: F401
    _REGISTERED_MCP_TOOLS,
    _find_registered_tool,
)

__all__ = [
    "_REGISTERED_MCP_TOOLS",
    "_find_registered_tool",
    "_structured_tool_error",
    "mcp",
    "mcp_tool",
]
