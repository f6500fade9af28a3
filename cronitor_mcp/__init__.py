"""Cronitor Issues API exposed as an MCP tool."""

from __future__ import annotations

from cronitor_mcp.config import SERVER_VERSION as __version__

__all__ = ["__version__"]
