"""Configuration and logging helpers for the Cronitor MCP server."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Mapping, Optional

# Custom log levels
# ------------------------------------------------------------------------------
#
# DETAILED: verbose operational logging that is more detailed than INFO but less
# noisy than full DEBUG (per-call tool telemetry lands here).

DETAILED_LEVEL = 15


def _install_custom_log_levels() -> None:
    if not hasattr(logging, "DETAILED"):
        logging.addLevelName(DETAILED_LEVEL, "DETAILED")
        setattr(logging, "DETAILED", DETAILED_LEVEL)


def _env_flag(name: str, default: bool = False, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when an environment variable is set to a truthy value."""

    env = os.environ if environ is None else environ
    val = env.get(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "on"}


def _resolve_log_level(level_name: str | None) -> int:
    if not level_name:
        return logging.INFO

    name = str(level_name).strip().upper()
    if not name:
        return logging.INFO

    # Numeric levels are allowed.
    if name.lstrip("-").isdigit() and name.count("-") <= 1:
        return int(name)

    if name == "DETAILED":
        return DETAILED_LEVEL

    level = getattr(logging, name, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


_install_custom_log_levels()

# Configuration and globals
# ------------------------------------------------------------------------------

SERVER_NAME = "Cronitor MCP Server"
SERVER_VERSION = "1.0.0"
USER_AGENT = "Cronitor-MCP/1.0"

API_KEY_ENV_VAR = "CRONITOR_API_KEY"
DEFAULT_API_BASE = "https://cronitor.io"
ISSUES_PATH = "/api/issues"

SERVER_START_TIME = time.time()

MCP_DEBUG = _env_flag("MCP_DEBUG", False)
LOG_LEVEL = "DEBUG" if MCP_DEBUG else os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_STYLE = os.environ.get("LOG_STYLE", "color").lower()

# Default to a compact, scannable format.
LOG_FORMAT = os.environ.get(
    "LOG_FORMAT",
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)


class _ColorFormatter(logging.Formatter):
    """Level-colored formatter for console logs."""

    _C = {
        "DEBUG": "\x1b[36m",  # cyan
        "DETAILED": "\x1b[36m",  # cyan
        "INFO": "\x1b[32m",  # green
        "WARNING": "\x1b[33m",  # yellow
        "ERROR": "\x1b[31m",  # red
        "CRITICAL": "\x1b[35m",  # magenta
        "RESET": "\x1b[0m",
    }

    def __init__(self, fmt: str, *, use_color: bool) -> None:
        super().__init__(fmt)
        self._use_color = bool(use_color)

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting
        levelname = record.levelname
        if self._use_color and levelname in self._C:
            record.levelname = f"{self._C[levelname]}{levelname}{self._C['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _configure_logging() -> None:
    # Avoid reconfiguring during module reloads.
    root = logging.getLogger()
    if getattr(root, "_cronitor_mcp_configured", False):
        return

    use_color = LOG_STYLE in {"color", "ansi", "colored"}

    # stderr only: stdout carries the stdio transport.
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(_ColorFormatter(LOG_FORMAT, use_color=use_color))

    logging.basicConfig(
        level=_resolve_log_level(LOG_LEVEL),
        handlers=[console_handler],
        force=True,
    )

    if not MCP_DEBUG:
        for noisy in (
            "uvicorn.access",
            "mcp",
            "mcp.server",
            "mcp.server.lowlevel.server",
            "httpx",
            "httpcore",
        ):
            logging.getLogger(noisy).setLevel(logging.WARNING)

    setattr(root, "_cronitor_mcp_configured", True)


_configure_logging()

BASE_LOGGER = logging.getLogger("cronitor_mcp")
HTTP_LOGGER = logging.getLogger("cronitor_mcp.http")
TOOLS_LOGGER = logging.getLogger("cronitor_mcp.tools")


@dataclass(frozen=True)
class Settings:
    """Process configuration, resolved once at startup.

    ``api_key`` may be ``None``; the adapter checks it on every call and
    raises ``ConfigurationError`` before touching the network.
    """

    api_key: Optional[str] = None
    api_base: str = DEFAULT_API_BASE
    user_agent: str = USER_AGENT

    @property
    def issues_url(self) -> str:
        return f"{self.api_base.rstrip('/')}{ISSUES_PATH}"

    @property
    def api_key_present(self) -> bool:
        return bool(self.api_key)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build a :class:`Settings` from the process environment (or ``environ``)."""

    env = os.environ if environ is None else environ

    api_key = env.get(API_KEY_ENV_VAR)
    if api_key is not None:
        api_key = api_key.strip() or None

    api_base = (env.get("CRONITOR_API_BASE") or "").strip() or DEFAULT_API_BASE

    return Settings(api_key=api_key, api_base=api_base)


__all__ = [
    "API_KEY_ENV_VAR",
    "BASE_LOGGER",
    "DEFAULT_API_BASE",
    "DETAILED_LEVEL",
    "HTTP_LOGGER",
    "ISSUES_PATH",
    "SERVER_NAME",
    "SERVER_START_TIME",
    "SERVER_VERSION",
    "Settings",
    "TOOLS_LOGGER",
    "USER_AGENT",
    "load_settings",
]
