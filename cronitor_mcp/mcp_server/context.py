"""
FastMCP server instance used for tool registration.

The instance is created once at import time. Host binding and DNS-rebinding
protection follow the environment (FASTMCP_HOST/HOST, ALLOWED_HOSTS).
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import urlparse

from mcp.server.fastmcp import FastMCP

from cronitor_mcp.config import SERVER_NAME


def _has_port(host: str) -> bool:
    if host.endswith(":*"):
        return True
    if host.startswith("["):
        return "]:" in host
    if ":" in host:
        _, port = host.rsplit(":", 1)
        return port.isdigit()
    return False


def _normalize_host(value: str) -> str | None:
    candidate = value.strip()
    if not candidate:
        return None
    if "://" in candidate:
        parsed = urlparse(candidate)
        return parsed.netloc or None
    return candidate


def _build_transport_security_settings() -> Any:
    from mcp.server.transport_security import TransportSecuritySettings

    allowed_hosts_env = (os.getenv("ALLOWED_HOSTS") or "").strip()
    if not allowed_hosts_env or allowed_hosts_env == "*":
        return TransportSecuritySettings(enable_dns_rebinding_protection=False)

    normalized_hosts: list[str] = []
    for host in allowed_hosts_env.split(","):
        normalized = _normalize_host(host)
        if normalized:
            normalized_hosts.append(normalized)

    allowed_hosts: list[str] = []
    for host in normalized_hosts:
        allowed_hosts.append(host)
        if not _has_port(host):
            allowed_hosts.append(f"{host}:*")

    allowed_hosts = list(dict.fromkeys(allowed_hosts))

    allowed_origins: list[str] = []
    for host in allowed_hosts:
        allowed_origins.append(f"http://{host}")
        allowed_origins.append(f"https://{host}")

    return TransportSecuritySettings(
        enable_dns_rebinding_protection=True,
        allowed_hosts=allowed_hosts,
        allowed_origins=list(dict.fromkeys(allowed_origins)),
    )


def _resolve_host() -> str:
    return (os.getenv("FASTMCP_HOST") or os.getenv("HOST") or "").strip() or "127.0.0.1"


mcp = FastMCP(
    SERVER_NAME,
    host=_resolve_host(),
    transport_security=_build_transport_security_settings(),
)
