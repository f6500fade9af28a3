from __future__ import annotations

import platform
import sys
import time
from collections.abc import Callable
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse

from cronitor_mcp.config import SERVER_NAME, SERVER_START_TIME, SERVER_VERSION, Settings


def _build_health_payload(settings: Settings) -> dict[str, Any]:
    uptime_seconds = max(0, int(time.time() - SERVER_START_TIME))

    return {
        "status": "ok" if settings.api_key_present else "degraded",
        "server": {"name": SERVER_NAME, "version": SERVER_VERSION},
        "uptime_seconds": uptime_seconds,
        "cronitor_api_key_present": settings.api_key_present,
        "cronitor_api_base": settings.api_base,
        "runtime": {
            "python": sys.version.split()[0],
            "platform": platform.platform(),
        },
    }


def build_healthz_endpoint(settings: Settings) -> Callable[[Request], Any]:
    async def _endpoint(_: Request) -> JSONResponse:
        return JSONResponse(_build_health_payload(settings))

    return _endpoint


def register_healthz_route(app: Any, settings: Settings) -> None:
    """Register the /healthz route on the ASGI app."""

    app.add_route("/healthz", build_healthz_endpoint(settings), methods=["GET"])


__all__ = ["register_healthz_route"]
