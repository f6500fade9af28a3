"""Synchronous HTTP helper for the Cronitor API with request logging."""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Optional

import httpx

from .config import HTTP_LOGGER, USER_AGENT
from .exceptions import DecodeError, TransportError, UpstreamError

ClientFactory = Callable[[], httpx.Client]


# ---------------------------------------------------------------------------
# Client factories
# ---------------------------------------------------------------------------


def _build_default_client() -> httpx.Client:
    """Return a fresh httpx.Client with the library's default timeouts."""

    return httpx.Client()


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


def _record_request(
    *,
    method: str,
    url: str,
    status_code: Optional[int],
    duration_ms: int,
    error: bool,
    exc: Optional[BaseException] = None,
) -> None:
    status = status_code if status_code is not None else "-"
    msg = f"[http] {method} {url} -> {status} {duration_ms}ms"
    extra = {
        "event": "http_request",
        "http_method": method,
        "http_url": url,
        "http_status": status_code,
        "duration_ms": duration_ms,
    }
    if exc is not None:
        extra["http_error"] = f"{exc.__class__.__name__}: {exc}"
        HTTP_LOGGER.warning(f"{msg} ({exc.__class__.__name__})", extra=extra)
    elif error:
        HTTP_LOGGER.warning(msg, extra=extra)
    else:
        HTTP_LOGGER.info(msg, extra=extra)


def _decode_json_body(text: str) -> Any:
    """Decode a 200 response body; ``null`` and empty bodies become ``{}``."""

    if not text or not text.strip():
        return {}
    try:
        decoded = json.loads(text)
    except ValueError as exc:
        raise DecodeError(f"Failed to decode JSON response: {exc}") from exc
    return {} if decoded is None else decoded


def get_json(
    url: str,
    *,
    api_key: str,
    user_agent: str = USER_AGENT,
    client_factory: Optional[ClientFactory] = None,
) -> Any:
    """Perform one authenticated GET and return the decoded JSON body.

    Basic auth uses the API key as username with an empty password. Transport
    failures raise :class:`TransportError`, non-200 responses raise
    :class:`UpstreamError` and unparseable bodies raise :class:`DecodeError`.
    Nothing is retried.
    """

    method = "GET"
    start = time.time()
    client_factory = client_factory or _build_default_client
    headers = {"Accept": "application/json", "User-Agent": user_agent}

    client = client_factory()
    try:
        response = client.get(url, auth=(api_key, ""), headers=headers)
    except httpx.HTTPError as exc:
        _record_request(
            method=method,
            url=url,
            status_code=None,
            duration_ms=int((time.time() - start) * 1000),
            error=True,
            exc=exc,
        )
        raise TransportError(f"Cronitor request failed: {exc}") from exc
    finally:
        client.close()

    _record_request(
        method=method,
        url=url,
        status_code=response.status_code,
        duration_ms=int((time.time() - start) * 1000),
        error=response.status_code != 200,
    )

    if response.status_code != 200:
        raise UpstreamError(response.status_code, response.text)

    return _decode_json_body(response.text)


__all__ = ["ClientFactory", "get_json"]
