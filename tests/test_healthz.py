from __future__ import annotations

from starlette.applications import Starlette
from starlette.testclient import TestClient

from cronitor_mcp.config import SERVER_VERSION, Settings
from cronitor_mcp.http_routes import healthz


def _build_client(settings: Settings) -> TestClient:
    app = Starlette()
    healthz.register_healthz_route(app, settings)
    return TestClient(app)


def test_healthz_reports_ok_with_api_key() -> None:
    client = _build_client(Settings(api_key="s3cr3t"))

    response = client.get("/healthz")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["cronitor_api_key_present"] is True
    assert payload["server"]["version"] == SERVER_VERSION
    assert payload["uptime_seconds"] >= 0
    assert "s3cr3t" not in response.text


def test_healthz_reports_degraded_without_api_key() -> None:
    client = _build_client(Settings(api_key=None))

    payload = client.get("/healthz").json()

    assert payload["status"] == "degraded"
    assert payload["cronitor_api_key_present"] is False
    assert payload["cronitor_api_base"] == "https://cronitor.io"
