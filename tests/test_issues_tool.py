import logging

import pytest

import main
from cronitor_mcp.config import Settings
from cronitor_mcp.issues import IssueFilter
from cronitor_mcp.server import _find_registered_tool


class _RecordingAdapter:
    def __init__(self, response):
        self.response = response
        self.requests: list[IssueFilter] = []

    def list_issues(self, request: IssueFilter):
        self.requests.append(request)
        return self.response


class _FailingAdapter:
    def __init__(self, exc: Exception):
        self.exc = exc

    def list_issues(self, request: IssueFilter):
        raise self.exc


def test_issues_tool_is_registered() -> None:
    found = _find_registered_tool("issues")

    assert found is not None
    assert found[1] is main.issues


def test_issues_tool_input_schema_exposes_constraints() -> None:
    tool = main.server.mcp._tool_manager.get_tool("issues")
    props = tool.parameters["properties"]

    assert len(props) == 21
    assert "orderBy" in props and "pageSize" in props and "withMonitorDetails" in props
    assert tool.parameters.get("required", []) == []
    assert tool.annotations.readOnlyHint is True
    assert tool.annotations.title == "Cronitor Issues"


@pytest.mark.asyncio
async def test_issues_maps_arguments_to_filter(monkeypatch, stub_response) -> None:
    adapter = _RecordingAdapter(stub_response)
    monkeypatch.setattr(main, "ADAPTER", adapter)

    result = await main.issues(
        state="unresolved,investigating",
        severity="outage",
        orderBy="-started",
        page=2,
        pageSize=50,
        withMonitorDetails=True,
        withAlertDetails=False,
    )

    assert result == stub_response
    (request,) = adapter.requests
    assert request.to_query_params() == {
        "state": "unresolved,investigating",
        "severity": "outage",
        "orderBy": "-started",
        "page": 2,
        "pageSize": 50,
        "withMonitorDetails": "true",
    }


@pytest.mark.asyncio
async def test_issues_without_arguments_sends_empty_filter(monkeypatch) -> None:
    adapter = _RecordingAdapter({})
    monkeypatch.setattr(main, "ADAPTER", adapter)

    assert await main.issues() == {}
    assert adapter.requests == [IssueFilter()]


@pytest.mark.asyncio
async def test_issues_propagates_errors_and_logs_them(monkeypatch, caplog) -> None:
    monkeypatch.setattr(main, "ADAPTER", _FailingAdapter(main.UpstreamError(500, "server error")))

    with caplog.at_level(logging.DEBUG, logger="cronitor_mcp.tools"):
        with pytest.raises(main.UpstreamError) as excinfo:
            await main.issues(state="resolved")

    assert excinfo.value.status_code == 500
    error_records = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert error_records
    assert '"category":"upstream"' in error_records[-1].tool_json


@pytest.mark.asyncio
async def test_issues_without_api_key_raises_configuration_error(monkeypatch) -> None:
    monkeypatch.setattr(main, "ADAPTER", main.IssuesAdapter(Settings(api_key=None)))

    with pytest.raises(main.ConfigurationError):
        await main.issues()


def test_healthz_route_is_mounted_on_app() -> None:
    paths = {getattr(route, "path", None) for route in main.app.routes}

    assert "/healthz" in paths


@pytest.mark.asyncio
async def test_issues_passes_non_mapping_json_through(monkeypatch) -> None:
    payload = [{"key": "abc", "state": "resolved"}]
    monkeypatch.setattr(main, "ADAPTER", _RecordingAdapter(payload))

    assert await main.issues() == payload

    # The tool's output schema must accept any JSON value Cronitor returns.
    result = await main.server.mcp.call_tool("issues", {})
    if isinstance(result, tuple):
        _, structured = result
        assert structured == {"result": payload}


@pytest.mark.asyncio
async def test_issues_builds_filter_from_wire_names(monkeypatch) -> None:
    adapter = _RecordingAdapter({})
    monkeypatch.setattr(main, "ADAPTER", adapter)
    seen: list[dict] = []
    from_wire = IssueFilter.from_wire.__func__

    def _recording_from_wire(cls, params):
        seen.append(dict(params))
        return from_wire(cls, params)

    monkeypatch.setattr(IssueFilter, "from_wire", classmethod(_recording_from_wire))

    await main.issues(orderBy="relevance", pageSize=10)

    (params,) = seen
    assert len(params) == 21
    assert params["orderBy"] == "relevance" and params["pageSize"] == 10
    assert adapter.requests == [IssueFilter(order_by="relevance", page_size=10)]


def test_asgi_app_is_built_on_first_access(monkeypatch) -> None:
    monkeypatch.setattr(main, "_APP", None)
    monkeypatch.setattr(main, "MCP_TRANSPORT", "carrier-pigeon")

    assert "app" not in vars(main)
    with pytest.raises(ValueError):
        main.create_app()
