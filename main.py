"""Cronitor MCP server exposing the Cronitor Issues API as the `issues` tool.

Run over stdio with ``python main.py`` (or ``cronitor-mcp serve``), or host the
ASGI app with ``uvicorn main:app``. The app serves streamable HTTP at ``/mcp``
by default; set ``MCP_TRANSPORT=sse`` to serve ``/sse`` + ``/messages``
instead. ``/healthz`` reports whether the API key is configured.
"""

import asyncio
import os
from typing import Annotated, Any, Literal, Optional

from pydantic import Field
from starlette.middleware.trustedhost import TrustedHostMiddleware

import cronitor_mcp.server as server
from cronitor_mcp.config import BASE_LOGGER, load_settings
from cronitor_mcp.exceptions import (  # noqa: F401
    ConfigurationError,
    DecodeError,
    ToolInputValidationError,
    TransportError,
    UpstreamError,
)
from cronitor_mcp.http_routes.healthz import register_healthz_route
from cronitor_mcp.issues import (
    MAX_PAGE_SIZE,
    SEVERITY_PATTERN,
    STATE_PATTERN,
    TIME_PATTERN,
    TYPE_PATTERN,
    IssueFilter,
    IssuesAdapter,
)
from cronitor_mcp.server import mcp_tool

SETTINGS = load_settings()
ADAPTER = IssuesAdapter(SETTINGS)

if not SETTINGS.api_key_present:
    BASE_LOGGER.warning("CRONITOR_API_KEY is not set; issues calls will fail until it is configured.")


ISSUES_DESCRIPTION = """\
Lists all issues from Cronitor with comprehensive filtering and pagination support.
This tool retrieves issues from your Cronitor account.
Issues represent incidents that can be tracked through their lifecycle, posted to status pages, \
and used for team communication about service disruptions or maintenance events.

FILTERING BEHAVIOR:
- Multiple values for the same parameter (comma-separated) are treated as OR operations
  Example: state="unresolved,investigating" returns issues in EITHER state
- Different parameters are combined with AND logic
  Example: state="unresolved" + severity="outage" returns unresolved issues that are also outages
- All filters are optional; omitting all filters returns all issues
"""


@mcp_tool(name="issues", title="Cronitor Issues", description=ISSUES_DESCRIPTION)
async def issues(
    state: Annotated[
        Optional[str],
        Field(
            description=(
                "Filter by issue lifecycle state. Comma-separated list for multiple values (OR logic). "
                "Valid states: unresolved, investigating, identified, monitoring, resolved, update. "
                'Examples: "unresolved", "unresolved,investigating", "resolved"'
            ),
            pattern=STATE_PATTERN,
        ),
    ] = None,
    severity: Annotated[
        Optional[str],
        Field(
            description=(
                "Filter by issue severity/impact level. Comma-separated list for multiple values (OR logic). "
                "Valid severities (lowest to highest impact): missing_data, operational, maintenance, "
                "degraded_performance, minor_outage, outage. "
                'Examples: "outage", "outage,minor_outage"'
            ),
            pattern=SEVERITY_PATTERN,
        ),
    ] = None,
    statuspage: Annotated[
        Optional[str],
        Field(
            description="Filter by status page key. Only returns issues associated with that status page.",
            min_length=1,
        ),
    ] = None,
    group: Annotated[
        Optional[str],
        Field(
            description="Filter by monitor group key(s). Comma-separated list for multiple groups (OR logic).",
            min_length=1,
        ),
    ] = None,
    job: Annotated[
        Optional[str],
        Field(
            description="Filter by job monitor key(s). Comma-separated list for multiple jobs (OR logic).",
            min_length=1,
        ),
    ] = None,
    component: Annotated[
        Optional[str],
        Field(
            description="Filter by status page component key(s). Comma-separated list (OR logic).",
            min_length=1,
        ),
    ] = None,
    check: Annotated[
        Optional[str],
        Field(
            description="Filter by check monitor key(s). Comma-separated list for multiple checks (OR logic).",
            min_length=1,
        ),
    ] = None,
    heartbeat: Annotated[
        Optional[str],
        Field(
            description="Filter by heartbeat monitor key(s). Comma-separated list (OR logic).",
            min_length=1,
        ),
    ] = None,
    site: Annotated[
        Optional[str],
        Field(
            description="Filter by site monitor key(s). Comma-separated list for multiple sites (OR logic).",
            min_length=1,
        ),
    ] = None,
    tag: Annotated[
        Optional[str],
        Field(
            description="Filter by monitor tag(s). Comma-separated list for multiple tags (OR logic).",
            min_length=1,
        ),
    ] = None,
    type: Annotated[
        Optional[str],
        Field(
            description='Filter by monitor type(s): check, heartbeat, job, site. Example: "job,heartbeat"',
            pattern=TYPE_PATTERN,
        ),
    ] = None,
    env: Annotated[
        Optional[str],
        Field(
            description='Filter by environment key. Example: "production", "staging"',
            min_length=1,
        ),
    ] = None,
    search: Annotated[
        Optional[str],
        Field(
            description=(
                "Free-text search across issue names, descriptions, monitor names and monitor keys. "
                "Case-insensitive partial matching."
            ),
            min_length=1,
        ),
    ] = None,
    time: Annotated[
        Optional[str],
        Field(
            description=(
                "Only return issues that started within this window: a number followed by "
                'h, d, w, m or y. Examples: "24h", "7d", "30d", "2w", "1y"'
            ),
            pattern=TIME_PATTERN,
        ),
    ] = None,
    orderBy: Annotated[  # noqa: N803
        Optional[Literal["started", "-started", "relevance", "-relevance"]],
        Field(
            description=(
                'Sort order. "started" = oldest first, "-started" = newest first (Cronitor default), '
                '"relevance" / "-relevance" order by search relevance.'
            ),
        ),
    ] = None,
    page: Annotated[
        Optional[int],
        Field(description="Page number for pagination (1-based). Cronitor default: 1", ge=1),
    ] = None,
    pageSize: Annotated[  # noqa: N803
        Optional[int],
        Field(
            description=f"Number of issues per page, at most {MAX_PAGE_SIZE}. Cronitor default: 50",
            ge=1,
            le=MAX_PAGE_SIZE,
        ),
    ] = None,
    withStatusPageDetails: Annotated[  # noqa: N803
        Optional[bool],
        Field(description="When true, include detailed status page information for each issue."),
    ] = None,
    withMonitorDetails: Annotated[  # noqa: N803
        Optional[bool],
        Field(description="When true, include detailed monitor information for each issue."),
    ] = None,
    withAlertDetails: Annotated[  # noqa: N803
        Optional[bool],
        Field(description="When true, include the alert history for each issue."),
    ] = None,
    withComponentDetails: Annotated[  # noqa: N803
        Optional[bool],
        Field(description="When true, include detailed status page component information for each issue."),
    ] = None,
) -> Any:
    """List Cronitor issues matching the given filters.

    Returns Cronitor's decoded JSON verbatim (usually the issue list plus
    pagination metadata); a null or empty body comes back as an empty object.
    """

    request = IssueFilter.from_wire(
        {
            "state": state,
            "severity": severity,
            "statuspage": statuspage,
            "group": group,
            "job": job,
            "component": component,
            "check": check,
            "heartbeat": heartbeat,
            "site": site,
            "tag": tag,
            "type": type,
            "env": env,
            "search": search,
            "time": time,
            "orderBy": orderBy,
            "page": page,
            "pageSize": pageSize,
            "withStatusPageDetails": withStatusPageDetails,
            "withMonitorDetails": withMonitorDetails,
            "withAlertDetails": withAlertDetails,
            "withComponentDetails": withComponentDetails,
        }
    )
    return await asyncio.to_thread(ADAPTER.list_issues, request)


# ASGI app for ``uvicorn main:app``.
MCP_TRANSPORT = (os.getenv("MCP_TRANSPORT") or "streamable-http").strip().lower()


def _build_app(transport: str):
    if transport == "sse":
        return server.mcp.sse_app()
    if transport in {"streamable-http", "http"}:
        return server.mcp.streamable_http_app()
    raise ValueError(f"Unsupported MCP_TRANSPORT {transport!r}; expected 'streamable-http' or 'sse'")


def _configure_trusted_hosts(app_instance) -> None:
    allowed_hosts_env = os.getenv("ALLOWED_HOSTS")
    if allowed_hosts_env:
        allowed_hosts = [host.strip() for host in allowed_hosts_env.split(",") if host.strip()]
    else:
        allowed_hosts = ["*"]

    app_instance.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)


_APP = None


def create_app():
    """Build the ASGI app for ``MCP_TRANSPORT`` once, on first access.

    Kept out of import time so stdio serving never depends on
    ``MCP_TRANSPORT`` being valid.
    """

    global _APP
    if _APP is None:
        app_instance = _build_app(MCP_TRANSPORT)
        _configure_trusted_hosts(app_instance)
        register_healthz_route(app_instance, SETTINGS)
        _APP = app_instance
    return _APP


def __getattr__(name: str):
    if name == "app":
        return create_app()
    raise AttributeError(name)


if __name__ == "__main__":
    server.mcp.run()
