"""Cronitor Issues API adapter.

Turns an :class:`IssueFilter` into a query string against the fixed
``/api/issues`` endpoint and returns the decoded response untouched.

Filtering semantics live on Cronitor's side: comma-separated values for one
parameter are OR'd, distinct parameters are AND'd. The adapter only passes
them through.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Sequence, Union
from urllib.parse import urlencode

import jsonschema
from jsonschema.exceptions import ValidationError, best_match

from .config import BASE_LOGGER, Settings
from .exceptions import ConfigurationError, ToolInputValidationError
from .http_clients import ClientFactory, get_json

ISSUE_STATES = ("unresolved", "investigating", "identified", "monitoring", "resolved", "update")
ISSUE_SEVERITIES = (
    "missing_data",
    "operational",
    "maintenance",
    "degraded_performance",
    "minor_outage",
    "outage",
)
MONITOR_TYPES = ("check", "heartbeat", "job", "site")
ORDER_BY_VALUES = ("started", "-started", "relevance", "-relevance")

TIME_PATTERN = r"^\d+[hdwmy]$"
MAX_PAGE_SIZE = 1000


def _comma_list_pattern(values: Sequence[str]) -> str:
    alt = "|".join(values)
    return rf"^({alt})(,({alt}))*$"


STATE_PATTERN = _comma_list_pattern(ISSUE_STATES)
SEVERITY_PATTERN = _comma_list_pattern(ISSUE_SEVERITIES)
TYPE_PATTERN = _comma_list_pattern(MONITOR_TYPES)

MultiValue = Union[str, Sequence[str]]

_BOOLEAN_FLAGS = (
    "withStatusPageDetails",
    "withMonitorDetails",
    "withAlertDetails",
    "withComponentDetails",
)

_KEY = {"type": "string", "minLength": 1}

ISSUE_QUERY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "state": {"type": "string", "pattern": STATE_PATTERN},
        "severity": {"type": "string", "pattern": SEVERITY_PATTERN},
        "statuspage": _KEY,
        "group": _KEY,
        "job": _KEY,
        "component": _KEY,
        "check": _KEY,
        "heartbeat": _KEY,
        "site": _KEY,
        "tag": _KEY,
        "type": {"type": "string", "pattern": TYPE_PATTERN},
        "env": _KEY,
        "search": _KEY,
        "time": {"type": "string", "pattern": TIME_PATTERN},
        "orderBy": {"type": "string", "enum": list(ORDER_BY_VALUES)},
        "page": {"type": "integer", "minimum": 1},
        "pageSize": {"type": "integer", "minimum": 1, "maximum": MAX_PAGE_SIZE},
        **{flag: {"type": "string", "enum": ["true"]} for flag in _BOOLEAN_FLAGS},
    },
}


def _fullmatch_pattern(validator, pattern, instance, schema):
    # re.search lets "$" match before a trailing newline; the whole value must match.
    if validator.is_type(instance, "string") and re.fullmatch(pattern, instance) is None:
        yield ValidationError(f"{instance!r} does not match {pattern!r}")


def _is_strict_integer(checker, instance) -> bool:
    return isinstance(instance, int) and not isinstance(instance, bool)


_IssueQueryValidator = jsonschema.validators.extend(
    jsonschema.Draft7Validator,
    validators={"pattern": _fullmatch_pattern},
    type_checker=jsonschema.Draft7Validator.TYPE_CHECKER.redefine("integer", _is_strict_integer),
)

_VALIDATOR = _IssueQueryValidator(ISSUE_QUERY_SCHEMA)


@dataclass(frozen=True)
class IssueFilter:
    """Optional filters for the issues listing; every field defaults to None.

    Attribute names are snake_case; :func:`_wire_name` maps them to the
    camelCase query parameter names Cronitor expects. Multi-valued filters
    accept either a comma-separated string or a sequence of strings.
    """

    state: Optional[MultiValue] = None
    severity: Optional[MultiValue] = None
    statuspage: Optional[str] = None
    group: Optional[MultiValue] = None
    job: Optional[MultiValue] = None
    component: Optional[MultiValue] = None
    check: Optional[MultiValue] = None
    heartbeat: Optional[MultiValue] = None
    site: Optional[MultiValue] = None
    tag: Optional[MultiValue] = None
    type: Optional[MultiValue] = None
    env: Optional[str] = None
    search: Optional[str] = None
    time: Optional[str] = None
    order_by: Optional[str] = None
    page: Optional[int] = None
    page_size: Optional[int] = None
    with_status_page_details: Optional[bool] = None
    with_monitor_details: Optional[bool] = None
    with_alert_details: Optional[bool] = None
    with_component_details: Optional[bool] = None

    @classmethod
    def from_wire(cls, params: Mapping[str, Any]) -> "IssueFilter":
        """Build a filter from camelCase wire names (as the MCP tool receives them)."""

        by_wire = {_wire_name(name): name for name in _FIELD_NAMES}
        unknown = sorted(k for k in params if k not in by_wire)
        if unknown:
            raise ToolInputValidationError(
                f"Unknown issue filter parameter(s): {', '.join(unknown)}", field=unknown[0]
            )
        return cls(**{by_wire[k]: v for k, v in params.items()})

    def to_query_params(self) -> Dict[str, Any]:
        """Return wire-name -> value for every field that should be sent.

        None is dropped; booleans become ``"true"`` when True and are dropped
        when False, so False cannot be told apart from unset.
        """

        params: Dict[str, Any] = {}
        for name in _FIELD_NAMES:
            value = getattr(self, name)
            if value is None:
                continue
            wire = _wire_name(name)
            if wire in _BOOLEAN_FLAGS:
                if value is True:
                    params[wire] = "true"
                continue
            if isinstance(value, (list, tuple)):
                value = ",".join(str(v) for v in value)
            params[wire] = value
        return params

    def validate(self) -> None:
        """Check the filter against :data:`ISSUE_QUERY_SCHEMA`."""

        for name in _BOOLEAN_FLAGS:
            value = getattr(self, _attr_name(name))
            if value is not None and not isinstance(value, bool):
                raise ToolInputValidationError(f"{value!r} is not a boolean", field=name)

        error = best_match(_VALIDATOR.iter_errors(self.to_query_params()))
        if error is not None:
            field = str(error.path[0]) if error.path else None
            raise ToolInputValidationError(error.message, field=field)


_WIRE_OVERRIDES = {
    "order_by": "orderBy",
    "page_size": "pageSize",
    "with_status_page_details": "withStatusPageDetails",
    "with_monitor_details": "withMonitorDetails",
    "with_alert_details": "withAlertDetails",
    "with_component_details": "withComponentDetails",
}
_ATTR_OVERRIDES = {wire: attr for attr, wire in _WIRE_OVERRIDES.items()}
_FIELD_NAMES = tuple(f.name for f in fields(IssueFilter))


def _wire_name(attr: str) -> str:
    return _WIRE_OVERRIDES.get(attr, attr)


def _attr_name(wire: str) -> str:
    return _ATTR_OVERRIDES.get(wire, wire)


def build_query_params(request: IssueFilter) -> Dict[str, Any]:
    return request.to_query_params()


def build_issues_url(request: IssueFilter, base_url: str) -> str:
    """Append the encoded filters to ``base_url``; no filters means no ``?``."""

    params = build_query_params(request)
    if not params:
        return base_url
    return f"{base_url}?{urlencode(params)}"


class IssuesAdapter:
    """Lists Cronitor issues using the credentials in a :class:`Settings`."""

    def __init__(self, settings: Settings, *, client_factory: Optional[ClientFactory] = None) -> None:
        self.settings = settings
        self._client_factory = client_factory

    def list_issues(self, request: Optional[IssueFilter] = None) -> Any:
        request = request or IssueFilter()
        request.validate()
        url = build_issues_url(request, self.settings.issues_url)
        BASE_LOGGER.debug("Listing Cronitor issues", extra={"issues_url": url})
        return self.fetch(url)

    def fetch(self, url: str) -> Any:
        api_key = self.settings.api_key
        if not api_key:
            raise ConfigurationError("CRONITOR_API_KEY environment variable is not set")

        return get_json(
            url,
            api_key=api_key,
            user_agent=self.settings.user_agent,
            client_factory=self._client_factory,
        )


__all__ = [
    "ISSUE_QUERY_SCHEMA",
    "ISSUE_SEVERITIES",
    "ISSUE_STATES",
    "IssueFilter",
    "IssuesAdapter",
    "MAX_PAGE_SIZE",
    "MONITOR_TYPES",
    "ORDER_BY_VALUES",
    "SEVERITY_PATTERN",
    "STATE_PATTERN",
    "TIME_PATTERN",
    "TYPE_PATTERN",
    "build_issues_url",
    "build_query_params",
]
