from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any


def _load_project_version(pyproject_path: Path | None = None) -> str:
    """Best-effort loader for the project version from pyproject.toml.

    This avoids importing the server module (and its FastMCP wiring) just to
    answer a simple CLI query like `--version`.
    """
    if pyproject_path is None:
        pyproject_path = Path(__file__).with_name("pyproject.toml")

    import tomllib

    try:
        data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        from cronitor_mcp.config import SERVER_VERSION

        return SERVER_VERSION

    project = data.get("project") or {}
    version = project.get("version")
    if isinstance(version, str) and version.strip():
        return version.strip()
    return "0.0.0"


def _environment_checks() -> dict[str, Any]:
    """Check configuration without touching the network."""
    from cronitor_mcp.config import API_KEY_ENV_VAR, load_settings

    settings = load_settings()
    checks: list[dict[str, str]] = []

    if settings.api_key_present:
        checks.append({"name": "cronitor_api_key", "level": "ok", "message": f"{API_KEY_ENV_VAR} is configured"})
    else:
        checks.append(
            {
                "name": "cronitor_api_key",
                "level": "error",
                "message": f"{API_KEY_ENV_VAR} is not set; issues calls will fail",
            }
        )

    if settings.api_base.startswith("https://"):
        checks.append({"name": "cronitor_api_base", "level": "ok", "message": settings.api_base})
    else:
        checks.append(
            {
                "name": "cronitor_api_base",
                "level": "warning",
                "message": f"{settings.api_base} is not https; the API key is sent with Basic auth",
            }
        )

    levels = {c["level"] for c in checks}
    status = "error" if "error" in levels else "warning" if "warning" in levels else "ok"
    return {"status": status, "checks": checks}


def _run_doctor() -> int:
    """Run basic environment checks and print a human-readable summary."""

    result = _environment_checks()

    status = str(result.get("status", "unknown"))
    checks = result.get("checks") or []
    ok = sum(1 for c in checks if c.get("level") == "ok")
    warning = sum(1 for c in checks if c.get("level") == "warning")
    error = sum(1 for c in checks if c.get("level") == "error")

    print(f"Status: {status}")
    print(f"Checks: ok={ok}, warning={warning}, error={error}")
    for check in checks:
        name = check.get("name", "?")
        level = check.get("level", "?")
        message = check.get("message", "")
        print(f"- [{level}] {name}: {message}")

    return 0 if status != "error" else 1


def _run_serve(transport: str) -> int:
    # Lazy import: registers the `issues` tool on the shared FastMCP instance.
    import main as server_main

    server_main.server.mcp.run(transport=transport)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cronitor-mcp",
        description="Cronitor MCP server CLI helpers.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print the Cronitor MCP server version and exit.",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser(
        "doctor",
        help="Check configuration (API key, API base) and print a summary.",
    )
    serve = subparsers.add_parser("serve", help="Run the MCP server.")
    serve.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="MCP transport to serve (default: stdio).",
    )

    if argv is None:
        argv = sys.argv[1:]

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # When used as a library function in tests, return the exit code
        # instead of raising.
        return int(getattr(exc, "code", 1) or 0)

    if args.version and not args.command:
        print(_load_project_version())
        return 0

    if args.command == "doctor":
        return _run_doctor()

    if args.command == "serve":
        return _run_serve(args.transport)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
