import logging

import pytest

from cronitor_mcp import config


def test_load_settings_reads_key_and_default_base() -> None:
    settings = config.load_settings({"CRONITOR_API_KEY": "  secret  "})

    assert settings.api_key == "secret"
    assert settings.api_key_present is True
    assert settings.api_base == "https://cronitor.io"
    assert settings.issues_url == "https://cronitor.io/api/issues"
    assert settings.user_agent == "Cronitor-MCP/1.0"


@pytest.mark.parametrize("environ", [{}, {"CRONITOR_API_KEY": ""}, {"CRONITOR_API_KEY": "   "}])
def test_load_settings_without_key(environ) -> None:
    settings = config.load_settings(environ)

    assert settings.api_key is None
    assert settings.api_key_present is False


def test_load_settings_custom_base_strips_trailing_slash_in_url() -> None:
    settings = config.load_settings({"CRONITOR_API_BASE": "http://localhost:9000/"})

    assert settings.issues_url == "http://localhost:9000/api/issues"


def test_load_settings_defaults_to_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("CRONITOR_API_KEY", "env-key")

    assert config.load_settings().api_key == "env-key"


def test_settings_are_immutable() -> None:
    settings = config.Settings(api_key="a")

    with pytest.raises(AttributeError):
        settings.api_key = "b"  # type: ignore[misc]


@pytest.mark.parametrize(
    "name, expected",
    [
        (None, logging.INFO),
        ("", logging.INFO),
        ("debug", logging.DEBUG),
        ("WARNING", logging.WARNING),
        ("detailed", config.DETAILED_LEVEL),
        ("5", 5),
        ("not-a-level", logging.INFO),
    ],
)
def test_resolve_log_level(name, expected) -> None:
    assert config._resolve_log_level(name) == expected


def test_env_flag_parsing() -> None:
    assert config._env_flag("MCP_DEBUG", environ={"MCP_DEBUG": "true"}) is True
    assert config._env_flag("MCP_DEBUG", environ={"MCP_DEBUG": "0"}) is False
    assert config._env_flag("MCP_DEBUG", default=True, environ={}) is True


def test_detailed_level_is_registered() -> None:
    assert logging.getLevelName(config.DETAILED_LEVEL) == "DETAILED"
    assert getattr(logging, "DETAILED") == config.DETAILED_LEVEL
    assert not hasattr(logging.Logger, "detailed")
