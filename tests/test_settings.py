"""Tests for YAML + environment settings loading."""

import pytest

from configwatch.common.exceptions import ConfigError
from configwatch.common.settings import Settings, load_settings


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    """Run from an empty directory so no ./config.yaml or .env is picked up"""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults(in_tmp):
    settings = Settings()

    assert settings.client_side_id == ""
    assert settings.config_key == "ai-config--ai-new-model-chatbot"
    assert settings.context_key == "user-key"
    assert settings.refresh_interval_s == 5.0
    assert settings.fetch_timeout_s == 10.0
    assert settings.port == 8080
    assert settings.admin_port == 8082


def test_environment(in_tmp, monkeypatch):
    monkeypatch.setenv("CONFIGWATCH_CLIENT_SIDE_ID", "env-id")
    monkeypatch.setenv("CONFIGWATCH_PORT", "9090")

    settings = load_settings()

    assert settings.client_side_id == "env-id"
    assert settings.port == 9090


def test_yaml_sections(in_tmp):
    path = in_tmp / "configwatch.yaml"
    path.write_text(
        "provider:\n"
        "  client_side_id: yaml-id\n"
        "  config_key: my-config\n"
        "  log_level_flag: log-level\n"
        "refresh:\n"
        "  interval_s: 2.5\n"
        "server:\n"
        "  port: 8181\n"
    )

    settings = load_settings(path)

    assert settings.client_side_id == "yaml-id"
    assert settings.config_key == "my-config"
    assert settings.log_level_flag == "log-level"
    assert settings.refresh_interval_s == 2.5
    assert settings.port == 8181


def test_yaml_overrides_environment(in_tmp, monkeypatch):
    monkeypatch.setenv("CONFIGWATCH_CLIENT_SIDE_ID", "env-id")
    monkeypatch.setenv("CONFIGWATCH_CONTEXT_KEY", "env-user")
    path = in_tmp / "config.yaml"
    path.write_text("provider:\n  client_side_id: yaml-id\n")

    settings = load_settings()

    assert settings.client_side_id == "yaml-id"
    assert settings.context_key == "env-user"


def test_missing_file_falls_back_to_defaults(in_tmp):
    settings = load_settings(in_tmp / "absent.yaml")
    assert settings.port == 8080


def test_invalid_yaml(in_tmp):
    path = in_tmp / "bad.yaml"
    path.write_text("provider: [unclosed\n")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_non_mapping_section(in_tmp):
    path = in_tmp / "bad.yaml"
    path.write_text("refresh: 5\n")

    with pytest.raises(ConfigError, match="refresh"):
        load_settings(path)


@pytest.mark.parametrize(
    "body",
    [
        "refresh:\n  interval_s: 0\n",
        "refresh:\n  fetch_timeout_s: -1\n",
        "server:\n  port: 70000\n",
    ],
)
def test_validation_errors(in_tmp, body):
    path = in_tmp / "bad.yaml"
    path.write_text(body)

    with pytest.raises(ConfigError):
        load_settings(path)
