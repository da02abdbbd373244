"""YAML-backed settings."""

import pytest

from rentwise_backend.config import Settings, get_settings, settings
from rentwise_backend.main import app


def test_suite_settings_come_from_yaml():
    assert settings.app_env == "test"
    assert settings.database_url == "sqlite+aiosqlite:///:memory:"
    assert settings.max_login_attempts == 3


def test_from_yaml(tmp_path):
    config = tmp_path / "staging.yaml"
    config.write_text(
        "app_env: staging\n"
        'database_url: "mysql+asyncmy://rw:secret@db:3306/rentwise"\n'
        "api_prefix: /v2\n"
        "api_title: RentWise Staging\n"
    )

    loaded = Settings.from_yaml(str(config))

    assert loaded.app_env == "staging"
    assert loaded.database_url == "mysql+asyncmy://rw:secret@db:3306/rentwise"
    assert loaded.api_prefix == "/v2"
    assert loaded.api_title == "RentWise Staging"


def test_config_variable_is_required(monkeypatch):
    monkeypatch.delenv("CONFIG", raising=False)
    with pytest.raises(ValueError):
        get_settings()


def test_missing_config_file(monkeypatch, tmp_path):
    monkeypatch.setenv("CONFIG", str(tmp_path / "absent.yaml"))
    with pytest.raises(FileNotFoundError):
        get_settings()


def test_app_uses_api_settings():
    assert app.title == settings.api_title
    assert app.version == settings.api_version
    paths = {route.path for route in app.routes}
    assert f"{settings.api_prefix}/health" in paths
    assert f"{settings.api_prefix}/tenants" in paths
