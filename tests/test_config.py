from __future__ import annotations

import pytest

from gapfinder.config import DEFAULT_DATABASE_URL, Settings, get_database_url


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "DATABASE_URL",
        "TEST_MODE",
        "LOG_LEVEL",
        "SQLALCHEMY_ECHO",
        "FSRS_REQUEST_RETENTION",
        "FSRS_MAXIMUM_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()

    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.log_level == "INFO"
    assert settings.sqlalchemy_echo is False
    assert settings.fsrs_parameters().request_retention == 0.9
    assert settings.fsrs_parameters().maximum_interval == 36500


def test_test_mode_swaps_database_name(monkeypatch):
    monkeypatch.setenv("TEST_MODE", "true")

    assert get_database_url() == "sqlite:///test_gapfinder.db"


def test_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/gapfinder")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("SQLALCHEMY_ECHO", "1")
    monkeypatch.setenv("FSRS_REQUEST_RETENTION", "0.85")
    monkeypatch.setenv("FSRS_MAXIMUM_INTERVAL", "365")

    settings = Settings.from_env()

    assert settings.database_url == "postgresql://localhost/gapfinder"
    assert settings.log_level == "DEBUG"
    assert settings.sqlalchemy_echo is True
    assert settings.fsrs_parameters().maximum_interval == 365


@pytest.mark.parametrize("name, value", [
    ("FSRS_REQUEST_RETENTION", "high"),
    ("FSRS_REQUEST_RETENTION", "1.2"),
    ("FSRS_MAXIMUM_INTERVAL", "0"),
    ("FSRS_MAXIMUM_INTERVAL", "ten"),
])
def test_malformed_values_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(RuntimeError):
        Settings.from_env()
