"""Tests for runtime settings read from the environment."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from docsniff.errors import ConfigurationError, ErrorCode
from docsniff.settings import RuntimeSettings, load_settings


def test_defaults() -> None:
    settings = load_settings()

    assert settings.log_level == "WARNING"
    assert settings.level_number == logging.WARNING
    assert not settings.log_json
    assert settings.config_path is None


def test_environment_variables_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCSNIFF_LOG_LEVEL", "debug")
    monkeypatch.setenv("DOCSNIFF_LOG_JSON", "true")
    monkeypatch.setenv("DOCSNIFF_CONFIG", "conf/docsniff.toml")

    settings = load_settings()

    assert settings.log_level == "DEBUG"
    assert settings.level_number == logging.DEBUG
    assert settings.log_json
    assert settings.config_path == Path("conf/docsniff.toml")


def test_invalid_level_raises_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCSNIFF_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigurationError) as excinfo:
        load_settings()

    assert excinfo.value.code is ErrorCode.CONFIGURATION_ERROR
    assert "validation_error" in excinfo.value.to_problem_details()


def test_settings_are_frozen() -> None:
    settings = RuntimeSettings()

    with pytest.raises(ValueError):
        settings.log_level = "INFO"  # type: ignore[misc]
