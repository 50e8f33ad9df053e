"""Tests for docsniff.config."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docsniff.config import (
    LinterConfig,
    config_from_mapping,
    load_config,
    load_config_with_selection,
    parse_version,
    resolve_config_path,
)
from docsniff.errors import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.parametrize(
    ("value", "expected"),
    [("8.0", (8, 0)), ("7", (7, 0)), ("7.4.3", (7, 4)), ("70400", (7, 4))],
)
def test_parse_version(value: str, expected: tuple[int, int]) -> None:
    assert parse_version(value) == expected


def test_parse_version_rejects_garbage() -> None:
    with pytest.raises(ConfigurationError):
        parse_version("eight")


def test_scalar_hints_follow_the_minimum_version() -> None:
    assert LinterConfig().scalar_hints
    assert LinterConfig(minimum_language_version="7.0").scalar_hints
    assert not LinterConfig(minimum_language_version="5.6").scalar_hints


def test_config_from_mapping_normalizes_values() -> None:
    config = config_from_mapping(
        {
            "minimum-language-version": "7.4",
            "extensions": [".PHP", "phtml"],
            "exclude": "vendor/*",
            "max_fix_passes": 10,
            "severity_overrides": {"FunctionComment.MissingReturn": "Warning"},
        }
    )

    assert config.minimum_language_version == "7.4"
    assert config.extensions == ("php", "phtml")
    assert config.exclude == ("vendor/*",)
    assert config.max_fix_passes == 10
    assert config.severity_overrides == {"FunctionComment.MissingReturn": "warning"}


@pytest.mark.parametrize(
    "data",
    [
        {"unknown_key": True},
        {"max_fix_passes": 0},
        {"max_fix_passes": True},
        {"minimum_language_version": "latest"},
        {"severity_overrides": {"DocComment.Empty": "loud"}},
        {"severity_overrides": ["DocComment.Empty"]},
        {"extensions": 3},
    ],
)
def test_config_from_mapping_rejects_invalid_values(data: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError):
        config_from_mapping(data)


def test_config_hash_is_stable_and_value_sensitive() -> None:
    assert LinterConfig().config_hash == LinterConfig().config_hash
    assert LinterConfig().config_hash != LinterConfig(max_fix_passes=3).config_hash


def test_load_config_reads_pyproject_tool_table(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(
        '[project]\nname = "demo"\n\n[tool.docsniff]\nminimum_language_version = "5.6"\n',
        encoding="utf-8",
    )

    assert load_config(pyproject).minimum_language_version == "5.6"


def test_load_config_reports_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "docsniff.toml"
    path.write_text("max_fix_passes = [", encoding="utf-8")

    with pytest.raises(ConfigurationError) as excinfo:
        load_config(path)

    assert "Invalid TOML" in excinfo.value.message


def test_resolve_config_path_walks_upwards(tmp_path: Path) -> None:
    nested = tmp_path / "src" / "module"
    nested.mkdir(parents=True)
    (tmp_path / "docsniff.toml").write_text("max_fix_passes = 5\n", encoding="utf-8")

    selection = resolve_config_path(nested)

    assert selection.source == "default"
    assert selection.path == (tmp_path / "docsniff.toml").resolve()


def test_pyproject_without_tool_table_is_skipped(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")

    selection = resolve_config_path(tmp_path)

    assert selection.path != tmp_path.resolve() / "pyproject.toml"


def test_selection_precedence(tmp_path: Path) -> None:
    """Command line beats environment, environment beats discovery."""
    cli_config = tmp_path / "cli.toml"
    cli_config.write_text("max_fix_passes = 2\n", encoding="utf-8")
    env_config = tmp_path / "env.toml"
    env_config.write_text("max_fix_passes = 3\n", encoding="utf-8")
    env = {"DOCSNIFF_CONFIG": str(env_config)}

    config, selection = load_config_with_selection(cli_config, env=env, start=tmp_path)
    assert (config.max_fix_passes, selection.source) == (2, "cli")

    config, selection = load_config_with_selection(None, env=env, start=tmp_path)
    assert (config.max_fix_passes, selection.source) == (3, "env:DOCSNIFF_CONFIG")


def test_missing_selected_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_config_with_selection(tmp_path / "absent.toml", env={})

    assert "not found" in excinfo.value.message
