"""Shared fixtures for docsniff tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docsniff.config import LinterConfig

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture
def config() -> LinterConfig:
    """Return the default configuration (minimum language version 8.0)."""
    return LinterConfig()


@pytest.fixture
def legacy_config() -> LinterConfig:
    """Return a configuration targeting a version without scalar type declarations."""
    return LinterConfig(minimum_language_version="5.6")


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing ``text`` to ``tmp_path / name``."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        return path

    return _write


def build_function_source(tags: list[str], declaration: str, body: list[str] | None = None) -> str:
    """Return a file holding one documented function.

    The comment carries a fixed short description, then ``tags`` (an empty
    entry renders a blank star line), then ``declaration`` with ``body``.
    """
    lines = ["<?php", "/**", " * Does things.", " *"]
    lines.extend(f" * {tag}" if tag else " *" for tag in tags)
    lines.extend([" */", declaration, "{"])
    lines.extend(f"    {statement}" for statement in body or [])
    lines.append("}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def php_function() -> Callable[..., str]:
    """Return :func:`build_function_source`."""
    return build_function_source


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DOCSNIFF_CONFIG", "DOCSNIFF_LOG_LEVEL", "DOCSNIFF_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
