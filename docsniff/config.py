"""Configuration loading for the linter."""

from __future__ import annotations

import hashlib
import json
import os
import re
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, cast

from docsniff._shared.logging import get_logger
from docsniff.errors import ConfigurationError

LOGGER = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("docsniff.toml")
PYPROJECT_PATH = Path("pyproject.toml")
DEFAULT_MINIMUM_VERSION: Final[str] = "8.0"
DEFAULT_MAX_FIX_PASSES: Final[int] = 50
SCALAR_HINT_VERSION: Final[tuple[int, int]] = (7, 0)
_ENV_CONFIG = "DOCSNIFF_CONFIG"
_VERSION_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?$")
_SEVERITY_ACTIONS = frozenset({"error", "warning", "ignore"})
_KNOWN_KEYS = frozenset(
    {
        "minimum_language_version",
        "extensions",
        "exclude",
        "max_fix_passes",
        "severity_overrides",
    }
)


@dataclass(slots=True)
class ConfigSelection:
    """Selected configuration path and its provenance."""

    path: Path | None
    source: str


@dataclass(frozen=True, slots=True)
class LinterConfig:
    """Runtime configuration resolved from ``docsniff.toml`` or ``[tool.docsniff]``."""

    minimum_language_version: str = DEFAULT_MINIMUM_VERSION
    extensions: tuple[str, ...] = ("php", "inc")
    exclude: tuple[str, ...] = ()
    max_fix_passes: int = DEFAULT_MAX_FIX_PASSES
    severity_overrides: Mapping[str, str] = field(default_factory=dict)

    @property
    def language_version(self) -> tuple[int, int]:
        """Return ``minimum_language_version`` as a ``(major, minor)`` tuple."""
        return parse_version(self.minimum_language_version)

    @property
    def scalar_hints(self) -> bool:
        """Return ``True`` when scalar parameter type declarations are available."""
        return self.language_version >= SCALAR_HINT_VERSION

    @property
    def config_hash(self) -> str:
        """Return a stable hash representing the config values."""
        payload = {
            "minimum_language_version": self.minimum_language_version,
            "extensions": list(self.extensions),
            "exclude": list(self.exclude),
            "max_fix_passes": self.max_fix_passes,
            "severity_overrides": dict(sorted(self.severity_overrides.items())),
        }
        blob = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
        return hashlib.sha256(blob).hexdigest()


def parse_version(value: str) -> tuple[int, int]:
    """Parse ``"7.4"``, ``"8"`` or a packed ``"70400"`` into ``(major, minor)``.

    Raises
    ------
    ConfigurationError
        If ``value`` is not a version number.
    """
    text = str(value).strip()
    if text.isdigit() and len(text) >= 5:
        number = int(text)
        return (number // 10000, (number // 100) % 100)
    match = _VERSION_PATTERN.match(text)
    if match is None:
        message = f"Invalid minimum_language_version: {value!r}"
        raise ConfigurationError(message)
    return (int(match.group(1)), int(match.group(2) or 0))


TomlMapping = dict[str, object]


def _load_toml(path: Path) -> TomlMapping:
    LOGGER.debug("Loading docsniff config from %s", path)
    try:
        with path.open("rb") as stream:
            return cast(TomlMapping, tomllib.load(stream))
    except tomllib.TOMLDecodeError as exc:
        message = f"Invalid TOML in {path}: {exc}"
        raise ConfigurationError(message, cause=exc, context={"path": str(path)}) from exc
    except OSError as exc:
        message = f"Cannot read config file {path}"
        raise ConfigurationError(message, cause=exc, context={"path": str(path)}) from exc


def _as_tuple(value: object, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(item) for item in value)
    message = f"{key} must be a string or a list of strings, got {value!r}"
    raise ConfigurationError(message)


def _severity_overrides(value: object) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        message = "severity_overrides must be a table of '<Sniff>.<Code>' = action"
        raise ConfigurationError(message)
    overrides: dict[str, str] = {}
    for raw_code, raw_action in value.items():
        action = str(raw_action).strip().lower()
        if action not in _SEVERITY_ACTIONS:
            message = f"Unknown severity action for {raw_code}: {raw_action!r}"
            raise ConfigurationError(message)
        overrides[str(raw_code)] = action
    return overrides


def config_from_mapping(data: Mapping[str, object]) -> LinterConfig:
    """Build a :class:`LinterConfig` from a parsed TOML table.

    Raises
    ------
    ConfigurationError
        If a key is unknown or a value has the wrong type.
    """
    unknown = sorted(str(key) for key in data if str(key).replace("-", "_") not in _KNOWN_KEYS)
    if unknown:
        message = f"Unknown docsniff config keys: {', '.join(unknown)}"
        raise ConfigurationError(message)
    normalized = {str(key).replace("-", "_"): value for key, value in data.items()}

    version = str(normalized.get("minimum_language_version", DEFAULT_MINIMUM_VERSION))
    parse_version(version)
    raw_passes = normalized.get("max_fix_passes", DEFAULT_MAX_FIX_PASSES)
    if isinstance(raw_passes, bool) or not isinstance(raw_passes, int) or raw_passes < 1:
        message = f"max_fix_passes must be a positive integer, got {raw_passes!r}"
        raise ConfigurationError(message)
    extensions = tuple(
        item.lstrip(".").lower()
        for item in _as_tuple(normalized.get("extensions", ("php", "inc")), "extensions")
    )
    return LinterConfig(
        minimum_language_version=version,
        extensions=extensions,
        exclude=_as_tuple(normalized.get("exclude"), "exclude"),
        max_fix_passes=raw_passes,
        severity_overrides=_severity_overrides(normalized.get("severity_overrides")),
    )


def load_config(path: Path | None = None) -> LinterConfig:
    """Load configuration from ``path``; defaults apply when ``path`` is ``None``.

    A ``pyproject.toml`` path is read from its ``[tool.docsniff]`` table.
    """
    if path is None:
        return LinterConfig()
    data = _load_toml(path)
    if path.name == PYPROJECT_PATH.name:
        tool = data.get("tool", {})
        section = tool.get("docsniff", {}) if isinstance(tool, Mapping) else {}
        data = cast(TomlMapping, section) if isinstance(section, Mapping) else {}
    config = config_from_mapping(data)
    LOGGER.debug(
        "Loaded docsniff config: minimum_language_version=%s max_fix_passes=%s",
        config.minimum_language_version,
        config.max_fix_passes,
    )
    return config


def _has_tool_section(pyproject: Path) -> bool:
    try:
        data = _load_toml(pyproject)
    except ConfigurationError:
        return False
    tool = data.get("tool")
    return isinstance(tool, Mapping) and "docsniff" in tool


def resolve_config_path(start: Path | None = None) -> ConfigSelection:
    """Find ``docsniff.toml`` or a ``pyproject.toml`` with ``[tool.docsniff]``.

    The directory tree is walked upwards from ``start``; in each directory
    ``docsniff.toml`` wins over ``pyproject.toml``.
    """
    current = (start or Path.cwd()).resolve()
    for directory in [current, *current.parents]:
        candidate = directory / DEFAULT_CONFIG_PATH
        if candidate.is_file():
            return ConfigSelection(path=candidate, source="default")
        pyproject = directory / PYPROJECT_PATH
        if pyproject.is_file() and _has_tool_section(pyproject):
            return ConfigSelection(path=pyproject, source="pyproject")
    return ConfigSelection(path=None, source="builtin")


def select_config_path(
    override: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    start: Path | None = None,
) -> ConfigSelection:
    """Determine the configuration path honouring CLI and environment precedence."""
    if override:
        return ConfigSelection(path=Path(override).expanduser(), source="cli")
    env_mapping: Mapping[str, str] = os.environ if env is None else env
    env_override = env_mapping.get(_ENV_CONFIG)
    if env_override:
        return ConfigSelection(path=Path(env_override).expanduser(), source=f"env:{_ENV_CONFIG}")
    return resolve_config_path(start)


def load_config_with_selection(
    override: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    start: Path | None = None,
) -> tuple[LinterConfig, ConfigSelection]:
    """Load configuration while also returning metadata about the selection.

    Raises
    ------
    ConfigurationError
        If the selected file is missing, unreadable or invalid.
    """
    selection = select_config_path(override, env=env, start=start)
    if selection.path is not None and not selection.path.is_file():
        message = f"Config file not found: {selection.path} (from {selection.source})"
        raise ConfigurationError(message, context={"path": str(selection.path)})
    config = load_config(selection.path)
    return config, selection


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConfigSelection",
    "LinterConfig",
    "config_from_mapping",
    "load_config",
    "load_config_with_selection",
    "parse_version",
    "resolve_config_path",
    "select_config_path",
]
