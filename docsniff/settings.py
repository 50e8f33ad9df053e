"""Process-level settings read from ``DOCSNIFF_*`` environment variables.

These cover how the CLI runs (logging, default config file). Lint rules live
in :mod:`docsniff.config`.

Examples
--------
>>> settings = RuntimeSettings(log_level="debug")
>>> settings.log_level
'DEBUG'
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docsniff._shared.logging import get_logger
from docsniff.errors import ConfigurationError

__all__ = ["RuntimeSettings", "load_settings"]

LOGGER = get_logger(__name__)

_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class RuntimeSettings(BaseSettings):
    """Runtime toggles for the command line (``DOCSNIFF_*`` namespace)."""

    model_config = SettingsConfigDict(
        env_prefix="DOCSNIFF_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
    )

    log_level: str = Field(default="WARNING", description="Logging level for CLI runs")
    log_json: bool = Field(default=False, description="Emit JSON log lines on stderr")
    config_path: Path | None = Field(
        default=None,
        description="Linter config file used when --config is not given",
        validation_alias="DOCSNIFF_CONFIG",
    )

    @field_validator("log_level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LEVELS:
            message = f"log_level must be one of {', '.join(sorted(_LEVELS))}"
            raise ValueError(message)
        return level

    @property
    def level_number(self) -> int:
        """Return :attr:`log_level` as a :mod:`logging` level number."""
        return logging.getLevelNamesMapping()[self.log_level]


def load_settings(**overrides: object) -> RuntimeSettings:
    """Load :class:`RuntimeSettings`, failing fast on invalid values.

    Raises
    ------
    ConfigurationError
        If an environment variable or override does not validate.
    """
    try:
        return RuntimeSettings(**overrides)  # type: ignore[arg-type]
    except ValidationError as exc:
        message = f"Runtime settings validation failed: {exc.error_count()} error(s)"
        LOGGER.debug(
            "Settings validation failed",
            extra={"operation": "settings", "status": "error", "error": str(exc)},
        )
        raise ConfigurationError(
            message, cause=exc, context={"validation_error": str(exc)}
        ) from exc
