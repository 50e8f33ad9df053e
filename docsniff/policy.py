"""Severity overrides and the allowlist of suppressed violations.

Overrides come from ``severity_overrides`` in the linter configuration and
map ``"<Sniff>.<Code>"`` (or a whole ``"<Sniff>"`` family) to ``error``,
``warning`` or ``ignore``. The allowlist is a YAML document listing violations
that are accepted until an expiry date::

    exceptions:
      - path: src/Legacy/Importer.php
        code: FunctionComment.MissingParamTag
        justification: Generated signatures, rewritten in the importer refactor.
        expires_on: 2027-03-31
"""

from __future__ import annotations

import datetime as _dt
import fnmatch
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING, cast

import yaml

from docsniff._shared.logging import get_logger
from docsniff.errors import AllowlistError, ConfigurationError
from docsniff.models import Severity

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from pathlib import Path

    from docsniff.models import Violation

__all__ = [
    "PolicyEngine",
    "PolicyException",
    "SeverityAction",
    "load_allowlist",
    "parse_exceptions",
]

LOGGER = get_logger(__name__)


class SeverityAction(StrEnum):
    """Action applied to a violation code."""

    ERROR = "error"
    WARNING = "warning"
    IGNORE = "ignore"

    @classmethod
    def parse(cls, value: str) -> SeverityAction:
        """Parse ``value`` into a :class:`SeverityAction`.

        Raises
        ------
        ConfigurationError
            If the value is not a known action.
        """
        lowered = value.strip().lower()
        try:
            return cls(lowered)
        except ValueError as exc:
            message = f"Unknown severity action: {value}"
            raise ConfigurationError(message, cause=exc) from exc


@dataclass(slots=True, frozen=True)
class PolicyException:
    """Allowlisted violation code for the files matching ``path``."""

    path: str
    code: str
    justification: str
    expires_on: _dt.date

    def is_active(self, today: _dt.date) -> bool:
        """Return ``True`` when the exception has not expired."""
        return self.expires_on >= today

    def matches(self, path: str, source: str) -> bool:
        """Return ``True`` when the exception covers ``source`` reported in ``path``."""
        if self.code not in {source, source.split(".", 1)[0]}:
            return False
        return path == self.path or fnmatch.fnmatch(path, self.path)


def parse_exceptions(entries: Iterable[Mapping[str, object]]) -> list[PolicyException]:
    """Parse allowlist entries.

    Parameters
    ----------
    entries : Iterable[Mapping[str, object]]
        Raw entries as loaded from YAML.

    Returns
    -------
    list[PolicyException]
        Parsed exceptions in document order.

    Raises
    ------
    AllowlistError
        If an entry lacks a field or carries an invalid date.
    """
    parsed: list[PolicyException] = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            message = f"Allowlist entry {position} must be a mapping"
            raise AllowlistError(message)
        path = str(entry.get("path", "")).strip()
        code = str(entry.get("code", "")).strip()
        justification = str(entry.get("justification", "")).strip()
        expires_raw = entry.get("expires_on") or entry.get("expires-on")
        if not path or not code or not justification or not expires_raw:
            message = (
                f"Allowlist entry {position} requires path, code, justification and expires_on"
            )
            raise AllowlistError(message)
        if isinstance(expires_raw, _dt.date):
            expires_on = expires_raw
        else:
            try:
                expires_on = _dt.date.fromisoformat(str(expires_raw))
            except ValueError as exc:
                message = f"Invalid expires_on value in allowlist entry {position}: {expires_raw}"
                raise AllowlistError(message, cause=exc) from exc
        parsed.append(
            PolicyException(
                path=path, code=code, justification=justification, expires_on=expires_on
            )
        )
    return parsed


def load_allowlist(path: Path) -> list[PolicyException]:
    """Load the YAML allowlist at ``path``.

    Raises
    ------
    AllowlistError
        If the file cannot be read, is not valid YAML or has a bad shape.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        message = f"Cannot read allowlist {path}"
        raise AllowlistError(message, cause=exc, context={"path": str(path)}) from exc
    except yaml.YAMLError as exc:
        message = f"Invalid YAML in allowlist {path}: {exc}"
        raise AllowlistError(message, cause=exc, context={"path": str(path)}) from exc
    if not isinstance(data, dict):
        message = f"Allowlist {path} must be a mapping with an 'exceptions' list"
        raise AllowlistError(message, context={"path": str(path)})
    entries = data.get("exceptions") or []
    if not isinstance(entries, list):
        message = f"'exceptions' in {path} must be a list"
        raise AllowlistError(message, context={"path": str(path)})
    exceptions = parse_exceptions(cast("list[Mapping[str, object]]", entries))
    LOGGER.debug("Loaded %s allowlist entries from %s", len(exceptions), path)
    return exceptions


@dataclass(slots=True)
class PolicyEngine:
    """Apply severity overrides and allowlist entries to violations.

    Parameters
    ----------
    overrides : Mapping[str, str]
        ``"<Sniff>.<Code>"`` or ``"<Sniff>"`` mapped to an action name.
    exceptions : Sequence[PolicyException]
        Allowlist entries; expired ones are ignored.
    today : datetime.date | None, optional
        Reference date for expiry checks. Defaults to today in UTC.
    """

    overrides: Mapping[str, str] = field(default_factory=dict)
    exceptions: Sequence[PolicyException] = ()
    today: _dt.date | None = None
    suppressed: int = 0
    _actions: dict[str, SeverityAction] = field(init=False, default_factory=dict)
    _today: _dt.date = field(init=False, default=_dt.date.min)

    def __post_init__(self) -> None:
        self._actions = {
            code: SeverityAction.parse(action) for code, action in self.overrides.items()
        }
        self._today = self.today or _dt.datetime.now(tz=_dt.UTC).date()
        expired = [entry for entry in self.exceptions if not entry.is_active(self._today)]
        for entry in expired:
            LOGGER.warning(
                "Allowlist entry for %s in %s expired on %s",
                entry.code,
                entry.path,
                entry.expires_on.isoformat(),
                extra={"operation": "policy", "status": "expired"},
            )

    def action_for(self, source: str) -> SeverityAction | None:
        """Return the configured action for ``source``; the exact code wins over its family."""
        action = self._actions.get(source)
        if action is None:
            action = self._actions.get(source.split(".", 1)[0])
        return action

    def is_allowlisted(self, path: str, source: str) -> bool:
        """Return ``True`` when an active allowlist entry covers ``source`` in ``path``."""
        return any(
            entry.is_active(self._today) and entry.matches(path, source)
            for entry in self.exceptions
        )

    def apply(self, path: str, violations: Iterable[Violation]) -> list[Violation]:
        """Return ``violations`` with overrides applied and suppressed entries removed.

        Parameters
        ----------
        path : str
            Path of the file the violations belong to, as shown in reports.
        violations : Iterable[Violation]
            Violations reported for that file.

        Returns
        -------
        list[Violation]
            Remaining violations with their effective severity.
        """
        kept: list[Violation] = []
        for violation in violations:
            action = self.action_for(violation.source)
            if action is SeverityAction.IGNORE or self.is_allowlisted(path, violation.source):
                self.suppressed += 1
                continue
            if action is not None and action.value != violation.severity.value:
                kept.append(replace(violation, severity=Severity(action.value)))
            else:
                kept.append(violation)
        return kept
