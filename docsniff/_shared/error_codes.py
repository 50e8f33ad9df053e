"""Canonical error code registry for the docsniff CLI.

Each code maps to metadata describing the failure domain, category, severity
and the recommended remediation, so terminal output can point users at a fix.

Examples
--------
>>> from docsniff._shared.error_codes import format_error_message
>>> message = format_error_message("DSN-CFG-001", "Invalid docsniff.toml")
>>> "DSN-CFG-001" in message
True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

__all__ = [
    "CANONICAL_ERROR_CODES",
    "CanonicalErrorCode",
    "format_error_message",
    "get_error_code",
]


@dataclass(frozen=True, slots=True)
class CanonicalErrorCode:
    """Metadata describing a canonical error code."""

    code: str
    title: str
    summary: str
    domain: str
    category: str
    severity: str
    remediation: str

    def format(self, message: str, *, details: str | None = None) -> str:
        """Return a formatted terminal message for ``message``.

        Parameters
        ----------
        message
            Human-readable failure description.
        details
            Optional additional context appended on separate lines.
        """
        header = f"[ERROR {self.code}] {message}"
        suffix = f"Hint: {self.remediation}" if self.remediation else ""
        if details:
            return "\n".join(word for word in (header, details, suffix) if word)
        if suffix:
            return f"{header}\n{suffix}"
        return header


def _code(code: str, **kwargs: str) -> CanonicalErrorCode:
    return CanonicalErrorCode(code=code, **kwargs)


CANONICAL_ERROR_CODES: Final[dict[str, CanonicalErrorCode]] = {
    "DSN-CFG-001": _code(
        "DSN-CFG-001",
        title="Invalid linter configuration",
        summary="docsniff.toml or [tool.docsniff] could not be parsed or validated",
        domain="configuration",
        category="config",
        severity="error",
        remediation="Check the keys and value types in docsniff.toml or [tool.docsniff].",
    ),
    "DSN-CFG-002": _code(
        "DSN-CFG-002",
        title="Invalid allowlist",
        summary="The YAML allowlist of suppressed violations could not be loaded",
        domain="configuration",
        category="policy",
        severity="error",
        remediation="Each entry needs path, code, justification and an ISO expires_on date.",
    ),
    "DSN-CFG-003": _code(
        "DSN-CFG-003",
        title="Invalid runtime settings",
        summary="DOCSNIFF_* environment variables failed validation",
        domain="configuration",
        category="environment",
        severity="error",
        remediation="Unset or correct the DOCSNIFF_* variables reported above.",
    ),
    "DSN-SRC-001": _code(
        "DSN-SRC-001",
        title="Source file unreadable",
        summary="A selected source file could not be read or written",
        domain="source",
        category="io",
        severity="error",
        remediation="Verify the path exists, is UTF-8 encoded and is writable for 'fix'.",
    ),
    "DSN-SRC-002": _code(
        "DSN-SRC-002",
        title="Source could not be tokenized",
        summary="The tokenizer met an unterminated comment or string literal",
        domain="source",
        category="syntax",
        severity="error",
        remediation="Close the reported comment or string literal and rerun.",
    ),
    "DSN-FIX-001": _code(
        "DSN-FIX-001",
        title="Fixes did not converge",
        summary="The fixer stopped after the maximum number of passes",
        domain="fixer",
        category="convergence",
        severity="warning",
        remediation="Raise max_fix_passes or report the file; conflicting fixes keep rewriting it.",
    ),
}


def get_error_code(code: str) -> CanonicalErrorCode:
    """Return metadata for ``code``.

    Raises
    ------
    KeyError
        If the code is not registered.
    """
    try:
        return CANONICAL_ERROR_CODES[code]
    except KeyError as exc:
        message = f"Unknown error code: {code}"
        raise KeyError(message) from exc


def format_error_message(code: str, message: str, *, details: str | None = None) -> str:
    """Return a formatted error message for ``code`` and ``message``."""
    return get_error_code(code).format(message, details=details)
