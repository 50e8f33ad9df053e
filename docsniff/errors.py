"""Exception hierarchy for operational failures.

Lint findings never raise; they are reported as
:class:`~docsniff.models.Violation` values. The exceptions below cover the
surrounding machinery only: configuration, allowlists, reading sources and
tokenizing them. Each carries a stable :class:`ErrorCode` and converts to an
RFC 9457 Problem Details payload.

Examples
--------
>>> error = ConfigurationError("max_fix_passes must be positive")
>>> error.code
<ErrorCode.CONFIGURATION_ERROR: 'configuration-error'>
>>> error.to_problem_details(instance="urn:docsniff:config")["status"]
400
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Final

from docsniff._shared.problem_details import (
    ProblemDetailsDict,
    ProblemDetailsParams,
    problem_from_exception,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from docsniff._shared.problem_details import JsonValue

__all__ = [
    "BASE_TYPE_URI",
    "AllowlistError",
    "ConfigurationError",
    "DocsniffError",
    "ErrorCode",
    "SourceReadError",
    "TokenizeError",
    "get_type_uri",
]

BASE_TYPE_URI: Final[str] = "https://docsniff.dev/problems"


class ErrorCode(StrEnum):
    """Stable error codes used in Problem Details payloads."""

    CONFIGURATION_ERROR = "configuration-error"
    ALLOWLIST_ERROR = "allowlist-error"
    SOURCE_READ_FAILED = "source-read-failed"
    TOKENIZE_FAILED = "tokenize-failed"
    RUNTIME_ERROR = "runtime-error"


def get_type_uri(code: ErrorCode) -> str:
    """Return the Problem Details type URI for ``code``."""
    return f"{BASE_TYPE_URI}/{code.value}"


class DocsniffError(Exception):
    """Base exception for docsniff failures.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode, optional
        Stable error code. Defaults to ``ErrorCode.RUNTIME_ERROR``.
    status : int, optional
        Problem Details status. Defaults to 500.
    cause : Exception | None, optional
        Underlying exception, chained as ``__cause__``.
    context : Mapping[str, JsonValue] | None, optional
        Extra fields copied into the Problem Details payload.
    """

    default_code: ErrorCode = ErrorCode.RUNTIME_ERROR
    default_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        status: int | None = None,
        cause: Exception | None = None,
        context: Mapping[str, JsonValue] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status = status if status is not None else self.default_status
        self.context: dict[str, JsonValue] = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetailsDict:
        """Convert the error to an RFC 9457 Problem Details payload.

        Parameters
        ----------
        instance : str | None, optional
            URI identifying the specific occurrence.
        title : str | None, optional
            Short summary. Defaults to the exception class name.

        Returns
        -------
        ProblemDetailsDict
            Payload with ``type``, ``title``, ``status``, ``detail``,
            ``instance``, ``exception_type``, ``code`` and any context
            extensions.
        """
        extensions: dict[str, JsonValue] = {"code": self.code.value}
        extensions.update(self.context)
        return problem_from_exception(
            ProblemDetailsParams(
                type=get_type_uri(self.code),
                title=title or self.__class__.__name__,
                status=self.status,
                detail=self.message,
                instance=instance or "urn:docsniff:error",
            ),
            self,
            extensions=extensions,
        )

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}[{self.code.value}]: {self.message}"
        if self.__cause__:
            base += f" (caused by: {type(self.__cause__).__name__})"
        return base


class ConfigurationError(DocsniffError):
    """Raised when linter configuration or runtime settings are invalid."""

    default_code = ErrorCode.CONFIGURATION_ERROR
    default_status = 400


class AllowlistError(ConfigurationError):
    """Raised when the YAML allowlist cannot be parsed or validated."""

    default_code = ErrorCode.ALLOWLIST_ERROR


class SourceReadError(DocsniffError):
    """Raised when a source file cannot be read or written."""

    default_code = ErrorCode.SOURCE_READ_FAILED


class TokenizeError(DocsniffError):
    """Raised when source text cannot be split into tokens.

    Parameters
    ----------
    message : str
        Description of the failure.
    line : int
        1-based line where the offending construct starts.
    column : int
        1-based column where the offending construct starts.
    """

    default_code = ErrorCode.TOKENIZE_FAILED
    default_status = 422

    def __init__(self, message: str, *, line: int, column: int) -> None:
        super().__init__(message, context={"line": line, "column": column})
        self.line = line
        self.column = column
