"""Problem Details helpers for RFC 9457 compliance.

The CLI reports operational failures (unreadable files, invalid configuration,
tokenizer failures) as Problem Details payloads so downstream tooling can
index them the same way as lint findings.

Examples
--------
>>> problem = build_problem_details(
...     ProblemDetailsParams(
...         type="https://docsniff.dev/problems/source-read-failed",
...         title="Source file could not be read",
...         status=500,
...         detail="Permission denied",
...         instance="urn:docsniff:file:src/Foo.php",
...     )
... )
>>> problem["type"].endswith("source-read-failed")
True
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "JsonPrimitive",
    "JsonValue",
    "ProblemDetailsDict",
    "ProblemDetailsParams",
    "build_problem_details",
    "coerce_optional_dict",
    "problem_from_exception",
    "render_problem",
]

JsonPrimitive = str | int | float | bool | None
JsonValue = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]

ProblemDetailsDict = dict[str, JsonValue]


def coerce_optional_dict(
    mapping: Mapping[str, JsonValue] | None,
) -> dict[str, JsonValue] | None:
    """Return ``mapping`` as a ``dict`` when non-empty, otherwise ``None``.

    Parameters
    ----------
    mapping : Mapping[str, JsonValue] | None
        Mapping of extension values.

    Returns
    -------
    dict[str, JsonValue] | None
        Materialised dictionary or ``None`` when ``mapping`` is empty/``None``.
    """
    if mapping is None:
        return None
    materialised = {str(key): value for key, value in mapping.items()}
    if not materialised:
        return None
    return materialised


@dataclass(frozen=True, slots=True)
class ProblemDetailsParams:
    """Core fields required to build a Problem Details payload."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
    extensions: Mapping[str, JsonValue] | None = None


def build_problem_details(params: ProblemDetailsParams) -> ProblemDetailsDict:
    """Build an RFC 9457 Problem Details payload.

    Parameters
    ----------
    params : ProblemDetailsParams
        Structured fields describing the Problem Details payload.

    Returns
    -------
    ProblemDetailsDict
        Problem Details payload conforming to RFC 9457.
    """
    payload: ProblemDetailsDict = {
        "type": params.type,
        "title": params.title,
        "status": params.status,
        "detail": params.detail,
        "instance": params.instance,
    }
    extensions = coerce_optional_dict(params.extensions)
    if extensions:
        payload.update(extensions)
    return payload


def problem_from_exception(
    base: ProblemDetailsParams,
    exception: BaseException,
    *,
    extensions: Mapping[str, JsonValue] | None = None,
) -> ProblemDetailsDict:
    """Build Problem Details from an exception.

    ``base.detail`` wins when set; otherwise the detail is ``str(exception)``.
    The exception class name is recorded as the ``exception_type`` extension.

    Parameters
    ----------
    base : ProblemDetailsParams
        Type, title, status and instance of the problem.
    exception : BaseException
        Exception being reported.
    extensions : Mapping[str, JsonValue] | None, optional
        Extra fields merged after ``exception_type``.

    Returns
    -------
    ProblemDetailsDict
        Problem Details payload.

    Examples
    --------
    >>> try:
    ...     raise ValueError("Invalid input")
    ... except ValueError as exc:
    ...     problem = problem_from_exception(
    ...         ProblemDetailsParams(
    ...             type="https://docsniff.dev/problems/runtime-error",
    ...             title="Invalid input",
    ...             status=400,
    ...             detail="",
    ...             instance="urn:docsniff:error",
    ...         ),
    ...         exc,
    ...     )
    >>> problem["detail"], problem["exception_type"]
    ('Invalid input', 'ValueError')
    """
    merged: dict[str, JsonValue] = {"exception_type": exception.__class__.__name__}
    if base.extensions:
        merged.update(base.extensions)
    if extensions:
        merged.update(extensions)
    detail = base.detail or str(exception)
    return build_problem_details(replace(base, detail=detail, extensions=merged))


def render_problem(problem: ProblemDetailsDict) -> str:
    """Render Problem Details as a minified JSON string without a trailing newline."""
    return json.dumps(problem, default=str)
