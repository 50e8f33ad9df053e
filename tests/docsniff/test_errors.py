"""Tests for the exception hierarchy, Problem Details and error codes."""

from __future__ import annotations

import json

import pytest

from docsniff._shared.error_codes import format_error_message, get_error_code
from docsniff._shared.problem_details import (
    ProblemDetailsParams,
    build_problem_details,
    problem_from_exception,
    render_problem,
)
from docsniff.errors import (
    AllowlistError,
    ConfigurationError,
    DocsniffError,
    ErrorCode,
    TokenizeError,
)


@pytest.mark.parametrize(
    ("error", "code", "status"),
    [
        (DocsniffError("boom"), ErrorCode.RUNTIME_ERROR, 500),
        (ConfigurationError("bad"), ErrorCode.CONFIGURATION_ERROR, 400),
        (AllowlistError("bad"), ErrorCode.ALLOWLIST_ERROR, 400),
        (TokenizeError("open", line=3, column=7), ErrorCode.TOKENIZE_FAILED, 422),
    ],
)
def test_defaults(error: DocsniffError, code: ErrorCode, status: int) -> None:
    assert error.code is code
    assert error.status == status


def test_problem_details_carry_context() -> None:
    error = TokenizeError("Unterminated string", line=3, column=7)

    problem = error.to_problem_details(instance="urn:docsniff:file:a.php")

    assert problem["type"] == "https://docsniff.dev/problems/tokenize-failed"
    assert problem["title"] == "TokenizeError"
    assert problem["detail"] == "Unterminated string"
    assert problem["instance"] == "urn:docsniff:file:a.php"
    assert (problem["code"], problem["line"], problem["column"]) == ("tokenize-failed", 3, 7)
    assert problem["exception_type"] == "TokenizeError"


def test_str_mentions_cause() -> None:
    error = ConfigurationError("Invalid TOML", cause=ValueError("x"))

    assert str(error) == (
        "ConfigurationError[configuration-error]: Invalid TOML (caused by: ValueError)"
    )
    assert isinstance(error.__cause__, ValueError)


def test_build_problem_details_without_extensions() -> None:
    problem = build_problem_details(
        ProblemDetailsParams(
            type="about:blank", title="T", status=400, detail="D", instance="urn:x", extensions={}
        )
    )

    assert problem == {
        "type": "about:blank",
        "title": "T",
        "status": 400,
        "detail": "D",
        "instance": "urn:x",
    }


def test_format_error_message_includes_hint() -> None:
    message = format_error_message("DSN-SRC-002", "Unterminated comment")

    assert message.splitlines() == [
        "[ERROR DSN-SRC-002] Unterminated comment",
        f"Hint: {get_error_code('DSN-SRC-002').remediation}",
    ]


def test_unknown_error_code() -> None:
    with pytest.raises(KeyError):
        get_error_code("DSN-XXX-999")


def test_problem_from_exception_uses_message_when_detail_is_empty() -> None:
    base = ProblemDetailsParams(
        type="https://docsniff.dev/problems/runtime-error",
        title="Runtime error",
        status=500,
        detail="",
        instance="urn:docsniff:error",
        extensions={"stage": "read"},
    )

    problem = problem_from_exception(base, OSError("disk gone"), extensions={"path": "a.php"})

    assert problem["detail"] == "disk gone"
    assert problem["exception_type"] == "OSError"
    assert (problem["stage"], problem["path"]) == ("read", "a.php")


def test_render_problem_is_single_line_json() -> None:
    rendered = render_problem(ConfigurationError("bad").to_problem_details())

    assert "\n" not in rendered
    assert json.loads(rendered)["status"] == 400
