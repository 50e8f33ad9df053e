from __future__ import annotations

import datetime as dt
import logging
from typing import TYPE_CHECKING

import pytest

from docsniff.errors import AllowlistError, ConfigurationError
from docsniff.models import Severity, Violation
from docsniff.policy import (
    PolicyEngine,
    PolicyException,
    SeverityAction,
    load_allowlist,
    parse_exceptions,
)

if TYPE_CHECKING:
    from pathlib import Path

TODAY = dt.date(2026, 10, 18)


def _violation(sniff: str, code: str, severity: Severity = Severity.ERROR) -> Violation:
    return Violation(
        sniff=sniff, code=code, message="m", index=0, line=1, column=1, severity=severity
    )


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("error", SeverityAction.ERROR),
        (" Warning ", SeverityAction.WARNING),
        ("IGNORE", SeverityAction.IGNORE),
    ],
)
def test_severity_action_parse(raw: str, expected: SeverityAction) -> None:
    assert SeverityAction.parse(raw) is expected


def test_severity_action_parse_rejects_unknown() -> None:
    with pytest.raises(ConfigurationError):
        SeverityAction.parse("fatal")


def test_exact_override_wins_over_family() -> None:
    engine = PolicyEngine(
        overrides={"FunctionComment": "warning", "FunctionComment.MissingReturn": "ignore"},
        today=TODAY,
    )
    violations = [
        _violation("FunctionComment", "MissingReturn"),
        _violation("FunctionComment", "Missing"),
        _violation("DocComment", "Empty"),
    ]

    kept = engine.apply("a.php", violations)

    assert [(item.source, item.severity) for item in kept] == [
        ("FunctionComment.Missing", Severity.WARNING),
        ("DocComment.Empty", Severity.ERROR),
    ]
    assert engine.suppressed == 1


def test_override_can_raise_a_warning_to_an_error() -> None:
    engine = PolicyEngine(overrides={"FunctionComment.ScalarTypeHintMissing": "error"})
    (kept,) = engine.apply(
        "a.php", [_violation("FunctionComment", "ScalarTypeHintMissing", Severity.WARNING)]
    )

    assert kept.severity is Severity.ERROR


def test_allowlist_matches_path_patterns_until_expiry(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="docsniff.policy")
    active = PolicyException(
        path="legacy/*.php",
        code="FunctionComment",
        justification="Generated code.",
        expires_on=TODAY,
    )
    expired = PolicyException(
        path="src/a.php",
        code="DocComment.Empty",
        justification="Old.",
        expires_on=TODAY - dt.timedelta(days=1),
    )
    engine = PolicyEngine(exceptions=[active, expired], today=TODAY)

    assert engine.is_allowlisted("legacy/old.php", "FunctionComment.MissingReturn")
    assert not engine.is_allowlisted("src/old.php", "FunctionComment.MissingReturn")
    assert not engine.is_allowlisted("src/a.php", "DocComment.Empty")
    assert any("expired" in record.getMessage() for record in caplog.records)


def test_parse_exceptions_accepts_dates_and_strings() -> None:
    parsed = parse_exceptions(
        [
            {"path": "a.php", "code": "DocComment", "justification": "J.", "expires_on": TODAY},
            {
                "path": "b.php",
                "code": "DocComment",
                "justification": "J.",
                "expires-on": "2027-01-01",
            },
        ]
    )

    assert [entry.expires_on for entry in parsed] == [TODAY, dt.date(2027, 1, 1)]


@pytest.mark.parametrize(
    "entry",
    [
        {"path": "a.php", "code": "DocComment", "expires_on": "2027-01-01"},
        {"path": "a.php", "code": "DocComment", "justification": "J.", "expires_on": "soon"},
        "a.php",
    ],
)
def test_parse_exceptions_rejects_bad_entries(entry: object) -> None:
    with pytest.raises(AllowlistError):
        parse_exceptions([entry])  # type: ignore[list-item]


def test_load_allowlist_reads_yaml(tmp_path: Path) -> None:
    path = tmp_path / "allowlist.yaml"
    path.write_text(
        "exceptions:\n"
        "  - path: src/Legacy/*.php\n"
        "    code: FunctionComment.MissingParamTag\n"
        "    justification: Generated signatures.\n"
        "    expires_on: 2027-03-31\n",
        encoding="utf-8",
    )

    (entry,) = load_allowlist(path)

    assert entry.code == "FunctionComment.MissingParamTag"
    assert entry.expires_on == dt.date(2027, 3, 31)


@pytest.mark.parametrize(
    "content", ["exceptions: [unclosed\n", "- just\n- a list\n", "exceptions: 3\n"]
)
def test_load_allowlist_rejects_bad_documents(tmp_path: Path, content: str) -> None:
    path = tmp_path / "allowlist.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(AllowlistError):
        load_allowlist(path)


def test_load_allowlist_missing_file(tmp_path: Path) -> None:
    with pytest.raises(AllowlistError):
        load_allowlist(tmp_path / "absent.yaml")
