"""Tests for text and JSON run reports."""

from __future__ import annotations

import json

from docsniff.errors import TokenizeError
from docsniff.models import CODE_CATALOG, Severity, Violation
from docsniff.report import (
    REPORT_SCHEMA_VERSION,
    build_run_report,
    render_codes,
    render_json,
    render_text,
)
from docsniff.runner import FileResult


def _results() -> list[FileResult]:
    clean = FileResult(path="src/clean.php", original="x", text="x")
    dirty = FileResult(
        path="src/dirty.php",
        violations=[
            Violation(
                sniff="DocComment",
                code="ContentAfterOpen",
                message="The open comment tag must be the only content on the line",
                index=2,
                line=2,
                column=1,
                fixable=True,
            ),
            Violation(
                sniff="FunctionComment",
                code="ScalarTypeHintMissing",
                message='Type hint "int" missing for $x',
                index=9,
                line=8,
                column=1,
                severity=Severity.WARNING,
            ),
        ],
        fixed_count=3,
        passes=2,
    )
    broken = FileResult(
        path="src/broken.php",
        error=TokenizeError("Unterminated doc comment", line=4, column=1),
    )
    return [clean, dirty, broken]


def test_build_run_report_counts_totals() -> None:
    report = build_run_report("fix", _results(), config_source="cli", suppressed=2)

    assert report.schema_version == REPORT_SCHEMA_VERSION
    assert report.command == "fix"
    totals = report.totals
    assert (totals.files, totals.errors, totals.warnings) == (3, 1, 1)
    assert (totals.fixed, totals.suppressed, totals.failed) == (3, 2, 1)


def test_render_text_lists_one_line_per_violation() -> None:
    text = render_text(build_run_report("check", _results()))
    lines = text.splitlines()

    assert (
        "src/dirty.php:2:1: error: The open comment tag must be the only content on the line "
        "[DocComment.ContentAfterOpen] (fixable)"
    ) in lines
    assert (
        'src/dirty.php:8:1: warning: Type hint "int" missing for $x '
        "[FunctionComment.ScalarTypeHintMissing]"
    ) in lines
    assert "src/dirty.php: 3 fix(es) applied in 2 pass(es)" in lines
    assert "src/broken.php: TokenizeError: Unterminated doc comment" in lines
    assert lines[-1] == "3 file(s) checked: 1 error(s), 1 warning(s), 3 fixed, 0 suppressed"


def test_render_json_uses_aliases_and_problem_details() -> None:
    payload = json.loads(render_json(build_run_report("check", _results(), config_hash="abc")))

    assert payload["schemaVersion"] == REPORT_SCHEMA_VERSION
    assert payload["configHash"] == "abc"
    assert payload["configSource"] == "builtin"
    assert "generatedAt" in payload
    clean, dirty, broken = payload["files"]
    assert clean["violations"] == []
    assert dirty["fixedCount"] == 3
    assert dirty["violations"][1]["severity"] == "warning"
    assert broken["error"]["code"] == "tokenize-failed"
    assert broken["error"]["status"] == 422
    assert broken["error"]["line"] == 4


def test_render_codes_lists_the_catalog() -> None:
    rendered = render_codes(CODE_CATALOG)
    lines = rendered.splitlines()

    assert len(lines) == len(CODE_CATALOG)
    assert lines[0].startswith("DocComment.Empty")
    (after_open,) = [line for line in lines if line.startswith("DocComment.ContentAfterOpen ")]
    assert "fixable" in after_open
