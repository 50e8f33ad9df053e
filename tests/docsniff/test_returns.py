"""``@return`` checks against function bodies."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docsniff.engine import check_text, fix_text

if TYPE_CHECKING:
    from collections.abc import Callable


def _sources(text: str) -> list[str]:
    return [violation.source for violation in check_text(text)]


@pytest.mark.parametrize(
    ("tag", "body", "expected"),
    [
        ("@return void", ["return 5;"], ["FunctionComment.InvalidReturnVoid"]),
        ("@return void", ["return;"], []),
        ("@return void", ["$f = function () { return 1; };"], []),
        ("@return int", [], ["FunctionComment.InvalidNoReturn"]),
        ("@return int", ["return;"], ["FunctionComment.InvalidReturnNotVoid"]),
        ("@return int", ["yield 1;"], []),
        ("@return mixed", [], []),
        ("@return boolean", ["return true;"], []),
        ("@return", ["return 1;"], ["FunctionComment.MissingReturnType"]),
    ],
)
def test_return_tag_against_body(
    php_function: Callable[..., str], tag: str, body: list[str], expected: list[str]
) -> None:
    assert _sources(php_function([tag], "function f()", body)) == expected


def test_missing_return_tag(php_function: Callable[..., str]) -> None:
    (violation,) = check_text(php_function(["@see Other"], "function f()"))

    assert violation.source == "FunctionComment.MissingReturn"
    assert violation.message == "Missing @return tag in function comment"


def test_duplicate_return_stops_further_checks(php_function: Callable[..., str]) -> None:
    text = php_function(["@return Integer", "@return void"], "function f()", ["return 5;"])

    assert _sources(text) == ["FunctionComment.DuplicateReturn"]


def test_return_type_spelling_is_fixed(php_function: Callable[..., str]) -> None:
    text = php_function(["@return Integer|NULL The count."], "function f()", ["return 1;"])
    assert _sources(text) == ["FunctionComment.InvalidReturn"]

    result = fix_text(text)

    assert " * @return int|null The count.\n" in result.text
    assert result.violations == ()


def test_bodiless_methods_skip_exit_checks() -> None:
    text = """<?php
interface Counter
{
    /**
     * Counts.
     *
     * @return int
     */
    public function count();
}
"""
    assert check_text(text) == ()
