"""Function comment placement and ``@see`` checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docsniff.engine import check_text, fix_text

if TYPE_CHECKING:
    from collections.abc import Callable

CLEAN = """<?php
/**
 * Adds two numbers.
 *
 * @param int $left  Left operand.
 * @param int $right Right operand.
 *
 * @return int
 */
function add(int $left, int $right)
{
    return $left + $right;
}
"""

METHOD = """<?php
class Greeter
{
    /**
     * Greets.
     *
     * @param string $name Name to greet.
     *
     * @return string
     */
    public static function greet(string $name)
    {
        return "Hello " . $name;
    }
}
"""


def _sources(text: str) -> list[str]:
    return [violation.source for violation in check_text(text)]


def test_documented_function_is_clean() -> None:
    assert check_text(CLEAN) == ()


def test_modifiers_between_comment_and_method_are_skipped() -> None:
    assert check_text(METHOD) == ()


def test_missing_comment() -> None:
    (violation,) = check_text("<?php\nfunction ping() {}\n")

    assert violation.source == "FunctionComment.Missing"
    assert violation.message == "Missing doc comment for function ping()"
    assert (violation.line, violation.column) == (2, 1)


def test_line_comment_is_the_wrong_style() -> None:
    assert _sources("<?php\n// Pings.\nfunction ping() {}\n") == ["FunctionComment.WrongStyle"]


def test_closures_are_not_checked() -> None:
    assert check_text("<?php\n$f = function ($x) { return $x; };\n") == ()


def test_blank_lines_after_comment_are_removed() -> None:
    text = "<?php\n/**\n * Pings.\n *\n * @return void\n */\n\n\nfunction ping()\n{\n}\n"
    assert _sources(text) == ["FunctionComment.SpacingAfter"]

    result = fix_text(text)

    assert result.text == "<?php\n/**\n * Pings.\n *\n * @return void\n */\nfunction ping()\n{\n}\n"
    assert result.violations == ()


def test_empty_see_tag(php_function: Callable[..., str]) -> None:
    text = php_function(["@see", "", "@return void"], "function ping()")

    assert _sources(text) == ["FunctionComment.EmptySees"]


def test_constructor_needs_no_return_tag(php_function: Callable[..., str]) -> None:
    method = php_function(["@param int $size Size."], "public function __construct(int $size)")
    text = method.replace("<?php\n", "<?php\nclass Box\n{\n", 1) + "}\n"

    assert _sources(text) == []


def test_modifiers_on_their_own_line_are_kept() -> None:
    text = (
        "<?php\nclass Box\n{\n    /**\n     * Pings.\n     *\n     * @return void\n     */\n"
        "    public static\n    function ping()\n    {\n    }\n}\n"
    )

    assert check_text(text) == ()
    assert fix_text(text).text == text


def test_blank_line_before_modifiers_is_removed_without_touching_code() -> None:
    text = (
        "<?php\nclass Box\n{\n    /**\n     * Pings.\n     *\n     * @return void\n     */\n"
        "\n    public static function ping()\n    {\n    }\n}\n"
    )
    assert _sources(text) == ["FunctionComment.SpacingAfter"]

    result = fix_text(text)

    assert result.text == text.replace("*/\n\n", "*/\n")
    assert result.violations == ()


@pytest.mark.parametrize(
    "attribute",
    ["#[Pure]", "#[Route('/ping', methods: ['GET'])]", "#[Pure]\n#[Deprecated]"],
)
def test_attributes_between_comment_and_function_are_skipped(attribute: str) -> None:
    text = (
        "<?php\n/**\n * Pings.\n *\n * @return void\n */\n"
        f"{attribute}\nfunction ping()\n{{\n}}\n"
    )

    assert check_text(text) == ()


def test_attribute_without_comment_is_still_missing() -> None:
    assert _sources("<?php\n#[Pure]\nfunction ping() {}\n") == ["FunctionComment.Missing"]


def test_function_imports_are_not_declarations() -> None:
    assert check_text("<?php\nuse function App\\helper;\nuse function App\\{one, two};\n") == ()
