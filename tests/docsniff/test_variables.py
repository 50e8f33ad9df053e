"""Member variable comment checks."""

from __future__ import annotations

import pytest

from docsniff.engine import check_text, fix_text
from docsniff.models import Severity


def _class_source(tags: list[str], declaration: str = "private int $size = 0;") -> str:
    lines = ["<?php", "class Box", "{", "    /**", "     * Size of the box.", "     *"]
    lines.extend(f"     * {tag}" if tag else "     *" for tag in tags)
    lines.extend(["     */", f"    {declaration}", "}"])
    return "\n".join(lines) + "\n"


def _sources(text: str) -> list[str]:
    return [violation.source for violation in check_text(text)]


@pytest.mark.parametrize(
    "declaration",
    [
        "private int $size = 0;",
        "public ?Foo $size;",
        "protected int|string $size;",
        "public static readonly array $size;",
        "var $size;",
    ],
)
def test_documented_properties_are_clean(declaration: str) -> None:
    assert check_text(_class_source(["@var int"], declaration)) == ()


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        (["@see Other"], ["VariableComment.MissingVar"]),
        (["@see Other", "@var int"], ["VariableComment.VarOrder"]),
        (["@var int", "@var string"], ["VariableComment.DuplicateVar"]),
        (["@var int", "@see"], ["VariableComment.EmptySees"]),
        (["@var"], ["VariableComment.EmptyVar"]),
        (["@var Integer Count."], ["VariableComment.IncorrectVarType"]),
    ],
)
def test_variable_tag_violations(tags: list[str], expected: list[str]) -> None:
    assert _sources(_class_source(tags)) == expected


def test_foreign_tags_are_warnings() -> None:
    (violation,) = check_text(_class_source(["@var int", "", "@todo Remove."]))

    assert violation.source == "VariableComment.TagNotAllowed"
    assert violation.severity is Severity.WARNING
    assert violation.message == "@todo tag is not allowed in member variable comment"


def test_var_type_spelling_is_fixed() -> None:
    result = fix_text(_class_source(["@var Integer|NULL Count."]))

    assert "     * @var int|null Count.\n" in result.text
    assert result.violations == ()


def test_missing_and_wrong_style_comments() -> None:
    missing = "<?php\nclass Box\n{\n    public $size;\n}\n"
    wrong = "<?php\nclass Box\n{\n    // Size.\n    public $size;\n}\n"

    assert _sources(missing) == ["VariableComment.Missing"]
    assert _sources(wrong) == ["VariableComment.WrongStyle"]


def test_locals_and_parameters_are_not_properties() -> None:
    text = """<?php
class Box
{
    /**
     * Resizes.
     *
     * @param int $size New size.
     *
     * @return void
     */
    public function resize(int $size)
    {
        $old = $size;
    }
}
$global = 1;
"""
    assert check_text(text) == ()


def test_attributes_before_properties_are_skipped() -> None:
    text = _class_source(["@var int"], "#[ORM\\Column(type: 'integer')] private int $size = 0;")

    assert check_text(text) == ()


def test_property_docblock_without_tags_reports_missing_var() -> None:
    text = "<?php\nclass Box\n{\n    /**\n     * Size.\n     */\n    private $size;\n}\n"

    assert _sources(text) == ["VariableComment.MissingVar"]
