from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docsniff.engine import check_text

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        (["@throws \\RuntimeException When the disk is full."], []),
        (["@throws \\RuntimeException When the disk", "         is full."], []),
        (["@throws"], ["FunctionComment.InvalidThrows"]),
        (["@throws \\RuntimeException"], ["FunctionComment.EmptyThrows"]),
        (
            ["@throws \\RuntimeException when the disk is full"],
            ["FunctionComment.ThrowsNotCapital", "FunctionComment.ThrowsNoFullStop"],
        ),
    ],
)
def test_throws_tags(
    php_function: Callable[..., str], tags: list[str], expected: list[str]
) -> None:
    text = php_function([*tags, "", "@return void"], "function f()")

    assert [violation.source for violation in check_text(text)] == expected
