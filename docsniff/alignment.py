"""Column alignment arithmetic shared by tag groups and ``@param`` columns.

Within one group every value starts one column after the longest entry, so
the padding an entry needs is ``longest - len(entry) + 1``.

Examples
--------
>>> required_padding(7, 6)
2
>>> shifted_indent(12, required=1, found=3)
10
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docsniff.blocks import TagGroup
    from docsniff.tokens import TokenStream

__all__ = ["Misalignment", "misaligned_values", "required_padding", "shifted_indent"]


def required_padding(longest: int, length: int) -> int:
    """Return the spaces needed after an entry of ``length`` in a column of ``longest``."""
    return longest - length + 1


def shifted_indent(indent: int, *, required: int, found: int) -> int:
    """Return a continuation-line indent moved by the padding delta, never below 0."""
    return max(indent + required - found, 0)


@dataclass(frozen=True, slots=True)
class Misalignment:
    """Tag whose value does not start at the group's value column."""

    tag_index: int
    padding_index: int | None
    value_index: int
    expected: int
    found: int


def misaligned_values(stream: TokenStream, group: TagGroup) -> list[Misalignment]:
    """Return every tag of ``group`` whose inline value is padded incorrectly.

    Tags without an inline value need no padding and are skipped.

    Parameters
    ----------
    stream : TokenStream
        Stream of the current pass.
    group : TagGroup
        Group to inspect.

    Returns
    -------
    list[Misalignment]
        Offending tags in document order.
    """
    longest = group.max_name_length
    found: list[Misalignment] = []
    for tag in group.tags:
        if tag.value_index is None:
            continue
        padding = len(stream[tag.padding_index].text) if tag.padding_index is not None else 0
        expected = required_padding(longest, len(tag.name))
        if padding != expected:
            found.append(
                Misalignment(
                    tag_index=tag.position,
                    padding_index=tag.padding_index,
                    value_index=tag.value_index,
                    expected=expected,
                    found=padding,
                )
            )
    return found
