"""``@throws`` tag validation."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from docsniff.blocks import continuation_strings
from docsniff.models import FUNCTION_COMMENT

if TYPE_CHECKING:
    from docsniff.blocks import CommentBlock
    from docsniff.context import SniffContext

__all__ = ["check_throws"]

THROWS_TAG = "@throws"
_THROWS_VALUE = re.compile(r"(?P<exception>\S+)(?:\s+(?P<comment>.*))?")


def check_throws(ctx: SniffContext, block: CommentBlock) -> None:
    """Validate every ``@throws`` tag of ``block``.

    The value is ``<exception> <description>``. The description may continue
    on later lines up to the next tag; the joined text must start with a
    capital letter and end with a full stop.
    """
    stream = ctx.stream
    for tag in block.tags_named(THROWS_TAG):
        match = _THROWS_VALUE.match(tag.value) if tag.value_index is not None else None
        if tag.value_index is None or match is None:
            ctx.report(
                FUNCTION_COMMENT,
                "InvalidThrows",
                "Exception type and comment missing for @throws tag in function comment",
                tag.position,
            )
            continue
        comment = (match.group("comment") or "").strip()
        if not comment:
            ctx.report(
                FUNCTION_COMMENT,
                "EmptyThrows",
                "Comment missing for @throws tag in function comment",
                tag.position,
            )
            continue
        for index in continuation_strings(stream, tag):
            comment += f" {stream[index].text}"
        if comment[:1].islower():
            ctx.report(
                FUNCTION_COMMENT,
                "ThrowsNotCapital",
                "@throws tag comment must start with a capital letter",
                tag.value_index,
            )
        if not comment.endswith("."):
            ctx.report(
                FUNCTION_COMMENT,
                "ThrowsNoFullStop",
                "@throws tag comment must end with a full stop",
                tag.value_index,
            )
