"""Layout checks for every doc comment (``DocComment.*`` codes).

Checks run in a fixed order: emptiness, open and close marker lines, blank
lines before the close marker, the short and long descriptions, spacing before
the tags, tag grouping, value alignment within each group, and finally the
column of every line-leading star.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docsniff.alignment import misaligned_values
from docsniff.blocks import group_tags
from docsniff.models import DOC_COMMENT
from docsniff.tokens import COMMENT_EMPTY_KINDS, TokenKind

if TYPE_CHECKING:
    from docsniff.blocks import CommentBlock, TagGroup
    from docsniff.context import SniffContext
    from docsniff.fixer import Changeset
    from docsniff.tokens import TokenStream

__all__ = ["check_block", "star_column", "star_indent"]

PARAM_TAG = "@param"
_LINE_BREAKS = ("\n", "\r")
_INDENT_KINDS = frozenset({TokenKind.WHITESPACE, TokenKind.DOC_COMMENT_WHITESPACE})


def check_block(ctx: SniffContext, block: CommentBlock) -> None:
    """Report layout violations of ``block``.

    Parameters
    ----------
    ctx : SniffContext
        Context of the current pass.
    block : CommentBlock
        Block to check.
    """
    if block.first_content is None:
        ctx.report(DOC_COMMENT, "Empty", "Doc comment is empty", block.open_index)
        return
    _check_layout(ctx, block, block.first_content)
    _check_star_alignment(ctx, block)


def star_column(stream: TokenStream, block: CommentBlock) -> int:
    """Return the column every line-leading star of ``block`` must use.

    This is the column of the first star, or the column right after the open
    marker's first character when the block has no star yet.
    """
    star = stream.find_next({TokenKind.DOC_COMMENT_STAR}, block.open_index + 1, block.close_index)
    if star is not None:
        return stream[star].column
    return stream[block.open_index].column + 1


def star_indent(stream: TokenStream, block: CommentBlock) -> str:
    """Return the whitespace written before every line-leading star of ``block``.

    The first star's own indentation is reused, tabs included. A block without
    a star line indents one space past the whitespace that leads the open
    marker's line. Either way the length is ``star_column(stream, block) - 1``.
    """
    star = stream.find_next({TokenKind.DOC_COMMENT_STAR}, block.open_index + 1, block.close_index)
    if star is not None:
        leading = _leading_whitespace(stream, star)
        return " " * (stream[star].column - 1) if leading is None else leading
    leading = _leading_whitespace(stream, block.open_index)
    if leading is None:
        return " " * stream[block.open_index].column
    return leading + " "


def _leading_whitespace(stream: TokenStream, index: int) -> str | None:
    """Return the whitespace before ``index`` when it is the first token on its line."""
    previous = index - 1
    if previous < 0 or stream[previous].text.endswith(_LINE_BREAKS):
        return ""
    token = stream[previous]
    if token.kind not in _INDENT_KINDS:
        return None
    if previous > 0 and not stream[previous - 1].text.endswith(_LINE_BREAKS):
        return None
    return token.text


def _check_layout(ctx: SniffContext, block: CommentBlock, first: int) -> None:
    stream = ctx.stream
    opener = stream[block.open_index]
    closer = stream[block.close_index]
    indent = star_indent(stream, block)
    eol = stream.eol

    if stream[first].line == opener.line:
        changeset = (
            ctx.changeset()
            .add_newline(block.open_index)
            .blank_tokens(range(block.open_index + 1, first))
            .add_content_before(first, f"{indent}* ")
        )
        ctx.report(
            DOC_COMMENT,
            "ContentAfterOpen",
            "The open comment tag must be the only content on the line",
            block.open_index,
            changeset=changeset,
        )

    last = stream.find_previous(
        COMMENT_EMPTY_KINDS, block.close_index - 1, block.open_index, exclude=True
    )
    if last is None:
        return
    if stream[last].line == closer.line:
        changeset = (
            ctx.changeset()
            .blank_tokens(range(last + 1, block.close_index))
            .add_content_before(block.close_index, eol + indent)
        )
        ctx.report(
            DOC_COMMENT,
            "ContentBeforeClose",
            "The close comment tag must be the only content on the line",
            block.close_index,
            changeset=changeset,
        )

    if stream[last].line < closer.line - 1:
        blanks: list[int] = []
        for cursor in range(last + 1, block.close_index):
            if stream[cursor + 1].line == closer.line:
                break
            blanks.append(cursor)
        ctx.report(
            DOC_COMMENT,
            "SpacingAfter",
            "Additional blank lines found at end of doc comment",
            block.close_index,
            changeset=ctx.changeset().blank_tokens(blanks),
        )

    if block.short_index is None or block.short_end is None:
        message = "Missing short description in doc comment"
        ctx.report(DOC_COMMENT, "MissingShort", message, block.open_index)
        return
    short = stream[block.short_index]

    if short.line > opener.line + 1:
        blanks = [
            cursor
            for cursor in range(block.open_index, block.short_index)
            if opener.line < stream[cursor].line < short.line
        ]
        ctx.report(
            DOC_COMMENT,
            "SpacingBeforeShort",
            "Doc comment short description must be on the first line",
            block.short_index,
            changeset=ctx.changeset().blank_tokens(blanks),
        )

    if block.short_description[:1].islower():
        ctx.report(
            DOC_COMMENT,
            "ShortNotCapital",
            "Doc comment short description must start with a capital letter",
            block.short_index,
        )

    short_end_line = stream[block.short_end].line
    if block.long_index is not None:
        long_line = stream[block.long_index].line
        if long_line != short_end_line + 2:
            blanks = [
                cursor
                for cursor in range(block.short_end + 1, block.long_index)
                if short_end_line < stream[cursor].line < long_line - 1
            ]
            ctx.report(
                DOC_COMMENT,
                "SpacingBetween",
                "There must be exactly one blank line between descriptions in a doc comment",
                block.long_index,
                changeset=ctx.changeset().blank_tokens(blanks),
            )
        if block.long_description[:1].islower():
            ctx.report(
                DOC_COMMENT,
                "LongNotCapital",
                "Doc comment long description must start with a capital letter",
                block.long_index,
            )

    if not block.tags:
        return

    first_tag = block.tags[0]
    previous = stream.find_previous(
        COMMENT_EMPTY_KINDS, first_tag.position - 1, block.open_index, exclude=True
    )
    if previous is not None and first_tag.line != stream[previous].line + 2:
        ctx.report(
            DOC_COMMENT,
            "SpacingBeforeTags",
            "There must be exactly one blank line before the tags in a doc comment",
            first_tag.position,
            changeset=_single_blank_line(ctx, previous, first_tag.position, indent),
        )

    groups = group_tags(stream, block)
    param_group = _check_param_groups(ctx, groups)
    for number, group in enumerate(groups):
        if number + 1 < len(groups):
            _check_spacing_after_group(ctx, block, group, groups[number + 1], indent)
        _check_value_indent(ctx, group)

    if param_group is not None and param_group != 0:
        ctx.report(
            DOC_COMMENT,
            "ParamNotFirst",
            "Parameter tags must be defined first in a doc comment",
            groups[param_group].tags[0].position,
        )

    seen: set[str] = set()
    for number, tag in enumerate(block.tags):
        if tag.name in seen:
            if block.tags[number - 1].name != tag.name:
                ctx.report(
                    DOC_COMMENT,
                    "TagsNotGrouped",
                    "Tags must be grouped together in a doc comment",
                    tag.position,
                )
            continue
        seen.add(tag.name)


def _single_blank_line(
    ctx: SniffContext, previous: int, following: int, indent: str
) -> Changeset:
    """Return a changeset leaving exactly one blank star line between two lines."""
    stream = ctx.stream
    target_line = stream[following].line
    eol = stream.eol
    blanks = [
        cursor for cursor in range(previous + 1, following) if stream[cursor].line != target_line
    ]
    return (
        ctx.changeset()
        .blank_tokens(blanks)
        .add_content(previous, f"{eol}{indent}*{eol}")
    )


def _check_param_groups(ctx: SniffContext, groups: tuple[TagGroup, ...]) -> int | None:
    param_group: int | None = None
    for group in groups:
        if PARAM_TAG not in group:
            continue
        if param_group is None:
            param_group = group.number
            continue
        for tag in group.tags:
            if tag.name == PARAM_TAG:
                ctx.report(
                    DOC_COMMENT,
                    "ParamGroup",
                    "Parameter tags must be grouped together in a doc comment",
                    tag.position,
                )
    return param_group


def _check_spacing_after_group(
    ctx: SniffContext, block: CommentBlock, group: TagGroup, following: TagGroup, indent: str
) -> None:
    stream = ctx.stream
    next_tag = following.tags[0]
    previous = stream.find_previous(
        {TokenKind.DOC_COMMENT_TAG, TokenKind.DOC_COMMENT_STRING},
        next_tag.position - 1,
        block.open_index,
    )
    if previous is None or next_tag.line == stream[previous].line + 2:
        return
    ctx.report(
        DOC_COMMENT,
        "SpacingAfterTagGroup",
        "There must be a single blank line after a tag group",
        group.tags[-1].position,
        changeset=_single_blank_line(ctx, previous, next_tag.position, indent),
    )


def _check_value_indent(ctx: SniffContext, group: TagGroup) -> None:
    for entry in misaligned_values(ctx.stream, group):
        padding = " " * entry.expected
        changeset = ctx.changeset()
        if entry.padding_index is not None:
            changeset.replace_token(entry.padding_index, padding)
            anchor = entry.padding_index
        else:
            changeset.add_content_before(entry.value_index, padding)
            anchor = entry.value_index
        ctx.report(
            DOC_COMMENT,
            "TagValueIndent",
            f"Tag value indented incorrectly; expected {entry.expected} spaces "
            f"but found {entry.found}",
            anchor,
            changeset=changeset,
        )


def _line_indent(stream: TokenStream, index: int) -> tuple[bool, int | None]:
    """Return whether ``index`` starts its line and the index of its indent token."""
    previous = index - 1
    if previous < 0 or stream[previous].text.endswith(_LINE_BREAKS):
        return True, None
    if (
        stream[previous].kind is TokenKind.DOC_COMMENT_WHITESPACE
        and previous > 0
        and stream[previous - 1].text.endswith(_LINE_BREAKS)
    ):
        return True, previous
    return False, None


def _check_star_alignment(ctx: SniffContext, block: CommentBlock) -> None:
    stream = ctx.stream
    column = star_column(stream, block)
    padding = star_indent(stream, block)
    candidates = [
        cursor
        for cursor in range(block.open_index + 1, block.close_index + 1)
        if stream[cursor].kind in {TokenKind.DOC_COMMENT_STAR, TokenKind.DOC_COMMENT_CLOSE}
    ]
    for cursor in candidates:
        leading, indent_index = _line_indent(stream, cursor)
        if not leading or stream[cursor].column == column:
            continue
        changeset = ctx.changeset()
        if indent_index is not None:
            changeset.replace_token(indent_index, padding)
        else:
            changeset.add_content_before(cursor, padding)
        ctx.report(
            DOC_COMMENT,
            "SpaceBeforeStar",
            f"Expected {column - 1} spaces before asterisk; {stream[cursor].column - 1} found",
            cursor,
            changeset=changeset,
        )
