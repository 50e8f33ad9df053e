"""Function comment checks (``FunctionComment.*`` codes).

Locates the doc comment of every named function, checks its placement and
``@see`` tags, then runs the parameter, return and throws validators in that
order against a :class:`~docsniff.declarations.FunctionDeclaration` snapshot.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from docsniff.blocks import CommentKind, find_preceding_comment, locate_block
from docsniff.declarations import read_function
from docsniff.models import FUNCTION_COMMENT
from docsniff.params import check_params
from docsniff.returns import check_return
from docsniff.throws import check_throws
from docsniff.tokens import TokenKind

if TYPE_CHECKING:
    from docsniff.blocks import CommentBlock
    from docsniff.context import SniffContext

__all__ = ["check_function"]

SEE_TAG = "@see"
_PREFIX_KINDS: Final[frozenset[TokenKind]] = frozenset(
    {TokenKind.WHITESPACE, TokenKind.MODIFIER}
)


def check_function(ctx: SniffContext, index: int) -> None:
    """Check the doc comment of the named function at ``index``.

    Parameters
    ----------
    ctx : SniffContext
        Context of the current pass.
    index : int
        Index of a :attr:`TokenKind.FUNCTION` token.
    """
    stream = ctx.stream
    declaration = read_function(stream, index)
    preceding = find_preceding_comment(stream, index, _PREFIX_KINDS)
    if preceding.kind is CommentKind.OTHER:
        ctx.report(
            FUNCTION_COMMENT,
            "WrongStyle",
            'You must use "/**" style comments for a function comment',
            index,
        )
        return
    if preceding.kind is CommentKind.NONE or preceding.index is None:
        ctx.report(
            FUNCTION_COMMENT,
            "Missing",
            f"Missing doc comment for function {declaration.name}()",
            index,
        )
        return

    close_index = preceding.index
    close_line = stream[close_index].line
    following = stream.find_next({TokenKind.WHITESPACE}, close_index + 1, index, exclude=True)
    following_line = stream[index if following is None else following].line
    if close_line < following_line - 1:
        blanks = [
            cursor
            for cursor in range(close_index + 1, index)
            if stream[cursor].kind is TokenKind.WHITESPACE
            and close_line < stream[cursor].line < following_line
        ]
        ctx.report(
            FUNCTION_COMMENT,
            "SpacingAfter",
            "There must be no blank lines after the function comment",
            close_index,
            changeset=ctx.changeset().blank_tokens(blanks),
        )

    block = locate_block(stream, stream.comment_opener(close_index))
    _check_sees(ctx, block)
    check_params(ctx, block, declaration)
    check_return(ctx, block, declaration)
    check_throws(ctx, block)


def _check_sees(ctx: SniffContext, block: CommentBlock) -> None:
    for tag in block.tags_named(SEE_TAG):
        if tag.value_index is None:
            ctx.report(
                FUNCTION_COMMENT,
                "EmptySees",
                "Content missing for @see tag in function comment",
                tag.position,
            )
