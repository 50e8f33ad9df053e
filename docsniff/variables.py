"""Member variable comment checks (``VariableComment.*`` codes)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from docsniff.blocks import CommentKind, find_preceding_comment, locate_block
from docsniff.models import VARIABLE_COMMENT, Severity
from docsniff.tokens import TokenKind
from docsniff.type_names import normalize_union

if TYPE_CHECKING:
    from docsniff.context import SniffContext

__all__ = ["check_variable"]

VAR_TAG = "@var"
SEE_TAG = "@see"
_PREFIX_KINDS: Final[frozenset[TokenKind]] = frozenset(
    {
        TokenKind.WHITESPACE,
        TokenKind.MODIFIER,
        TokenKind.VAR,
        TokenKind.STRING,
        TokenKind.NULLABLE,
    }
)
_UNION = ("|",)


def check_variable(ctx: SniffContext, index: int) -> None:
    """Check the doc comment of the member variable at ``index``.

    Only ``@var`` and ``@see`` belong in a property comment. ``@var`` is
    required, must come first and must carry a normalized type.
    """
    stream = ctx.stream
    preceding = find_preceding_comment(stream, index, _PREFIX_KINDS, skip_texts=_UNION)
    if preceding.kind is CommentKind.OTHER:
        ctx.report(
            VARIABLE_COMMENT,
            "WrongStyle",
            'You must use "/**" style comments for a member variable comment',
            index,
        )
        return
    if preceding.kind is CommentKind.NONE or preceding.index is None:
        ctx.report(VARIABLE_COMMENT, "Missing", "Missing member variable doc comment", index)
        return

    block = locate_block(stream, stream.comment_opener(preceding.index))
    var_tag = None
    for tag in block.tags:
        if tag.name == VAR_TAG:
            if var_tag is None:
                var_tag = tag
                continue
            ctx.report(
                VARIABLE_COMMENT,
                "DuplicateVar",
                "Only one @var tag is allowed in a member variable comment",
                tag.position,
            )
        elif tag.name == SEE_TAG:
            if tag.value_index is None:
                ctx.report(
                    VARIABLE_COMMENT,
                    "EmptySees",
                    "Content missing for @see tag in member variable comment",
                    tag.position,
                )
        else:
            ctx.report(
                VARIABLE_COMMENT,
                "TagNotAllowed",
                f"{tag.name} tag is not allowed in member variable comment",
                tag.position,
                severity=Severity.WARNING,
            )

    if var_tag is None:
        ctx.report(
            VARIABLE_COMMENT,
            "MissingVar",
            "Missing @var tag in member variable comment",
            block.close_index,
        )
        return
    if block.tags[0].name != VAR_TAG:
        ctx.report(
            VARIABLE_COMMENT,
            "VarOrder",
            "The @var tag must be the first tag in a member variable comment",
            var_tag.position,
        )
    if var_tag.value_index is None:
        ctx.report(
            VARIABLE_COMMENT,
            "EmptyVar",
            "Content missing for @var tag in member variable comment",
            var_tag.position,
        )
        return

    var_type = var_tag.value.split(" ", 1)[0]
    suggested = normalize_union(var_type)
    if suggested != var_type:
        ctx.report(
            VARIABLE_COMMENT,
            "IncorrectVarType",
            f'Expected "{suggested}" but found "{var_type}" for @var tag in member variable '
            "comment",
            var_tag.value_index,
            changeset=ctx.changeset().replace_token(
                var_tag.value_index, suggested + var_tag.value[len(var_type) :]
            ),
        )
