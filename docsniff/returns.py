"""``@return`` tag validation against the function body."""

from __future__ import annotations

from typing import TYPE_CHECKING

from docsniff.declarations import ExitKind, first_exit
from docsniff.models import FUNCTION_COMMENT
from docsniff.type_names import normalize_union

if TYPE_CHECKING:
    from docsniff.blocks import CommentBlock
    from docsniff.context import SniffContext
    from docsniff.declarations import FunctionDeclaration

__all__ = ["check_return"]

RETURN_TAG = "@return"
# Normalizes from the legacy ``boolean`` spelling; accepted as written.
_ACCEPTED_LEGACY = "bool"


def check_return(ctx: SniffContext, block: CommentBlock, declaration: FunctionDeclaration) -> None:
    """Validate the ``@return`` tag of ``block``.

    A second ``@return`` stops all further return checks. Constructors and
    destructors only get the duplicate check. The type is the first word of
    the tag value; ``void`` requires the first exit of the body to be bare and
    any type other than ``void`` or ``mixed`` requires a value-carrying exit.

    Parameters
    ----------
    ctx : SniffContext
        Context of the current pass.
    block : CommentBlock
        Comment documenting the declaration.
    declaration : FunctionDeclaration
        Declaration whose body is scanned for exits.
    """
    tags = block.tags_named(RETURN_TAG)
    if len(tags) > 1:
        ctx.report(
            FUNCTION_COMMENT,
            "DuplicateReturn",
            "Only 1 @return tag is allowed in a function comment",
            tags[1].position,
        )
        return
    if declaration.is_special:
        return
    if not tags:
        ctx.report(
            FUNCTION_COMMENT,
            "MissingReturn",
            "Missing @return tag in function comment",
            block.close_index,
        )
        return

    tag = tags[0]
    if tag.value_index is None:
        ctx.report(
            FUNCTION_COMMENT,
            "MissingReturnType",
            "Return type missing for @return tag in function comment",
            tag.position,
        )
        return

    return_type = tag.value.split(" ", 1)[0]
    suggested = normalize_union(return_type)
    if suggested != return_type and suggested != _ACCEPTED_LEGACY:
        content = suggested + tag.value[len(return_type) :]
        ctx.report(
            FUNCTION_COMMENT,
            "InvalidReturn",
            f'Expected "{suggested}" but found "{return_type}" for function return type',
            tag.position,
            changeset=ctx.changeset().replace_token(tag.value_index, content),
        )

    if not declaration.has_body:
        return
    if return_type == "void":
        if first_exit(ctx.stream, declaration).kind is ExitKind.VALUE:
            ctx.report(
                FUNCTION_COMMENT,
                "InvalidReturnVoid",
                "Function return type is void, but function contains return statement",
                tag.position,
            )
    elif return_type != "mixed":
        exit_path = first_exit(ctx.stream, declaration)
        if exit_path.kind is ExitKind.NONE:
            ctx.report(
                FUNCTION_COMMENT,
                "InvalidNoReturn",
                "Function return type is not void, but function has no return statement",
                tag.position,
            )
        elif exit_path.kind is ExitKind.BARE and exit_path.index is not None:
            ctx.report(
                FUNCTION_COMMENT,
                "InvalidReturnNotVoid",
                "Function return type is not void, but function is returning void here",
                exit_path.index,
            )
