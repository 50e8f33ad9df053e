"""``@param`` tag validation against the real parameter list.

Each tag value is parsed as ``<type> <sigil-name> <description>``; the sigil is
``$`` or ``&``, optionally preceded by ``...``. Tags are matched to declared
parameters by position. Type and name columns follow the same alignment rule
as tag values: ``longest - len(entry) + 1`` spaces.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from docsniff.alignment import required_padding, shifted_indent
from docsniff.blocks import continuation_strings
from docsniff.models import FUNCTION_COMMENT, Severity
from docsniff.tokens import TokenKind
from docsniff.type_names import SCALAR_HINTS, hint_matches, normalize_union, suggest_type_hint

if TYPE_CHECKING:
    from docsniff.blocks import CommentBlock, TagRef
    from docsniff.context import SniffContext
    from docsniff.declarations import FunctionDeclaration, ParameterSignature
    from docsniff.fixer import Changeset
    from docsniff.tokens import TokenStream

__all__ = ["CommentLine", "ParamTag", "check_params", "parse_param_tags"]

PARAM_TAG = "@param"
VARIADIC_CONTINUATION = ",..."

# array(K => V) shapes may contain spaces.
_PARAM_VALUE = re.compile(
    r"^(?P<type>(?:array\([^()]*\)|(?!\.\.\.)[^\s$&])+)(?P<type_space>\s*)"
    r"(?:(?P<var>(?:\.\.\.)?[$&]\S+)(?:(?P<var_space>\s+)(?P<comment>.*))?)?"
)


@dataclass(frozen=True, slots=True)
class CommentLine:
    """One line of a ``@param`` description and the whitespace token in front of it."""

    text: str
    token: int
    indent: int


@dataclass(slots=True)
class ParamTag:
    """Parsed ``@param`` tag."""

    tag: TagRef
    type: str = ""
    type_space: int = 0
    var: str = ""
    var_space: int = 0
    comment: str = ""
    lines: list[CommentLine] = field(default_factory=list)

    @property
    def first_line(self) -> str:
        return self.lines[0].text if self.lines else ""

    def render(self, *, type_name: str, type_space: int, var_space: int) -> str:
        """Return the tag value rebuilt from its parts."""
        return f"{type_name}{' ' * type_space}{self.var}{' ' * var_space}{self.first_line}"


def parse_param_tags(
    ctx: SniffContext, block: CommentBlock
) -> tuple[list[ParamTag], int, int]:
    """Parse every ``@param`` tag of ``block``, reporting unparseable ones.

    Parameters
    ----------
    ctx : SniffContext
        Context of the current pass.
    block : CommentBlock
        Block holding the tags.

    Returns
    -------
    tuple[list[ParamTag], int, int]
        Parsed tags plus the longest type and the longest variable name.
    """
    stream = ctx.stream
    parsed: list[ParamTag] = []
    max_type = 0
    max_var = 0
    for tag in block.tags_named(PARAM_TAG):
        entry = ParamTag(tag=tag)
        parsed.append(entry)
        value_index = tag.value_index
        match = _PARAM_VALUE.match(tag.value) if value_index is not None else None
        if value_index is None or match is None:
            ctx.report(FUNCTION_COMMENT, "MissingParamType", "Missing parameter type", tag.position)
            continue
        entry.type = match.group("type")
        entry.type_space = len(match.group("type_space"))
        max_type = max(max_type, len(entry.type))
        if match.group("var") is None:
            ctx.report(FUNCTION_COMMENT, "MissingParamName", "Missing parameter name", tag.position)
            continue
        entry.var = match.group("var")
        max_var = max(max_var, len(entry.var))
        if match.group("comment") is None:
            ctx.report(
                FUNCTION_COMMENT, "MissingParamComment", "Missing parameter comment", tag.position
            )
            continue
        entry.var_space = len(match.group("var_space"))
        entry.comment = match.group("comment")
        entry.lines.append(
            CommentLine(text=entry.comment, token=value_index, indent=entry.var_space)
        )
        for index in continuation_strings(stream, tag):
            text = stream[index].text
            entry.comment += f" {text}"
            indent = _indent_of(stream, index)
            entry.lines.append(CommentLine(text=text, token=index, indent=indent))
    return parsed, max_type, max_var


def _indent_of(stream: TokenStream, index: int) -> int:
    previous = stream[index - 1]
    if previous.kind is not TokenKind.DOC_COMMENT_WHITESPACE or previous.text.endswith(
        ("\n", "\r")
    ):
        return 0
    return len(previous.text)


def check_params(ctx: SniffContext, block: CommentBlock, declaration: FunctionDeclaration) -> None:
    """Cross-check the ``@param`` tags of ``block`` against ``declaration``.

    Parameters
    ----------
    ctx : SniffContext
        Context of the current pass.
    block : CommentBlock
        Comment documenting the declaration.
    declaration : FunctionDeclaration
        Real signature.
    """
    parsed, max_type, max_var = parse_param_tags(ctx, block)
    real = declaration.parameters
    found: list[str] = []
    for position, entry in enumerate(parsed):
        if not entry.type:
            continue
        counterpart = real[position] if position < len(real) else None
        _check_type(ctx, entry, counterpart, declaration)
        if not entry.var:
            continue
        found.append(entry.var)

        spaces = required_padding(max_type, len(entry.type))
        if entry.type_space != spaces:
            changeset = _respace(
                ctx,
                entry,
                entry.render(type_name=entry.type, type_space=spaces, var_space=entry.var_space),
                required=spaces,
                current=entry.type_space,
            )
            ctx.report(
                FUNCTION_COMMENT,
                "SpacingAfterParamType",
                f"Expected {spaces} spaces after parameter type; {entry.type_space} found",
                entry.tag.position,
                changeset=changeset,
            )

        if counterpart is not None:
            _check_name(ctx, entry, counterpart)
        elif not entry.var.endswith(VARIADIC_CONTINUATION):
            ctx.report(
                FUNCTION_COMMENT,
                "ExtraParamComment",
                "Superfluous parameter comment",
                entry.tag.position,
            )

        if not entry.comment:
            continue
        spaces = required_padding(max_var, len(entry.var))
        if entry.var_space != spaces:
            changeset = _respace(
                ctx,
                entry,
                entry.render(type_name=entry.type, type_space=entry.type_space, var_space=spaces),
                required=spaces,
                current=entry.var_space,
            )
            ctx.report(
                FUNCTION_COMMENT,
                "SpacingAfterParamName",
                f"Expected {spaces} spaces after parameter name; {entry.var_space} found",
                entry.tag.position,
                changeset=changeset,
            )
        if entry.comment[:1].islower():
            ctx.report(
                FUNCTION_COMMENT,
                "ParamCommentNotCapital",
                "Parameter comment must start with a capital letter",
                entry.tag.position,
            )
        if not entry.comment.endswith("."):
            ctx.report(
                FUNCTION_COMMENT,
                "ParamCommentFullStop",
                "Parameter comment must end with a full stop",
                entry.tag.position,
            )

    reported: set[str] = set()
    for parameter in real:
        name = parameter.comparable_name
        if name in found or name in reported:
            continue
        reported.add(name)
        ctx.report(
            FUNCTION_COMMENT,
            "MissingParamTag",
            f'Doc comment for parameter "{name}" missing',
            block.open_index,
        )


def _respace(
    ctx: SniffContext, entry: ParamTag, content: str, *, required: int, current: int
) -> Changeset:
    """Return a changeset rewriting the tag value and shifting continuation lines."""
    changeset = ctx.changeset()
    if entry.tag.value_index is None:
        return changeset
    changeset.replace_token(entry.tag.value_index, content)
    for line in entry.lines[1:]:
        if line.indent == 0:
            continue
        indent = shifted_indent(line.indent, required=required, found=current)
        changeset.replace_token(line.token - 1, " " * indent)
    return changeset


def _check_type(
    ctx: SniffContext,
    entry: ParamTag,
    counterpart: ParameterSignature | None,
    declaration: FunctionDeclaration,
) -> None:
    normalized = normalize_union(entry.type)
    if normalized != entry.type and entry.tag.value_index is not None:
        content = normalized + entry.tag.value[len(entry.type) :]
        ctx.report(
            FUNCTION_COMMENT,
            "IncorrectParamVarName",
            f'Expected "{normalized}" but found "{entry.type}" for parameter type',
            entry.tag.position,
            changeset=ctx.changeset().replace_token(entry.tag.value_index, content),
        )
        return
    if "|" in normalized or counterpart is None:
        return

    suggested = suggest_type_hint(normalized, scalar_hints=ctx.config.scalar_hints)
    declared = counterpart.declared_type
    label = entry.var or counterpart.name
    if suggested and not declared:
        if suggested in SCALAR_HINTS:
            ctx.report(
                FUNCTION_COMMENT,
                "ScalarTypeHintMissing",
                f'Type hint "{suggested}" missing for {label}',
                declaration.index,
                severity=Severity.WARNING,
            )
        else:
            ctx.report(
                FUNCTION_COMMENT,
                "TypeHintMissing",
                f'Type hint "{suggested}" missing for {label}',
                declaration.index,
            )
    elif suggested and not hint_matches(declared, suggested):
        ctx.report(
            FUNCTION_COMMENT,
            "IncorrectTypeHint",
            f'Expected type hint "{suggested}"; found "{declared}" for {label}',
            declaration.index,
        )
    elif not suggested and declared:
        ctx.report(
            FUNCTION_COMMENT,
            "InvalidTypeHint",
            f'Unknown type hint "{declared}" found for {label}',
            declaration.index,
        )


def _check_name(ctx: SniffContext, entry: ParamTag, counterpart: ParameterSignature) -> None:
    real_name = counterpart.comparable_name
    if real_name == entry.var:
        return
    if real_name.lower() == entry.var.lower():
        code = "ParamNameNoCaseMatch"
        message = (
            f"Doc comment for parameter {entry.var} does not match case of "
            f"actual variable name {real_name}"
        )
    else:
        code = "ParamNameNoMatch"
        message = (
            f"Doc comment for parameter {entry.var} does not match "
            f"actual variable name {real_name}"
        )
    ctx.report(FUNCTION_COMMENT, code, message, entry.tag.position)
