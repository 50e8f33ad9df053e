"""Value types shared by the sniffs, the fixer and the reporters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

__all__ = [
    "CODE_CATALOG",
    "DOC_COMMENT",
    "FUNCTION_COMMENT",
    "VARIABLE_COMMENT",
    "CodeInfo",
    "Severity",
    "TokenEdit",
    "Violation",
]

DOC_COMMENT: Final[str] = "DocComment"
FUNCTION_COMMENT: Final[str] = "FunctionComment"
VARIABLE_COMMENT: Final[str] = "VariableComment"


class Severity(StrEnum):
    """Severity attached to a violation."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class TokenEdit:
    """Replacement of one token's text, computed against ``original``."""

    index: int
    original: str
    new_text: str


@dataclass(frozen=True, slots=True)
class Violation:
    """Single finding reported by a sniff.

    Attributes
    ----------
    sniff : str
        Sniff family, e.g. ``"DocComment"``.
    code : str
        Code within the family, e.g. ``"ContentAfterOpen"``.
    message : str
        Human-readable description.
    index : int
        Index of the token the violation is anchored on.
    line : int
        1-based line of that token.
    column : int
        1-based column of that token.
    severity : Severity
        ``error`` or ``warning``.
    fixable : bool
        Whether a deterministic fix exists.
    edits : tuple[TokenEdit, ...]
        Token edits of the fix; empty for non-fixable violations.
    """

    sniff: str
    code: str
    message: str
    index: int
    line: int
    column: int
    severity: Severity = Severity.ERROR
    fixable: bool = False
    edits: tuple[TokenEdit, ...] = ()

    @property
    def source(self) -> str:
        """Return the stable ``"<Sniff>.<Code>"`` identifier."""
        return f"{self.sniff}.{self.code}"


@dataclass(frozen=True, slots=True)
class CodeInfo:
    """Catalog entry describing one violation code."""

    source: str
    severity: Severity
    fixable: bool
    summary: str


def _info(source: str, summary: str, *, fixable: bool = False, warning: bool = False) -> CodeInfo:
    severity = Severity.WARNING if warning else Severity.ERROR
    return CodeInfo(source=source, severity=severity, fixable=fixable, summary=summary)


CODE_CATALOG: Final[tuple[CodeInfo, ...]] = (
    _info("DocComment.Empty", "Doc comment is empty"),
    _info("DocComment.ContentAfterOpen", "Content on the open marker line", fixable=True),
    _info("DocComment.ContentBeforeClose", "Content on the close marker line", fixable=True),
    _info("DocComment.SpacingAfter", "Blank lines before the close marker", fixable=True),
    _info("DocComment.MissingShort", "Missing short description"),
    _info("DocComment.SpacingBeforeShort", "Short description not on the first line", fixable=True),
    _info("DocComment.ShortNotCapital", "Short description starts lower-case"),
    _info("DocComment.SpacingBetween", "Not one blank line between descriptions", fixable=True),
    _info("DocComment.LongNotCapital", "Long description starts lower-case"),
    _info("DocComment.SpacingBeforeTags", "Not one blank line before the tags", fixable=True),
    _info("DocComment.ParamGroup", "Parameter tags split across groups"),
    _info("DocComment.ParamNotFirst", "Parameter group is not the first group"),
    _info("DocComment.TagValueIndent", "Tag value not aligned within its group", fixable=True),
    _info("DocComment.SpacingAfterTagGroup", "Not one blank line after a tag group", fixable=True),
    _info("DocComment.TagsNotGrouped", "Same-name tags interrupted by another tag"),
    _info("DocComment.SpaceBeforeStar", "Star not aligned with the block", fixable=True),
    _info("FunctionComment.Missing", "Function has no doc comment"),
    _info("FunctionComment.WrongStyle", "Function comment is not a doc comment"),
    _info("FunctionComment.SpacingAfter", "Blank lines after the function comment", fixable=True),
    _info("FunctionComment.EmptySees", "@see tag without content"),
    _info("FunctionComment.MissingParamType", "@param tag without type"),
    _info("FunctionComment.MissingParamName", "@param tag without variable name"),
    _info("FunctionComment.MissingParamComment", "@param tag without description"),
    _info("FunctionComment.IncorrectParamVarName", "@param type not normalized", fixable=True),
    _info("FunctionComment.TypeHintMissing", "Parameter type declaration missing"),
    _info(
        "FunctionComment.ScalarTypeHintMissing",
        "Scalar parameter type declaration missing",
        warning=True,
    ),
    _info("FunctionComment.IncorrectTypeHint", "Parameter type declaration differs"),
    _info("FunctionComment.InvalidTypeHint", "Unexpected parameter type declaration"),
    _info("FunctionComment.SpacingAfterParamType", "Spacing after @param type", fixable=True),
    _info("FunctionComment.ParamNameNoMatch", "@param name differs from the parameter"),
    _info("FunctionComment.ParamNameNoCaseMatch", "@param name differs only in case"),
    _info("FunctionComment.ExtraParamComment", "Superfluous @param tag"),
    _info("FunctionComment.SpacingAfterParamName", "Spacing after @param name", fixable=True),
    _info("FunctionComment.ParamCommentNotCapital", "@param description starts lower-case"),
    _info("FunctionComment.ParamCommentFullStop", "@param description lacks a full stop"),
    _info("FunctionComment.MissingParamTag", "Parameter without @param tag"),
    _info("FunctionComment.DuplicateReturn", "More than one @return tag"),
    _info("FunctionComment.MissingReturn", "Missing @return tag"),
    _info("FunctionComment.MissingReturnType", "@return tag without type"),
    _info("FunctionComment.InvalidReturn", "@return type not normalized", fixable=True),
    _info("FunctionComment.InvalidReturnVoid", "void function returns a value"),
    _info("FunctionComment.InvalidNoReturn", "Non-void function has no return"),
    _info("FunctionComment.InvalidReturnNotVoid", "Non-void function returns nothing"),
    _info("FunctionComment.InvalidThrows", "@throws tag without exception type"),
    _info("FunctionComment.EmptyThrows", "@throws tag without description"),
    _info("FunctionComment.ThrowsNotCapital", "@throws description starts lower-case"),
    _info("FunctionComment.ThrowsNoFullStop", "@throws description lacks a full stop"),
    _info("VariableComment.Missing", "Member variable has no doc comment"),
    _info("VariableComment.WrongStyle", "Member variable comment is not a doc comment"),
    _info("VariableComment.DuplicateVar", "More than one @var tag"),
    _info("VariableComment.EmptySees", "@see tag without content"),
    _info("VariableComment.TagNotAllowed", "Tag not allowed on a member variable", warning=True),
    _info("VariableComment.MissingVar", "Missing @var tag"),
    _info("VariableComment.VarOrder", "@var is not the first tag"),
    _info("VariableComment.EmptyVar", "@var tag without content"),
    _info("VariableComment.IncorrectVarType", "@var type not normalized", fixable=True),
)
