"""Read declaration snapshots (functions, parameters, member variables) from a stream.

The validators never walk code tokens themselves. They receive immutable
snapshots built here: a :class:`FunctionDeclaration` with its ordered
:class:`ParameterSignature` list, and the :class:`ExitPath` that classifies the
first ``return``/``yield`` of a body.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from docsniff.tokens import CLASS_LIKE_KINDS, FUNCTION_KINDS, TokenKind

if TYPE_CHECKING:
    from docsniff.tokens import TokenStream

__all__ = [
    "ExitKind",
    "ExitPath",
    "FunctionDeclaration",
    "ParameterSignature",
    "first_exit",
    "get_method_parameters",
    "is_member_variable",
    "read_function",
]

SPECIAL_METHODS: Final[frozenset[str]] = frozenset({"__construct", "__destruct"})

_SKIPPABLE: Final[frozenset[TokenKind]] = frozenset({TokenKind.WHITESPACE, TokenKind.COMMENT})
_TYPE_KINDS: Final[frozenset[TokenKind]] = frozenset({TokenKind.STRING, TokenKind.NULLABLE})


@dataclass(frozen=True, slots=True)
class ParameterSignature:
    """Parameter as written in the declaration, independent of any comment."""

    name: str
    declared_type: str = ""
    is_variadic: bool = False
    is_by_reference: bool = False
    default: str | None = None

    @property
    def comparable_name(self) -> str:
        """Return the name compared against ``@param`` tags (``...`` for variadics)."""
        return f"...{self.name}" if self.is_variadic else self.name


@dataclass(frozen=True, slots=True)
class FunctionDeclaration:
    """Immutable snapshot of a named function or method.

    Attributes
    ----------
    index : int
        Index of the ``function`` keyword token.
    name : str
        Declared name, empty when it could not be read.
    parameters : tuple[ParameterSignature, ...]
        Parameters in declaration order.
    scope_opener : int | None
        Index of the body's ``{``; ``None`` for abstract and interface methods.
    scope_closer : int | None
        Index of the body's ``}``.
    """

    index: int
    name: str
    parameters: tuple[ParameterSignature, ...]
    scope_opener: int | None = None
    scope_closer: int | None = None

    @property
    def has_body(self) -> bool:
        return self.scope_opener is not None and self.scope_closer is not None

    @property
    def is_special(self) -> bool:
        """Return ``True`` for constructors and destructors."""
        return self.name.lower() in SPECIAL_METHODS


class ExitKind(StrEnum):
    """Classification of the first exit found in a body."""

    NONE = "none"
    BARE = "bare"
    VALUE = "value"


@dataclass(frozen=True, slots=True)
class ExitPath:
    """First ``return``/``yield`` of a body and whether it carries a value."""

    kind: ExitKind
    index: int | None = None


def read_function(stream: TokenStream, index: int) -> FunctionDeclaration:
    """Build a :class:`FunctionDeclaration` for the ``function`` token at ``index``.

    Parameters
    ----------
    stream : TokenStream
        Token stream holding the declaration.
    index : int
        Index of a :attr:`TokenKind.FUNCTION` token.

    Returns
    -------
    FunctionDeclaration
        Snapshot of the declaration.
    """
    scope = stream.scope(index)
    name = ""
    stop = scope.parenthesis_opener if scope.parenthesis_opener is not None else len(stream)
    name_index = stream.find_next({TokenKind.STRING}, index + 1, stop)
    if name_index is not None:
        name = stream[name_index].text
    return FunctionDeclaration(
        index=index,
        name=name,
        parameters=get_method_parameters(stream, index),
        scope_opener=scope.scope_opener,
        scope_closer=scope.scope_closer,
    )


def get_method_parameters(stream: TokenStream, index: int) -> tuple[ParameterSignature, ...]:
    """Return the parameters of the function or closure token at ``index``.

    Parameters
    ----------
    stream : TokenStream
        Token stream holding the declaration.
    index : int
        Index of a function or closure token.

    Returns
    -------
    tuple[ParameterSignature, ...]
        Parameters in declaration order; empty when the parameter list cannot
        be located.
    """
    scope = stream.scope(index)
    if scope.parenthesis_opener is None or scope.parenthesis_closer is None:
        return ()
    parameters: list[ParameterSignature] = []
    chunk: list[int] = []
    depth = 0
    for cursor in range(scope.parenthesis_opener + 1, scope.parenthesis_closer):
        kind = stream[cursor].kind
        if kind in {TokenKind.OPEN_PARENTHESIS, TokenKind.OPEN_SQUARE, TokenKind.OPEN_CURLY}:
            depth += 1
        elif kind in {TokenKind.CLOSE_PARENTHESIS, TokenKind.CLOSE_SQUARE, TokenKind.CLOSE_CURLY}:
            depth -= 1
        elif kind is TokenKind.COMMA and depth == 0:
            parameters.extend(_parse_parameter(stream, chunk))
            chunk = []
            continue
        chunk.append(cursor)
    parameters.extend(_parse_parameter(stream, chunk))
    return tuple(parameters)


def _parse_parameter(stream: TokenStream, indices: list[int]) -> list[ParameterSignature]:
    type_parts: list[str] = []
    name = ""
    variadic = False
    by_reference = False
    default: str | None = None
    for position, cursor in enumerate(indices):
        token = stream[cursor]
        if token.kind is TokenKind.EQUAL:
            default = "".join(stream[i].text for i in indices[position + 1 :]).strip()
            break
        if name:
            continue
        if token.kind is TokenKind.VARIABLE:
            name = token.text
        elif token.kind is TokenKind.ELLIPSIS:
            variadic = True
        elif token.kind is TokenKind.BITWISE_AND:
            by_reference = True
        elif token.kind in _TYPE_KINDS or token.text == "|":
            type_parts.append(token.text)
    if not name:
        return []
    return [
        ParameterSignature(
            name=name,
            declared_type="".join(type_parts),
            is_variadic=variadic,
            is_by_reference=by_reference,
            default=default,
        )
    ]


def first_exit(stream: TokenStream, declaration: FunctionDeclaration) -> ExitPath:
    """Return the first exit of ``declaration``'s body, skipping nested scopes.

    Exits inside closures, nested functions and anonymous classes belong to
    those scopes and are not counted.

    Parameters
    ----------
    stream : TokenStream
        Token stream holding the declaration.
    declaration : FunctionDeclaration
        Declaration whose body is scanned.

    Returns
    -------
    ExitPath
        ``ExitKind.NONE`` when the body has no exit (or no body at all),
        otherwise the first exit and whether it is bare (``return;``).
    """
    if declaration.scope_opener is None or declaration.scope_closer is None:
        return ExitPath(ExitKind.NONE)
    cursor = declaration.scope_opener + 1
    while cursor < declaration.scope_closer:
        kind = stream[cursor].kind
        if kind in FUNCTION_KINDS or kind in CLASS_LIKE_KINDS:
            nested = stream.scope(cursor).scope_closer
            if nested is not None:
                cursor = nested + 1
                continue
        elif kind in {TokenKind.RETURN, TokenKind.YIELD}:
            following = stream.find_next(_SKIPPABLE, cursor + 1, exclude=True)
            if following is not None and stream[following].kind is TokenKind.SEMICOLON:
                return ExitPath(ExitKind.BARE, cursor)
            return ExitPath(ExitKind.VALUE, cursor)
        cursor += 1
    return ExitPath(ExitKind.NONE)


def is_member_variable(stream: TokenStream, index: int) -> bool:
    """Return ``True`` when the variable at ``index`` declares a class property.

    A property sits directly in a class, interface or trait body, outside any
    parentheses, and is introduced by ``var`` or a visibility/static modifier
    (optionally followed by a type).
    """
    if stream[index].kind is not TokenKind.VARIABLE or stream.in_parentheses(index):
        return False
    owner = stream.scope_owner(index)
    if owner is None or stream[owner].kind not in CLASS_LIKE_KINDS:
        return False
    cursor = index - 1
    while cursor >= 0:
        token = stream[cursor]
        if token.kind in _SKIPPABLE or token.kind in _TYPE_KINDS or token.text == "|":
            cursor -= 1
            continue
        return token.kind in {TokenKind.MODIFIER, TokenKind.VAR}
    return False
