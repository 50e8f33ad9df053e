"""Immutable token model and the token stream consumed by every validator.

A :class:`TokenStream` is an ordered, read-only sequence of :class:`Token`
values plus the pairings resolved once at construction time: doc-comment open
and close markers, the tags of each comment, matching parentheses and braces,
and the scope (parenthesis and body) owned by functions, closures and
class-like declarations. Validators only ever read a stream; rewrites go
through :class:`docsniff.fixer.Fixer`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import overload

__all__ = [
    "CLASS_LIKE_KINDS",
    "COMMENT_EMPTY_KINDS",
    "FUNCTION_KINDS",
    "Token",
    "TokenKind",
    "TokenStream",
]


class TokenKind(StrEnum):
    """Kinds of tokens produced by :func:`docsniff.tokenizer.tokenize`."""

    DOC_COMMENT_OPEN = "doc_comment_open"
    DOC_COMMENT_CLOSE = "doc_comment_close"
    DOC_COMMENT_STAR = "doc_comment_star"
    DOC_COMMENT_WHITESPACE = "doc_comment_whitespace"
    DOC_COMMENT_TAG = "doc_comment_tag"
    DOC_COMMENT_STRING = "doc_comment_string"
    OPEN_TAG = "open_tag"
    CLOSE_TAG = "close_tag"
    INLINE_HTML = "inline_html"
    WHITESPACE = "whitespace"
    COMMENT = "comment"
    FUNCTION = "function"
    CLOSURE = "closure"
    RETURN = "return"
    YIELD = "yield"
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    MODIFIER = "modifier"
    VAR = "var"
    STRING = "string"
    VARIABLE = "variable"
    CONSTANT_STRING = "constant_string"
    NUMBER = "number"
    OPEN_PARENTHESIS = "open_parenthesis"
    CLOSE_PARENTHESIS = "close_parenthesis"
    OPEN_CURLY = "open_curly"
    CLOSE_CURLY = "close_curly"
    OPEN_SQUARE = "open_square"
    CLOSE_SQUARE = "close_square"
    SEMICOLON = "semicolon"
    COMMA = "comma"
    ELLIPSIS = "ellipsis"
    BITWISE_AND = "bitwise_and"
    NULLABLE = "nullable"
    EQUAL = "equal"
    ATTRIBUTE = "attribute"
    OTHER = "other"


COMMENT_EMPTY_KINDS: frozenset[TokenKind] = frozenset(
    {TokenKind.DOC_COMMENT_WHITESPACE, TokenKind.DOC_COMMENT_STAR}
)
FUNCTION_KINDS: frozenset[TokenKind] = frozenset({TokenKind.FUNCTION, TokenKind.CLOSURE})
CLASS_LIKE_KINDS: frozenset[TokenKind] = frozenset(
    {TokenKind.CLASS, TokenKind.INTERFACE, TokenKind.TRAIT}
)

_OPENERS = {
    TokenKind.OPEN_PARENTHESIS: TokenKind.CLOSE_PARENTHESIS,
    TokenKind.OPEN_CURLY: TokenKind.CLOSE_CURLY,
    TokenKind.OPEN_SQUARE: TokenKind.CLOSE_SQUARE,
}
_CLOSERS = {closer: opener for opener, closer in _OPENERS.items()}


@dataclass(frozen=True, slots=True)
class Token:
    """Single lexical unit with 1-based ``line`` and ``column``."""

    kind: TokenKind
    text: str
    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Scope:
    """Parenthesis and body span owned by a declaration token."""

    parenthesis_opener: int | None = None
    parenthesis_closer: int | None = None
    scope_opener: int | None = None
    scope_closer: int | None = None


@dataclass(slots=True)
class _Pairings:
    comment_closer: dict[int, int] = field(default_factory=dict)
    comment_opener: dict[int, int] = field(default_factory=dict)
    comment_tags: dict[int, tuple[int, ...]] = field(default_factory=dict)
    brackets: dict[int, int] = field(default_factory=dict)
    scopes: dict[int, Scope] = field(default_factory=dict)
    curly_owner: dict[int, int] = field(default_factory=dict)
    enclosing_curly: list[int | None] = field(default_factory=list)
    parenthesis_depth: list[int] = field(default_factory=list)


class TokenStream(Sequence[Token]):
    """Read-only token sequence with resolved block boundaries.

    Parameters
    ----------
    tokens : Iterable[Token]
        Tokens in source order. Line and column metadata must already be set.

    Examples
    --------
    >>> from docsniff.tokenizer import tokenize
    >>> stream = tokenize("<?php\\n/**\\n * Foo.\\n */\\n")
    >>> opener = stream.find_next({TokenKind.DOC_COMMENT_OPEN}, 0)
    >>> stream[stream.comment_closer(opener)].text
    '*/'
    """

    __slots__ = ("_pairings", "_tokens")

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: tuple[Token, ...] = tuple(tokens)
        self._pairings = _resolve_pairings(self._tokens)

    @overload
    def __getitem__(self, index: int) -> Token: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Token]: ...

    def __getitem__(self, index: int | slice) -> Token | Sequence[Token]:
        return self._tokens[index]

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    @property
    def text(self) -> str:
        """Return the source text the stream was built from."""
        return "".join(token.text for token in self._tokens)

    @property
    def eol(self) -> str:
        """Return the line ending of the first line break, ``"\\n"`` by default."""
        for token in self._tokens:
            if "\r\n" in token.text:
                return "\r\n"
            if "\n" in token.text:
                return "\n"
        return "\n"

    def comment_closer(self, opener: int) -> int:
        """Return the close marker index for the comment opened at ``opener``."""
        return self._pairings.comment_closer[opener]

    def comment_opener(self, closer: int) -> int:
        """Return the open marker index for the comment closed at ``closer``."""
        return self._pairings.comment_opener[closer]

    def comment_tags(self, opener: int) -> tuple[int, ...]:
        """Return the tag token indices of the comment opened at ``opener``."""
        return self._pairings.comment_tags.get(opener, ())

    def matching_bracket(self, index: int) -> int | None:
        """Return the partner of the bracket at ``index`` or ``None`` if unmatched."""
        return self._pairings.brackets.get(index)

    def scope(self, index: int) -> Scope:
        """Return the scope owned by the declaration token at ``index``."""
        return self._pairings.scopes.get(index, Scope())

    def scope_owner(self, index: int) -> int | None:
        """Return the declaration owning the innermost brace block around ``index``."""
        curly = self._pairings.enclosing_curly[index]
        if curly is None:
            return None
        return self._pairings.curly_owner.get(curly)

    def in_parentheses(self, index: int) -> bool:
        """Return ``True`` when ``index`` sits inside at least one parenthesis pair."""
        return self._pairings.parenthesis_depth[index] > 0

    def find_next(
        self,
        kinds: Iterable[TokenKind],
        start: int,
        end: int | None = None,
        *,
        exclude: bool = False,
    ) -> int | None:
        """Return the first index in ``[start, end)`` whose kind matches.

        Parameters
        ----------
        kinds : Iterable[TokenKind]
            Kinds to look for.
        start : int
            First index to inspect.
        end : int | None, optional
            Exclusive upper bound. Defaults to the end of the stream.
        exclude : bool, optional
            When ``True`` return the first token whose kind is *not* in
            ``kinds``.

        Returns
        -------
        int | None
            Matching index or ``None``.
        """
        wanted = frozenset(kinds)
        stop = len(self._tokens) if end is None else min(end, len(self._tokens))
        for index in range(max(start, 0), stop):
            if (self._tokens[index].kind in wanted) != exclude:
                return index
        return None

    def find_previous(
        self,
        kinds: Iterable[TokenKind],
        start: int,
        end: int | None = None,
        *,
        exclude: bool = False,
    ) -> int | None:
        """Return the last index in ``[end, start]`` (walking backwards) that matches.

        Parameters
        ----------
        kinds : Iterable[TokenKind]
            Kinds to look for.
        start : int
            First index to inspect; the search walks towards the beginning.
        end : int | None, optional
            Inclusive lower bound. Defaults to ``0``.
        exclude : bool, optional
            When ``True`` return the first token whose kind is *not* in
            ``kinds``.

        Returns
        -------
        int | None
            Matching index or ``None``.
        """
        wanted = frozenset(kinds)
        stop = 0 if end is None else max(end, 0)
        for index in range(min(start, len(self._tokens) - 1), stop - 1, -1):
            if (self._tokens[index].kind in wanted) != exclude:
                return index
        return None


def _resolve_pairings(tokens: Sequence[Token]) -> _Pairings:
    pairings = _Pairings()
    bracket_stack: list[int] = []
    open_comment: int | None = None
    comment_tags: list[int] = []
    for index, token in enumerate(tokens):
        kind = token.kind
        curly_stack = [i for i in bracket_stack if tokens[i].kind is TokenKind.OPEN_CURLY]
        pairings.enclosing_curly.append(curly_stack[-1] if curly_stack else None)
        pairings.parenthesis_depth.append(
            sum(1 for i in bracket_stack if tokens[i].kind is TokenKind.OPEN_PARENTHESIS)
        )
        if kind is TokenKind.DOC_COMMENT_OPEN:
            open_comment = index
            comment_tags = []
        elif kind is TokenKind.DOC_COMMENT_TAG and open_comment is not None:
            comment_tags.append(index)
        elif kind is TokenKind.DOC_COMMENT_CLOSE and open_comment is not None:
            pairings.comment_closer[open_comment] = index
            pairings.comment_opener[index] = open_comment
            pairings.comment_tags[open_comment] = tuple(comment_tags)
            open_comment = None
        elif kind in _OPENERS:
            bracket_stack.append(index)
        elif kind in _CLOSERS:
            expected = _CLOSERS[kind]
            # Unbalanced closers are tolerated; only the nearest matching opener pairs.
            for depth in range(len(bracket_stack) - 1, -1, -1):
                if tokens[bracket_stack[depth]].kind is expected:
                    opener = bracket_stack[depth]
                    del bracket_stack[depth:]
                    pairings.brackets[opener] = index
                    pairings.brackets[index] = opener
                    break
    for index, token in enumerate(tokens):
        if token.kind in FUNCTION_KINDS:
            scope = _function_scope(tokens, pairings.brackets, index)
        elif token.kind in CLASS_LIKE_KINDS:
            scope = _class_scope(tokens, pairings.brackets, index)
        else:
            continue
        pairings.scopes[index] = scope
        if scope.scope_opener is not None:
            pairings.curly_owner[scope.scope_opener] = index
    return pairings


def _function_scope(tokens: Sequence[Token], brackets: dict[int, int], index: int) -> Scope:
    paren_open: int | None = None
    for cursor in range(index + 1, len(tokens)):
        kind = tokens[cursor].kind
        if kind is TokenKind.OPEN_PARENTHESIS:
            paren_open = cursor
            break
        if kind in {TokenKind.SEMICOLON, TokenKind.OPEN_CURLY, TokenKind.CLOSE_CURLY}:
            return Scope()
    if paren_open is None or paren_open not in brackets:
        return Scope()
    paren_close = brackets[paren_open]
    cursor = paren_close + 1
    while cursor < len(tokens):
        kind = tokens[cursor].kind
        if kind is TokenKind.SEMICOLON:
            break
        if kind is TokenKind.OPEN_CURLY:
            return Scope(paren_open, paren_close, cursor, brackets.get(cursor))
        if kind is TokenKind.OPEN_PARENTHESIS and cursor in brackets:
            cursor = brackets[cursor]
        cursor += 1
    return Scope(paren_open, paren_close)


def _class_scope(tokens: Sequence[Token], brackets: dict[int, int], index: int) -> Scope:
    for cursor in range(index + 1, len(tokens)):
        kind = tokens[cursor].kind
        if kind is TokenKind.OPEN_CURLY:
            return Scope(scope_opener=cursor, scope_closer=brackets.get(cursor))
        if kind is TokenKind.SEMICOLON:
            break
    return Scope()
