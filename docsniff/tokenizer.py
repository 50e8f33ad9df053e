"""Split PHP-style source text into a :class:`~docsniff.tokens.TokenStream`.

The tokenizer is deliberately shallow: it recognises what the sniffs need
(doc comments broken into open/star/whitespace/tag/string/close tokens, other
comments, variables, keywords that start declarations or exits, literals and
punctuation) and lumps everything else into :attr:`TokenKind.OTHER`.

Whitespace is split at line breaks so that every line break ends its own
token. Inside doc comments the string token of a line never carries the
trailing whitespace; that whitespace and the line break are separate tokens.
"""

from __future__ import annotations

import re
from typing import Final, NoReturn

from docsniff._shared.logging import get_logger
from docsniff.errors import TokenizeError
from docsniff.tokens import Token, TokenKind, TokenStream

__all__ = ["tokenize"]

LOGGER = get_logger(__name__)

_KEYWORDS: Final[dict[str, TokenKind]] = {
    "return": TokenKind.RETURN,
    "yield": TokenKind.YIELD,
    "class": TokenKind.CLASS,
    "interface": TokenKind.INTERFACE,
    "trait": TokenKind.TRAIT,
    "var": TokenKind.VAR,
    "public": TokenKind.MODIFIER,
    "protected": TokenKind.MODIFIER,
    "private": TokenKind.MODIFIER,
    "static": TokenKind.MODIFIER,
    "abstract": TokenKind.MODIFIER,
    "final": TokenKind.MODIFIER,
    "readonly": TokenKind.MODIFIER,
}

_PUNCTUATION: Final[dict[str, TokenKind]] = {
    "(": TokenKind.OPEN_PARENTHESIS,
    ")": TokenKind.CLOSE_PARENTHESIS,
    "{": TokenKind.OPEN_CURLY,
    "}": TokenKind.CLOSE_CURLY,
    "[": TokenKind.OPEN_SQUARE,
    "]": TokenKind.CLOSE_SQUARE,
    ";": TokenKind.SEMICOLON,
    ",": TokenKind.COMMA,
    "...": TokenKind.ELLIPSIS,
    "&": TokenKind.BITWISE_AND,
    "?": TokenKind.NULLABLE,
    "=": TokenKind.EQUAL,
}

_OPEN_TAG = re.compile(r"<\?php\b|<\?=|<\?", re.IGNORECASE)
_NEWLINE = re.compile(r"\r\n|\n|\r")
_WHITESPACE = re.compile(r"[ \t\f\v]*(?:\r\n|\n|\r)|[ \t\f\v]+")
_IDENTIFIER = re.compile(r"\\?[A-Za-z_\x80-\uffff][\w\\\x80-\uffff]*")
_VARIABLE = re.compile(r"\$[A-Za-z_\x80-\uffff][\w\x80-\uffff]*")
_NUMBER = re.compile(
    r"0[xX][0-9a-fA-F_]+|0[bB][01_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?|\.\d+"
)
_HEREDOC = re.compile(r"<<<[ \t]*(['\"]?)([A-Za-z_]\w*)\1(?:\r\n|\n|\r)")
_OPERATOR = re.compile(
    r"\?->|\?\?=|\.\.\.|<=>|===|!==|\*\*=|<<=|>>="
    r"|=>|->|::|==|!=|<>|<=|>=|&&|\|\||\?\?|\+\+|--|\+=|-=|\*=|/=|\.=|%=|&=|\|=|\^=|<<|>>|\*\*"
)
_DOC_TAG = re.compile(r"@[\w\\-]+")


class _Emitter:
    """Collect tokens while tracking 1-based line and column."""

    def __init__(self) -> None:
        self.tokens: list[Token] = []
        self.line = 1
        self.column = 1

    def emit(self, kind: TokenKind, text: str) -> None:
        if not text:
            return
        self.tokens.append(Token(kind=kind, text=text, line=self.line, column=self.column))
        breaks = list(_NEWLINE.finditer(text))
        if breaks:
            self.line += len(breaks)
            self.column = len(text) - breaks[-1].end() + 1
        else:
            self.column += len(text)

    def emit_whitespace(self, kind: TokenKind, text: str) -> None:
        for match in _WHITESPACE.finditer(text):
            self.emit(kind, match.group(0))


def tokenize(text: str) -> TokenStream:
    """Tokenize ``text`` into a :class:`TokenStream`.

    Parameters
    ----------
    text : str
        Full source text. Content before the first ``<?php`` tag (and after a
        ``?>`` tag) is kept as inline HTML.

    Returns
    -------
    TokenStream
        Tokens with line/column metadata and resolved pairings. Joining the
        token texts reproduces ``text`` exactly.

    Raises
    ------
    TokenizeError
        If a comment, string literal or heredoc is not terminated.
    """
    emitter = _Emitter()
    position = 0
    length = len(text)
    while position < length:
        match = _OPEN_TAG.search(text, position)
        if match is None:
            emitter.emit(TokenKind.INLINE_HTML, text[position:])
            break
        emitter.emit(TokenKind.INLINE_HTML, text[position : match.start()])
        emitter.emit(TokenKind.OPEN_TAG, match.group(0))
        position = _tokenize_code(text, match.end(), emitter)
    stream = TokenStream(emitter.tokens)
    LOGGER.debug(
        "Tokenized source",
        extra={"operation": "tokenize", "token_count": len(stream), "line_count": emitter.line},
    )
    return stream


def _tokenize_code(text: str, position: int, emitter: _Emitter) -> int:
    """Tokenize PHP code from ``position`` up to a close tag or the end of ``text``."""
    length = len(text)
    while position < length:
        char = text[position]
        if text.startswith("?>", position):
            emitter.emit(TokenKind.CLOSE_TAG, "?>")
            return position + 2
        if char in " \t\r\n\f\v":
            end = position
            while end < length and text[end] in " \t\r\n\f\v":
                end += 1
            emitter.emit_whitespace(TokenKind.WHITESPACE, text[position:end])
            position = end
        elif text.startswith("/**", position) and not text.startswith("/**/", position):
            position = _tokenize_doc_comment(text, position, emitter)
        elif text.startswith("/*", position):
            end = text.find("*/", position + 2)
            if end < 0:
                _fail("Unterminated block comment", emitter)
            emitter.emit(TokenKind.COMMENT, text[position : end + 2])
            position = end + 2
        elif text.startswith("//", position) or (
            char == "#" and not text.startswith("#[", position)
        ):
            end = position
            while end < length and text[end] not in "\r\n" and not text.startswith("?>", end):
                end += 1
            emitter.emit(TokenKind.COMMENT, text[position:end])
            position = end
        elif text.startswith("#[", position):
            emitter.emit(TokenKind.ATTRIBUTE, "#")
            position += 1
        elif char in {"'", '"', "`"}:
            end = _string_end(text, position, char)
            if end < 0:
                _fail("Unterminated string literal", emitter)
            emitter.emit(TokenKind.CONSTANT_STRING, text[position:end])
            position = end
        elif text.startswith("<<<", position):
            position = _tokenize_heredoc(text, position, emitter)
        elif (match := _VARIABLE.match(text, position)) is not None:
            emitter.emit(TokenKind.VARIABLE, match.group(0))
            position = match.end()
        elif (match := _IDENTIFIER.match(text, position)) is not None:
            word = match.group(0)
            emitter.emit(_classify_word(text, match.end(), word, emitter), word)
            position = match.end()
        elif (match := _NUMBER.match(text, position)) is not None:
            emitter.emit(TokenKind.NUMBER, match.group(0))
            position = match.end()
        elif (match := _OPERATOR.match(text, position)) is not None:
            operator = match.group(0)
            emitter.emit(_PUNCTUATION.get(operator, TokenKind.OTHER), operator)
            position = match.end()
        else:
            emitter.emit(_PUNCTUATION.get(char, TokenKind.OTHER), char)
            position += 1
    return position


def _classify_word(text: str, end: int, word: str, emitter: _Emitter) -> TokenKind:
    lowered = word.lower()
    previous = _previous_significant(emitter)
    if previous is not None and previous.text in {"->", "?->", "::"}:
        return TokenKind.STRING
    if previous is not None and previous.text.lower() == "use" and lowered == "function":
        return TokenKind.STRING
    if lowered in {"function", "fn"}:
        following = text[end:].lstrip(" \t\r\n")
        if following.startswith("("):
            return TokenKind.CLOSURE
        if following.startswith("&") and following[1:].lstrip(" \t\r\n").startswith("("):
            return TokenKind.CLOSURE
        return TokenKind.FUNCTION if lowered == "function" else TokenKind.STRING
    return _KEYWORDS.get(lowered, TokenKind.STRING)


def _previous_significant(emitter: _Emitter) -> Token | None:
    for token in reversed(emitter.tokens):
        if token.kind not in {TokenKind.WHITESPACE, TokenKind.COMMENT}:
            return token
    return None


def _string_end(text: str, position: int, quote: str) -> int:
    cursor = position + 1
    length = len(text)
    while cursor < length:
        char = text[cursor]
        if char == "\\":
            cursor += 2
            continue
        if char == quote:
            return cursor + 1
        cursor += 1
    return -1


def _tokenize_heredoc(text: str, position: int, emitter: _Emitter) -> int:
    match = _HEREDOC.match(text, position)
    if match is None:
        emitter.emit(TokenKind.OTHER, "<<<")
        return position + 3
    closer = re.compile(rf"^[ \t]*{re.escape(match.group(2))}\b", re.MULTILINE)
    end = closer.search(text, match.end())
    if end is None:
        _fail("Unterminated heredoc", emitter)
    emitter.emit(TokenKind.CONSTANT_STRING, text[position : end.end()])
    return end.end()


def _tokenize_doc_comment(text: str, position: int, emitter: _Emitter) -> int:
    close = text.find("*/", position + 3)
    if close < 0:
        _fail("Unterminated doc comment", emitter)
    emitter.emit(TokenKind.DOC_COMMENT_OPEN, "/**")
    body = text[position + 3 : close]
    lines = _NEWLINE.split(body)
    breaks = [match.group(0) for match in _NEWLINE.finditer(body)]
    for number, line in enumerate(lines):
        _tokenize_doc_line(line, emitter, allow_star=number > 0)
        if number < len(breaks):
            emitter.emit(TokenKind.DOC_COMMENT_WHITESPACE, breaks[number])
    emitter.emit(TokenKind.DOC_COMMENT_CLOSE, "*/")
    return close + 2


def _tokenize_doc_line(line: str, emitter: _Emitter, *, allow_star: bool) -> None:
    content = line.lstrip(" \t")
    emitter.emit(TokenKind.DOC_COMMENT_WHITESPACE, line[: len(line) - len(content)])
    if allow_star and content.startswith("*"):
        emitter.emit(TokenKind.DOC_COMMENT_STAR, "*")
        rest = content[1:]
        content = rest.lstrip(" \t")
        emitter.emit(TokenKind.DOC_COMMENT_WHITESPACE, rest[: len(rest) - len(content)])
    stripped = content.rstrip(" \t")
    trailing = content[len(stripped) :]
    tag = _DOC_TAG.match(stripped)
    if tag is not None:
        emitter.emit(TokenKind.DOC_COMMENT_TAG, tag.group(0))
        value = stripped[tag.end() :]
        string = value.lstrip(" \t")
        emitter.emit(TokenKind.DOC_COMMENT_WHITESPACE, value[: len(value) - len(string)])
        emitter.emit(TokenKind.DOC_COMMENT_STRING, string)
    else:
        emitter.emit(TokenKind.DOC_COMMENT_STRING, stripped)
    emitter.emit(TokenKind.DOC_COMMENT_WHITESPACE, trailing)


def _fail(message: str, emitter: _Emitter) -> NoReturn:
    raise TokenizeError(message, line=emitter.line, column=emitter.column)
