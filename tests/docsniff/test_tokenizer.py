"""Tests for docsniff.tokenizer."""

from __future__ import annotations

import pytest

from docsniff.errors import ErrorCode, TokenizeError
from docsniff.tokenizer import tokenize
from docsniff.tokens import TokenKind

SOURCE = """<html>
<?php
/**
 * @param int $x Foo.
 */
function named(int $x)
{
    $f = function ($y) { return $y; };
    $g = fn($z) => $z;
    return Foo::class . $this->function();
}
"""


def _kinds(text: str, word: str) -> list[TokenKind]:
    return [token.kind for token in tokenize(text) if token.text == word]


def test_tokens_reproduce_the_source_text() -> None:
    stream = tokenize(SOURCE)

    assert stream.text == SOURCE
    assert stream[0].kind is TokenKind.INLINE_HTML
    assert stream[1].kind is TokenKind.OPEN_TAG


def test_doc_comment_is_split_into_structural_tokens() -> None:
    stream = tokenize("<?php\n/**\n * @param int $x Foo.\n */\n")
    kinds = [token.kind for token in stream][2:13]

    assert kinds == [
        TokenKind.DOC_COMMENT_OPEN,
        TokenKind.DOC_COMMENT_WHITESPACE,
        TokenKind.DOC_COMMENT_WHITESPACE,
        TokenKind.DOC_COMMENT_STAR,
        TokenKind.DOC_COMMENT_WHITESPACE,
        TokenKind.DOC_COMMENT_TAG,
        TokenKind.DOC_COMMENT_WHITESPACE,
        TokenKind.DOC_COMMENT_STRING,
        TokenKind.DOC_COMMENT_WHITESPACE,
        TokenKind.DOC_COMMENT_WHITESPACE,
        TokenKind.DOC_COMMENT_CLOSE,
    ]
    tag = stream[7]
    assert (tag.text, tag.line, tag.column) == ("@param", 3, 4)
    value = stream[9]
    assert (value.text, value.line, value.column) == ("int $x Foo.", 3, 11)


def test_doc_comment_string_never_carries_trailing_whitespace() -> None:
    stream = tokenize("<?php\n/**\n * Summary.   \n */\n")
    strings = [token for token in stream if token.kind is TokenKind.DOC_COMMENT_STRING]

    assert [token.text for token in strings] == ["Summary."]
    following = stream[stream.find_next({TokenKind.DOC_COMMENT_STRING}, 0) + 1]
    assert following.text == "   "


def test_whitespace_is_split_at_line_breaks() -> None:
    stream = tokenize("<?php  \n\n  $x;")
    blanks = [token.text for token in stream if token.kind is TokenKind.WHITESPACE]

    assert blanks == ["  \n", "\n", "  "]


def test_pairings_link_comment_markers_and_tags() -> None:
    stream = tokenize(SOURCE)
    opener = stream.find_next({TokenKind.DOC_COMMENT_OPEN}, 0)
    assert opener is not None
    closer = stream.comment_closer(opener)

    assert stream[closer].kind is TokenKind.DOC_COMMENT_CLOSE
    assert stream.comment_opener(closer) == opener
    assert [stream[index].text for index in stream.comment_tags(opener)] == ["@param"]


def test_function_keyword_classification() -> None:
    assert _kinds(SOURCE, "function") == [
        TokenKind.FUNCTION,
        TokenKind.CLOSURE,
        TokenKind.STRING,
    ]
    assert _kinds(SOURCE, "fn") == [TokenKind.CLOSURE]
    assert _kinds(SOURCE, "class") == [TokenKind.STRING]


def test_function_scope_is_resolved() -> None:
    stream = tokenize(SOURCE)
    function = stream.find_next({TokenKind.FUNCTION}, 0)
    assert function is not None
    scope = stream.scope(function)

    assert scope.parenthesis_opener is not None
    assert scope.scope_opener is not None
    assert scope.scope_closer is not None
    assert stream[scope.scope_opener].text == "{"
    assert stream.matching_bracket(scope.scope_opener) == scope.scope_closer


def test_line_endings_follow_the_first_line_break() -> None:
    assert tokenize("<?php\r\n$x;\r\n").eol == "\r\n"
    assert tokenize("<?php\n$x;\n").eol == "\n"
    assert tokenize("<?php $x;").eol == "\n"


def test_empty_comment_is_not_a_doc_comment() -> None:
    stream = tokenize("<?php /**/ $x;")

    assert stream.find_next({TokenKind.DOC_COMMENT_OPEN}, 0) is None
    assert any(token.kind is TokenKind.COMMENT for token in stream)


@pytest.mark.parametrize(
    "text",
    [
        "<?php\n/**\n * Never closed.\n",
        "<?php\n$x = 'open;\n",
        "<?php\n/* never closed\n",
    ],
)
def test_unterminated_constructs_raise(text: str) -> None:
    with pytest.raises(TokenizeError) as excinfo:
        tokenize(text)

    assert excinfo.value.code is ErrorCode.TOKENIZE_FAILED
    assert excinfo.value.line == 2


def test_attribute_marker_is_not_a_comment() -> None:
    assert _kinds("<?php\n#[Pure]\nfunction f() {}\n", "#") == [TokenKind.ATTRIBUTE]
    assert _kinds("<?php\n# note\n", "# note") == [TokenKind.COMMENT]


def test_function_import_is_not_a_declaration() -> None:
    assert _kinds("<?php\nuse function App\\helper;\n", "function") == [TokenKind.STRING]
