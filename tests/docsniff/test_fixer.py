"""Tests for transactional token rewrites."""

from __future__ import annotations

from docsniff.fixer import Changeset, FixOutcome, Fixer
from docsniff.tokenizer import tokenize

SOURCE = "<?php\n/** Foo */\n"


def test_accepted_changeset_rewrites_token_text() -> None:
    stream = tokenize(SOURCE)
    fixer = Fixer(stream)

    changeset = fixer.changeset().add_newline(2).blank_tokens([3]).add_content_before(4, " * ")

    assert fixer.propose(changeset) is FixOutcome.ACCEPTED
    assert fixer.changed
    assert fixer.text == "<?php\n/**\n * Foo */\n"
    assert fixer.current_text(4) == " * Foo"


def test_changeset_operations_on_one_token_compose() -> None:
    stream = tokenize(SOURCE)
    changeset = Changeset(stream).add_newline(4).add_content(4, "x").add_content_before(4, "<")

    assert [(edit.index, edit.original, edit.new_text) for edit in changeset.edits] == [
        (4, "Foo", "<Foo\nx")
    ]


def test_second_edit_of_a_token_is_rejected_atomically() -> None:
    """A changeset touching an already rewritten token leaves every token alone."""
    stream = tokenize(SOURCE)
    fixer = Fixer(stream)
    assert fixer.propose(fixer.changeset().replace_token(4, "Bar")) is FixOutcome.ACCEPTED

    conflicting = fixer.changeset().replace_token(6, "**/").replace_token(4, "Baz")

    assert fixer.propose(conflicting) is FixOutcome.REJECTED
    assert fixer.current_text(6) == "*/"
    assert fixer.current_text(4) == "Bar"
    assert (fixer.accepted, fixer.rejected) == (1, 1)


def test_changeset_from_another_text_is_rejected() -> None:
    fixer = Fixer(tokenize(SOURCE))
    stale = Changeset(tokenize("<?php\n/** Bar */\n")).replace_token(4, "Baz")

    assert fixer.propose(stale) is FixOutcome.REJECTED
    assert fixer.text == SOURCE


def test_empty_changeset_is_rejected() -> None:
    stream = tokenize(SOURCE)
    fixer = Fixer(stream)

    assert fixer.propose(fixer.changeset()) is FixOutcome.REJECTED
    assert fixer.propose(fixer.changeset().replace_token(4, "Foo")) is FixOutcome.REJECTED
    assert not fixer.changed


def test_newlines_follow_the_stream_line_ending() -> None:
    stream = tokenize("<?php\r\n/** Foo */\r\n")
    changeset = Changeset(stream).add_newline_before(4)

    assert changeset.edits[0].new_text == "\r\nFoo"
