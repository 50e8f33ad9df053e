"""Transactional token rewrites.

A :class:`Changeset` is built for exactly one violation. It records, per
token, the text the fix was computed against and the replacement text.
:meth:`Fixer.propose` applies a changeset only when every token still holds
the recorded text and none of them was already rewritten during the current
pass; otherwise nothing is applied. Token slots never move during a pass:
inserting or deleting lines is expressed as editing the text of neighbouring
tokens, and the next pass re-tokenizes the result.

Examples
--------
>>> from docsniff.tokenizer import tokenize
>>> stream = tokenize("<?php\\n/** Foo */\\n")
>>> fixer = Fixer(stream)
>>> changeset = fixer.changeset().add_newline(2)
>>> fixer.propose(changeset)
<FixOutcome.ACCEPTED: 'accepted'>
>>> fixer.propose(fixer.changeset().replace_token(2, "/*"))
<FixOutcome.REJECTED: 'rejected'>
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Self

from docsniff._shared.logging import get_logger
from docsniff.models import TokenEdit

if TYPE_CHECKING:
    from collections.abc import Iterable

    from docsniff.tokens import TokenStream

__all__ = ["Changeset", "FixOutcome", "Fixer"]

LOGGER = get_logger(__name__)


class FixOutcome(StrEnum):
    """Result of proposing a changeset."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Changeset:
    """Ordered token edits describing the fix of one violation.

    Operations on the same token compose: ``add_newline(i)`` followed by
    ``add_content(i, "x")`` appends both. Every builder method returns the
    changeset so calls can be chained.

    Parameters
    ----------
    stream : TokenStream
        Stream the edits are computed against.
    """

    __slots__ = ("_order", "_pending", "_stream")

    def __init__(self, stream: TokenStream) -> None:
        self._stream = stream
        self._pending: dict[int, str] = {}
        self._order: list[int] = []

    def _current(self, index: int) -> str:
        return self._pending.get(index, self._stream[index].text)

    def _set(self, index: int, text: str) -> Self:
        if index not in self._pending:
            self._order.append(index)
        self._pending[index] = text
        return self

    def replace_token(self, index: int, text: str) -> Self:
        """Replace the whole text of token ``index``."""
        return self._set(index, text)

    def add_content(self, index: int, text: str) -> Self:
        """Append ``text`` to token ``index``."""
        return self._set(index, self._current(index) + text)

    def add_content_before(self, index: int, text: str) -> Self:
        """Prepend ``text`` to token ``index``."""
        return self._set(index, text + self._current(index))

    def add_newline(self, index: int) -> Self:
        """Append the stream's line ending to token ``index``."""
        return self.add_content(index, self._stream.eol)

    def add_newline_before(self, index: int) -> Self:
        """Prepend the stream's line ending to token ``index``."""
        return self.add_content_before(index, self._stream.eol)

    def blank_tokens(self, indices: Iterable[int]) -> Self:
        """Replace every token in ``indices`` with the empty string."""
        for index in indices:
            self._set(index, "")
        return self

    @property
    def edits(self) -> tuple[TokenEdit, ...]:
        """Return the edits that actually change text, in recording order."""
        return tuple(
            TokenEdit(index=index, original=self._stream[index].text, new_text=self._pending[index])
            for index in self._order
            if self._pending[index] != self._stream[index].text
        )

    def __len__(self) -> int:
        return len(self.edits)


class Fixer:
    """Own the rewritten token texts of one pass.

    Parameters
    ----------
    stream : TokenStream
        Stream of the current pass. It is never mutated; the fixer keeps its
        own copy of the token texts.
    """

    def __init__(self, stream: TokenStream) -> None:
        self._stream = stream
        self._texts: list[str] = [token.text for token in stream]
        self._touched: set[int] = set()
        self.accepted = 0
        self.rejected = 0

    def changeset(self) -> Changeset:
        """Return an empty changeset bound to this pass's stream."""
        return Changeset(self._stream)

    def current_text(self, index: int) -> str:
        """Return the text of token ``index`` including accepted edits."""
        return self._texts[index]

    def propose(self, changeset: Changeset) -> FixOutcome:
        """Apply ``changeset`` atomically or reject it without side effects.

        Parameters
        ----------
        changeset : Changeset
            Edits computed for a single violation.

        Returns
        -------
        FixOutcome
            ``ACCEPTED`` when all edits were applied, ``REJECTED`` when a token
            no longer holds its original text or was already rewritten in this
            pass (or the changeset is empty).
        """
        edits = changeset.edits
        if not edits:
            self.rejected += 1
            return FixOutcome.REJECTED
        for edit in edits:
            if edit.index in self._touched or self._texts[edit.index] != edit.original:
                self.rejected += 1
                LOGGER.debug(
                    "Changeset rejected",
                    extra={"operation": "fix", "status": "rejected", "token_index": edit.index},
                )
                return FixOutcome.REJECTED
        for edit in edits:
            self._texts[edit.index] = edit.new_text
            self._touched.add(edit.index)
        self.accepted += 1
        return FixOutcome.ACCEPTED

    @property
    def changed(self) -> bool:
        """Return ``True`` once any changeset has been accepted."""
        return self.accepted > 0

    @property
    def text(self) -> str:
        """Return the rewritten source text."""
        return "".join(self._texts)
