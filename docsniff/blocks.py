"""Comment block resolution and tag grouping.

:func:`locate_block` turns a doc-comment open token into a :class:`CommentBlock`
with its descriptions and ordered :class:`TagRef` values. :func:`group_tags`
partitions those tags into :class:`TagGroup` runs using the line-gap rule: a new
group starts whenever the last tag or value line before a tag is not the line
directly above it. Blocks and groups are rebuilt on every pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from docsniff.tokens import COMMENT_EMPTY_KINDS, TokenKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from docsniff.tokens import TokenStream

__all__ = [
    "CommentBlock",
    "CommentKind",
    "PrecedingComment",
    "TagGroup",
    "TagRef",
    "continuation_strings",
    "find_preceding_comment",
    "group_tags",
    "locate_block",
]


@dataclass(frozen=True, slots=True)
class TagRef:
    """Tag occurrence inside a comment block.

    Attributes
    ----------
    position : int
        Index of the tag token.
    name : str
        Tag name including ``@``; case-sensitive.
    line : int
        Line of the tag token.
    value_index : int | None
        Index of the string token holding the inline value, when the value
        starts on the tag's line.
    padding_index : int | None
        Index of the whitespace token between the tag and its value.
    end : int
        Index of the next tag, or of the close marker for the last tag.
    """

    position: int
    name: str
    line: int
    value_index: int | None
    padding_index: int | None
    end: int
    value: str = ""

    @property
    def value_span(self) -> tuple[int, int] | None:
        """Return ``(value_index, end)`` or ``None`` when the tag has no value."""
        if self.value_index is None:
            return None
        return (self.value_index, self.end)


@dataclass(frozen=True, slots=True)
class CommentBlock:
    """Resolved doc comment between ``open_index`` and ``close_index``."""

    open_index: int
    close_index: int
    tags: tuple[TagRef, ...]
    first_content: int | None = None
    short_index: int | None = None
    short_end: int | None = None
    long_index: int | None = None
    short_description: str = ""
    long_description: str = ""

    def tags_named(self, name: str) -> tuple[TagRef, ...]:
        """Return the tags called ``name`` in document order."""
        return tuple(tag for tag in self.tags if tag.name == name)


@dataclass(frozen=True, slots=True)
class TagGroup:
    """Run of tags with no blank line between consecutive members."""

    number: int
    tags: tuple[TagRef, ...]

    @property
    def max_name_length(self) -> int:
        return max((len(tag.name) for tag in self.tags), default=0)

    def __contains__(self, name: object) -> bool:
        return any(tag.name == name for tag in self.tags)


class CommentKind(StrEnum):
    """Kind of comment found in front of a declaration."""

    DOC = "doc"
    OTHER = "other"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class PrecedingComment:
    """Comment directly in front of a declaration, if any."""

    kind: CommentKind
    index: int | None = None


def locate_block(stream: TokenStream, open_index: int) -> CommentBlock:
    """Resolve the doc comment opened at ``open_index``.

    Parameters
    ----------
    stream : TokenStream
        Stream of the current pass.
    open_index : int
        Index of a :attr:`TokenKind.DOC_COMMENT_OPEN` token.

    Returns
    -------
    CommentBlock
        Block with tags and descriptions. A short description spans the
        string tokens on consecutive lines after the first content and stops
        at the first tag.
    """
    close_index = stream.comment_closer(open_index)
    tag_positions = stream.comment_tags(open_index)
    ends = (*tag_positions[1:], close_index) if tag_positions else ()
    tags = tuple(
        _tag_ref(stream, position, end) for position, end in zip(tag_positions, ends, strict=True)
    )
    first = stream.find_next(COMMENT_EMPTY_KINDS, open_index + 1, close_index, exclude=True)
    if first is None or stream[first].kind is not TokenKind.DOC_COMMENT_STRING:
        return CommentBlock(open_index, close_index, tags, first_content=first)

    first_tag = tag_positions[0] if tag_positions else close_index
    short_end = first
    short_parts = [stream[first].text]
    for cursor in range(first + 1, first_tag):
        token = stream[cursor]
        if token.kind is not TokenKind.DOC_COMMENT_STRING:
            continue
        if token.line != stream[short_end].line + 1:
            break
        short_parts.append(token.text)
        short_end = cursor

    long_index = stream.find_next(
        COMMENT_EMPTY_KINDS, short_end + 1, close_index - 1, exclude=True
    )
    long_description = ""
    if long_index is not None and stream[long_index].kind is TokenKind.DOC_COMMENT_STRING:
        long_description = " ".join(_strings_between(stream, long_index, first_tag))
    else:
        long_index = None
    return CommentBlock(
        open_index,
        close_index,
        tags,
        first_content=first,
        short_index=first,
        short_end=short_end,
        long_index=long_index,
        short_description=" ".join(short_parts),
        long_description=long_description,
    )


def _tag_ref(stream: TokenStream, position: int, end: int) -> TagRef:
    token = stream[position]
    value_index: int | None = None
    padding_index: int | None = None
    following = position + 1
    if following < end and stream[following].kind is TokenKind.DOC_COMMENT_WHITESPACE:
        padding_index = following
        following += 1
    if (
        following < end
        and stream[following].kind is TokenKind.DOC_COMMENT_STRING
        and stream[following].line == token.line
    ):
        value_index = following
    else:
        padding_index = None
    return TagRef(
        position=position,
        name=token.text,
        line=token.line,
        value_index=value_index,
        padding_index=padding_index,
        end=end,
        value=stream[value_index].text if value_index is not None else "",
    )


def _strings_between(stream: TokenStream, start: int, end: int) -> list[str]:
    return [
        stream[cursor].text
        for cursor in range(start, end)
        if stream[cursor].kind is TokenKind.DOC_COMMENT_STRING
    ]


def continuation_strings(stream: TokenStream, tag: TagRef) -> tuple[int, ...]:
    """Return the string tokens continuing ``tag``'s value on later lines."""
    start = (tag.value_index if tag.value_index is not None else tag.position) + 1
    return tuple(
        cursor
        for cursor in range(start, tag.end)
        if stream[cursor].kind is TokenKind.DOC_COMMENT_STRING
    )


def group_tags(stream: TokenStream, block: CommentBlock) -> tuple[TagGroup, ...]:
    """Partition ``block.tags`` into groups separated by blank lines.

    Parameters
    ----------
    stream : TokenStream
        Stream of the current pass.
    block : CommentBlock
        Block whose tags are grouped.

    Returns
    -------
    tuple[TagGroup, ...]
        Groups in document order, numbered from 0.
    """
    groups: list[list[TagRef]] = []
    for number, tag in enumerate(block.tags):
        if number == 0:
            groups.append([tag])
            continue
        previous_tag = block.tags[number - 1]
        previous = stream.find_previous(
            {TokenKind.DOC_COMMENT_STRING}, tag.position - 1, previous_tag.position
        )
        if previous is None:
            previous = previous_tag.position
        if stream[previous].line != tag.line - 1:
            groups.append([])
        groups[-1].append(tag)
    return tuple(TagGroup(number, tuple(members)) for number, members in enumerate(groups))


def find_preceding_comment(
    stream: TokenStream,
    index: int,
    skip: Iterable[TokenKind],
    *,
    skip_texts: Iterable[str] = (),
) -> PrecedingComment:
    """Return the comment directly in front of the declaration at ``index``.

    Parameters
    ----------
    stream : TokenStream
        Stream of the current pass.
    index : int
        Index of the declaration token.
    skip : Iterable[TokenKind]
        Kinds allowed between the comment and the declaration (whitespace,
        modifiers, type names). Attribute groups such as ``#[Pure]`` are
        always skipped.
    skip_texts : Iterable[str], optional
        Token texts also allowed in between, such as the ``|`` of a union type.

    Returns
    -------
    PrecedingComment
        ``DOC`` with the close marker index, ``OTHER`` with the comment index,
        or ``NONE``.
    """
    kinds = frozenset(skip)
    texts = frozenset(skip_texts)
    previous = index - 1
    while previous >= 0:
        token = stream[previous]
        if token.kind in kinds or token.text in texts:
            previous -= 1
            continue
        attribute = _attribute_start(stream, previous)
        if attribute is None:
            break
        previous = attribute - 1
    if previous < 0:
        return PrecedingComment(CommentKind.NONE)
    kind = stream[previous].kind
    if kind is TokenKind.DOC_COMMENT_CLOSE:
        return PrecedingComment(CommentKind.DOC, previous)
    if kind is TokenKind.COMMENT:
        return PrecedingComment(CommentKind.OTHER, previous)
    return PrecedingComment(CommentKind.NONE)


def _attribute_start(stream: TokenStream, index: int) -> int | None:
    """Return the ``#`` index of the attribute group closed at ``index``, if any."""
    if stream[index].kind is not TokenKind.CLOSE_SQUARE:
        return None
    opener = stream.matching_bracket(index)
    if opener is None or opener == 0 or stream[opener - 1].kind is not TokenKind.ATTRIBUTE:
        return None
    return opener - 1
