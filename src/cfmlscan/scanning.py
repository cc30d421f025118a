"""Forward scans that respect string literals and bracket nesting."""

from __future__ import annotations

from collections.abc import Iterable

from cfmlscan.context import NO_STRING, BracketPairState
from cfmlscan.document import Document
from cfmlscan.positions import CHARACTER_PAIRS, Position, opening_char


def next_unnested_position(
    doc: Document,
    start_offset: int,
    end_offset: int,
    chars: str | Iterable[str],
    include_char: bool = True,
) -> Position:
    """Return the position of the first unnested occurrence of any of chars.

    An occurrence is unnested when no string is open and the brace,
    bracket and paren counters all read zero. Pair characters that are
    themselves searched for are not counted. With include_char the
    returned position is just after the character found.

    If nothing is found the position of end_offset is returned; callers
    must treat that as "not found".
    """
    targets = frozenset([chars] if isinstance(chars, str) else chars)
    pair_chars = {ch for pair in CHARACTER_PAIRS[:3] for ch in pair}
    pairs = BracketPairState(ignored=frozenset(targets & pair_chars))
    string = NO_STRING
    text = doc.text

    for offset in range(start_offset, min(end_offset, len(text))):
        ch = text[offset]
        was_in_string = string.in_string
        string = string.advance(ch)
        if was_in_string or string.in_string:
            continue
        if pairs.feed(ch):
            continue
        if ch in targets and pairs.balanced:
            return doc.position_at(offset + 1 if include_char else offset)

    return doc.position_at(end_offset)


def closing_pair_position(doc: Document, initial_offset: int, closing_char: str) -> Position:
    """Return the position just after the close matching an opener already consumed.

    The scan starts at initial_offset, just past the opening character.
    Nested openers of the same kind must be closed first. If the pair is
    never closed, the position of initial_offset is returned unchanged.
    """
    opening = opening_char(closing_char)
    unclosed = 0
    string = NO_STRING
    text = doc.text

    for offset in range(initial_offset, len(text)):
        ch = text[offset]
        was_in_string = string.in_string
        string = string.advance(ch)
        if was_in_string or string.in_string:
            continue
        if ch == opening:
            unclosed += 1
        elif ch == closing_char:
            if unclosed == 0:
                return doc.position_at(offset + 1)
            unclosed -= 1

    return doc.position_at(initial_offset)
