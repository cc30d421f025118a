"""Backward scanning: cursor, preceding identifier, argument lists."""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Iterator

from cfmlscan.document import Document
from cfmlscan.positions import Position, Range, is_identifier, is_identifier_part, is_string_delimiter

_CONTINUING_EXPRESSION = re.compile(r"(?:\.\s*|[\w$])$")


class BackwardCursor:
    """Walk a document toward its start one character at a time.

    Each line break is reported as a single ``"\\n"`` regardless of the
    line ending used in the text. :attr:`position` is the position of the
    character most recently returned. :meth:`rewind` undoes calls to
    :meth:`next`.
    """

    def __init__(self, doc: Document, position: Position) -> None:
        self._doc = doc
        line = min(max(position.line, 0), doc.line_count - 1)
        self._line_text = doc.line_at(line)
        self._line = line
        self._character = min(max(position.character, 0), len(self._line_text))
        self._history: list[tuple[int, int]] = []

    @property
    def document(self) -> Document:
        return self._doc

    @property
    def position(self) -> Position:
        return Position(self._line, self._character)

    def has_next(self) -> bool:
        return self._line > 0 or self._character > 0

    def next(self) -> str:
        """Return the previous character, or '' at the start of the document."""
        if not self.has_next():
            return ""
        self._history.append((self._line, self._character))
        if self._character > 0:
            self._character -= 1
            return self._line_text[self._character]
        self._set_line(self._line - 1)
        self._character = len(self._line_text)
        return "\n"

    def rewind(self, count: int = 1) -> None:
        """Step forward again over the last count characters returned."""
        for _ in range(min(count, len(self._history))):
            line, character = self._history.pop()
            if line != self._line:
                self._set_line(line)
            self._character = character

    def __iter__(self) -> Iterator[str]:
        while self.has_next():
            yield self.next()

    def _set_line(self, line: int) -> None:
        self._line = line
        self._line_text = self._doc.line_at(line)


def preceding_identifier_range(doc: Document, position: Position) -> Range | None:
    """Return the range of the identifier just before position, skipping whitespace."""
    cursor = BackwardCursor(doc, position)
    for ch in cursor:
        if not ch.isspace():
            break
    else:
        return None

    if not is_identifier_part(ch):
        return None
    word_range = doc.word_range_at(cursor.position)
    if word_range is not None and is_identifier(doc.get_text(word_range)):
        return word_range
    return None


def read_arguments(cursor: BackwardCursor) -> list[str]:
    """Read backward through an argument list up to its unmatched '('.

    Returns the trimmed arguments in source order, or an empty list if the
    start of the document is reached first. Quoted text is taken verbatim
    up to the next matching quote; escaped quotes are not recognised.
    """
    paren = bracket = brace = 0
    args: deque[str] = deque()
    current: deque[str] = deque()

    while cursor.has_next():
        ch = cursor.next()
        current.appendleft(ch)
        if ch == "(":
            paren -= 1
            if paren < 0:
                current.popleft()
                args.appendleft("".join(current).strip())
                return list(args)
        elif ch == ")":
            paren += 1
        elif ch == "{":
            brace -= 1
        elif ch == "}":
            brace += 1
        elif ch == "[":
            bracket -= 1
        elif ch == "]":
            bracket += 1
        elif is_string_delimiter(ch):
            for quoted in cursor:
                current.appendleft(quoted)
                if quoted == ch:
                    break
        elif ch == "," and not (paren or bracket or brace):
            current.popleft()
            args.appendleft("".join(current).strip())
            current = deque()

    return []


def is_continuing_expression(prefix: str) -> bool:
    """Return True if prefix ends mid-expression (identifier or member access)."""
    return _CONTINUING_EXPRESSION.search(prefix) is not None
