"""Comment range extraction, fast (regex) and accurate (character scan)."""

from __future__ import annotations

import re

from cfmlscan.context import (
    NO_STRING,
    SCRIPT_COMMENTS,
    TAG_COMMENTS,
    CommentContext,
    CommentKind,
    StringContext,
)
from cfmlscan.document import Document
from cfmlscan.positions import Position, Range, is_string_delimiter
from cfmlscan.regions import embedded_regions, is_in_ranges, normalize_ranges

_SCRIPT_LINE_COMMENT = re.compile(r"//[^\r\n]*")
_SCRIPT_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_TAG_BLOCK_COMMENT = re.compile(r"<!--[\s\S]*?-->")


def comment_ranges(
    doc: Document,
    is_script: bool = False,
    range: Range | None = None,
    fast: bool = False,
) -> list[Range]:
    """Return sorted, non-overlapping comment ranges in doc (or in range).

    The fast mode does not understand string literals, so comment-like
    text inside a string is reported as a comment.
    """
    if fast:
        return _comment_ranges_by_regex(doc, is_script, range)
    return _comment_ranges_iterated(doc, is_script, range)


def is_in_comment(doc: Document, position: Position, is_script: bool = False) -> bool:
    return is_in_ranges(comment_ranges(doc, is_script), position)


def _comment_ranges_by_regex(doc: Document, is_script: bool, range: Range | None) -> list[Range]:
    found: list[Range] = []
    work: list[tuple[Range | None, bool]] = [(range, is_script)]
    while work:
        region, script = work.pop()
        start, end = doc.bounds(region)
        text = doc.text[start:end]
        patterns = (_SCRIPT_BLOCK_COMMENT, _SCRIPT_LINE_COMMENT) if script else (_TAG_BLOCK_COMMENT,)
        for pattern in patterns:
            for m in pattern.finditer(text):
                found.append(doc.range_at(start + m.start(), start + m.end()))
        work.extend((nested, not script) for nested in embedded_regions(doc, region, script))
    return normalize_ranges(found)


def _comment_ranges_iterated(doc: Document, is_script: bool, range: Range | None) -> list[Range]:
    found: list[Range] = []
    work: list[tuple[Range | None, bool]] = [(range, is_script)]
    while work:
        region, script = work.pop()
        start, end = doc.bounds(region)
        spans = CommentScanner(doc.text, start, end, script).scan()
        ranges = [doc.range_at(s, e) for s, e in spans]

        nested = embedded_regions(doc, region, script)
        if nested:
            # Comment syntax of this mode means nothing inside the nested regions
            ranges = [r for r in ranges if not is_in_ranges(nested, r)]
            work.extend((n, not script) for n in nested if not is_in_ranges(ranges, n))
        found.extend(ranges)
    return normalize_ranges(found)


class CommentScanner:
    """Scan text[start:end] character by character for comments.

    Script mode tracks string literals so that comment openers inside
    strings are ignored. Tag mode does not track strings. Once a comment
    is open nothing else is tracked until it closes; an unterminated
    comment runs to ``end``.
    """

    def __init__(self, text: str, start: int, end: int, is_script: bool) -> None:
        self._text = text
        self._start = start
        self._end = end
        self._is_script = is_script
        self._syntaxes = SCRIPT_COMMENTS if is_script else TAG_COMMENTS
        self._string: StringContext = NO_STRING
        self._comment: CommentContext | None = None
        # Openers must start at or after this offset
        self._floor = start
        self._spans: list[tuple[int, int]] = []

    def scan(self) -> list[tuple[int, int]]:
        """Return (start, end) offset pairs of every comment found."""
        for offset in range(self._start, self._end):
            ch = self._text[offset]
            if self._comment is not None:
                self._scan_comment(offset, ch)
            elif self._string.in_string:
                self._string = self._string.advance(ch)
                if not self._string.in_string:
                    self._floor = offset + 1
            elif self._is_script and is_string_delimiter(ch):
                self._string = self._string.advance(ch)
            else:
                self._scan_opener(offset)

        if self._comment is not None:
            self._close(self._end)
        return self._spans

    def _scan_comment(self, offset: int, ch: str) -> None:
        comment = self._comment
        assert comment is not None
        if comment.kind is CommentKind.LINE:
            if ch in "\r\n":
                self._close(offset)
            return

        close = comment.syntax.close
        close_start = offset - len(close) + 1
        body_start = comment.start + len(comment.syntax.open)
        if close_start >= body_start and self._text.startswith(close, close_start):
            self._close(offset + 1)

    def _scan_opener(self, offset: int) -> None:
        for syntax in self._syntaxes:
            open_start = offset - len(syntax.open) + 1
            if open_start >= self._floor and self._text.startswith(syntax.open, open_start):
                self._comment = CommentContext(syntax, open_start)
                return

    def _close(self, end: int) -> None:
        assert self._comment is not None
        self._spans.append((self._comment.start, end))
        self._comment = None
        self._floor = end


def sanitize(doc: Document, is_script: bool = False, fast: bool = False) -> Document:
    """Return a copy of doc with every comment blanked out.

    Line breaks inside comments are kept, so offsets and positions in the
    copy match the original.
    """
    text = doc.text
    chars = list(text)
    for r in comment_ranges(doc, is_script, fast=fast):
        for offset in range(doc.offset_at(r.start), doc.offset_at(r.end)):
            if chars[offset] not in "\r\n":
                chars[offset] = " "
    return Document("".join(chars), doc.path)
