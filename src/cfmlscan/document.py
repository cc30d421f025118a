"""In-memory text buffer with offset/position conversion."""

from __future__ import annotations

import bisect
import re
from pathlib import Path

from cfmlscan.positions import Position, Range

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_WORD = re.compile(r"[$\w]+")


class Document:
    """A snapshot of source text plus the file it came from (if any).

    Lines are split on ``\\n``, ``\\r\\n`` and ``\\r``. Characters are
    counted in code points.
    """

    def __init__(self, text: str, path: Path | str | None = None) -> None:
        self._text = text
        self.path = Path(path) if path is not None else None
        # Offset of the first character of each line, and of each line end
        self._line_starts = [0]
        self._line_ends: list[int] = []
        for m in _LINE_BREAK.finditer(text):
            self._line_ends.append(m.start())
            self._line_starts.append(m.end())
        self._line_ends.append(len(text))

    @classmethod
    def from_file(cls, path: Path | str) -> Document:
        path = Path(path)
        return cls(path.read_text(encoding="utf-8"), path)

    @property
    def text(self) -> str:
        return self._text

    @property
    def uri(self) -> str | None:
        if self.path is None:
            return None
        return self.path.resolve().as_uri()

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    @property
    def end(self) -> Position:
        return self.position_at(len(self._text))

    @property
    def full_range(self) -> Range:
        return Range(Position(0, 0), self.end)

    def __len__(self) -> int:
        return len(self._text)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def position_at(self, offset: int) -> Position:
        """Convert a linear offset to a position, clamping to the text."""
        offset = max(0, min(offset, len(self._text)))
        line = bisect.bisect_right(self._line_starts, offset) - 1
        # An offset inside a \r\n pair belongs to the end of the line
        line_end = self._line_ends[line]
        character = min(offset, line_end) - self._line_starts[line]
        return Position(line, character)

    def offset_at(self, position: Position) -> int:
        """Convert a position to a linear offset, clamping to the text."""
        if position.line < 0:
            return 0
        if position.line >= self.line_count:
            return len(self._text)
        start = self._line_starts[position.line]
        end = self._line_ends[position.line]
        return max(start, min(start + position.character, end))

    # ------------------------------------------------------------------
    # Text retrieval
    # ------------------------------------------------------------------

    def get_text(self, range: Range | None = None) -> str:
        if range is None:
            return self._text
        return self._text[self.offset_at(range.start) : self.offset_at(range.end)]

    def line_at(self, line: int) -> str:
        """Return the text of a line without its line break."""
        return self._text[self._line_starts[line] : self._line_ends[line]]

    def range_at(self, start_offset: int, end_offset: int) -> Range:
        return Range(self.position_at(start_offset), self.position_at(end_offset))

    def validate_range(self, range: Range) -> bool:
        """Return True if both ends of range address real characters."""
        for pos in (range.start, range.end):
            if pos.line < 0 or pos.line >= self.line_count or pos.character < 0:
                return False
            if pos.character > len(self.line_at(pos.line)):
                return False
        return True

    def word_range_at(self, position: Position) -> Range | None:
        """Return the range of the identifier-like word touching position."""
        if position.line < 0 or position.line >= self.line_count:
            return None
        line_text = self.line_at(position.line)
        for m in _WORD.finditer(line_text):
            if m.start() <= position.character <= m.end():
                return Range(
                    Position(position.line, m.start()),
                    Position(position.line, m.end()),
                )
        return None

    def bounds(self, range: Range | None) -> tuple[int, int]:
        """Return (start, end) offsets for range, or the whole text if invalid."""
        if range is not None and self.validate_range(range):
            return self.offset_at(range.start), self.offset_at(range.end)
        return 0, len(self._text)


def is_cfm_file(path: Path | str) -> bool:
    """Return True for template files (.cfm, .cfml)."""
    return Path(path).suffix.lower() in (".cfm", ".cfml")


def is_cfc_file(path: Path | str) -> bool:
    """Return True for component files (.cfc)."""
    from cfmlscan.component import COMPONENT_EXT

    return Path(path).suffix.lower() == COMPONENT_EXT
