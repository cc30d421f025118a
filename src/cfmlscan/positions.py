"""Positions, ranges, and character classification helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Source position, 0-based line and character."""

    line: int
    character: int

    def translate(self, line_delta: int = 0, character_delta: int = 0) -> Position:
        return Position(self.line + line_delta, self.character + character_delta)


@dataclass(frozen=True, slots=True)
class Range:
    """Half-open source range from start to end position."""

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"range end {self.end} precedes start {self.start}")

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, other: Position | Range) -> bool:
        """Return True if other lies within this range, boundaries included."""
        if isinstance(other, Range):
            return self.contains(other.start) and self.contains(other.end)
        return self.start <= other <= self.end


# Pairs tracked by the scanners, in (open, close) form
BRACES = ("{", "}")
BRACKETS = ("[", "]")
PARENS = ("(", ")")
CHARACTER_PAIRS: tuple[tuple[str, str], ...] = (
    BRACES,
    BRACKETS,
    PARENS,
    ('"', '"'),
    ("'", "'"),
    ("#", "#"),
    ("<", ">"),
)

STRING_DELIMITERS = frozenset("'\"")

# Toggles an interpolated expression inside a string
EMBEDDED_EXPRESSION_DELIMITER = "#"

_IDENT = re.compile(r"[$A-Za-z_][$\w]*")
_IDENT_PART = re.compile(r"[$\w]")


def is_string_delimiter(ch: str) -> bool:
    """Return True if ch opens or closes a string literal."""
    return ch in STRING_DELIMITERS


def is_identifier_part(ch: str) -> bool:
    """Return True if ch can appear in an identifier."""
    return bool(ch) and _IDENT_PART.fullmatch(ch) is not None


def is_identifier(word: str) -> bool:
    """Return True if word is a whole valid identifier."""
    return _IDENT.fullmatch(word) is not None


def opening_char(closing: str) -> str:
    """Return the opening half of the pair that closing belongs to, or ''."""
    for pair in CHARACTER_PAIRS:
        if closing in pair:
            return pair[0]
    return ""
