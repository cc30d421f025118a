"""Lexical context values: string state, comment state, bracket counters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from cfmlscan.positions import (
    BRACES,
    BRACKETS,
    EMBEDDED_EXPRESSION_DELIMITER,
    PARENS,
    is_string_delimiter,
)


@dataclass(frozen=True, slots=True)
class StringContext:
    """Immutable string state advanced one character at a time.

    Quotes toggle rather than nest. Inside a string, the embedded
    expression delimiter flips ``embedded_expression``; while it is set
    the active quote does not close the string.
    """

    delimiter: str | None = None
    embedded_expression: bool = False

    @property
    def in_string(self) -> bool:
        return self.delimiter is not None

    def advance(self, ch: str) -> StringContext:
        """Return the context after consuming ch."""
        if self.delimiter is None:
            if is_string_delimiter(ch):
                return StringContext(ch)
            return self
        if ch == EMBEDDED_EXPRESSION_DELIMITER:
            return StringContext(self.delimiter, not self.embedded_expression)
        if not self.embedded_expression and ch == self.delimiter:
            return NO_STRING
        return self


NO_STRING = StringContext()


class CommentKind(Enum):
    LINE = auto()  # closes at end of line
    BLOCK = auto()  # closes on the literal close delimiter


@dataclass(frozen=True, slots=True)
class CommentSyntax:
    """One way of writing a comment: its kind and (open, close) delimiters."""

    kind: CommentKind
    open: str
    close: str = ""


SCRIPT_LINE_COMMENT = CommentSyntax(CommentKind.LINE, "//")
SCRIPT_BLOCK_COMMENT = CommentSyntax(CommentKind.BLOCK, "/*", "*/")
TAG_BLOCK_COMMENT = CommentSyntax(CommentKind.BLOCK, "<!---", "--->")

SCRIPT_COMMENTS = (SCRIPT_LINE_COMMENT, SCRIPT_BLOCK_COMMENT)
TAG_COMMENTS = (TAG_BLOCK_COMMENT,)


@dataclass(frozen=True, slots=True)
class CommentContext:
    """An open comment: its syntax and the offset where the opener starts."""

    syntax: CommentSyntax
    start: int

    @property
    def kind(self) -> CommentKind:
        return self.syntax.kind

    @property
    def delimiters(self) -> tuple[str, str]:
        return self.syntax.open, self.syntax.close


@dataclass(slots=True)
class BracketPairState:
    """Unclosed counters for braces, brackets and parens.

    Counters are signed; a backward scan drives them negative on purpose.
    Pair characters listed in ``ignored`` are not counted.
    """

    ignored: frozenset[str] = frozenset()
    counts: dict[tuple[str, str], int] = field(
        default_factory=lambda: {BRACES: 0, BRACKETS: 0, PARENS: 0}
    )

    def feed(self, ch: str) -> bool:
        """Count ch if it is a tracked pair character; return True if counted."""
        if ch in self.ignored:
            return False
        for pair in self.counts:
            if ch == pair[0]:
                self.counts[pair] += 1
                return True
            if ch == pair[1]:
                self.counts[pair] -= 1
                return True
        return False

    @property
    def balanced(self) -> bool:
        return all(count == 0 for count in self.counts.values())
