"""Variable assignments within a bounded range."""

from __future__ import annotations

import re
from dataclasses import dataclass

from cfmlscan.comments import sanitize
from cfmlscan.document import Document
from cfmlscan.positions import Range

SCOPES = ("variables", "this", "local", "arguments", "request", "application", "session", "server")

_TARGET = (
    r"(?:(?P<var>var)\s+)?"
    r"(?:(?P<scope>" + "|".join(SCOPES) + r")\s*\.\s*)?"
    r"(?P<name>[_$A-Za-z][$\w]*)\s*=(?!=)"
)
_SCRIPT_ASSIGNMENT = re.compile(r"(?:^|[;{}])[ \t]*" + _TARGET, re.IGNORECASE | re.MULTILINE)
_TAG_ASSIGNMENT = re.compile(r"<cfset\s+" + _TARGET, re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class Variable:
    """An assigned variable; unscoped names land in ``variables``."""

    identifier: str
    scope: str
    declaration_range: Range


def parse_variables(doc: Document, is_script: bool, range: Range | None = None) -> list[Variable]:
    """Return assignments found in range, in document order, comments skipped."""
    clean = sanitize(doc, is_script)
    start, end = clean.bounds(range)
    text = clean.text[start:end]
    pattern = _SCRIPT_ASSIGNMENT if is_script else _TAG_ASSIGNMENT

    found: list[Variable] = []
    for m in pattern.finditer(text):
        if m.group("var"):
            scope = "local"
        elif m.group("scope"):
            scope = m.group("scope").lower()
        else:
            scope = "variables"
        found.append(
            Variable(
                identifier=m.group("name"),
                scope=scope,
                declaration_range=doc.range_at(start + m.start("name"), start + m.end("name")),
            )
        )
    return found
