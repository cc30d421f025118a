"""Named tag pair recognition: <name attrs>body</name>."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from cfmlscan.document import Document
from cfmlscan.positions import Range


@dataclass(frozen=True, slots=True)
class Tag:
    """A matched tag pair."""

    name: str
    range: Range
    attribute_range: Range
    body_range: Range


@lru_cache(maxsize=64)
def tag_pattern(name: str) -> re.Pattern[str]:
    """Return a case-insensitive pattern for a <name ...>...</name> pair."""
    escaped = re.escape(name)
    return re.compile(
        rf"(?P<open><{escaped}\b)(?P<attrs>[^>]*)>(?P<body>[\s\S]*?)</{escaped}\s*>",
        re.IGNORECASE,
    )


def parse_tags(doc: Document, name: str, range: Range | None = None) -> list[Tag]:
    """Return every name tag pair in doc (or in range), in document order."""
    start, end = doc.bounds(range)
    text = doc.text[start:end]

    tags: list[Tag] = []
    for m in tag_pattern(name).finditer(text):
        tags.append(
            Tag(
                name=name,
                range=doc.range_at(start + m.start(), start + m.end()),
                attribute_range=doc.range_at(start + m.start("attrs"), start + m.end("attrs")),
                body_range=doc.range_at(start + m.start("body"), start + m.end("body")),
            )
        )
    return tags
