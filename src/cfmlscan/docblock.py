"""Doc-block (/** ... */) key/value parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass

from cfmlscan.document import Document
from cfmlscan.positions import Range

_LINE = re.compile(r"[^\r\n]+")
_LEADER = re.compile(r"\s*(?:\*+)?\s*")
_TRAILER = re.compile(r"\s*\*+\s*$")
_TAG = re.compile(r"@([\w.]+)\s*")


@dataclass(frozen=True, slots=True)
class DocBlockKeyValue:
    """One @key value entry; value_range spans the value text in the document."""

    key: str
    value: str
    value_range: Range


def parse_doc_block(doc: Document, range: Range) -> list[DocBlockKeyValue]:
    """Parse the inside of a doc-block (without /** and */) into entries.

    Text before the first @key is the ``hint``. Lines that do not start
    with @key continue the previous entry. Keys are lower-cased; a key
    with no value gets an empty string.
    """
    start, end = doc.bounds(range)
    text = doc.text[start:end]

    entries: list[DocBlockKeyValue] = []
    key: str | None = None
    parts: list[str] = []
    value_start = value_end = 0

    def flush() -> None:
        if key is not None:
            entries.append(
                DocBlockKeyValue(
                    key,
                    " ".join(parts),
                    doc.range_at(start + value_start, start + value_end),
                )
            )

    lines = list(_LINE.finditer(text))
    for i, m in enumerate(lines):
        line = m.group()
        content_start = _LEADER.match(line).end()
        content_end = len(line)
        if i == len(lines) - 1:
            trailer = _TRAILER.search(line, content_start)
            if trailer:
                content_end = trailer.start()
        content = line[content_start:content_end].rstrip()
        content_end = content_start + len(content)
        if not content:
            continue

        tag = _TAG.match(content)
        if tag:
            flush()
            key = tag.group(1).lower()
            value = content[tag.end() :]
            parts = [value] if value else []
            value_start = m.start() + content_start + tag.end()
            value_end = m.start() + content_end
            continue

        if key is None:
            key = "hint"
            parts = []
            value_start = m.start() + content_start
        parts.append(content)
        value_end = m.start() + content_end

    flush()
    return entries
