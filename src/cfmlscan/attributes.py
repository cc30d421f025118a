"""Tag-style attribute lists: name="value" name='value' name=value name."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from cfmlscan.document import Document
from cfmlscan.positions import Range

_ATTRIBUTE = re.compile(
    r"""(?<![\w.:-])(?P<name>[A-Za-z_][\w:.-]*)
        (?:\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'>{;]+)))?""",
    re.VERBOSE,
)


@dataclass(frozen=True, slots=True)
class Attribute:
    """An attribute value and the range of the value text (inside any quotes)."""

    name: str
    value: str
    value_range: Range


def parse_attributes(
    doc: Document, range: Range, allowed_names: Iterable[str] | None = None
) -> dict[str, Attribute]:
    """Parse the attribute list in range, keyed by lower-cased name.

    Names outside allowed_names (compared case-insensitively) are skipped.
    A later duplicate replaces an earlier one. A bare name has value ''.
    """
    allowed = {n.lower() for n in allowed_names} if allowed_names is not None else None
    start, end = doc.bounds(range)
    text = doc.text[start:end]

    attributes: dict[str, Attribute] = {}
    for m in _ATTRIBUTE.finditer(text):
        name = m.group("name").lower()
        if allowed is not None and name not in allowed:
            continue
        group = next((g for g in ("dq", "sq", "bare") if m.group(g) is not None), None)
        if group is None:
            value = ""
            value_start = value_end = m.end("name")
        else:
            value = m.group(group)
            value_start, value_end = m.start(group), m.end(group)
        attributes[name] = Attribute(
            name, value, doc.range_at(start + value_start, start + value_end)
        )
    return attributes
