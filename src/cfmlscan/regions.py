"""Tag-delimited regions (cfscript, script, cfoutput) and range set helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from cfmlscan.document import Document
from cfmlscan.positions import Position, Range
from cfmlscan.tags import parse_tags


def cfscript_ranges(doc: Document, range: Range | None = None) -> list[Range]:
    """Return the non-empty bodies of every <cfscript> block."""
    return [
        tag.body_range
        for tag in parse_tags(doc, "cfscript", range)
        if not tag.body_range.is_empty
    ]


def javascript_ranges(doc: Document, range: Range | None = None) -> list[Range]:
    """Return the bodies of every <script> block."""
    return [tag.body_range for tag in parse_tags(doc, "script", range)]


def cfoutput_ranges(doc: Document, range: Range | None = None) -> list[Range]:
    """Return the bodies of every <cfoutput> block."""
    return [tag.body_range for tag in parse_tags(doc, "cfoutput", range)]


def embedded_regions(doc: Document, range: Range | None, is_script: bool) -> list[Range]:
    """Return regions inside range that must be scanned in the opposite mode.

    Tag markup embeds script through <cfscript>. Script has no syntax for
    embedding tag markup, so script mode yields nothing.
    """
    if is_script:
        return []
    return cfscript_ranges(doc, range)


def is_in_ranges(ranges: Iterable[Range], target: Position | Range) -> bool:
    """Return True if any range contains target (boundaries inclusive)."""
    return any(r.contains(target) for r in ranges)


def is_in_cfscript(doc: Document, position: Position) -> bool:
    return is_in_ranges(cfscript_ranges(doc), position)


def is_in_javascript(doc: Document, position: Position) -> bool:
    return is_in_ranges(javascript_ranges(doc), position)


def is_in_cfoutput(doc: Document, position: Position) -> bool:
    return is_in_ranges(cfoutput_ranges(doc), position)


def is_position_script(doc: Document, position: Position) -> bool:
    """Return True if script syntax applies at position."""
    from cfmlscan.component import is_script_component

    return is_script_component(doc) or is_in_cfscript(doc, position)


def invert_ranges(doc: Document, ranges: Sequence[Range]) -> list[Range]:
    """Return the ranges covering everything in doc not covered by ranges.

    ranges must be sorted and non-overlapping.
    """
    inverted: list[Range] = []
    previous_end = Position(0, 0)
    for r in ranges:
        if r.start > previous_end:
            inverted.append(Range(previous_end, r.start))
        previous_end = max(previous_end, r.end)

    doc_end = doc.end
    if previous_end < doc_end:
        inverted.append(Range(previous_end, doc_end))
    return inverted


def normalize_ranges(ranges: Iterable[Range]) -> list[Range]:
    """Sort ranges by start and drop any that overlap an earlier one."""
    result: list[Range] = []
    for r in sorted(ranges, key=lambda r: (r.start, r.end)):
        if result and r.start < result[-1].end:
            continue
        result.append(r)
    return result
