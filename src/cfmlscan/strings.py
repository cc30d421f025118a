"""String helpers shared by the attribute and doc-block parsers."""

from __future__ import annotations

import re

_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_truthy(value: str) -> bool:
    """Return True if value reads as a true boolean.

    Accepts ``true`` and ``yes`` (any case) and any non-zero number;
    surrounding whitespace is ignored.
    """
    value = value.strip().lower()
    if value in ("true", "yes"):
        return True
    if _NUMBER.fullmatch(value):
        return float(value) != 0
    return False
