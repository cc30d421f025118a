"""Component property declarations (script ``property`` and ``<cfproperty>``)."""

from __future__ import annotations

import re
from dataclasses import dataclass

from cfmlscan.attributes import parse_attributes
from cfmlscan.comments import sanitize
from cfmlscan.document import Document
from cfmlscan.positions import Range
from cfmlscan.strings import is_truthy

_SCRIPT_PROPERTY = re.compile(r"(?<![\w$.])property\s+(?P<body>[^;{}]*?)\s*;", re.IGNORECASE)
_TAG_PROPERTY = re.compile(r"<cfproperty\b(?P<body>[^>]*)>", re.IGNORECASE)
_SHORTHAND = re.compile(r"(?:(?P<type>[A-Za-z_][\w.]*(?:\[\])?)\s+)?(?P<name>[_$A-Za-z][$\w]*)")

_PROPERTY_ATTRIBUTES = ("name", "type", "default", "hint", "getter", "setter")


@dataclass(frozen=True, slots=True)
class Property:
    name: str
    data_type: str
    default: str | None
    hint: str
    getter: bool
    setter: bool
    name_range: Range
    range: Range


Properties = dict[str, Property]


def parse_properties(doc: Document, is_script: bool = True) -> Properties:
    """Return declared properties keyed by lower-cased name; last one wins."""
    clean = sanitize(doc, is_script)
    text = clean.text
    properties: Properties = {}

    for pattern in (_SCRIPT_PROPERTY, _TAG_PROPERTY):
        for m in pattern.finditer(text):
            prop = _parse_property(doc, clean, m)
            if prop is not None:
                properties[prop.name.lower()] = prop
    return properties


def _parse_property(doc: Document, clean: Document, m: re.Match[str]) -> Property | None:
    body_start, body_end = m.start("body"), m.end("body")
    body = m.group("body")
    whole = doc.range_at(m.start(), m.end())

    if "=" not in body:
        short = _SHORTHAND.fullmatch(body.strip())
        if short is None:
            return None
        name_start = body_start + (len(body) - len(body.lstrip())) + short.start("name")
        return Property(
            name=short.group("name"),
            data_type=short.group("type") or "any",
            default=None,
            hint="",
            getter=True,
            setter=True,
            name_range=doc.range_at(name_start, name_start + len(short.group("name"))),
            range=whole,
        )

    attrs = parse_attributes(clean, doc.range_at(body_start, body_end), _PROPERTY_ATTRIBUTES)
    name = attrs.get("name")
    if name is None or not name.value:
        return None

    def flag(key: str) -> bool:
        attr = attrs.get(key)
        return attr is None or is_truthy(attr.value)

    return Property(
        name=name.value,
        data_type=attrs["type"].value if "type" in attrs else "any",
        default=attrs["default"].value if "default" in attrs else None,
        hint=attrs["hint"].value if "hint" in attrs else "",
        getter=flag("getter"),
        setter=flag("setter"),
        name_range=name.value_range,
        range=whole,
    )
