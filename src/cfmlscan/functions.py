"""User function declarations in script and tag syntax."""

from __future__ import annotations

import re
from dataclasses import dataclass

from cfmlscan.attributes import parse_attributes
from cfmlscan.comments import sanitize
from cfmlscan.document import Document
from cfmlscan.positions import Range
from cfmlscan.scanning import closing_pair_position, next_unnested_position
from cfmlscan.strings import is_truthy
from cfmlscan.tags import parse_tags

_SCRIPT_FUNCTION = re.compile(
    r"""(?<![\w$.])
        (?:(?P<access>private|package|public|remote)\s+)?
        (?:(?P<static>static)\s+)?
        (?:(?P<returntype>[A-Za-z_][\w.]*(?:\[\])?)\s+)?
        function\s+(?P<name>[_$A-Za-z][$\w]*)\s*\(""",
    re.IGNORECASE | re.VERBOSE,
)

_TAG_FUNCTION_ATTRIBUTES = ("name", "access", "returntype", "static")


@dataclass(frozen=True, slots=True)
class UserFunction:
    """A function declared in a component or template."""

    name: str
    access: str
    return_type: str
    is_static: bool
    is_script: bool
    name_range: Range
    range: Range


def parse_script_functions(doc: Document, is_script: bool = True) -> list[UserFunction]:
    """Return script-syntax function declarations outside comments.

    is_script says how the document as a whole is written; it decides
    which comment syntax is blanked out before matching.
    """
    clean = sanitize(doc, is_script)
    text = clean.text

    functions: list[UserFunction] = []
    for m in _SCRIPT_FUNCTION.finditer(text):
        start = m.start()
        end = m.end()
        args_end = clean.offset_at(closing_pair_position(clean, end, ")"))
        if args_end != end:
            end = args_end
            opener = clean.offset_at(next_unnested_position(clean, args_end, len(text), ("{", ";")))
            if text[opener - 1 : opener] == "{":
                body_end = clean.offset_at(closing_pair_position(clean, opener, "}"))
                end = body_end if body_end != opener else len(text)
            elif text[opener - 1 : opener] == ";":
                end = opener

        return_type = m.group("returntype") or "any"
        if return_type.lower() in ("public", "private", "package", "remote", "static"):
            return_type = "any"
        functions.append(
            UserFunction(
                name=m.group("name"),
                access=(m.group("access") or "public").lower(),
                return_type=return_type,
                is_static=m.group("static") is not None,
                is_script=True,
                name_range=doc.range_at(m.start("name"), m.end("name")),
                range=doc.range_at(start, end),
            )
        )
    return functions


def parse_tag_functions(doc: Document) -> list[UserFunction]:
    """Return <cffunction> declarations outside tag comments."""
    clean = sanitize(doc, is_script=False)

    functions: list[UserFunction] = []
    for tag in parse_tags(clean, "cffunction"):
        attrs = parse_attributes(clean, tag.attribute_range, _TAG_FUNCTION_ATTRIBUTES)
        name = attrs.get("name")
        if name is None or not name.value:
            continue
        access = attrs.get("access")
        returntype = attrs.get("returntype")
        static = attrs.get("static")
        functions.append(
            UserFunction(
                name=name.value,
                access=access.value.lower() if access and access.value else "public",
                return_type=returntype.value if returntype and returntype.value else "any",
                is_static=static is not None and (not static.value or is_truthy(static.value)),
                is_script=False,
                name_range=name.value_range,
                range=tag.range,
            )
        )
    return functions
