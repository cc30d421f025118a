"""Component declaration parsing: head, attributes, inheritance, members."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

from cfmlscan.attributes import parse_attributes
from cfmlscan.comments import sanitize
from cfmlscan.docblock import parse_doc_block
from cfmlscan.document import Document
from cfmlscan.functions import UserFunction, parse_script_functions, parse_tag_functions
from cfmlscan.positions import Range
from cfmlscan.properties import Properties, parse_properties
from cfmlscan.resolver import COMPONENT_EXT, ComponentResolver
from cfmlscan.strings import is_truthy
from cfmlscan.variables import Variable, parse_variables

logger = logging.getLogger(__name__)

COMPONENT_ATTRIBUTE_NAMES = frozenset(
    {
        "accessors",
        "alias",
        "autoindex",
        "bindingname",
        "consumes",
        "displayname",
        "extends",
        "hint",
        "httpmethod",
        "implements",
        "indexable",
        "indexlanguage",
        "initmethod",
        "mappedsuperclass",
        "namespace",
        "output",
        "persistent",
        "porttypename",
        "produces",
        "rest",
        "restpath",
        "serializable",
        "serviceaddress",
        "serviceportname",
        "style",
        "wsdlfile",
        "wsversion",
    }
)

BOOLEAN_ATTRIBUTES = frozenset(
    {
        "accessors",
        "autoindex",
        "indexable",
        "mappedsuperclass",
        "output",
        "persistent",
        "rest",
        "serializable",
    }
)

ComponentAttributes = dict[str, "str | bool"]


# ----------------------------------------------------------------------
# Declaration head
# ----------------------------------------------------------------------


class _TokenKind(Enum):
    DOC = auto()  # /** ... */
    WS = auto()
    TAG_OPEN = auto()  # <cf directly before a keyword
    KEYWORD = auto()  # component | interface
    WORD = auto()
    OTHER = auto()


_TOKEN = re.compile(
    r"""(?P<DOC>/\*\*(?:\*(?!/)|[^*])*\*/)
      |(?P<WS>\s+)
      |(?P<TAG_OPEN><cf)(?=(?:component|interface)(?![$\w]))
      |(?P<KEYWORD>(?:component|interface)(?![$\w]))
      |(?P<WORD>[$\w]+)
      |(?P<OTHER>.)""",
    re.IGNORECASE | re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class _Token:
    kind: _TokenKind
    start: int
    end: int


def _tokens(text: str) -> list[_Token]:
    return [_Token(_TokenKind[m.lastgroup], m.start(), m.end()) for m in _TOKEN.finditer(text)]


class _HeadState(Enum):
    EXPECT_DOC_OR_TAG = auto()
    EXPECT_KEYWORD = auto()
    EXPECT_ATTRIBUTES = auto()
    DONE = auto()


@dataclass(frozen=True, slots=True)
class ComponentHead:
    """Offsets of the parts of a component declaration head.

    ``end`` is where the attribute list stops, just before ``>`` or ``{``.
    """

    start: int
    end: int
    keyword: str
    keyword_start: int
    is_tag: bool
    doc_start: int | None
    doc_end: int | None
    attributes_start: int

    @property
    def is_script(self) -> bool:
        return not self.is_tag

    @property
    def is_interface(self) -> bool:
        return self.keyword.lower() == "interface"

    @property
    def has_doc(self) -> bool:
        return self.doc_start is not None


_ATTRIBUTES_END = re.compile(r"[>{]")


def find_component_head(text: str) -> ComponentHead | None:
    """Return the first component/interface declaration head in text.

    A head is an optional doc-block followed by whitespace, an optional
    ``<cf`` prefix, the keyword, and the attribute text up to ``>`` or
    ``{``. Keywords are matched case-insensitively as whole words.
    """
    tokens = _tokens(text)
    for i, tok in enumerate(tokens):
        if tok.kind in (_TokenKind.DOC, _TokenKind.TAG_OPEN, _TokenKind.KEYWORD):
            head = _match_head(text, tokens, i)
            if head is not None:
                return head
    return None


def _match_head(text: str, tokens: list[_Token], i: int) -> ComponentHead | None:
    state = _HeadState.EXPECT_DOC_OR_TAG
    doc: _Token | None = None
    tag: _Token | None = None
    keyword: _Token | None = None
    end = len(text)

    def kind_at(j: int) -> _TokenKind | None:
        return tokens[j].kind if j < len(tokens) else None

    while state is not _HeadState.DONE:
        if state is _HeadState.EXPECT_DOC_OR_TAG:
            if kind_at(i) is _TokenKind.DOC:
                if kind_at(i + 1) is not _TokenKind.WS:
                    return None
                doc = tokens[i]
                i += 2
            if kind_at(i) is _TokenKind.TAG_OPEN:
                tag = tokens[i]
                i += 1
            state = _HeadState.EXPECT_KEYWORD

        elif state is _HeadState.EXPECT_KEYWORD:
            if kind_at(i) is not _TokenKind.KEYWORD:
                return None
            keyword = tokens[i]
            state = _HeadState.EXPECT_ATTRIBUTES

        elif state is _HeadState.EXPECT_ATTRIBUTES:
            assert keyword is not None
            m = _ATTRIBUTES_END.search(text, keyword.end)
            end = m.start() if m else len(text)
            state = _HeadState.DONE

    assert keyword is not None
    start = doc.start if doc else tag.start if tag else keyword.start
    return ComponentHead(
        start=start,
        end=end,
        keyword=text[keyword.start : keyword.end],
        keyword_start=keyword.start,
        is_tag=tag is not None,
        doc_start=doc.start + 3 if doc else None,
        doc_end=doc.end - 2 if doc else None,
        attributes_start=keyword.end,
    )


# ----------------------------------------------------------------------
# Attributes
# ----------------------------------------------------------------------


def merge_attributes(
    doc_block: Iterable[tuple[str, str]],
    tag_attributes: Iterable[tuple[str, str]],
    boolean_keys: frozenset[str] = BOOLEAN_ATTRIBUTES,
) -> ComponentAttributes:
    """Merge doc-block and tag attribute pairs; tag attributes win.

    Values for boolean_keys are coerced with :func:`is_truthy`.
    """
    merged: ComponentAttributes = {}
    for pairs in (doc_block, tag_attributes):
        for key, value in pairs:
            merged[key] = is_truthy(value) if key in boolean_keys else value
    return merged


def component_name_from_dot_path(dot_path: str) -> str:
    """Return the last segment of a dot path."""
    return dot_path.split(".")[-1]


def _last_segment_range(doc: Document, value: str, value_range: Range) -> Range:
    """Narrow the range of a dot-path value to its final segment."""
    end = doc.offset_at(value_range.end)
    name = component_name_from_dot_path(value.strip())
    start = max(doc.offset_at(value_range.start), end - len(name))
    return doc.range_at(start, end)


# ----------------------------------------------------------------------
# Component
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ComponentReference:
    """A dot path written in source, where, and what it resolved to."""

    dot_path: str
    range: Range
    target: Path | None = None


@dataclass(frozen=True, slots=True)
class Component:
    """The declared shape of a component file. Built once, never mutated."""

    path: Path | None
    name: str
    is_script: bool
    is_interface: bool
    declaration_range: Range
    display_name: str = ""
    hint: str = ""
    accessors: bool = False
    init_method: str | None = None
    extends: ComponentReference | None = None
    implements: tuple[ComponentReference, ...] | None = None
    unresolved: tuple[ComponentReference, ...] = ()
    attributes: ComponentAttributes = field(default_factory=dict)
    functions: dict[str, UserFunction] = field(default_factory=dict)
    properties: Properties = field(default_factory=dict)
    variables: tuple[Variable, ...] = ()

    @property
    def extends_range(self) -> Range | None:
        return self.extends.range if self.extends else None


def parse_component(doc: Document, resolver: ComponentResolver | None = None) -> Component | None:
    """Parse doc as a component; None if it declares no component or interface."""
    text = doc.text
    head = find_component_head(text)
    if head is None:
        logger.debug("no component declaration in %s", doc.path or "<memory>")
        return None
    if resolver is None:
        resolver = ComponentResolver()

    # Source of the last extends/implements value seen, (value, value_range)
    sources: dict[str, tuple[str, Range]] = {}

    doc_pairs: list[tuple[str, str]] = []
    if head.has_doc:
        assert head.doc_start is not None and head.doc_end is not None
        for entry in parse_doc_block(doc, doc.range_at(head.doc_start, head.doc_end)):
            if entry.key in COMPONENT_ATTRIBUTE_NAMES:
                doc_pairs.append((entry.key, entry.value))
                sources[entry.key] = (entry.value, entry.value_range)

    tag_pairs: list[tuple[str, str]] = []
    if head.end > head.attributes_start:
        attr_range = doc.range_at(head.attributes_start, head.end)
        for key, attr in parse_attributes(doc, attr_range, COMPONENT_ATTRIBUTE_NAMES).items():
            tag_pairs.append((key, attr.value))
            sources[key] = (attr.value, attr.value_range)

    attributes = merge_attributes(doc_pairs, tag_pairs)
    unresolved: list[ComponentReference] = []

    extends: ComponentReference | None = None
    extends_value = attributes.get("extends")
    if isinstance(extends_value, str) and extends_value.strip():
        value, value_range = sources["extends"]
        ref = ComponentReference(
            extends_value.strip(),
            _last_segment_range(doc, value, value_range),
            resolver.resolve(extends_value, doc.path),
        )
        if ref.target is not None:
            extends = ref
        else:
            unresolved.append(ref)

    implements: list[ComponentReference] = []
    implements_value = attributes.get("implements")
    if isinstance(implements_value, str):
        value, value_range = sources["implements"]
        for dot_path, ref_range in _split_implements(doc, value, value_range):
            ref = ComponentReference(dot_path, ref_range, resolver.resolve(dot_path, doc.path))
            if ref.target is not None:
                implements.append(ref)
            else:
                unresolved.append(ref)

    functions: dict[str, UserFunction] = {}
    user_functions = parse_script_functions(doc, head.is_script) + parse_tag_functions(doc)
    earliest = len(text)
    for func in user_functions:
        earliest = min(earliest, doc.offset_at(func.range.start))
    for func in sorted(user_functions, key=lambda f: f.range.start):
        functions[func.name.lower()] = func

    body_start = min(head.end, earliest)
    variables = parse_variables(doc, head.is_script, doc.range_at(body_start, earliest))

    def text_attribute(key: str) -> str | None:
        value = attributes.get(key)
        return value if isinstance(value, str) and value else None

    accessors = attributes.get("accessors") is True or attributes.get("persistent") is True

    keyword_end = head.keyword_start + len(head.keyword)
    component = Component(
        path=doc.path,
        name=doc.path.stem if doc.path is not None else "",
        is_script=head.is_script,
        is_interface=head.is_interface,
        declaration_range=doc.range_at(head.keyword_start, keyword_end),
        display_name=text_attribute("displayname") or "",
        hint=text_attribute("hint") or "",
        accessors=accessors,
        init_method=text_attribute("initmethod"),
        extends=extends,
        implements=tuple(implements) if implements else None,
        unresolved=tuple(unresolved),
        attributes=attributes,
        functions=functions,
        properties=parse_properties(doc, head.is_script),
        variables=tuple(variables),
    )
    logger.debug(
        "parsed %s %s: %d functions, %d unresolved references",
        head.keyword.lower(),
        component.name or "<memory>",
        len(functions),
        len(unresolved),
    )
    return component


def _split_implements(doc: Document, value: str, value_range: Range) -> list[tuple[str, Range]]:
    """Split an implements list into (dot path, range of its last segment)."""
    start = doc.offset_at(value_range.start)
    end = doc.offset_at(value_range.end)
    # Offsets only line up when the value is written out on one line
    exact = end - start == len(value)

    result: list[tuple[str, Range]] = []
    for m in re.finditer(r"[^,]+", value):
        dot_path = m.group().strip()
        if not dot_path:
            continue
        if exact:
            segment_end = start + m.start() + len(m.group().rstrip())
            name = component_name_from_dot_path(dot_path)
            result.append((dot_path, doc.range_at(segment_end - len(name), segment_end)))
        else:
            result.append((dot_path, value_range))
    return result


def is_script_component(doc: Document) -> bool:
    """Return True if doc is a component file written in script syntax."""
    if doc.path is not None and doc.path.suffix.lower() != COMPONENT_EXT:
        return False
    head = find_component_head(doc.text)
    return head is not None and head.is_script


# ----------------------------------------------------------------------
# References to other components
# ----------------------------------------------------------------------

_REFERENCE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # new Foo() / new "pkg.Foo"()
    re.compile(r"\bnew\s+(['\"]?)(?P<ref>[\w$.]+)\1\s*\(", re.IGNORECASE),
    # createObject("component", "pkg.Foo")
    re.compile(
        r"\bcreateObject\s*\(\s*(['\"])component\1\s*,\s*(['\"])(?P<ref>[\w$.]+)\2",
        re.IGNORECASE,
    ),
    # <cfobject component="pkg.Foo"> / <cfinvoke component="pkg.Foo">
    re.compile(r"\bcomponent\s*=\s*(['\"])(?P<ref>[\w$.]+)\1", re.IGNORECASE),
    # isInstanceOf(obj, "pkg.Foo")
    re.compile(
        r"\bisInstanceOf\s*\(\s*[\w$.]+\s*,\s*(['\"])(?P<ref>[\w$.]+)\1",
        re.IGNORECASE,
    ),
)


def find_component_references(
    doc: Document, resolver: ComponentResolver | None = None
) -> list[ComponentReference]:
    """Return component dot paths used in doc, in document order.

    Each range covers the whole dot path. Targets are resolved only when
    a resolver is given.
    """
    clean = sanitize(doc, is_script_component(doc))
    found: list[ComponentReference] = []
    for pattern in _REFERENCE_PATTERNS:
        for m in pattern.finditer(clean.text):
            dot_path = m.group("ref")
            target = resolver.resolve(dot_path, doc.path) if resolver is not None else None
            found.append(ComponentReference(dot_path, doc.range_at(m.start("ref"), m.end("ref")), target))
    found.sort(key=lambda ref: ref.range.start)
    return found

