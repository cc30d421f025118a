"""Tests for component declaration parsing and component references."""

from __future__ import annotations

from pathlib import Path

from cfmlscan import parse
from cfmlscan.component import (
    BOOLEAN_ATTRIBUTES,
    component_name_from_dot_path,
    find_component_head,
    find_component_references,
    is_script_component,
    merge_attributes,
    parse_component,
)
from cfmlscan.document import Document
from cfmlscan.resolver import ComponentResolver
from tests.conftest import rng, write

# ---------------------------------------------------------------------------
# Declaration head
# ---------------------------------------------------------------------------


class TestComponentHead:
    def test_script_head(self) -> None:
        text = "component extends=\"Base\" {\n}"
        head = find_component_head(text)
        assert head is not None
        assert head.is_script
        assert not head.has_doc
        assert (head.start, head.keyword_start, head.end) == (0, 0, 25)
        assert text[head.attributes_start : head.end] == ' extends="Base" '

    def test_tag_head_with_doc(self) -> None:
        text = "/** doc */\n<cfcomponent output=false>\n</cfcomponent>"
        head = find_component_head(text)
        assert head is not None
        assert head.is_tag
        assert head.has_doc
        assert head.start == 0
        assert text[head.doc_start : head.doc_end] == " doc "
        assert head.keyword == "component"
        assert text[head.end] == ">"

    def test_keyword_is_case_insensitive(self) -> None:
        head = find_component_head("COMPONENT {}")
        assert head is not None
        assert head.keyword == "COMPONENT"

    def test_keyword_is_whole_word(self) -> None:
        assert find_component_head("mycomponent = 1;") is None
        assert find_component_head("components {}") is None

    def test_dollar_continues_keyword(self) -> None:
        assert find_component_head("component$thing = 1;") is None
        assert find_component_head("<cfcomponent$x>") is None
        head = find_component_head("x = component$thing;\ncomponent {}")
        assert head is not None
        assert head.keyword_start == 21

    def test_doc_must_be_followed_by_whitespace(self) -> None:
        head = find_component_head("/** a */component {}")
        assert head is not None
        assert not head.has_doc

    def test_doc_not_before_keyword_is_ignored(self) -> None:
        head = find_component_head("/** a */\nx = 1;\ncomponent {}")
        assert head is not None
        assert not head.has_doc
        assert head.start == 16

    def test_interface(self) -> None:
        head = find_component_head("interface {}")
        assert head is not None
        assert head.is_interface

    def test_missing_terminator_runs_to_end(self) -> None:
        text = "component output=false"
        head = find_component_head(text)
        assert head is not None
        assert head.end == len(text)


# ---------------------------------------------------------------------------
# Attribute merge
# ---------------------------------------------------------------------------


class TestMergeAttributes:
    def test_tag_overrides_doc(self) -> None:
        merged = merge_attributes(
            [("output", "yes"), ("hint", "a")],
            [("hint", "b"), ("accessors", "false")],
        )
        assert merged == {"output": True, "hint": "b", "accessors": False}

    def test_booleans_coerced(self) -> None:
        assert "persistent" in BOOLEAN_ATTRIBUTES
        assert merge_attributes([], [("persistent", "1"), ("extends", "1")]) == {
            "persistent": True,
            "extends": "1",
        }

    def test_component_name_from_dot_path(self) -> None:
        assert component_name_from_dot_path("a.b.C") == "C"
        assert component_name_from_dot_path("C") == "C"


# ---------------------------------------------------------------------------
# parse_component
# ---------------------------------------------------------------------------


class TestParseComponent:
    def test_script_component_with_doc_extends(
        self, tmp_path: Path, resolver: ComponentResolver
    ) -> None:
        base = write(tmp_path / "Base.cfc", "component {}")
        path = tmp_path / "Widget.cfc"
        doc = Document("/** @extends Base **/ component {\n    function foo() {}\n}", path)

        comp = parse_component(doc, resolver)
        assert comp is not None
        assert comp.name == "Widget"
        assert comp.is_script
        assert not comp.is_interface
        assert comp.declaration_range == rng(0, 22, 0, 31)
        assert comp.extends is not None
        assert comp.extends.target == base
        assert comp.extends_range == rng(0, 13, 0, 17)
        assert list(comp.functions) == ["foo"]
        assert comp.unresolved == ()

    def test_tag_component_persistent_and_dotted_extends(
        self, tmp_path: Path, resolver: ComponentResolver
    ) -> None:
        base = write(tmp_path / "pkg" / "Base.cfc", "<cfcomponent></cfcomponent>")
        doc = Document(
            '<cfcomponent extends="pkg.Base" persistent="true">\n</cfcomponent>',
            tmp_path / "Widget.cfc",
        )
        comp = parse_component(doc, resolver)
        assert comp is not None
        assert not comp.is_script
        assert comp.accessors
        assert comp.attributes["persistent"] is True
        assert comp.extends is not None
        assert comp.extends.dot_path == "pkg.Base"
        assert comp.extends.target == base
        assert comp.extends_range == rng(0, 26, 0, 30)

    def test_interface(self) -> None:
        comp = parse("interface {\n    function run();\n}")
        assert comp is not None
        assert comp.is_interface
        assert list(comp.functions) == ["run"]

    def test_no_component(self) -> None:
        assert parse("<cfset x = 1>") is None
        assert parse("") is None

    def test_in_memory_has_no_name(self) -> None:
        comp = parse("component {}")
        assert comp is not None
        assert comp.name == ""
        assert comp.path is None

    def test_tag_attribute_overrides_doc_block(self) -> None:
        comp = parse(
            "/**\n"
            " * From doc\n"
            " * @output true\n"
            " * @displayName Widget\n"
            " * @author Someone\n"
            " */\n"
            'component hint="From tag" initMethod="setup" {\n}'
        )
        assert comp is not None
        assert comp.hint == "From tag"
        assert comp.display_name == "Widget"
        assert comp.init_method == "setup"
        assert comp.attributes["output"] is True
        assert "author" not in comp.attributes

    def test_doc_hint(self) -> None:
        comp = parse("/**\n * Just a hint\n */\ncomponent {}")
        assert comp is not None
        assert comp.hint == "Just a hint"
        assert not comp.accessors
        assert comp.init_method is None

    def test_accessors_flag(self) -> None:
        comp = parse("component accessors=true {}")
        assert comp is not None
        assert comp.accessors

    def test_unresolved_extends(self, tmp_path: Path, resolver: ComponentResolver) -> None:
        doc = Document('component extends="Nope" {}', tmp_path / "Widget.cfc")
        comp = parse_component(doc, resolver)
        assert comp is not None
        assert comp.extends is None
        assert comp.extends_range is None
        (ref,) = comp.unresolved
        assert ref.dot_path == "Nope"
        assert ref.target is None
        assert ref.range == rng(0, 19, 0, 23)

    def test_implements(self, tmp_path: Path, resolver: ComponentResolver) -> None:
        ifoo = write(tmp_path / "IFoo.cfc", "interface {}")
        doc = Document('component implements="IFoo, IBar" {}', tmp_path / "Widget.cfc")
        comp = parse_component(doc, resolver)
        assert comp is not None
        assert comp.implements is not None
        assert [ref.target for ref in comp.implements] == [ifoo]
        assert comp.implements[0].range == rng(0, 22, 0, 26)
        assert [ref.dot_path for ref in comp.unresolved] == ["IBar"]
        assert comp.unresolved[0].range == rng(0, 28, 0, 32)

    def test_no_implements(self) -> None:
        comp = parse("component {}")
        assert comp is not None
        assert comp.implements is None
        assert comp.extends is None

    def test_duplicate_functions_last_wins(self) -> None:
        comp = parse("component {\n    function foo() {}\n    function FOO() { return 1; }\n}")
        assert comp is not None
        assert list(comp.functions) == ["foo"]
        assert comp.functions["foo"].name == "FOO"

    def test_component_level_variables(self) -> None:
        comp = parse(
            "component {\n"
            "    variables.a = 1;\n"
            "    b = 2;\n"
            "    function f() { c = 3; }\n"
            "    d = 4;\n"
            "}"
        )
        assert comp is not None
        assert [(v.identifier, v.scope) for v in comp.variables] == [
            ("a", "variables"),
            ("b", "variables"),
        ]

    def test_tag_component_members(self) -> None:
        comp = parse(
            "<cfcomponent>\n"
            '    <cfproperty name="id">\n'
            "    <cfset variables.ready = true>\n"
            '    <cffunction name="init"></cffunction>\n'
            "</cfcomponent>"
        )
        assert comp is not None
        assert list(comp.properties) == ["id"]
        assert list(comp.functions) == ["init"]
        assert [v.identifier for v in comp.variables] == ["ready"]

    def test_extends_without_path_is_unresolved(self, resolver: ComponentResolver) -> None:
        comp = parse('component extends="Base" {}', resolver=resolver)
        assert comp is not None
        assert comp.extends is None
        assert [ref.dot_path for ref in comp.unresolved] == ["Base"]

    def test_is_script_component(self) -> None:
        assert is_script_component(Document("component {}", "A.cfc"))
        assert is_script_component(Document("component {}"))
        assert not is_script_component(Document("<cfcomponent></cfcomponent>", "A.cfc"))
        assert not is_script_component(Document("component {}", "a.cfm"))


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class TestComponentReferences:
    def test_reference_forms(self) -> None:
        doc = Document(
            "x = new pkg.Widget();\n"
            'y = createObject("component", "pkg.Other");\n'
            "// z = new Hidden();\n"
            'ok = isInstanceOf(x, "pkg.Base");\n'
            '<cfobject name="o" component="pkg.Tagged">\n'
        )
        refs = find_component_references(doc)
        assert [ref.dot_path for ref in refs] == ["pkg.Widget", "pkg.Other", "pkg.Base", "pkg.Tagged"]
        assert refs[0].range == rng(0, 8, 0, 18)
        assert all(ref.target is None for ref in refs)

    def test_script_comments_skipped_in_script_component(self) -> None:
        doc = Document(
            "component {\n    // x = new Hidden();\n    y = new Shown();\n}",
            "A.cfc",
        )
        assert [ref.dot_path for ref in find_component_references(doc)] == ["Shown"]

    def test_resolved_when_resolver_given(self, tmp_path: Path, resolver: ComponentResolver) -> None:
        target = write(tmp_path / "Thing.cfc", "component {}")
        doc = Document("component {\n    t = new Thing();\n}", tmp_path / "A.cfc")
        (ref,) = find_component_references(doc, resolver)
        assert ref.target == target
