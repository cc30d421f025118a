"""Tests for the CLI module: arg parsing, exit codes, end-to-end output."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from cfmlscan.cli import build_parser, main
from cfmlscan.component import parse_component
from cfmlscan.debug import dump_component
from cfmlscan.document import Document
from tests.conftest import write

# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_comments_defaults(self) -> None:
        ns = build_parser().parse_args(["comments", "page.cfm"])
        assert ns.command == "comments"
        assert ns.input == "page.cfm"
        assert ns.mode == "auto"
        assert ns.fast is None
        assert ns.json is False

    def test_comments_flags(self) -> None:
        ns = build_parser().parse_args(["comments", "page.cfm", "--mode", "script", "--fast", "--json"])
        assert ns.mode == "script"
        assert ns.fast is True
        assert ns.json is True

    def test_component_roots_repeatable(self) -> None:
        ns = build_parser().parse_args(["component", "A.cfc", "--root", "a", "--root", "b"])
        assert ns.root == ["a", "b"]
        assert ns.debug is False

    def test_global_flags(self) -> None:
        ns = build_parser().parse_args(["-v", "--config", "x.toml", "component", "A.cfc"])
        assert ns.verbose is True
        assert ns.config == "x.toml"

    def test_bad_mode_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["comments", "page.cfm", "--mode", "html"])

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


# ---------------------------------------------------------------------------
# comments command
# ---------------------------------------------------------------------------


class TestCommentsCommand:
    def test_text_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        page = write(tmp_path / "page.cfm", "<p>\n<!--- note --->\n")
        assert main(["comments", str(page)]) == 0
        assert capsys.readouterr().out == "2:1-2:16\t'<!--- note --->'\n"

    def test_json_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        page = write(tmp_path / "page.cfm", "<!--- a --->")
        assert main(["comments", str(page), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data == [{"start": {"line": 0, "character": 0}, "end": {"line": 0, "character": 12}}]

    def test_auto_mode_detects_script_component(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        cfc = write(tmp_path / "A.cfc", "component {\n    // note\n}\n")
        assert main(["comments", str(cfc)]) == 0
        assert capsys.readouterr().out == "2:5-2:12\t'// note'\n"

    def test_forced_tag_mode(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfc = write(tmp_path / "A.cfc", "component {\n    // note\n}\n")
        assert main(["comments", str(cfc), "--mode", "tag"]) == 0
        assert capsys.readouterr().out == ""

    def test_fast_flag(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfc = write(tmp_path / "A.cfc", 'component {\n    u = "http://x";\n}\n')
        assert main(["comments", str(cfc)]) == 0
        assert capsys.readouterr().out == ""
        assert main(["comments", str(cfc), "--fast"]) == 0
        assert capsys.readouterr().out == "2:15-2:20\t'//x\";'\n"

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["comments", str(tmp_path / "nope.cfm")]) == 1
        assert "cannot read" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# component command
# ---------------------------------------------------------------------------


class TestComponentCommand:
    def test_text_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        base = write(tmp_path / "Base.cfc", "component {}")
        widget = write(
            tmp_path / "Widget.cfc",
            'component extends="Base" implements="IMissing" {\n'
            "    property title;\n"
            "    function run() {}\n"
            "}\n",
        )
        assert main(["component", str(widget)]) == 0
        out = capsys.readouterr().out
        assert out.splitlines() == [
            "component Widget (script)",
            f"extends Base -> {base}",
            "unresolved IMissing at 1:38-1:46",
            "function run",
            "property title",
        ]

    def test_json_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        write(tmp_path / "lib" / "Base.cfc", "component {}")
        widget = write(tmp_path / "app" / "Widget.cfc", 'component extends="Base" {}')
        assert main(["component", str(widget), "--json", "--root", str(tmp_path / "lib")]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["name"] == "Widget"
        assert data["isScript"] is True
        assert data["extends"] is None
        assert data["unresolved"] == ["Base"]

    def test_root_resolves(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        base = write(tmp_path / "ws" / "lib" / "Base.cfc", "component {}")
        widget = write(tmp_path / "ws" / "app" / "Widget.cfc", 'component extends="lib.Base" {}')
        assert main(["component", str(widget), "--json", "--root", str(tmp_path / "ws")]) == 0
        data = json.loads(capsys.readouterr().out)
        assert Path(data["extends"]).resolve() == base.resolve()
        assert data["unresolved"] == []

    def test_no_component(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        page = write(tmp_path / "page.cfm", "<cfset x = 1>")
        assert main(["component", str(page)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "no component declaration" in captured.err

    def test_debug_dump(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        widget = write(tmp_path / "Widget.cfc", "component {}")
        assert main(["component", str(widget), "--debug"]) == 0
        assert capsys.readouterr().out == "component Widget (script)\n"


# ---------------------------------------------------------------------------
# Debug dump
# ---------------------------------------------------------------------------


class TestDumpComponent:
    def test_tree(self, tmp_path: Path) -> None:
        doc = Document(
            'component extends="Gone" accessors=true {\n'
            "    property numeric count;\n"
            "    x = 1;\n"
            "    private static string function run() {}\n"
            "}",
            tmp_path / "Widget.cfc",
        )
        comp = parse_component(doc)
        assert comp is not None
        buf = io.StringIO()
        dump_component(comp, file=buf)
        assert buf.getvalue().splitlines() == [
            "Component Widget (script) [0:0-0:9]",
            "  Attr accessors=True",
            "  Attr extends='Gone'",
            "  Unresolved Gone -> ? [0:19-0:23]",
            "  Property numeric count [1:21-1:26]",
            "  Function private static string run [3:4-3:43]",
            "  Variable variables.x [2:4-2:5]",
        ]
