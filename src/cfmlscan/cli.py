"""Command-line interface for cfmlscan."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cfmlscan.errors import ConfigError
from cfmlscan.positions import Range

CONFIG_NAME = "cfmlscan.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    command: str
    input_file: Path
    mode: str
    fast: bool
    roots: list[Path]
    as_json: bool
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="cfmlscan",
        description="Lexical context and component structure for CFML sources",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = p.add_subparsers(dest="command", required=True)

    comments = sub.add_parser("comments", help="List comment ranges")
    comments.add_argument("input", help="Input .cfm/.cfc file")
    comments.add_argument(
        "--mode",
        choices=("auto", "script", "tag"),
        default="auto",
        help="Syntax of the file (default: script for script components, else tag)",
    )
    comments.add_argument(
        "--fast",
        action="store_true",
        default=None,
        help="Use the regex scan (ignores strings)",
    )
    comments.add_argument("--json", action="store_true", help="Emit JSON")

    component = sub.add_parser("component", help="Describe a component file")
    component.add_argument("input", help="Input .cfc file")
    component.add_argument(
        "--root",
        action="append",
        default=[],
        metavar="DIR",
        help="Workspace root for resolving dot paths (repeatable)",
    )
    component.add_argument("--json", action="store_true", help="Emit JSON")
    component.add_argument("--debug", action="store_true", help="Dump the component to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML: {exc}", path) from None


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)
    config_file = config_path if config_path is not None else input_dir / CONFIG_NAME

    # Workspace roots: config < CLI, config entries relative to the config file
    roots: list[Path] = []
    cfg_workspace = config.get("workspace", {})
    if not isinstance(cfg_workspace, dict):
        raise ConfigError("[workspace] must be a table", config_file)
    cfg_roots = cfg_workspace.get("roots", [])
    if not isinstance(cfg_roots, list) or not all(isinstance(r, str) for r in cfg_roots):
        raise ConfigError("workspace.roots must be a list of strings", config_file)
    roots.extend((config_file.parent / r).resolve() for r in cfg_roots)
    roots.extend(Path(r).resolve() for r in getattr(args, "root", []))

    # Accuracy: default accurate < config < CLI
    fast = False
    cfg_comments = config.get("comments", {})
    if not isinstance(cfg_comments, dict):
        raise ConfigError("[comments] must be a table", config_file)
    cfg_fast = cfg_comments.get("fast")
    if cfg_fast is not None:
        if not isinstance(cfg_fast, bool):
            raise ConfigError("comments.fast must be true or false", config_file)
        fast = cfg_fast
    if getattr(args, "fast", None) is not None:
        fast = args.fast

    return CliOptions(
        command=args.command,
        input_file=input_file,
        mode=getattr(args, "mode", "auto"),
        fast=fast,
        roots=roots,
        as_json=args.json,
        debug=getattr(args, "debug", False),
        verbose=args.verbose,
    )


def _range_json(r: Range) -> dict[str, dict[str, int]]:
    return {
        "start": {"line": r.start.line, "character": r.start.character},
        "end": {"line": r.end.line, "character": r.end.character},
    }


def _range_text(r: Range) -> str:
    """1-based line:column form for humans."""
    return (
        f"{r.start.line + 1}:{r.start.character + 1}-"
        f"{r.end.line + 1}:{r.end.character + 1}"
    )


def run_comments(options: CliOptions) -> str:
    """Return the report for the comments command."""
    from cfmlscan.comments import comment_ranges
    from cfmlscan.component import is_script_component
    from cfmlscan.document import Document

    doc = Document.from_file(options.input_file)
    if options.mode == "auto":
        is_script = is_script_component(doc)
    else:
        is_script = options.mode == "script"

    ranges = comment_ranges(doc, is_script, fast=options.fast)
    if options.as_json:
        return json.dumps([_range_json(r) for r in ranges], indent=2) + "\n"
    return "".join(f"{_range_text(r)}\t{doc.get_text(r)!r}\n" for r in ranges)


def run_component(options: CliOptions) -> str | None:
    """Return the report for the component command, or None if no component."""
    from cfmlscan.component import parse_component
    from cfmlscan.debug import dump_component
    from cfmlscan.document import Document
    from cfmlscan.resolver import ComponentResolver

    doc = Document.from_file(options.input_file)
    resolver = ComponentResolver(roots=list(options.roots))
    component = parse_component(doc, resolver)
    if component is None:
        return None

    if options.debug:
        dump_component(component)

    if options.as_json:
        payload = {
            "name": component.name,
            "isScript": component.is_script,
            "isInterface": component.is_interface,
            "declarationRange": _range_json(component.declaration_range),
            "displayName": component.display_name,
            "hint": component.hint,
            "accessors": component.accessors,
            "initMethod": component.init_method,
            "extends": str(component.extends.target) if component.extends else None,
            "implements": [str(ref.target) for ref in component.implements or ()],
            "unresolved": [ref.dot_path for ref in component.unresolved],
            "functions": [func.name for func in component.functions.values()],
            "properties": [prop.name for prop in component.properties.values()],
            "variables": [f"{var.scope}.{var.identifier}" for var in component.variables],
        }
        return json.dumps(payload, indent=2) + "\n"

    kind = "interface" if component.is_interface else "component"
    syntax = "script" if component.is_script else "tag"
    lines = [f"{kind} {component.name} ({syntax})"]
    if component.extends is not None:
        lines.append(f"extends {component.extends.dot_path} -> {component.extends.target}")
    for ref in component.implements or ():
        lines.append(f"implements {ref.dot_path} -> {ref.target}")
    for ref in component.unresolved:
        lines.append(f"unresolved {ref.dot_path} at {_range_text(ref.range)}")
    lines.extend(f"function {name}" for name in component.functions)
    lines.extend(f"property {name}" for name in component.properties)
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(name)s: %(message)s")

    try:
        options = resolve_options(args)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    try:
        if options.command == "comments":
            output = run_comments(options)
        else:
            output = run_component(options)
    except OSError as exc:
        print(f"error: cannot read {options.input_file}: {exc.strerror or exc}", file=sys.stderr)
        return 1

    if output is None:
        print(f"error: no component declaration in {options.input_file}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0
