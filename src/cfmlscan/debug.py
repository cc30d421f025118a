"""--debug component dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from cfmlscan.component import Component, ComponentReference
from cfmlscan.functions import UserFunction
from cfmlscan.positions import Range
from cfmlscan.properties import Property
from cfmlscan.variables import Variable


def dump_component(component: Component, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable component tree to *file*."""
    kind = "Interface" if component.is_interface else "Component"
    syntax = "script" if component.is_script else "tag"
    file.write(f"{kind} {component.name or '<memory>'} ({syntax}) {_range(component.declaration_range)}\n")
    for key in sorted(component.attributes):
        file.write(f"{_indent(1)}Attr {key}={component.attributes[key]!r}\n")
    if component.extends is not None:
        _dump_reference("Extends", component.extends, 1, file)
    for ref in component.implements or ():
        _dump_reference("Implements", ref, 1, file)
    for ref in component.unresolved:
        _dump_reference("Unresolved", ref, 1, file)
    for prop in component.properties.values():
        _dump_property(prop, 1, file)
    for func in component.functions.values():
        _dump_function(func, 1, file)
    for var in component.variables:
        _dump_variable(var, 1, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _range(r: Range) -> str:
    return f"[{r.start.line}:{r.start.character}-{r.end.line}:{r.end.character}]"


def _dump_reference(label: str, ref: ComponentReference, depth: int, f: TextIO) -> None:
    target = ref.target if ref.target is not None else "?"
    f.write(f"{_indent(depth)}{label} {ref.dot_path} -> {target} {_range(ref.range)}\n")


def _dump_property(prop: Property, depth: int, f: TextIO) -> None:
    f.write(f"{_indent(depth)}Property {prop.data_type} {prop.name} {_range(prop.name_range)}\n")


def _dump_function(func: UserFunction, depth: int, f: TextIO) -> None:
    static = "static " if func.is_static else ""
    f.write(
        f"{_indent(depth)}Function {func.access} {static}{func.return_type} {func.name} "
        f"{_range(func.range)}\n"
    )


def _dump_variable(var: Variable, depth: int, f: TextIO) -> None:
    f.write(f"{_indent(depth)}Variable {var.scope}.{var.identifier} {_range(var.declaration_range)}\n")
