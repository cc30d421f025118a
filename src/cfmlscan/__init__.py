"""Lexical context and component structure analysis for CFML."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cfmlscan.component import Component
    from cfmlscan.resolver import ComponentResolver

__version__ = "0.1.0"


def parse(
    source: str,
    path: Path | str | None = None,
    resolver: ComponentResolver | None = None,
) -> Component | None:
    """Parse CFML source as a component; None if it declares none."""
    from cfmlscan.component import parse_component
    from cfmlscan.document import Document

    return parse_component(Document(source, path), resolver)
