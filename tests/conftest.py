"""Shared test fixtures and helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from cfmlscan.document import Document
from cfmlscan.positions import Position, Range
from cfmlscan.resolver import ComponentPathCache, ComponentResolver


@pytest.fixture
def make_doc():
    """Return a helper that wraps source text in a Document."""

    def _make(text: str, path: Path | str | None = None) -> Document:
        return Document(text, path)

    return _make


@pytest.fixture
def resolver() -> ComponentResolver:
    """A resolver with its own empty cache and no workspace roots."""
    return ComponentResolver(cache=ComponentPathCache())


def write(path: Path, text: str = "") -> Path:
    """Create path (and its parent directories) holding text."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def rng(start_line: int, start_char: int, end_line: int, end_char: int) -> Range:
    """Shorthand Range constructor."""
    return Range(Position(start_line, start_char), Position(end_line, end_char))
