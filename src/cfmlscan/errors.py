"""Error types raised by the command-line and configuration surfaces.

The scanning and parsing core does not raise; absence is reported with
``None``, boundary positions, or empty results.
"""

from __future__ import annotations

from pathlib import Path


class ConfigError(Exception):
    """Raised when a config file holds a value of the wrong shape."""

    def __init__(self, message: str, path: Path) -> None:
        self.message = message
        self.path = path
        super().__init__(self.format())

    def format(self) -> str:
        gutter = "  "
        return f"error: {self.message}\n{gutter}--> {self.path}"
