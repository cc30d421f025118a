"""Dot-path component resolution against the file system."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

COMPONENT_EXT = ".cfc"


class ComponentPathCache:
    """Resolution results keyed by (dot path, referencing directory, root).

    ``root`` is the workspace root the resolver chose for the referencing
    file, so resolvers with different roots sharing one cache never see
    each other's answers. Safe to share between threads. Misses are cached
    as ``None``. Nothing here watches the file system; owners call the
    ``invalidate_*`` methods when files change.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[tuple[str, Path, Path | None], Path | None] = {}

    def lookup(
        self, dot_path: str, base_dir: Path, root: Path | None = None
    ) -> tuple[bool, Path | None]:
        """Return (hit, result)."""
        key = (dot_path, base_dir, root)
        with self._lock:
            if key in self._entries:
                return True, self._entries[key]
        return False, None

    def store(
        self, dot_path: str, base_dir: Path, result: Path | None, root: Path | None = None
    ) -> None:
        with self._lock:
            self._entries[(dot_path, base_dir, root)] = result

    def invalidate_referencing(self, path: Path | str) -> int:
        """Drop entries resolved on behalf of files in path's directory."""
        base_dir = Path(path).parent
        with self._lock:
            stale = [key for key in self._entries if key[1] == base_dir]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def invalidate_target(self, path: Path | str) -> int:
        """Drop entries a created or deleted component file may affect.

        That is every cached miss, every entry that resolved to path, and
        every entry whose dot path could name path from some directory.
        The last group covers a new file that now shadows a root match.
        """
        target = Path(path)
        with self._lock:
            stale = [
                key
                for key, value in self._entries.items()
                if value is None or value == target or _could_name(key[0], target)
            ]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def dot_path_to_relative(dot_path: str) -> Path:
    """Convert ``pkg.sub.Name`` to ``pkg/sub/Name.cfc``."""
    return Path(*dot_path.split(".")).with_suffix(COMPONENT_EXT)


def _could_name(dot_path: str, target: Path) -> bool:
    relative = dot_path_to_relative(dot_path).parts
    return target.parts[-len(relative) :] == relative


@dataclass
class ComponentResolver:
    """Resolves dot paths to component files.

    Lookup order: the referencing file's directory, then the workspace
    root that contains the referencing file. Logical path mappings are
    not supported.
    """

    roots: list[Path] = field(default_factory=list)
    cache: ComponentPathCache = field(default_factory=ComponentPathCache)

    def resolve(self, dot_path: str, referencing: Path | str | None) -> Path | None:
        """Return the file dot_path names, as seen from referencing, or None."""
        dot_path = dot_path.strip()
        if not dot_path or referencing is None:
            return None
        if any(not part for part in dot_path.split(".")):
            return None

        referencing = Path(referencing)
        base_dir = referencing.parent
        root = self.workspace_root(referencing)
        hit, cached = self.cache.lookup(dot_path, base_dir, root)
        if hit:
            logger.debug("cache hit for %s from %s: %s", dot_path, base_dir, cached)
            return cached

        result = self._discover(dot_path, referencing, root)
        self.cache.store(dot_path, base_dir, result, root)
        logger.debug("resolved %s from %s: %s", dot_path, base_dir, result)
        return result

    def workspace_root(self, path: Path | str) -> Path | None:
        """Return the deepest configured root containing path."""
        path = Path(path)
        containing = [root for root in self.roots if path.is_relative_to(root)]
        if not containing:
            return None
        return max(containing, key=lambda root: len(root.parts))

    def _discover(self, dot_path: str, referencing: Path, root: Path | None) -> Path | None:
        relative = dot_path_to_relative(dot_path)

        # 1. Next to the referencing file
        local = referencing.parent / relative
        if local.is_file():
            return local

        # 2. Under the workspace root
        if root is not None:
            candidate = root / relative
            if candidate.is_file():
                return candidate

        return None
