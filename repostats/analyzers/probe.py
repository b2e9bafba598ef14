"""Manifest and marker-file probes shared by every analyzer and detector.

Probing is best-effort: filesystem, decoding and JSON errors are treated as
"no match" so a single unreadable file never aborts a scan.
"""

from __future__ import annotations

import json
import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Set, Tuple

from ..config import DEFAULT_MONOREPO_DIRS

NODE_MANIFEST = "package.json"
PYTHON_REQUIREMENTS = "requirements.txt"
GO_MODULE = "go.mod"
PYTHON_PROJECT = "pyproject.toml"

ALL_ECOSYSTEMS: Tuple[str, ...] = (
    NODE_MANIFEST,
    PYTHON_REQUIREMENTS,
    GO_MODULE,
    PYTHON_PROJECT,
)

_SKIPPED_DIR_PREFIX = "node_modules"


# Tree walking and line counting


def walk(
    root: Path, *, prune: Callable[[Path], bool] | None = None
) -> Iterator[Tuple[Path, List[str], List[str]]]:
    """Yield ``(directory, dirnames, filenames)`` top-down in sorted order.

    Directory symlinks are followed, but each real directory is visited at
    most once so symlink cycles terminate. ``prune`` receives every
    subdirectory path and returns True to skip it.
    """
    visited: Set[str] = set()
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        real = os.path.realpath(dirpath)
        if real in visited:
            dirnames[:] = []
            continue
        visited.add(real)

        current = Path(dirpath)
        dirnames.sort()
        if prune is not None:
            dirnames[:] = [name for name in dirnames if not prune(current / name)]
        yield current, dirnames, sorted(filenames)


def count_lines(path: Path) -> int:
    """Return the number of newline-separated segments in ``path``.

    A trailing newline produces one extra empty segment, so ``"a\\n"`` is two
    lines. Raises ``OSError`` when the file cannot be read.
    """
    with path.open("r", encoding="utf-8", errors="replace", newline="") as handle:
        return len(handle.read().split("\n"))


def _skip_node_modules(path: Path) -> bool:
    return path.name.startswith(_SKIPPED_DIR_PREFIX)


# Marker files


def file_exists(root: Path, pattern: str) -> bool:
    """Return True when ``pattern`` matches something inside ``root``.

    Patterns containing ``/`` name a directory relative to the root; patterns
    containing ``*`` are matched against the root directory listing; anything
    else is an exact filename searched for recursively.
    """
    try:
        if "/" in pattern:
            return (root / pattern).is_dir()
        if "*" in pattern:
            return bool(_glob_directory(root, pattern))
        return find_file(root, pattern) is not None
    except OSError:
        return False


def find_files(root: Path, pattern: str) -> List[Path]:
    """Return the files a marker pattern refers to, using ``file_exists`` classes."""
    try:
        if "/" in pattern:
            directory = root / pattern
            if not directory.is_dir():
                return []
            files: List[Path] = []
            for current, _, filenames in walk(directory, prune=_skip_node_modules):
                files.extend(current / name for name in filenames)
            return files
        if "*" in pattern:
            return _glob_directory(root, pattern)
        match = find_file(root, pattern)
        return [match] if match is not None else []
    except OSError:
        return []


def find_file(root: Path, filename: str) -> Optional[Path]:
    """Return the first file named ``filename`` below ``root``, skipping node_modules."""
    for current, _, filenames in walk(root, prune=_skip_node_modules):
        if filename in filenames:
            candidate = current / filename
            if candidate.is_file():
                return candidate
    return None


def _glob_directory(root: Path, pattern: str) -> List[Path]:
    # Patterns with a separator take the directory branch, so wildcards only
    # ever apply to the repository root listing.
    if not root.is_dir():
        return []
    return [root / name for name in sorted(os.listdir(root)) if fnmatchcase(name, pattern)]


# Dependency manifests


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def load_node_dependencies(directory: Path) -> Set[str]:
    """Return merged runtime and dev dependency names from package.json."""
    text = _read_text(directory / NODE_MANIFEST)
    if text is None:
        return set()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return set()
    if not isinstance(data, dict):
        return set()

    names: Set[str] = set()
    for key in ("dependencies", "devDependencies"):
        deps = data.get(key)
        if isinstance(deps, dict):
            names.update(str(name) for name in deps)
    return names


def _node_matches(directory: Path, patterns: Sequence[str]) -> bool:
    names = load_node_dependencies(directory)
    return any(pattern in name for pattern in patterns for name in names)


def _requirements_match(directory: Path, patterns: Sequence[str]) -> bool:
    text = _read_text(directory / PYTHON_REQUIREMENTS)
    if text is None:
        return False
    lines = [line.strip().lower() for line in text.split("\n")]
    return any(pattern.lower() in line for pattern in patterns for line in lines)


def _go_module_matches(directory: Path, patterns: Sequence[str]) -> bool:
    text = _read_text(directory / GO_MODULE)
    if text is None:
        return False
    lines = [line.strip() for line in text.split("\n")]
    return any(pattern in line for pattern in patterns for line in lines)


def _pyproject_matches(directory: Path, patterns: Sequence[str]) -> bool:
    text = _read_text(directory / PYTHON_PROJECT)
    if text is None:
        return False
    return any(pattern in text for pattern in patterns)


_MATCHERS: Dict[str, Callable[[Path, Sequence[str]], bool]] = {
    NODE_MANIFEST: _node_matches,
    PYTHON_REQUIREMENTS: _requirements_match,
    GO_MODULE: _go_module_matches,
    PYTHON_PROJECT: _pyproject_matches,
}


class ManifestProbe:
    """Answers "does this repository depend on X" across manifest ecosystems."""

    def __init__(
        self,
        *,
        monorepo_fallback: bool = True,
        monorepo_dirs: Sequence[str] = DEFAULT_MONOREPO_DIRS,
    ) -> None:
        self.monorepo_fallback = monorepo_fallback
        self.monorepo_dirs = tuple(monorepo_dirs)

    def has_dependency(
        self,
        root: Path,
        patterns: Sequence[str],
        *,
        ecosystems: Sequence[str] = ALL_ECOSYSTEMS,
    ) -> bool:
        """Return True on the first ecosystem whose manifest mentions a pattern."""
        if not patterns:
            return False
        for ecosystem in ecosystems:
            matcher = _MATCHERS[ecosystem]
            for directory in self._candidate_dirs(root):
                if matcher(directory, patterns):
                    return True
        return False

    def file_exists(self, root: Path, pattern: str) -> bool:
        return file_exists(root, pattern)

    def find_files(self, root: Path, pattern: str) -> List[Path]:
        return find_files(root, pattern)

    def _candidate_dirs(self, root: Path) -> Iterator[Path]:
        yield root
        if not self.monorepo_fallback:
            return
        for name in self.monorepo_dirs:
            subdir = root / name
            try:
                if subdir.is_dir():
                    yield subdir
            except OSError:
                continue


__all__ = [
    "ALL_ECOSYSTEMS",
    "GO_MODULE",
    "ManifestProbe",
    "NODE_MANIFEST",
    "PYTHON_PROJECT",
    "PYTHON_REQUIREMENTS",
    "count_lines",
    "file_exists",
    "find_file",
    "find_files",
    "load_node_dependencies",
    "walk",
]
