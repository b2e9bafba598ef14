"""Language analyzer implementation."""

from __future__ import annotations

from pathlib import Path

from .base import Analyzer
from .probe import count_lines, walk
from ..models import LanguageConfig, LanguageStats


class LanguageAnalyzer(Analyzer):
    """Counts lines and files whose names end with a language's extensions."""

    def analyze(self, repo_path: Path, config: LanguageConfig) -> LanguageStats:
        root = Path(repo_path)
        # Paths are taken relative to the base directory, so the repository
        # name takes part in exclusion matching but the base location does not.
        base = root.parent
        stats = LanguageStats()

        def _excluded(path: Path) -> bool:
            relative = path.relative_to(base).as_posix()
            return any(pattern in relative for pattern in config.exclude_patterns)

        if _excluded(root):
            return stats

        for current, _, filenames in walk(root, prune=_excluded):
            for filename in filenames:
                path = current / filename
                if _excluded(path) or not filename.endswith(config.extensions):
                    continue
                if not path.is_file():
                    continue
                stats.files += 1
                try:
                    stats.lines += count_lines(path)
                except OSError:
                    # Unreadable files still count as a zero-line file.
                    continue
        return stats
