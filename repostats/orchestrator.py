"""Repository analysis pipeline: enumerate, analyze, aggregate, export."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .analyzers import (
    DatabaseDetector,
    FrameworkDetector,
    LanguageAnalyzer,
    ManifestProbe,
    ToolDetector,
)
from .catalog import DEFAULT_CATALOG, Catalog
from .logging import get_logger
from .models import RepositoryResult, SummaryStats
from .report import build_export, summarize


class RepositoryAnalyzer:
    """Runs every analyzer and detector over each repository in a base directory."""

    def __init__(
        self,
        base_dir: Path | str,
        *,
        catalog: Catalog = DEFAULT_CATALOG,
        language_analyzer: LanguageAnalyzer | None = None,
        framework_detector: FrameworkDetector | None = None,
        database_detector: DatabaseDetector | None = None,
        tool_detector: ToolDetector | None = None,
        workers: int = 1,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.catalog = catalog
        self.language_analyzer = language_analyzer or LanguageAnalyzer()
        self.framework_detector = framework_detector or FrameworkDetector(catalog=catalog)
        self.database_detector = database_detector or DatabaseDetector(catalog=catalog)
        self.tool_detector = tool_detector or ToolDetector(catalog=catalog)
        self.workers = max(1, workers)
        self.logger = get_logger("orchestrator")
        self._results: List[RepositoryResult] = []

    @classmethod
    def create(
        cls,
        base_dir: Path | str,
        *,
        catalog: Catalog = DEFAULT_CATALOG,
        probe: ManifestProbe | None = None,
        workers: int = 1,
    ) -> "RepositoryAnalyzer":
        """Wire the default analyzers around one shared probe and catalog."""
        shared = probe or ManifestProbe()
        return cls(
            base_dir,
            catalog=catalog,
            language_analyzer=LanguageAnalyzer(),
            framework_detector=FrameworkDetector(shared, catalog),
            database_detector=DatabaseDetector(shared, catalog),
            tool_detector=ToolDetector(shared, catalog),
            workers=workers,
        )

    @property
    def results(self) -> List[RepositoryResult]:
        return list(self._results)

    def list_repositories(self) -> List[Path]:
        """Return the immediate subdirectories of the base directory."""
        try:
            entries = sorted(os.listdir(self.base_dir))
        except OSError:
            return []
        repos: List[Path] = []
        for name in entries:
            path = self.base_dir / name
            try:
                if path.is_dir():
                    repos.append(path)
            except OSError:
                continue
        return repos

    def analyze_all_repositories(self) -> List[RepositoryResult]:
        """Analyze every repository, skipping any that fail part-way."""
        repos = self.list_repositories()
        if not repos:
            self.logger.info("No repositories found under %s", self.base_dir)
            self._results = []
            return []

        self.logger.info("Analyzing %d repositories under %s", len(repos), self.base_dir)
        if self.workers > 1 and len(repos) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                outcomes = list(executor.map(self._analyze_safely, repos))
        else:
            outcomes = [self._analyze_safely(repo) for repo in repos]

        self._results = [outcome for outcome in outcomes if outcome is not None]
        skipped = len(repos) - len(self._results)
        if skipped:
            self.logger.warning("Skipped %d repositories due to analysis errors", skipped)
        return self.results

    def analyze_repository(self, repo_path: Path, repo_name: str) -> RepositoryResult:
        """Return the full result for one repository; errors propagate."""
        result = RepositoryResult(repository=repo_name)

        for key, config in self.catalog.languages.items():
            stats = self.language_analyzer.analyze(repo_path, config)
            if stats.files > 0:
                result.languages[key] = stats
                result.total_lines += stats.lines
                result.total_files += stats.files

        for key, config in self.catalog.frameworks.items():
            detection = self.framework_detector.detect_framework(repo_path, key, config)
            if detection.detected:
                result.frameworks[key] = detection

        result.databases = self.database_detector.detect_databases(repo_path)
        result.tools = self.tool_detector.detect_tools(repo_path)
        return result

    def summarize(self) -> SummaryStats:
        return summarize(self._results, self.catalog)

    def export_results(self, *, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
        """Return the export document for the most recent analysis run."""
        return build_export(self._results, self.catalog, timestamp=timestamp)

    def _analyze_safely(self, repo_path: Path) -> Optional[RepositoryResult]:
        name = repo_path.name
        self.logger.debug("Analyzing %s", name)
        try:
            return self.analyze_repository(repo_path, name)
        except Exception as exc:
            self.logger.warning("Failed to analyze %s: %s", name, exc)
            self.logger.debug("Analysis failure for %s", name, exc_info=True)
            return None


__all__ = ["RepositoryAnalyzer"]
