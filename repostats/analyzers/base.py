"""Base classes for analyzers and detectors."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping

from ..models import LanguageStats


class Analyzer(ABC):
    """Contract for components that measure lines and files in a repository."""

    @abstractmethod
    def analyze(self, repo_path: Path, config: Any) -> LanguageStats:
        """Return line and file totals for ``config`` inside ``repo_path``."""


class Detector(ABC):
    """Contract for components that report catalog entries present in a repository."""

    @abstractmethod
    def detect(self, repo_path: Path) -> Mapping[str, Any]:
        """Return detection results keyed by catalog id."""
