"""Database detector implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from .base import Detector
from .probe import ManifestProbe
from ..catalog import DEFAULT_CATALOG, Catalog
from ..models import Detection


class DatabaseDetector(Detector):
    """Detects database drivers and ORMs from dependency manifests only."""

    def __init__(
        self, probe: ManifestProbe | None = None, catalog: Catalog = DEFAULT_CATALOG
    ) -> None:
        self.probe = probe or ManifestProbe()
        self.catalog = catalog

    def detect(self, repo_path: Path) -> Dict[str, Detection]:
        return self.detect_databases(repo_path)

    def detect_databases(self, repo_path: Path) -> Dict[str, Detection]:
        """Return a detection for every database catalog entry."""
        root = Path(repo_path)
        detections: Dict[str, Detection] = {}
        for key, config in self.catalog.databases.items():
            detection = Detection(category=config.category)
            if self.probe.has_dependency(root, config.package_patterns):
                detection.detected = True
                detection.confidence = "high"
            detections[key] = detection
        return detections
