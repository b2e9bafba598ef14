"""Framework detector implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from .base import Detector
from .probe import ManifestProbe, count_lines
from ..catalog import DEFAULT_CATALOG, Catalog
from ..models import FrameworkConfig, FrameworkDetection


class FrameworkDetector(Detector):
    """Detects web frameworks via manifest dependencies or marker files."""

    def __init__(
        self, probe: ManifestProbe | None = None, catalog: Catalog = DEFAULT_CATALOG
    ) -> None:
        self.probe = probe or ManifestProbe()
        self.catalog = catalog

    def detect(self, repo_path: Path) -> Dict[str, FrameworkDetection]:
        """Return detections for every framework found in ``repo_path``."""
        detections: Dict[str, FrameworkDetection] = {}
        for key, config in self.catalog.frameworks.items():
            detection = self.detect_framework(repo_path, key, config)
            if detection.detected:
                detections[key] = detection
        return detections

    def detect_framework(
        self, repo_path: Path, framework_key: str, config: FrameworkConfig
    ) -> FrameworkDetection:
        root = Path(repo_path)
        detection = FrameworkDetection()

        if config.package_patterns and self.probe.has_dependency(root, config.package_patterns):
            detection.detected = True
            detection.confidence = "high"

        if not detection.detected:
            for pattern in config.file_patterns:
                if self.probe.file_exists(root, pattern):
                    detection.detected = True
                    detection.confidence = "medium"
                    break

        if detection.detected:
            detection.lines, detection.files = self._count_framework_files(root, config)
        return detection

    def _count_framework_files(self, root: Path, config: FrameworkConfig) -> tuple[int, int]:
        lines = 0
        files = 0
        for pattern in config.file_patterns:
            matches: List[Path] = self.probe.find_files(root, pattern)
            for path in matches:
                try:
                    count = count_lines(path)
                except OSError:
                    # Unreadable files contribute neither lines nor a file.
                    continue
                lines += count
                files += 1
        return lines, files
