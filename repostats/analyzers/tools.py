"""Tool detector implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from .base import Detector
from .probe import NODE_MANIFEST, PYTHON_REQUIREMENTS, ManifestProbe
from ..catalog import DEFAULT_CATALOG, Catalog
from ..models import Detection

# Go modules and pyproject.toml are not probed for tools.
_TOOL_ECOSYSTEMS = (NODE_MANIFEST, PYTHON_REQUIREMENTS)


class ToolDetector(Detector):
    """Detects devops, cloud, CI, monitoring and testing tools."""

    def __init__(
        self, probe: ManifestProbe | None = None, catalog: Catalog = DEFAULT_CATALOG
    ) -> None:
        self.probe = probe or ManifestProbe()
        self.catalog = catalog

    def detect(self, repo_path: Path) -> Dict[str, Detection]:
        return self.detect_tools(repo_path)

    def detect_tools(self, repo_path: Path) -> Dict[str, Detection]:
        """Return a detection for every tool catalog entry."""
        root = Path(repo_path)
        detections: Dict[str, Detection] = {}
        for key, config in self.catalog.tools.items():
            detection = Detection(category=config.category)

            if config.package_patterns and self.probe.has_dependency(
                root, config.package_patterns, ecosystems=_TOOL_ECOSYSTEMS
            ):
                detection.detected = True
                detection.confidence = "high"

            if not detection.detected:
                for pattern in config.file_patterns:
                    if self.probe.file_exists(root, pattern):
                        detection.detected = True
                        detection.confidence = "medium"
                        break

            detections[key] = detection
        return detections
