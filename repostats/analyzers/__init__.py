"""Analyzer and detector implementations."""

from __future__ import annotations

from .base import Analyzer, Detector
from .databases import DatabaseDetector
from .frameworks import FrameworkDetector
from .language import LanguageAnalyzer
from .probe import ManifestProbe
from .tools import ToolDetector

__all__ = [
    "Analyzer",
    "DatabaseDetector",
    "Detector",
    "FrameworkDetector",
    "LanguageAnalyzer",
    "ManifestProbe",
    "ToolDetector",
]
