"""Core data models shared across repostats components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

FRAMEWORK_CATEGORIES: Tuple[str, ...] = ("frontend", "backend")
DATABASE_CATEGORIES: Tuple[str, ...] = ("sql", "nosql", "orm")
TOOL_CATEGORIES: Tuple[str, ...] = ("devops", "cloud", "cicd", "monitoring", "testing")


@dataclass(frozen=True)
class LanguageConfig:
    """Catalog entry describing how to recognise a language's files."""

    name: str
    extensions: Tuple[str, ...]
    exclude_patterns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FrameworkConfig:
    """Catalog entry for a web framework.

    ``exclude_patterns`` is catalog data kept alongside the other pattern lists
    so definitions round-trip; detection and measurement do not consult it.
    """

    name: str
    file_patterns: Tuple[str, ...]
    package_patterns: Tuple[str, ...]
    category: str
    exclude_patterns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DatabaseConfig:
    """Catalog entry for a database driver or ORM."""

    name: str
    package_patterns: Tuple[str, ...]
    category: str


@dataclass(frozen=True)
class ToolConfig:
    """Catalog entry for a devops, cloud, CI, monitoring or testing tool."""

    name: str
    file_patterns: Tuple[str, ...]
    package_patterns: Tuple[str, ...]
    category: str


@dataclass
class LanguageStats:
    lines: int = 0
    files: int = 0


@dataclass
class Detection:
    """Presence flag for one catalog entry in one repository."""

    detected: bool = False
    confidence: str = "low"
    category: str = ""


@dataclass
class FrameworkDetection:
    """Framework detection plus the lines/files matched by its file patterns."""

    detected: bool = False
    confidence: str = "low"
    lines: int = 0
    files: int = 0


@dataclass
class RepositoryResult:
    """Everything measured for a single repository during one scan."""

    repository: str
    languages: Dict[str, LanguageStats] = field(default_factory=dict)
    frameworks: Dict[str, FrameworkDetection] = field(default_factory=dict)
    databases: Dict[str, Detection] = field(default_factory=dict)
    tools: Dict[str, Detection] = field(default_factory=dict)
    total_lines: int = 0
    total_files: int = 0


@dataclass
class LanguageTotals:
    lines: int = 0
    files: int = 0
    repos: int = 0


@dataclass
class FrameworkTotals:
    repos: int = 0
    total_usage: int = 0
    lines: int = 0
    files: int = 0


@dataclass
class UsageTotals:
    category: str
    repos: int = 0
    total_usage: int = 0


@dataclass
class SummaryStats:
    """Fleet-wide aggregates computed from every repository result."""

    total_repos: int = 0
    total_lines: int = 0
    total_files: int = 0
    language_stats: Dict[str, LanguageTotals] = field(default_factory=dict)
    framework_stats: Dict[str, FrameworkTotals] = field(default_factory=dict)
    database_stats: Dict[str, UsageTotals] = field(default_factory=dict)
    tool_stats: Dict[str, UsageTotals] = field(default_factory=dict)
