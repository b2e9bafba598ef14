"""Fleet-wide aggregation and export document shaping."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Sequence

from .catalog import Catalog
from .models import (
    DATABASE_CATEGORIES,
    FRAMEWORK_CATEGORIES,
    FrameworkTotals,
    LanguageTotals,
    RepositoryResult,
    SummaryStats,
    UsageTotals,
)


def percentage(part: int, total: int) -> str:
    """Return ``part / total`` as a percentage string with two decimals.

    A zero ``total`` yields ``"0.00"``. Halves round away from zero.
    """
    if total == 0:
        return "0.00"
    value = Decimal(part * 100) / Decimal(total)
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def summarize(results: Sequence[RepositoryResult], catalog: Catalog) -> SummaryStats:
    """Aggregate per-repository results into fleet-wide totals.

    Totals are initialised from the same catalog the detectors use, so every
    id a detector can emit has a slot; ids outside the catalog are ignored.
    """
    summary = SummaryStats(total_repos=len(results))
    summary.language_stats = {key: LanguageTotals() for key in catalog.languages}
    summary.framework_stats = {key: FrameworkTotals() for key in catalog.frameworks}
    summary.database_stats = {
        key: UsageTotals(category=config.category) for key, config in catalog.databases.items()
    }
    summary.tool_stats = {
        key: UsageTotals(category=config.category) for key, config in catalog.tools.items()
    }

    for result in results:
        summary.total_lines += result.total_lines
        summary.total_files += result.total_files

        for key, stats in result.languages.items():
            language = summary.language_stats.get(key)
            if language is None:
                continue
            language.lines += stats.lines
            language.files += stats.files
            language.repos += 1

        for key, detection in result.frameworks.items():
            framework = summary.framework_stats.get(key)
            if framework is None:
                continue
            framework.repos += 1
            framework.total_usage += 1
            framework.lines += detection.lines
            framework.files += detection.files

        for key, detection in result.databases.items():
            database = summary.database_stats.get(key)
            if detection.detected and database is not None:
                database.repos += 1
                database.total_usage += 1

        for key, detection in result.tools.items():
            tool = summary.tool_stats.get(key)
            if detection.detected and tool is not None:
                tool.repos += 1
                tool.total_usage += 1

    return summary


def build_export(
    results: Sequence[RepositoryResult],
    catalog: Catalog,
    *,
    timestamp: datetime | None = None,
) -> Dict[str, Any]:
    """Return the report document pushed to the document store."""
    summary = summarize(results, catalog)
    moment = timestamp or datetime.now(UTC)
    names = catalog.names()

    return {
        "metadata": {
            "timestamp": moment.isoformat().replace("+00:00", "Z"),
            "totalRepositories": summary.total_repos,
            **names,
        },
        "summary": {
            "totalRepositories": summary.total_repos,
            "totalLinesOfCode": summary.total_lines,
            "totalFiles": summary.total_files,
            "languageBreakdown": _language_breakdown(summary, catalog),
        },
        "frameworks": {
            category: _framework_results(summary, catalog, category)
            for category in FRAMEWORK_CATEGORIES
        },
        "databases": {
            category: _database_results(summary, catalog, category)
            for category in DATABASE_CATEGORIES
        },
        "tools": _tool_results(summary, catalog),
        "detailedResults": [_detailed_result(result, catalog) for result in results],
    }


def _by_count(entries: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    # sorted() is stable, so ties keep catalog order.
    return sorted(entries, key=lambda entry: entry[key], reverse=True)


def _language_breakdown(summary: SummaryStats, catalog: Catalog) -> List[Dict[str, Any]]:
    entries = [
        {
            "language": catalog.languages[key].name,
            "languageKey": key,
            "linesOfCode": stats.lines,
            "fileCount": stats.files,
            "repositoryCount": stats.repos,
            "percentageOfTotal": percentage(stats.lines, summary.total_lines),
        }
        for key, stats in summary.language_stats.items()
        if stats.repos > 0
    ]
    return _by_count(entries, "linesOfCode")


def _framework_results(
    summary: SummaryStats, catalog: Catalog, category: str
) -> List[Dict[str, Any]]:
    entries = [
        {
            "name": catalog.frameworks[key].name,
            "key": key,
            "repositoryCount": stats.repos,
            "linesOfCode": stats.lines,
            "fileCount": stats.files,
            "percentageOfRepositories": percentage(stats.repos, summary.total_repos),
        }
        for key, stats in summary.framework_stats.items()
        if stats.repos > 0 and catalog.frameworks[key].category == category
    ]
    return _by_count(entries, "repositoryCount")


def _database_results(
    summary: SummaryStats, catalog: Catalog, category: str
) -> List[Dict[str, Any]]:
    entries = [
        {
            "name": catalog.databases[key].name,
            "key": key,
            "repositoryCount": stats.repos,
            "percentageOfRepositories": percentage(stats.repos, summary.total_repos),
        }
        for key, stats in summary.database_stats.items()
        if stats.repos > 0 and stats.category == category
    ]
    return _by_count(entries, "repositoryCount")


def _tool_results(summary: SummaryStats, catalog: Catalog) -> List[Dict[str, Any]]:
    entries = [
        {
            "name": catalog.tools[key].name,
            "key": key,
            "category": stats.category,
            "repositoryCount": stats.repos,
            "percentageOfRepositories": percentage(stats.repos, summary.total_repos),
        }
        for key, stats in summary.tool_stats.items()
        if stats.repos > 0
    ]
    return _by_count(entries, "repositoryCount")


def _detailed_result(result: RepositoryResult, catalog: Catalog) -> Dict[str, Any]:
    return {
        "repository": result.repository,
        "statistics": {
            "totalLinesOfCode": result.total_lines,
            "totalFiles": result.total_files,
        },
        "languages": [
            {
                "language": _name(catalog.languages, key),
                "languageKey": key,
                "linesOfCode": stats.lines,
                "fileCount": stats.files,
            }
            for key, stats in result.languages.items()
        ],
        "frameworks": [
            {
                "framework": _name(catalog.frameworks, key),
                "frameworkKey": key,
                "confidence": detection.confidence,
                "linesOfCode": detection.lines,
                "fileCount": detection.files,
            }
            for key, detection in result.frameworks.items()
        ],
        "databases": [
            {
                "database": _name(catalog.databases, key),
                "databaseKey": key,
                "confidence": detection.confidence,
                "category": detection.category,
            }
            for key, detection in result.databases.items()
            if detection.detected
        ],
        "tools": [
            {
                "tool": _name(catalog.tools, key),
                "toolKey": key,
                "confidence": detection.confidence,
                "category": detection.category,
            }
            for key, detection in result.tools.items()
            if detection.detected
        ],
    }


def _name(table: Any, key: str) -> str:
    entry = table.get(key)
    return entry.name if entry is not None else key


__all__ = ["build_export", "percentage", "summarize"]
