"""Tests for fleet aggregation and the export document."""

from __future__ import annotations

from datetime import UTC, datetime

from repostats.catalog import DEFAULT_CATALOG
from repostats.models import Detection, FrameworkDetection, LanguageStats, RepositoryResult
from repostats.report import build_export, percentage, summarize


def _result(name: str, **languages: LanguageStats) -> RepositoryResult:
    result = RepositoryResult(repository=name, languages=dict(languages))
    result.total_lines = sum(stats.lines for stats in languages.values())
    result.total_files = sum(stats.files for stats in languages.values())
    result.databases = {
        key: Detection(category=config.category) for key, config in DEFAULT_CATALOG.databases.items()
    }
    result.tools = {
        key: Detection(category=config.category) for key, config in DEFAULT_CATALOG.tools.items()
    }
    return result


def test_percentage_formats_two_decimals() -> None:
    assert percentage(1, 4) == "25.00"
    assert percentage(3, 4) == "75.00"
    assert percentage(1, 3) == "33.33"
    assert percentage(2, 3) == "66.67"
    assert percentage(1, 8) == "12.50"


def test_percentage_rounds_halves_up() -> None:
    assert percentage(1, 800) == "0.13"


def test_percentage_guards_zero_denominator() -> None:
    assert percentage(0, 0) == "0.00"


def test_summarize_accumulates_languages_and_usage() -> None:
    first = _result("a", py=LanguageStats(lines=100, files=2))
    first.frameworks["flask"] = FrameworkDetection(True, "high", 40, 1)
    first.databases["redis"] = Detection(True, "high", "nosql")
    second = _result("b", py=LanguageStats(lines=50, files=1), go=LanguageStats(lines=10, files=1))
    second.databases["redis"] = Detection(True, "high", "nosql")

    summary = summarize([first, second], DEFAULT_CATALOG)

    assert summary.total_repos == 2
    assert summary.total_lines == 160
    assert summary.total_files == 4
    assert summary.language_stats["py"].repos == 2
    assert summary.language_stats["py"].lines == 150
    assert summary.framework_stats["flask"].repos == 1
    assert summary.framework_stats["flask"].lines == 40
    assert summary.database_stats["redis"].repos == 2
    assert summary.database_stats["postgresql"].repos == 0


def test_summarize_ignores_unknown_ids() -> None:
    result = _result("a", cobol=LanguageStats(lines=5, files=1))
    result.tools["mystery"] = Detection(True, "high", "devops")

    summary = summarize([result], DEFAULT_CATALOG)

    assert "cobol" not in summary.language_stats
    assert "mystery" not in summary.tool_stats


def test_language_breakdown_percentages_and_order() -> None:
    results = [
        _result("a", js=LanguageStats(lines=100, files=1)),
        _result("b", ts=LanguageStats(lines=300, files=3)),
    ]

    report = build_export(results, DEFAULT_CATALOG, timestamp=datetime(2024, 1, 2, tzinfo=UTC))

    breakdown = report["summary"]["languageBreakdown"]
    assert [entry["languageKey"] for entry in breakdown] == ["ts", "js"]
    assert [entry["percentageOfTotal"] for entry in breakdown] == ["75.00", "25.00"]
    assert breakdown[0]["language"] == "TypeScript"
    assert breakdown[0]["repositoryCount"] == 1


def test_export_shapes_framework_database_and_tool_sections() -> None:
    first = _result("a", py=LanguageStats(lines=10, files=1))
    first.frameworks["django"] = FrameworkDetection(True, "high", 10, 1)
    first.databases["sqlalchemy"] = Detection(True, "high", "orm")
    first.tools["docker"] = Detection(True, "medium", "devops")
    second = _result("b", js=LanguageStats(lines=10, files=1))
    second.frameworks["reactNext"] = FrameworkDetection(True, "high", 0, 0)
    second.tools["docker"] = Detection(True, "high", "devops")

    report = build_export([first, second], DEFAULT_CATALOG)

    assert report["frameworks"]["frontend"] == [
        {
            "name": "React/Next.js",
            "key": "reactNext",
            "repositoryCount": 1,
            "linesOfCode": 0,
            "fileCount": 0,
            "percentageOfRepositories": "50.00",
        }
    ]
    assert [entry["key"] for entry in report["frameworks"]["backend"]] == ["django"]
    assert report["databases"]["sql"] == []
    assert report["databases"]["orm"][0]["key"] == "sqlalchemy"
    assert report["tools"] == [
        {
            "name": "Docker",
            "key": "docker",
            "category": "devops",
            "repositoryCount": 2,
            "percentageOfRepositories": "100.00",
        }
    ]


def test_detailed_results_list_only_detected_entries() -> None:
    result = _result("a", py=LanguageStats(lines=3, files=1))
    result.databases["mongodb"] = Detection(True, "high", "nosql")

    detailed = build_export([result], DEFAULT_CATALOG)["detailedResults"][0]

    assert detailed["repository"] == "a"
    assert detailed["statistics"] == {"totalLinesOfCode": 3, "totalFiles": 1}
    assert detailed["languages"] == [
        {"language": "Python", "languageKey": "py", "linesOfCode": 3, "fileCount": 1}
    ]
    assert detailed["databases"] == [
        {"database": "MongoDB", "databaseKey": "mongodb", "confidence": "high", "category": "nosql"}
    ]
    assert detailed["tools"] == []


def test_metadata_carries_timestamp_and_name_tables() -> None:
    report = build_export([], DEFAULT_CATALOG, timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=UTC))

    metadata = report["metadata"]
    assert metadata["timestamp"] == "2024-05-01T12:00:00Z"
    assert metadata["totalRepositories"] == 0
    assert metadata["languages"]["py"] == "Python"
    assert metadata["tools"]["githubActions"] == "GitHub Actions"
    assert report["summary"]["languageBreakdown"] == []


def test_sort_ties_keep_catalog_order() -> None:
    results = [_result("a"), _result("b")]
    for result in results:
        result.tools["jest"] = Detection(True, "high", "testing")
        result.tools["docker"] = Detection(True, "medium", "devops")

    report = build_export(results, DEFAULT_CATALOG)

    assert [entry["key"] for entry in report["tools"]] == ["docker", "jest"]
