"""Tests for tool detection."""

from __future__ import annotations

from repostats.analyzers import ToolDetector
from repostats.catalog import TOOLS
from tests._fixtures.repo_builder import RepoBuilder


def _detected(detections):
    return {key: detection.confidence for key, detection in detections.items() if detection.detected}


def test_dockerfile_is_medium_confidence(repo_builder: RepoBuilder) -> None:
    root = repo_builder.repo("svc", {"Dockerfile": "FROM alpine\n"})

    detections = ToolDetector().detect_tools(root)

    assert detections["docker"].detected is True
    assert detections["docker"].confidence == "medium"
    assert detections["docker"].category == "devops"


def test_package_dependency_is_high_confidence(repo_builder: RepoBuilder) -> None:
    root = repo_builder.package_json("web", [], ["jest"])

    detections = ToolDetector().detect_tools(root)

    assert _detected(detections) == {"jest": "high"}


def test_requirements_dependency_beats_marker_file(repo_builder: RepoBuilder) -> None:
    root = repo_builder.repo("py", {"requirements.txt": "pytest\n", "pytest.ini": "[pytest]\n"})

    detections = ToolDetector().detect_tools(root)

    assert detections["pytest"].confidence == "high"


def test_pyproject_and_go_mod_are_not_probed(repo_builder: RepoBuilder) -> None:
    root = repo_builder.repo(
        "lib",
        {
            "pyproject.toml": '[project.optional-dependencies]\ntest = ["pytest"]\n',
            "go.mod": "module lib\n\nrequire github.com/prometheus/client_golang v1\n",
        },
    )

    detections = ToolDetector().detect_tools(root)

    assert detections["pytest"].detected is False
    assert detections["prometheus"].detected is False


def test_directory_markers_detect_ci(repo_builder: RepoBuilder) -> None:
    root = repo_builder.repo(
        "ci",
        {".github/workflows/test.yml": "on: push\n", ".gitlab-ci.yml": "stages: [test]\n"},
    )

    detections = ToolDetector().detect_tools(root)

    assert _detected(detections) == {"githubActions": "medium", "gitlabCI": "medium"}


def test_every_catalog_entry_is_reported(repo_builder: RepoBuilder) -> None:
    root = repo_builder.repo("bare", {"main.c": "int main(void) { return 0; }\n"})

    detections = ToolDetector().detect_tools(root)

    assert list(detections) == list(TOOLS)
    for key, detection in detections.items():
        assert detection.detected is False
        assert detection.confidence == "low"
        assert detection.category == TOOLS[key].category
