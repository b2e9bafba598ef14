"""Tests for the GitHub GraphQL client."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pytest

from repostats.github import (
    GitHubClient,
    GitHubError,
    RepositoryRef,
    load_repository_list,
    save_repository_list,
)
from repostats.github.client import GraphQLRequest


def _node(name: str, *topics: str) -> Dict[str, Any]:
    return {
        "name": name,
        "url": f"https://github.com/octocat/{name}",
        "repositoryTopics": {"nodes": [{"topic": {"name": topic}} for topic in topics]},
    }


def _page(nodes: List[Dict[str, Any]], *, cursor: str | None = None) -> Dict[str, Any]:
    return {
        "data": {
            "user": {
                "repositories": {
                    "pageInfo": {"hasNextPage": cursor is not None, "endCursor": cursor},
                    "nodes": nodes,
                }
            }
        }
    }


class FakeTransport:
    def __init__(self, pages: List[Dict[str, Any]]) -> None:
        self.pages = list(pages)
        self.requests: List[GraphQLRequest] = []

    def __call__(self, request: GraphQLRequest) -> Dict[str, Any]:
        self.requests.append(request)
        return self.pages.pop(0)


def test_fetch_repository_list_follows_pagination() -> None:
    transport = FakeTransport(
        [
            _page([_node("api", "project"), _node("dotfiles")], cursor="c1"),
            _page([_node("web", "project", "react")]),
        ]
    )
    client = GitHubClient("token-123", endpoint="https://example.test/graphql", transport=transport)

    repos = client.fetch_repository_list("octocat")

    assert [repo.name for repo in repos] == ["api", "dotfiles", "web"]
    assert repos[2].topics == ["project", "react"]
    assert [request.variables["after"] for request in transport.requests] == [None, "c1"]
    first = transport.requests[0]
    assert first.variables["login"] == "octocat"
    assert first.variables["first"] == 5
    assert first.token == "token-123"
    assert first.endpoint == "https://example.test/graphql"
    assert "isFork: false" in first.query


def test_fetch_repository_list_filters_by_topic() -> None:
    transport = FakeTransport([_page([_node("api", "project"), _node("dotfiles", "config")])])
    client = GitHubClient("token", transport=transport)

    repos = client.fetch_repository_list("octocat", topic="project")

    assert repos == [
        RepositoryRef(name="api", url="https://github.com/octocat/api", topics=["project"])
    ]


def test_graphql_errors_raise() -> None:
    transport = FakeTransport([{"errors": [{"message": "Bad credentials"}]}])
    client = GitHubClient("token", transport=transport)

    with pytest.raises(GitHubError, match="Bad credentials"):
        client.fetch_repository_list("octocat")


def test_missing_user_raises() -> None:
    transport = FakeTransport([{"data": {"user": None}}])
    client = GitHubClient("token", transport=transport)

    with pytest.raises(GitHubError, match="not found"):
        client.fetch_repository_list("ghost")


def test_next_page_without_cursor_raises() -> None:
    page = _page([_node("api")])
    page["data"]["user"]["repositories"]["pageInfo"] = {"hasNextPage": True, "endCursor": None}
    client = GitHubClient("token", transport=FakeTransport([page]))

    with pytest.raises(GitHubError):
        client.fetch_repository_list("octocat")


def test_repository_list_round_trips_through_repos_json(tmp_path: Path) -> None:
    repos = [RepositoryRef(name="api", url="https://github.com/octocat/api", topics=["project"])]

    path = save_repository_list(repos, tmp_path / ".temp")

    assert path == tmp_path / ".temp" / "repos.json"
    assert load_repository_list(tmp_path / ".temp") == repos


def test_load_repository_list_missing_or_invalid(tmp_path: Path) -> None:
    assert load_repository_list(tmp_path) is None
    (tmp_path / "repos.json").write_text("{oops", encoding="utf-8")
    assert load_repository_list(tmp_path) is None
