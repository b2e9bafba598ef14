"""GraphQL client for listing a user's GitHub repositories."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..config import DEFAULT_GITHUB_ENDPOINT
from ..logging import get_logger

REPOSITORY_LIST_FILENAME = "repos.json"

_QUERY = """
query($login: String!, $first: Int!, $after: String) {
  user(login: $login) {
    repositories(first: $first, isFork: false, after: $after) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        name
        url
        repositoryTopics(first: 100) {
          nodes {
            topic {
              name
            }
          }
        }
      }
    }
  }
}
"""


class GitHubError(RuntimeError):
    """Raised when the repository listing cannot be retrieved."""


@dataclass
class RepositoryRef:
    """A repository to clone: its name, web URL and topic names."""

    name: str
    url: str
    topics: List[str] = field(default_factory=list)


@dataclass
class GraphQLRequest:
    endpoint: str
    query: str
    variables: Dict[str, Any]
    token: Optional[str]
    timeout: float


class GitHubClient:
    """Pages through ``user.repositories`` via the GitHub GraphQL API."""

    def __init__(
        self,
        token: str | None = None,
        *,
        endpoint: str = DEFAULT_GITHUB_ENDPOINT,
        page_size: int = 5,
        timeout: float = 30.0,
        transport: Callable[[GraphQLRequest], Dict[str, Any]] | None = None,
    ) -> None:
        self.token = token
        self.endpoint = endpoint
        self.page_size = page_size
        self.timeout = timeout
        self._transport = transport or self._http_transport
        self.logger = get_logger("github")

    def fetch_repository_list(
        self, owner: str, *, topic: str | None = None
    ) -> List[RepositoryRef]:
        """Return every non-fork repository owned by ``owner``.

        When ``topic`` is given only repositories tagged with it are kept.
        """
        repos: List[RepositoryRef] = []
        cursor: Optional[str] = None
        has_next_page = True

        while has_next_page:
            payload = self._transport(
                GraphQLRequest(
                    endpoint=self.endpoint,
                    query=_QUERY,
                    variables={"login": owner, "first": self.page_size, "after": cursor},
                    token=self.token,
                    timeout=self.timeout,
                )
            )
            connection = self._extract_connection(payload, owner)
            for node in connection.get("nodes") or []:
                ref = self._to_ref(node)
                if ref is not None:
                    repos.append(ref)

            page_info = connection.get("pageInfo") or {}
            has_next_page = bool(page_info.get("hasNextPage"))
            cursor = page_info.get("endCursor")
            if has_next_page and not cursor:
                raise GitHubError("GitHub reported another page without an end cursor")

        self.logger.info("Fetched %d repositories for %s", len(repos), owner)
        if topic is None:
            return repos

        tagged = [repo for repo in repos if topic in repo.topics]
        self.logger.info("Found %d repositories tagged '%s'", len(tagged), topic)
        return tagged

    @staticmethod
    def _extract_connection(payload: Dict[str, Any], owner: str) -> Dict[str, Any]:
        errors = payload.get("errors")
        if errors:
            messages = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error)
                for error in errors
            )
            raise GitHubError(f"GitHub GraphQL error: {messages}")
        data = payload.get("data")
        user = data.get("user") if isinstance(data, dict) else None
        if not isinstance(user, dict):
            raise GitHubError(f"GitHub user '{owner}' not found")
        connection = user.get("repositories")
        if not isinstance(connection, dict):
            raise GitHubError("GitHub response did not include a repositories connection")
        return connection

    @staticmethod
    def _to_ref(node: Any) -> Optional[RepositoryRef]:
        if not isinstance(node, dict):
            return None
        name = node.get("name")
        url = node.get("url")
        if not isinstance(name, str) or not isinstance(url, str):
            return None
        topics: List[str] = []
        topic_nodes = (node.get("repositoryTopics") or {}).get("nodes") or []
        for topic_node in topic_nodes:
            topic = (topic_node or {}).get("topic") or {}
            topic_name = topic.get("name")
            if isinstance(topic_name, str):
                topics.append(topic_name)
        return RepositoryRef(name=name, url=url, topics=topics)

    @staticmethod
    def _http_transport(request: GraphQLRequest) -> Dict[str, Any]:
        body = json.dumps({"query": request.query, "variables": request.variables})
        headers = {"Content-Type": "application/json"}
        if request.token:
            headers["Authorization"] = f"Bearer {request.token}"

        http_request = Request(
            request.endpoint, data=body.encode("utf-8"), headers=headers, method="POST"
        )
        try:
            with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on network
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise GitHubError(f"GitHub request failed with status {exc.code}: {message}") from exc
        except URLError as exc:  # pragma: no cover - depends on network
            raise GitHubError(f"GitHub request failed: {exc.reason}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise GitHubError("GitHub returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise GitHubError("GitHub returned an unexpected payload")
        return payload


def save_repository_list(repos: List[RepositoryRef], base_dir: Path) -> Path:
    """Write the listing to ``repos.json`` inside ``base_dir``."""
    base_dir.mkdir(parents=True, exist_ok=True)
    path = base_dir / REPOSITORY_LIST_FILENAME
    path.write_text(json.dumps([asdict(repo) for repo in repos], indent=2), encoding="utf-8")
    return path


def load_repository_list(base_dir: Path) -> Optional[List[RepositoryRef]]:
    """Return the cached listing, or None when it is missing or unreadable."""
    path = base_dir / REPOSITORY_LIST_FILENAME
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(payload, list):
        return None

    repos: List[RepositoryRef] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        url = entry.get("url")
        topics = entry.get("topics") or []
        if isinstance(name, str) and isinstance(url, str):
            repos.append(
                RepositoryRef(
                    name=name,
                    url=url,
                    topics=[topic for topic in topics if isinstance(topic, str)],
                )
            )
    return repos


__all__ = [
    "GitHubClient",
    "GitHubError",
    "GraphQLRequest",
    "RepositoryRef",
    "load_repository_list",
    "save_repository_list",
]
