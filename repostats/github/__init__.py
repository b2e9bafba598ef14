"""GitHub repository listing and cloning."""

from .client import GitHubClient, GitHubError, RepositoryRef, load_repository_list, save_repository_list
from .cloner import CloneResult, RepositoryCloner

__all__ = [
    "CloneResult",
    "GitHubClient",
    "GitHubError",
    "RepositoryCloner",
    "RepositoryRef",
    "load_repository_list",
    "save_repository_list",
]
