"""Clone repositories into the analysis base directory."""

from __future__ import annotations

import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..logging import get_logger
from .client import RepositoryRef

_GITHUB_PREFIX = "https://github.com/"


@dataclass
class CloneResult:
    """Outcome of cloning one repository."""

    repo: str
    success: bool
    skipped: bool = False
    error: Optional[str] = None


class RepositoryCloner:
    """Runs ``git clone`` for each repository, recording per-repo success."""

    def __init__(
        self,
        token: str | None = None,
        *,
        runner: Callable[[Sequence[str]], None] | None = None,
        workers: int = 4,
    ) -> None:
        self.token = token
        self._runner = runner or self._default_runner
        self.workers = max(1, workers)
        self.logger = get_logger("cloner")

    def clone_all(self, repos: Iterable[RepositoryRef], destination: Path) -> List[CloneResult]:
        """Clone every repository into ``destination/<name>``; never raises per repo."""
        destination.mkdir(parents=True, exist_ok=True)
        pending = list(repos)
        if not pending:
            return []

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            results = list(executor.map(lambda repo: self._clone(repo, destination), pending))

        cloned = sum(1 for result in results if result.success and not result.skipped)
        failed = sum(1 for result in results if not result.success)
        self.logger.info("Summary: %d repos cloned, %d failed", cloned, failed)
        return results

    def clone_url(self, url: str) -> str:
        """Return ``url`` with the access token embedded for HTTPS GitHub remotes."""
        if self.token and url.startswith(_GITHUB_PREFIX):
            return f"https://{self.token}@github.com/{url[len(_GITHUB_PREFIX):]}"
        return url

    def _clone(self, repo: RepositoryRef, destination: Path) -> CloneResult:
        target = destination / repo.name
        if target.exists():
            self.logger.debug("Skipping %s: %s already exists", repo.name, target)
            return CloneResult(repo=repo.name, success=True, skipped=True)

        self.logger.info("Cloning %s...", repo.name)
        try:
            self._runner(["git", "clone", self.clone_url(repo.url), str(target)])
        except (OSError, subprocess.CalledProcessError) as exc:
            message = self._redact(str(exc))
            self.logger.warning("Failed to clone %s: %s", repo.name, message)
            return CloneResult(repo=repo.name, success=False, error=message)
        self.logger.info("Cloned %s", repo.name)
        return CloneResult(repo=repo.name, success=True)

    def _redact(self, message: str) -> str:
        if self.token:
            return message.replace(self.token, "***")
        return message

    @staticmethod
    def _default_runner(args: Sequence[str]) -> None:
        subprocess.run(list(args), check=True, capture_output=True, text=True)


__all__ = ["CloneResult", "RepositoryCloner"]
