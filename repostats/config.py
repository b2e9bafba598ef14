"""Configuration loading for repostats (.repostats.yml and environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".repostats.yml"

DEFAULT_MONOREPO_DIRS = (
    "frontend",
    "backend",
    "client",
    "server",
    "api",
    "web",
    "app",
    "apps",
    "packages",
)

DEFAULT_GITHUB_ENDPOINT = "https://api.github.com/graphql"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GitHubConfig:
    """Repository listing and cloning settings."""

    endpoint: str = DEFAULT_GITHUB_ENDPOINT
    token: Optional[str] = None
    page_size: int = 5
    clone_workers: int = 4


@dataclass
class ProbeConfig:
    """Manifest probe behaviour."""

    monorepo_fallback: bool = True
    monorepo_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_MONOREPO_DIRS))


@dataclass
class FirebaseCredentials:
    project_id: Optional[str] = None
    client_email: Optional[str] = None
    private_key: Optional[str] = None


@dataclass
class StoreConfig:
    """Where the exported report is persisted."""

    backend: str = "json"
    path: Optional[Path] = None
    collection: str = "analysis-results"
    document: str = "results"
    firebase: FirebaseCredentials = field(default_factory=FirebaseCredentials)


@dataclass
class RepoStatsConfig:
    """Represents the settings defined in .repostats.yml plus environment overrides."""

    root: Path
    base_dir: Path
    owner: Optional[str] = None
    topic: Optional[str] = None
    workers: int = 1
    catalog_path: Optional[Path] = None
    github: GitHubConfig = field(default_factory=GitHubConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    store: StoreConfig = field(default_factory=StoreConfig)


def load_config(
    config_path: Path, *, environ: Mapping[str, str] | None = None
) -> RepoStatsConfig:
    """Load configuration from disk, layering environment variables on top."""
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    base_dir = root / (_as_str(data.get("base_dir")) or ".temp")
    catalog = _as_str(data.get("catalog"))

    github_data = _as_dict(data.get("github"))
    github = GitHubConfig(
        endpoint=(
            env.get("GITHUB_ENDPOINT")
            or _as_str(github_data.get("endpoint"))
            or DEFAULT_GITHUB_ENDPOINT
        ),
        token=env.get("GITHUB_TOKEN") or None,
        page_size=_positive(_as_int(github_data.get("page_size")), 5, "github.page_size"),
        clone_workers=_positive(
            _as_int(github_data.get("clone_workers")), 4, "github.clone_workers"
        ),
    )

    probe_data = _as_dict(data.get("probe"))
    probe = ProbeConfig()
    if probe_data:
        fallback = _as_bool(probe_data.get("monorepo_fallback"))
        if fallback is not None:
            probe.monorepo_fallback = fallback
        if "monorepo_dirs" in probe_data:
            probe.monorepo_dirs = _as_str_list(probe_data.get("monorepo_dirs"))

    store_data = _as_dict(data.get("store"))
    backend = (_as_str(store_data.get("backend")) or "json").lower()
    if backend not in {"json", "firestore"}:
        raise ConfigError("store.backend must be 'json' or 'firestore'")
    store_path = _as_str(store_data.get("path"))
    store = StoreConfig(
        backend=backend,
        path=root / (store_path or ".repostats/store"),
        collection=_as_str(store_data.get("collection")) or "analysis-results",
        document=_as_str(store_data.get("document")) or "results",
        firebase=FirebaseCredentials(
            project_id=env.get("FIREBASE_PROJECT_ID") or None,
            client_email=env.get("FIREBASE_CLIENT_EMAIL") or None,
            private_key=_unescape_key(env.get("FIREBASE_PRIVATE_KEY")),
        ),
    )

    return RepoStatsConfig(
        root=root,
        base_dir=base_dir,
        owner=_as_str(data.get("owner")),
        topic=_as_str(data.get("topic")),
        workers=_positive(_as_int(data.get("workers")), 1, "workers"),
        catalog_path=root / catalog if catalog else None,
        github=github,
        probe=probe,
        store=store,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _unescape_key(value: Optional[str]) -> Optional[str]:
    # Private keys are commonly stored in .env files with literal "\n" sequences.
    if not value:
        return None
    return value.replace("\\n", "\n")


def _positive(value: Optional[int], default: int, label: str) -> int:
    if value is None:
        return default
    if value < 1:
        raise ConfigError(f"{label} must be a positive integer")
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
