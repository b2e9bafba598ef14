"""CLI entrypoints for repostats commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

from .analyzers import ManifestProbe
from .catalog import load_catalog
from .config import ConfigError, RepoStatsConfig, load_config
from .github import (
    GitHubClient,
    GitHubError,
    RepositoryCloner,
    load_repository_list,
    save_repository_list,
)
from .logging import configure_logging, get_logger
from .orchestrator import RepositoryAnalyzer
from .stores import (
    DocumentStore,
    FirestoreDocumentStore,
    JsonDocumentStore,
    StoreError,
    push_analysis_results,
)

DEFAULT_TOPIC = "project"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repostats",
        description="Measure languages, frameworks, databases and tools across a fleet of repositories.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .repostats.yml or the directory containing it (defaults to current directory).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="Analyze every repository under a base directory.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    scan_parser.add_argument(
        "base_dir",
        nargs="?",
        default=None,
        help="Directory whose subdirectories are repositories (defaults to base_dir from config).",
    )
    scan_parser.add_argument(
        "--output",
        default=None,
        help="Write the export document as JSON to this file.",
    )
    scan_parser.add_argument(
        "--push",
        action="store_true",
        help="Store the export document in the configured document store.",
    )
    scan_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of repositories to analyze in parallel.",
    )
    scan_parser.add_argument(
        "--no-monorepo",
        action="store_true",
        help="Only read manifests at each repository root.",
    )

    fetch_parser = subparsers.add_parser(
        "fetch",
        help="List a GitHub user's repositories and save them to repos.json.",
    )
    _add_verbose_option(fetch_parser, suppress_default=True)
    fetch_parser.add_argument("owner", help="GitHub login whose repositories are listed.")
    fetch_parser.add_argument(
        "--dest",
        default=None,
        help="Directory receiving repos.json (defaults to base_dir from config).",
    )
    fetch_parser.add_argument(
        "--topic",
        default=None,
        help="Only keep repositories tagged with this topic.",
    )

    run_parser = subparsers.add_parser(
        "run",
        help="Fetch, clone, analyze and store results in one pass.",
    )
    _add_verbose_option(run_parser, suppress_default=True)
    run_parser.add_argument(
        "owner",
        nargs="?",
        default=None,
        help="GitHub login to fetch when repos.json is missing (defaults to owner from config).",
    )
    run_parser.add_argument(
        "--base-dir",
        default=None,
        help="Directory holding repos.json and the cloned repositories.",
    )
    run_parser.add_argument(
        "--topic",
        default=None,
        help=f"Only keep repositories tagged with this topic (defaults to '{DEFAULT_TOPIC}').",
    )

    show_parser = subparsers.add_parser(
        "show",
        help="Print totals from the stored analysis results.",
    )
    _add_verbose_option(show_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repostats commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))
    load_dotenv()

    try:
        config = load_config(Path(args.config))
        if args.command == "scan":
            _run_scan(args, config)
        elif args.command == "fetch":
            _run_fetch(args, config)
        elif args.command == "run":
            _run_pipeline(args, config)
        elif args.command == "show":
            _run_show(config, parser)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ConfigError as exc:
        parser.exit(1, f"repostats: configuration error: {exc}\n")
    except GitHubError as exc:
        parser.exit(1, f"repostats {args.command} failed: {exc}\n")
    except StoreError as exc:
        parser.exit(1, f"repostats {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _run_scan(args: argparse.Namespace, config: RepoStatsConfig) -> None:
    base_dir = Path(args.base_dir) if args.base_dir else config.base_dir
    workers = args.workers if args.workers is not None else config.workers
    if workers < 1:
        raise ConfigError("--workers must be a positive integer")

    analyzer = _create_analyzer(
        config, base_dir, workers=workers, monorepo=not args.no_monorepo
    )
    analyzer.analyze_all_repositories()
    report = analyzer.export_results()

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(report, indent=2), encoding="utf-8")
        print(f"Report written to {_relativize(output)}")
    if args.push:
        _push(config, report)
    _print_totals(report)


def _run_fetch(args: argparse.Namespace, config: RepoStatsConfig) -> None:
    dest = Path(args.dest) if args.dest else config.base_dir
    repos = _github_client(config).fetch_repository_list(
        args.owner, topic=args.topic or config.topic
    )
    path = save_repository_list(repos, dest)
    print(f"Saved {len(repos)} repositories to {_relativize(path)}")


def _run_pipeline(args: argparse.Namespace, config: RepoStatsConfig) -> None:
    logger = get_logger("cli")
    base_dir = Path(args.base_dir) if args.base_dir else config.base_dir
    topic = args.topic or config.topic or DEFAULT_TOPIC

    repos = load_repository_list(base_dir)
    if repos is None:
        owner = args.owner or config.owner
        if not owner:
            raise ConfigError("an owner is required when repos.json has not been fetched yet")
        repos = _github_client(config).fetch_repository_list(owner, topic=topic)
        save_repository_list(repos, base_dir)
        print(f"Found {len(repos)} repositories with '{topic}' topic")
    else:
        logger.info("Using cached repository list from %s", base_dir)

    analyzer = _create_analyzer(config, base_dir, workers=config.workers)
    if not analyzer.list_repositories():
        cloner = RepositoryCloner(config.github.token, workers=config.github.clone_workers)
        results = cloner.clone_all(repos, base_dir)
        cloned = sum(1 for result in results if result.success)
        failed = len(results) - cloned
        print(f"Summary: {cloned} repos cloned, {failed} failed")

    analyzer.analyze_all_repositories()
    report = analyzer.export_results()
    _push(config, report)
    print("Analysis completed successfully!")
    _print_totals(report)


def _run_show(config: RepoStatsConfig, parser: argparse.ArgumentParser) -> None:
    store = _build_store(config)
    document = store.get(config.store.collection, config.store.document)
    if document is None:
        parser.exit(1, "No stored analysis results found. Run `repostats scan --push` first.\n")
    updated = document.get("lastUpdated")
    if updated:
        print(f"Last updated: {updated}")
    _print_totals(document)


def _create_analyzer(
    config: RepoStatsConfig, base_dir: Path, *, workers: int, monorepo: bool = True
) -> RepositoryAnalyzer:
    probe = ManifestProbe(
        monorepo_fallback=config.probe.monorepo_fallback and monorepo,
        monorepo_dirs=config.probe.monorepo_dirs,
    )
    return RepositoryAnalyzer.create(
        base_dir,
        catalog=load_catalog(config.catalog_path),
        probe=probe,
        workers=workers,
    )


def _github_client(config: RepoStatsConfig) -> GitHubClient:
    if not config.github.token:
        raise ConfigError("GITHUB_TOKEN is not set")
    return GitHubClient(
        config.github.token,
        endpoint=config.github.endpoint,
        page_size=config.github.page_size,
    )


def _build_store(config: RepoStatsConfig) -> DocumentStore:
    if config.store.backend == "firestore":
        credentials = config.store.firebase
        return FirestoreDocumentStore(
            credentials.project_id, credentials.client_email, credentials.private_key
        )
    return JsonDocumentStore(config.store.path or config.root / ".repostats" / "store")


def _push(config: RepoStatsConfig, report: Dict[str, Any]) -> None:
    push_analysis_results(
        _build_store(config),
        report,
        collection=config.store.collection,
        document_id=config.store.document,
    )
    print(f"Results stored in {config.store.collection}/{config.store.document}")


def _print_totals(report: Dict[str, Any]) -> None:
    summary = report.get("summary") or {}
    metadata = report.get("metadata") or {}
    print(f"Total repositories analyzed: {metadata.get('totalRepositories', 0)}")
    print(f"Total lines of code: {summary.get('totalLinesOfCode', 0)}")
    print(f"Total files: {summary.get('totalFiles', 0)}")
    for entry in summary.get("languageBreakdown") or []:
        print(
            f"  {entry.get('language')}: {entry.get('linesOfCode')} lines "
            f"({entry.get('percentageOfTotal')}%)"
        )


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
