"""issuewindow CLI.

Subcommands:
  fetch    -> write window-filtered issues / pull requests as JSON
  summary  -> print per-type counts for the window

Configuration comes from ``issuewindow.config.yaml`` when present; every
value can be overridden from the command line.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .cache import Cache, FileCache, MemoryCache, fetch_key
from .config import ConfigError, ReportConfig, default_config, load_config
from .env_auth import EnvAuthConfig, resolve_token
from .errors import classify_error
from .graphql import GitHubGraphQLClient, PagedQueryClient, api_host
from .logging import configure_logging, get_logger
from .models import ResourceType
from .paginator import PageSource
from .progress import LoggingProgress, NullProgress, ProgressObserver, TextProgress
from .sources import IssueSource

CONFIG_DEFAULT = "issuewindow.config.yaml"
TYPE_CHOICES = ("issues", "pulls", "all")


def _add_selection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=CONFIG_DEFAULT)
    parser.add_argument("--repo", help="Override target repository (owner/name)")
    parser.add_argument("--start", help="First day of the report window (YYYY-MM-DD)")
    parser.add_argument("--end", help="Last day of the report window (YYYY-MM-DD)")
    parser.add_argument("--type", choices=TYPE_CHOICES, default="all")
    parser.add_argument("--no-cache", action="store_true", help="Keep results in memory only")
    parser.add_argument(
        "--refresh", action="store_true", help="Drop cached history before fetching"
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="issuewindow", description="Collect issue and pull request data for a date window"
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output (env: ISSUEWINDOW_QUIET=1)",
    )
    p.add_argument("--json-logging", action="store_true", help="Emit structured JSON logs")
    sub = p.add_subparsers(dest="cmd", required=True, metavar="<command>")

    pf = sub.add_parser("fetch", help="Write window-filtered records as JSON")
    _add_selection_args(pf)
    pf.add_argument("--output", help="Write JSON here instead of stdout")
    pf.add_argument("--pretty", action="store_true")

    ps = sub.add_parser("summary", help="Print per-type counts for the window")
    _add_selection_args(ps)
    return p


def prepare_config(args: argparse.Namespace) -> ReportConfig:
    path = Path(args.config)
    if path.exists():
        cfg = load_config(path)
    elif args.config == CONFIG_DEFAULT:
        cfg = default_config()
    else:
        raise ConfigError(f"Configuration file not found: {path}")
    if args.repo:
        cfg.repository = args.repo
    if args.start:
        cfg.window_start = args.start
    if args.end:
        cfg.window_end = args.end
    if args.no_cache:
        cfg.cache_enabled = False
    if args.json_logging:
        cfg.logging_json_enabled = True
    return cfg


def _resources(selection: str) -> list[ResourceType]:
    if selection == "all":
        return [ResourceType.ISSUES, ResourceType.PULL_REQUESTS]
    return [ResourceType.from_name(selection)]


def _progress(cfg: ReportConfig, args: argparse.Namespace) -> ProgressObserver:
    if args.quiet:
        return NullProgress()
    if cfg.logging_json_enabled:
        return LoggingProgress()
    return TextProgress(sys.stderr)


def build_sources(
    cfg: ReportConfig,
    args: argparse.Namespace,
    *,
    client: PageSource | None = None,
    cache: Cache | None = None,
) -> list[IssueSource]:
    repository = cfg.require_repository()
    window = cfg.window()
    host = api_host(cfg.graphql_url)
    if client is None:
        token = resolve_token(
            cfg.token,
            EnvAuthConfig(load_dotenv=cfg.env_auth_load_dotenv, dotenv_path=cfg.env_auth_dotenv_path),
        )
        transport = GitHubGraphQLClient(token=token, graphql_url=cfg.graphql_url)
        client = PagedQueryClient(transport, repository)
    if cache is None:
        cache = FileCache(cfg.cache_dir) if cfg.cache_enabled else MemoryCache()
    progress = _progress(cfg, args)
    sources: list[IssueSource] = []
    for resource in _resources(args.type):
        if args.refresh:
            cache.invalidate(fetch_key(repository, resource, host))
        factory = IssueSource.issues if resource is ResourceType.ISSUES else IssueSource.pulls
        sources.append(factory(repository, window, client, cache, progress, host=host))
    return sources


def _cmd_fetch(sources: list[IssueSource], args: argparse.Namespace) -> int:
    data: dict[str, list[dict[str, Any]]] = {
        source.resource.slug: [record.to_node() for record in source.to_list()]
        for source in sources
    }
    text = json.dumps(data, indent=2 if args.pretty else None) + "\n"
    if args.output:
        out_path = Path(args.output)
        out_path.write_text(text, encoding="utf-8")
        if not args.quiet:
            total = sum(len(v) for v in data.values())
            print(f"[fetch] {total} records -> {out_path}", file=sys.stderr)
    else:
        sys.stdout.write(text)
    return 0


def _cmd_summary(sources: list[IssueSource], args: argparse.Namespace) -> int:
    for source in sources:
        info = source.summary()
        print(
            f"{source.resource.slug}: {info['total']} in {source.window} "
            f"({info['open']} open, {info['closed']} closed)"
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if not args.quiet and os.environ.get("ISSUEWINDOW_QUIET") == "1":
        args.quiet = True
    try:
        cfg = prepare_config(args)
        logger = configure_logging(
            json_logging=cfg.logging_json_enabled,
            level="WARNING" if args.quiet else cfg.logging_level,
        )
        sources = build_sources(cfg, args)
        handlers = {"fetch": _cmd_fetch, "summary": _cmd_summary}
        start = time.perf_counter()
        exit_code = handlers[args.cmd](sources, args)
        logger.log_performance(
            args.cmd, (time.perf_counter() - start) * 1000, repository=cfg.repository
        )
        return exit_code
    except Exception as exc:
        info = classify_error(exc)
        get_logger().log_error(f"{args.cmd} failed", error=info.message, category=info.category)
        print(f"[error] {info.category}: {info.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
