from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from typing import List

from ..adapters.base import SiteRules
from ..adapters.registry import SiteRegistry, build_registry
from ..config import CrawlConfig
from ..engines.base import CrawlReport
from ..engines.catalog_engine import run_site
from ..errors import ConfigError, FetchError
from ..export.base import Exporter
from ..utils.loader import load_symbol
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FETCH_FAILED = 1
EXIT_BAD_CONFIG = 2


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Product catalog crawler CLI")
    p.add_argument("site", nargs="?", default=None, help="Site identifier (see --list-sites)")
    p.add_argument("output", nargs="?", default=None, help="Output file path (JSON lines by default)")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds (default from config)")
    p.add_argument("--max-pages", type=int, default=None,
                   help="Stop each category after this many pages (default: until exhausted)")
    p.add_argument("--fail-fast", action="store_true",
                   help="Abort the whole run when a category page cannot be fetched")
    p.add_argument("--exporter", type=str, default=None, help="Exporter dotted path (module:ClassName)")
    p.add_argument("--extra-sites", type=str, default=None,
                   help="Comma-separated dotted paths for additional SiteRules")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--list-sites", action="store_true", help="Print the known site identifiers and exit")
    p.add_argument("--serve", action="store_true", help="Run REST API server instead of CLI crawl")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")
    return p


def _load_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config:
        cfg = CrawlConfig.from_file(args.config)
    else:
        cfg = CrawlConfig.from_env()

    if args.site:
        cfg.site = args.site
    if args.output:
        cfg.output_path = args.output
    if args.timeout is not None:
        cfg.request_timeout = args.timeout
    if args.max_pages is not None:
        cfg.max_pages_per_category = args.max_pages
    if args.fail_fast:
        cfg.fail_fast = True
    if args.exporter:
        cfg.exporter = args.exporter
    if args.extra_sites:
        cfg.extra_sites = [a.strip() for a in args.extra_sites.split(",") if a.strip()]
    return cfg


def run_server(host: str, port: int) -> None:
    try:
        import uvicorn  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dep
        raise SystemExit("To run the API, install the api extra: pip install 'catalog-crawler[api]'") from exc
    uvicorn.run("catalog_crawler.apis.app:app", host=host, port=port)


def _print_sites(registry: SiteRegistry) -> None:
    for rules in registry.sites:
        print(f"{rules.name:<10} {rules.start_url}  {rules.description}".rstrip())


async def _crawl(cfg: CrawlConfig, rules: SiteRules, exporter_cls: type) -> CrawlReport:

    # Ctrl-C finishes the current page, then stops cleanly with what was written.
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel.set)
    except (NotImplementedError, RuntimeError):  # pragma: no cover - platform dependent
        pass

    sink: Exporter = exporter_cls(cfg.output_path)
    with sink as exporter:
        return await run_site(
            rules,
            exporter.write,
            request_timeout=cfg.request_timeout,
            user_agent=cfg.user_agent,
            max_pages_per_category=cfg.max_pages_per_category,
            fail_fast=cfg.fail_fast,
            cancel=cancel,
        )


def run_cli(argv: List[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return EXIT_OK

    try:
        cfg = _load_config(args)
        registry = build_registry(cfg.extra_sites)
        if args.list_sites:
            _print_sites(registry)
            return EXIT_OK
        cfg.validate()
        # Unknown sites fail here, before any request is made.
        rules = registry.get(cfg.site)
        exporter_cls = load_symbol(cfg.exporter)
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_BAD_CONFIG

    try:
        report = asyncio.run(_crawl(cfg, rules, exporter_cls))
    except FetchError as exc:
        logger.error("Crawl of %s aborted: %s", cfg.site, exc)
        return EXIT_FETCH_FAILED

    logger.info("Site: %s | Pages: %s | Products: %s | Skipped: %s | Duplicates: %s | Output: %s",
                report.site,
                report.pages_fetched,
                report.emitted,
                len(report.skipped),
                report.duplicates,
                cfg.output_path)
    return EXIT_OK
