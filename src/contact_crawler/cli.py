"""CLI entrypoint for contact-crawler."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from .config import DEFAULT_MAX_DEPTH, DEFAULT_MAX_PAGES, DEFAULT_WORKERS, CrawlConfig
from .engine import run_crawl
from .errors import ConfigError
from .io_csv import write_facts, write_facts_to
from .logging_utils import configure_logging, get_logger
from .results import SORT_FIELDS, get_results
from .store import SQLiteFactStore
from .validation import load_lines_from_file


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Contact crawler - concurrent crawl that extracts emails, phones and addresses."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    crawl = subparsers.add_parser("crawl", help="Crawl from seed URLs and store contact facts.")
    crawl.add_argument("seeds", nargs="*", help="Seed URLs.")
    crawl.add_argument("--seeds-file", help="Path to seed URL file (one URL per line).")
    crawl.add_argument(
        "--max-pages", type=int, default=DEFAULT_MAX_PAGES, help="Global page budget for the run."
    )
    crawl.add_argument(
        "--max-depth", type=int, default=DEFAULT_MAX_DEPTH, help="Link depth limit from seeds."
    )
    crawl.add_argument(
        "--enforce-depth",
        action="store_true",
        help="Stop expanding links past --max-depth (off by default: depth is only recorded).",
    )
    crawl.add_argument(
        "--workers", type=int, default=DEFAULT_WORKERS, help="Number of worker threads."
    )
    crawl.add_argument(
        "--timeout", type=float, default=None, help="Per-fetch timeout in seconds (default none)."
    )
    crawl.add_argument("--db", help="SQLite database path (default: in-memory, lost on exit).")
    crawl.add_argument("--output", help="Write every stored fact to this CSV path after the run.")
    crawl.add_argument(
        "--keep-polling",
        action="store_true",
        help="Keep idle workers polling when the frontier drains instead of finishing.",
    )
    crawl.add_argument("--no-progress", action="store_true", help="Disable tqdm progress bar.")

    results = subparsers.add_parser("results", help="Print stored facts as CSV.")
    results.add_argument("--db", required=True, help="SQLite database path.")
    results.add_argument("--page", type=int, default=0, help="Zero-based page number.")
    results.add_argument("--size", type=int, default=20, help="Page size.")
    results.add_argument(
        "--sort-by", default=None, help=f"Sort field: one of {', '.join(SORT_FIELDS)}."
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse and pre-validate CLI input."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "crawl" and not (args.seeds or args.seeds_file):
        parser.error("Provide seed URLs or --seeds-file.")
    return args


def _materialize_seeds(args: argparse.Namespace) -> tuple[str, ...]:
    seeds = list(args.seeds)
    if args.seeds_file:
        seeds.extend(load_lines_from_file(args.seeds_file))
    return tuple(seeds)


def namespace_to_config(args: argparse.Namespace) -> CrawlConfig:
    """Convert CLI args to validated CrawlConfig."""
    return CrawlConfig(
        workers=args.workers,
        max_pages=args.max_pages,
        max_depth=args.max_depth,
        enforce_depth=args.enforce_depth,
        request_timeout=args.timeout,
        stop_when_drained=not args.keep_polling,
        show_progress=not args.no_progress,
        db_path=args.db,
    )


def _crawl(args: argparse.Namespace) -> int:
    logger = get_logger()
    try:
        config = namespace_to_config(args)
        seeds = _materialize_seeds(args)
        engine, _stats = run_crawl(config, seeds, logger=logger)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2
    try:
        if args.output:
            write_facts(args.output, engine.store.find_all())
            logger.info("Wrote results to %s", args.output)
    finally:
        engine.shutdown()
    return 0


def _results(args: argparse.Namespace) -> int:
    logger = get_logger()
    store = SQLiteFactStore(args.db)
    try:
        result = get_results(store, args.page, args.size, args.sort_by)
    except ValueError as exc:
        logger.error("Invalid page request: %s", exc)
        return 2
    finally:
        store.close()
    write_facts_to(sys.stdout, result.items)
    logger.info("Showing %d of %d facts", len(result.items), result.total)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose)
    if args.command == "crawl":
        return _crawl(args)
    return _results(args)


if __name__ == "__main__":
    raise SystemExit(main())
