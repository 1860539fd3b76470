"""Runtime configuration model."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .validation import validate_runtime_constraints

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.5"
DEFAULT_MAX_PAGES = 100
DEFAULT_MAX_DEPTH = 3
DEFAULT_IDLE_WAIT = 0.2
DEFAULT_WORKERS = (os.cpu_count() or 1) * 2


@dataclass(frozen=True)
class CrawlConfig:
    """Validated configuration used by the crawl engine."""

    workers: int = DEFAULT_WORKERS
    max_pages: int = DEFAULT_MAX_PAGES
    max_depth: int = DEFAULT_MAX_DEPTH
    enforce_depth: bool = False
    idle_wait: float = DEFAULT_IDLE_WAIT
    # None leaves fetches unbounded; a hung fetch holds its worker until it returns.
    request_timeout: float | None = None
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    stop_when_drained: bool = False
    show_progress: bool = False
    db_path: str | None = None

    def __post_init__(self) -> None:
        validate_runtime_constraints(
            workers=self.workers,
            max_pages=self.max_pages,
            max_depth=self.max_depth,
            idle_wait=self.idle_wait,
            request_timeout=self.request_timeout,
        )
