"""Crawl engine: run context, worker loop and per-page processing."""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from threading import Event, Lock

from tqdm import tqdm

from .config import DEFAULT_MAX_DEPTH, DEFAULT_MAX_PAGES, CrawlConfig
from .errors import ConfigError, FetchError, StoreConflictError
from .extraction import discover_links, extract_facts, visible_text
from .fetchers import RequestsFetcher, make_browser_session
from .frontier import Frontier, PageBudget, VisitedSet
from .models import ContactFact, CrawlStats, FactKind, FactStore, Fetcher, PageResult
from .results import get_results
from .store import InMemoryFactStore, SQLiteFactStore
from .validation import normalize_seeds, validate_runtime_constraints

_run_ids = itertools.count(1)


class CrawlRun:
    """State owned by one crawl run: frontier, visited set, page budget and workers.

    Runs never share dedup state; the only thing two runs have in common is
    the fact store.
    """

    def __init__(
        self,
        *,
        max_pages: int,
        max_depth: int,
        stop_when_drained: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.run_id = next(_run_ids)
        self._logger = logger or logging.getLogger("contact_crawler")
        self._failures_reported = False
        self.max_depth = max_depth
        self.frontier = Frontier(stop_when_drained=stop_when_drained)
        self.visited = VisitedSet()
        self.budget = PageBudget(max_pages)
        self._stop = Event()
        self._lock = Lock()
        self._facts_saved = 0
        self._duplicates = 0
        self._links_enqueued = 0
        self._executor: ThreadPoolExecutor | None = None
        self._futures: list[Future[None]] = []

    def seed(self, seeds: Iterable[str]) -> int:
        """Mark seeds visited and enqueue them at depth 0; return how many were new."""
        added = 0
        for url in seeds:
            if self.visited.add(url):
                self.frontier.push(url, 0)
                added += 1
        return added

    def launch(self, executor: ThreadPoolExecutor, futures: list[Future[None]]) -> None:
        self._executor = executor
        self._futures = futures

    def stop(self) -> None:
        """Stop issuing work and wake idle workers; in-flight fetches finish naturally."""
        self._stop.set()
        self.frontier.close()

    def idle(self, timeout: float) -> None:
        self._stop.wait(timeout)

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    @property
    def done(self) -> bool:
        return bool(self._futures) and all(future.done() for future in self._futures)

    def _report_worker_failures(self) -> None:
        if self._failures_reported:
            return
        self._failures_reported = True
        for index, future in enumerate(self._futures):
            try:
                future.result()
            except Exception as exc:
                self._logger.error(
                    "Run %d worker %d failed: %s - %s", self.run_id, index, type(exc).__name__, exc
                )

    def record(self, *, facts_saved: int = 0, duplicates: int = 0, links_enqueued: int = 0) -> None:
        with self._lock:
            self._facts_saved += facts_saved
            self._duplicates += duplicates
            self._links_enqueued += links_enqueued

    def stats(self) -> CrawlStats:
        with self._lock:
            return CrawlStats(
                pages_processed=self.budget.processed,
                pages_failed=self.budget.failed,
                facts_saved=self._facts_saved,
                duplicates_discarded=self._duplicates,
                links_enqueued=self._links_enqueued,
                visited=len(self.visited),
            )

    def wait(self, timeout: float | None = None, *, show_progress: bool = False) -> bool:
        """Block until every worker exits; return False if ``timeout`` elapsed first."""
        deadline = None if timeout is None else time.monotonic() + timeout
        progress = (
            tqdm(total=self.budget.limit, desc="crawling pages", unit="page")
            if show_progress
            else None
        )
        try:
            while True:
                poll = 0.5
                if deadline is not None:
                    poll = max(0.0, min(poll, deadline - time.monotonic()))
                _, pending = wait_futures(self._futures, timeout=poll)
                if progress is not None:
                    progress.update(self.budget.processed - progress.n)
                if not pending:
                    break
                if deadline is not None and time.monotonic() >= deadline:
                    return False
        finally:
            if progress is not None:
                progress.close()
        self._report_worker_failures()
        if self._executor is not None:
            self._executor.shutdown(wait=False)
        return True


class CrawlEngine:
    """Dispatches worker pools over crawl runs and persists novel facts."""

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        store: FactStore,
        config: CrawlConfig | None = None,
        logger: logging.Logger,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._config = config or CrawlConfig()
        self._logger = logger
        self._runs: list[CrawlRun] = []
        self._runs_lock = Lock()

    @property
    def store(self) -> FactStore:
        return self._store

    def start(self, url: str) -> CrawlRun:
        """Launch a single-seed run with the default page budget and depth."""
        return self.submit_seeds({url}, DEFAULT_MAX_PAGES, DEFAULT_MAX_DEPTH)

    def submit_seeds(
        self,
        seeds: Iterable[str],
        max_pages: int | None = None,
        max_depth: int | None = None,
    ) -> CrawlRun:
        """Seed a new, independent run and start its workers."""
        max_pages = self._config.max_pages if max_pages is None else max_pages
        max_depth = self._config.max_depth if max_depth is None else max_depth
        validate_runtime_constraints(
            workers=self._config.workers,
            max_pages=max_pages,
            max_depth=max_depth,
            idle_wait=self._config.idle_wait,
            request_timeout=self._config.request_timeout,
        )
        raw_seeds = list(seeds)
        valid_seeds = normalize_seeds(raw_seeds)
        for dropped in sorted(set(s.strip() for s in raw_seeds) - set(valid_seeds)):
            self._logger.warning("Ignoring unsupported seed URL: %r", dropped)
        if not valid_seeds:
            raise ConfigError("Provide at least one absolute http(s) seed URL.")

        run = CrawlRun(
            max_pages=max_pages,
            max_depth=max_depth,
            stop_when_drained=self._config.stop_when_drained,
            logger=self._logger,
        )
        run.seed(valid_seeds)
        workers = self._config.workers
        executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"crawl-{run.run_id}"
        )
        futures = [executor.submit(self._worker_loop, run, index) for index in range(workers)]
        run.launch(executor, futures)
        with self._runs_lock:
            self._runs.append(run)
        self._logger.info(
            "Run %d started: %d seeds, max_pages=%d, max_depth=%d (%s), workers=%d",
            run.run_id,
            len(valid_seeds),
            max_pages,
            max_depth,
            "enforced" if self._config.enforce_depth else "not enforced",
            workers,
        )
        return run

    def _worker_loop(self, run: CrawlRun, worker_id: int) -> None:
        self._logger.debug("Run %d worker %d started", run.run_id, worker_id)
        while not run.stopped:
            if not run.budget.reserve():
                # Every slot is held; back off until one is released or the budget is spent.
                if run.budget.exhausted or run.frontier.closed:
                    break
                run.idle(self._config.idle_wait)
                continue
            item = run.frontier.pop(self._config.idle_wait)
            if item is None:
                run.budget.release()
                if run.frontier.closed:
                    break
                continue
            url, depth = item
            try:
                succeeded = self.process_url(run, url, depth)
            finally:
                run.frontier.task_done()
            processed = run.budget.mark_processed(succeeded=succeeded)
            if processed >= run.budget.limit:
                self._logger.info("Run %d reached its page budget (%d)", run.run_id, processed)
                run.frontier.close()
                break
        self._logger.debug("Run %d worker %d exiting", run.run_id, worker_id)

    def process_url(self, run: CrawlRun, url: str, depth: int = 0) -> bool:
        """Fetch one page, persist its novel facts and enqueue its new links.

        Returns True when the page was fetched and processed. Every failure is
        logged and swallowed so the calling worker can move on.
        """
        self._logger.info("Processing: %s", url)
        try:
            try:
                html = self._fetcher.fetch(url)
            except FetchError as exc:
                self._logger.warning("Fetch failed for %s: %s", url, exc)
                return False
            if not html or not html.strip():
                self._logger.warning("Empty or blank HTML for: %s", url)
                return False
            self._logger.debug("HTML loaded for %s (%d chars)", url, len(html))

            facts = extract_facts(visible_text(html))
            self._persist_facts(run, url, facts)

            added = self._enqueue_links(run, discover_links(html, url), depth)
            self._logger.info("Links added to frontier from %s: %d", url, added)
            return True
        except Exception as exc:
            self._logger.error("Error processing %s: %s - %s", url, type(exc).__name__, exc)
            return False

    def _persist_facts(self, run: CrawlRun, url: str, facts: dict[FactKind, list[str]]) -> None:
        saved = 0
        duplicates = 0
        for kind, values in facts.items():
            for value in values:
                if self._store.exists(url, kind, value):
                    continue
                try:
                    self._store.save(ContactFact(source_url=url, kind=kind, value=value))
                except StoreConflictError as exc:
                    duplicates += 1
                    self._logger.debug("Discarded duplicate fact: %s", exc)
                    continue
                saved += 1
                self._logger.info("Found %s on %s: %s", kind.value, url, value)
        run.record(facts_saved=saved, duplicates=duplicates)

    def _enqueue_links(self, run: CrawlRun, links: list[str], depth: int) -> int:
        child_depth = depth + 1
        if self._config.enforce_depth and child_depth > run.max_depth:
            return 0
        added = 0
        for link in links:
            if run.visited.add(link):
                run.frontier.push(link, child_depth)
                added += 1
        run.record(links_enqueued=added)
        return added

    def get_results(self, page: int, size: int, sort_by: str | None = None) -> PageResult:
        return get_results(self._store, page, size, sort_by)

    def shutdown(self, wait: bool = True) -> None:
        """Stop every run, optionally wait for workers, and close owned resources."""
        with self._runs_lock:
            runs = list(self._runs)
        for run in runs:
            run.stop()
        if wait:
            for run in runs:
                run.wait()
        for resource in (self._fetcher, self._store):
            close_fn = getattr(resource, "close", None)
            if callable(close_fn):
                close_fn()


def build_engine(config: CrawlConfig, *, logger: logging.Logger) -> CrawlEngine:
    """Build the concrete fetcher and store for ``config`` and wire an engine."""
    session = make_browser_session(
        config.user_agent,
        accept=config.accept,
        accept_language=config.accept_language,
        pool_size=config.workers,
    )
    fetcher = RequestsFetcher(session=session, timeout=config.request_timeout, logger=logger)
    store: FactStore = SQLiteFactStore(config.db_path) if config.db_path else InMemoryFactStore()
    return CrawlEngine(fetcher=fetcher, store=store, config=config, logger=logger)


def run_crawl(
    config: CrawlConfig, seeds: Iterable[str], *, logger: logging.Logger
) -> tuple[CrawlEngine, CrawlStats]:
    """Run one crawl to completion and return the engine (for reads) and run stats."""
    engine = build_engine(config, logger=logger)
    try:
        run = engine.submit_seeds(seeds, config.max_pages, config.max_depth)
    except ConfigError:
        engine.shutdown()
        raise
    try:
        run.wait(show_progress=config.show_progress)
    except KeyboardInterrupt:
        logger.warning("Interrupted; stopping run %d", run.run_id)
        run.stop()
        run.wait()
    stats = run.stats()
    logger.info(
        "Run %d finished: %d pages (%d failed), %d facts saved, %d links enqueued",
        run.run_id,
        stats.pages_processed,
        stats.pages_failed,
        stats.facts_saved,
        stats.links_enqueued,
    )
    return engine, stats
