"""Per-run crawl state: the frontier queue, the visited set and the page budget."""

from __future__ import annotations

from collections import deque
from threading import Condition, Lock


class Frontier:
    """Multi-producer multi-consumer URL queue.

    ``pop`` blocks on a condition variable instead of polling, and wakes on
    ``push`` or ``close``. Each popped item counts as in flight until
    ``task_done`` is called; with ``stop_when_drained`` the frontier closes
    itself once it is empty and nothing is in flight.
    """

    def __init__(self, *, stop_when_drained: bool = False) -> None:
        self._items: deque[tuple[str, int]] = deque()
        self._cond = Condition(Lock())
        self._in_flight = 0
        self._closed = False
        self._stop_when_drained = stop_when_drained

    def push(self, url: str, depth: int = 0) -> None:
        with self._cond:
            if self._closed:
                return
            self._items.append((url, depth))
            self._cond.notify()

    def pop(self, timeout: float) -> tuple[str, int] | None:
        """Return the next (url, depth), or None on timeout, close or drain."""
        with self._cond:
            if not self._items and not self._closed:
                self._check_drained()
                if not self._closed:
                    self._cond.wait(timeout)
            if self._closed or not self._items:
                return None
            self._in_flight += 1
            return self._items.popleft()

    def task_done(self) -> None:
        with self._cond:
            self._in_flight -= 1
            self._check_drained()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def _check_drained(self) -> None:
        if self._stop_when_drained and not self._items and self._in_flight == 0:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)


class VisitedSet:
    """Set of every URL ever enqueued in a run; only grows."""

    def __init__(self) -> None:
        self._urls: set[str] = set()
        self._lock = Lock()

    def add(self, url: str) -> bool:
        """Add ``url`` and return True only if it was not already present."""
        with self._lock:
            if url in self._urls:
                return False
            self._urls.add(url)
            return True

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)


class PageBudget:
    """Global page counter shared by every worker of one run.

    A worker reserves a slot before taking a URL, so concurrent workers can
    never process more than ``limit`` pages between them.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self._reserved = 0
        self._processed = 0
        self._failed = 0
        self._lock = Lock()

    def reserve(self) -> bool:
        with self._lock:
            if self._reserved >= self.limit:
                return False
            self._reserved += 1
            return True

    def release(self) -> None:
        with self._lock:
            self._reserved -= 1

    def mark_processed(self, *, succeeded: bool) -> int:
        """Count one finished page and return the new processed total."""
        with self._lock:
            self._processed += 1
            if not succeeded:
                self._failed += 1
            return self._processed

    @property
    def processed(self) -> int:
        with self._lock:
            return self._processed

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    @property
    def exhausted(self) -> bool:
        with self._lock:
            return self._processed >= self.limit
