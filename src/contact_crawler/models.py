"""Protocols and lightweight model types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class FactKind(str, Enum):
    """Kinds of contact facts the extractor produces."""

    EMAIL = "email"
    PHONE = "phone"
    ADDRESS = "address"


@dataclass(frozen=True)
class ContactFact:
    """One extracted contact datum tied to the page it was found on."""

    source_url: str
    kind: FactKind
    value: str

    @property
    def email(self) -> str | None:
        return self.value if self.kind is FactKind.EMAIL else None

    @property
    def phone(self) -> str | None:
        return self.value if self.kind is FactKind.PHONE else None

    @property
    def address(self) -> str | None:
        return self.value if self.kind is FactKind.ADDRESS else None

    def as_row(self) -> dict[str, str]:
        """Return the persisted four-column shape; absent columns are empty."""
        return {
            "source_url": self.source_url,
            "email": self.email or "",
            "phone": self.phone or "",
            "address": self.address or "",
        }


@dataclass(frozen=True)
class PageResult:
    """One page of stored facts plus the unfiltered total."""

    items: list[ContactFact]
    total: int


@dataclass(frozen=True)
class CrawlStats:
    """Point-in-time counters for a crawl run."""

    pages_processed: int
    pages_failed: int
    facts_saved: int
    duplicates_discarded: int
    links_enqueued: int
    visited: int


class Fetcher(Protocol):
    """Contract for HTML fetchers."""

    def fetch(self, url: str) -> str:
        """Return HTML content for a URL; raise FetchError on failure."""


class FactStore(Protocol):
    """Contract for fact persistence."""

    def exists(self, source_url: str, kind: FactKind, value: str) -> bool:
        """Return True when the fact is already stored."""

    def save(self, fact: ContactFact) -> None:
        """Persist one fact; raise StoreConflictError on a duplicate identity."""

    def find_all(self) -> list[ContactFact]:
        """Return every stored fact in store order."""
