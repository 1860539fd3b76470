"""Fact store implementations."""

from __future__ import annotations

import sqlite3
from threading import Lock

from .errors import StoreConflictError
from .models import ContactFact, FactKind

SCHEMA = """
CREATE TABLE IF NOT EXISTS contact_info (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    source_url TEXT NOT NULL,
    kind TEXT NOT NULL,
    value TEXT NOT NULL,
    email TEXT,
    phone TEXT,
    address TEXT,
    UNIQUE (source_url, kind, value)
)
"""


class InMemoryFactStore:
    """Thread-safe list-backed store that keeps insertion order."""

    def __init__(self) -> None:
        self._facts: list[ContactFact] = []
        self._keys: set[tuple[str, FactKind, str]] = set()
        self._lock = Lock()

    def exists(self, source_url: str, kind: FactKind, value: str) -> bool:
        with self._lock:
            return (source_url, kind, value) in self._keys

    def save(self, fact: ContactFact) -> None:
        key = (fact.source_url, fact.kind, fact.value)
        with self._lock:
            if key in self._keys:
                raise StoreConflictError(f"Duplicate fact: {key}")
            self._keys.add(key)
            self._facts.append(fact)

    def find_all(self) -> list[ContactFact]:
        with self._lock:
            return list(self._facts)


class SQLiteFactStore:
    """sqlite3-backed store; the UNIQUE constraint backstops the exists/save race."""

    def __init__(self, path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._lock = Lock()
        with self._lock, self._conn:
            self._conn.execute(SCHEMA)

    def exists(self, source_url: str, kind: FactKind, value: str) -> bool:
        with self._lock:
            cur = self._conn.execute(
                "SELECT 1 FROM contact_info WHERE source_url = ? AND kind = ? AND value = ? LIMIT 1",
                (source_url, kind.value, value),
            )
            return cur.fetchone() is not None

    def save(self, fact: ContactFact) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    "INSERT INTO contact_info (source_url, kind, value, email, phone, address) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        fact.source_url,
                        fact.kind.value,
                        fact.value,
                        fact.email,
                        fact.phone,
                        fact.address,
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise StoreConflictError(
                f"Duplicate fact: {fact.source_url} {fact.kind.value}={fact.value}"
            ) from exc

    def find_all(self) -> list[ContactFact]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT source_url, kind, value FROM contact_info ORDER BY id"
            ).fetchall()
        return [ContactFact(source_url=url, kind=FactKind(kind), value=value) for url, kind, value in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
