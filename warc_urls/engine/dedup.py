"""Deduplicating sink and the membership sets backing it."""

from __future__ import annotations

import hashlib
import sqlite3
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from threading import Event

from ..config import DedupStrategy, DeduplicationConfig
from ..errors import SeenStoreError
from ..logging_conf import component_logger
from .exporter import BaseExporter
from .handoff import HandOffQueue


class SeenSet(ABC):
    """Membership set of URIs already written during one run.

    Owned by the sink alone, so implementations are not synchronised. It
    only grows; nothing is ever evicted.
    """

    @abstractmethod
    def add(self, url: str) -> bool:
        """Insert ``url``; return ``True`` if it was not present before."""

    @abstractmethod
    def __len__(self) -> int: ...

    def close(self) -> None:
        return


class MemorySeenSet(SeenSet):
    """Exact strings in a Python set. Memory grows with total URI length."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def add(self, url: str) -> bool:
        if url in self._seen:
            return False
        self._seen.add(url)
        return True

    def __len__(self) -> int:
        return len(self._seen)


class DigestSeenSet(SeenSet):
    """SHA-256 digests instead of strings: 32 bytes per entry."""

    def __init__(self) -> None:
        self._seen: set[bytes] = set()

    def add(self, url: str) -> bool:
        digest = self._hash(url)
        if digest in self._seen:
            return False
        self._seen.add(digest)
        return True

    def __len__(self) -> int:
        return len(self._seen)

    @staticmethod
    def _hash(url: str) -> bytes:
        return hashlib.sha256(url.encode("utf-8")).digest()


class SQLiteSeenSet(SeenSet):
    """Disk-backed set for runs whose URI count does not fit in memory.

    With no ``path`` SQLite creates a private temporary on-disk database.
    An existing table is emptied so membership never leaks across runs.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        try:
            if path is not None:
                path.parent.mkdir(parents=True, exist_ok=True)
            # built by the coordinator, used by the sink thread
            self._conn = sqlite3.connect(str(path) if path is not None else "", check_same_thread=False)
            self._conn.execute("CREATE TABLE IF NOT EXISTS seen_urls (url TEXT PRIMARY KEY)")
            self._conn.execute("DELETE FROM seen_urls")
            self._conn.commit()
        except (OSError, sqlite3.Error) as exc:
            raise SeenStoreError(f"cannot open dedup store {path}: {exc}") from exc
        self._count = 0

    def add(self, url: str) -> bool:
        cur = self._conn.execute("INSERT OR IGNORE INTO seen_urls(url) VALUES (?)", (url,))
        if cur.rowcount == 1:
            self._count += 1
            return True
        return False

    def __len__(self) -> int:
        return self._count

    def close(self) -> None:
        self._conn.commit()
        self._conn.close()


def build_seen_set(config: DeduplicationConfig) -> SeenSet:
    if config.strategy is DedupStrategy.EXACT:
        return MemorySeenSet()
    if config.strategy is DedupStrategy.DIGEST:
        return DigestSeenSet()
    if config.strategy is DedupStrategy.SQLITE:
        return SQLiteSeenSet(config.store_path)
    raise ValueError(f"Unsupported dedup strategy: {config.strategy}")


@dataclass
class SinkStats:
    received: int = 0
    written: int = 0
    duplicates: int = 0


class DeduplicatingSink:
    """Single consumer writing first-seen URIs in arrival order.

    ``done`` is set exactly once, after the exporter has been flushed, on
    every exit path of :meth:`run`.
    """

    def __init__(
        self,
        urls: HandOffQueue[str],
        seen: SeenSet,
        exporter: BaseExporter,
        done: Event,
    ) -> None:
        self.urls = urls
        self.seen = seen
        self.exporter = exporter
        self.done = done
        self._ran = False

    def run(self) -> SinkStats:
        if self._ran:
            raise RuntimeError("sink can only run once")
        self._ran = True
        stats = SinkStats()
        try:
            for url in self.urls:
                stats.received += 1
                if self.seen.add(url):
                    self.exporter.export(url)
                    stats.written += 1
                else:
                    stats.duplicates += 1
            self.exporter.flush()
        finally:
            self.seen.close()
            self.done.set()
        component_logger("sink").debug(
            "sink_finished",
            received=stats.received,
            written=stats.written,
            duplicates=stats.duplicates,
        )
        return stats


__all__ = [
    "DeduplicatingSink",
    "DigestSeenSet",
    "MemorySeenSet",
    "SQLiteSeenSet",
    "SeenSet",
    "SinkStats",
    "build_seen_set",
]
