"""In-memory query result cache with a fixed time-to-live."""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from knowledgescout.models import Answer
from knowledgescout.utils.text import query_digest

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheEntry:
    payload: Answer
    created_at: float


class ResultCache:
    """Maps normalized queries to answers for `ttl` seconds.

    Entries never slide: reads do not refresh the timestamp, and an expired
    entry is dropped on the next lookup.
    """

    def __init__(self, ttl: float = 60.0, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, query: str) -> Optional[Answer]:
        key = query_digest(query)
        with self._lock:
            entry = self._live_entry(key)
        if entry is None:
            LOGGER.debug("Cache miss for %r", query)
            return None
        LOGGER.debug("Cache hit for %r", query)
        return dataclasses.replace(entry.payload, cached=True)

    def put(self, query: str, payload: Answer) -> Answer:
        """Store a payload, replacing any existing entry and its timestamp."""
        stored = dataclasses.replace(payload, cached=False)
        with self._lock:
            self._entries[query_digest(query)] = CacheEntry(stored, self.clock())
        return stored

    def put_if_absent(self, query: str, payload: Answer) -> Answer:
        """Store a payload unless a live entry exists; return whichever is kept."""
        key = query_digest(query)
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                entry = CacheEntry(dataclasses.replace(payload, cached=False), self.clock())
                self._entries[key] = entry
        return entry.payload

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        with self._lock:
            now = self.clock()
            expired = [k for k, e in self._entries.items() if now - e.created_at >= self.ttl]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.created_at >= self.ttl:
            del self._entries[key]
            return None
        return entry
