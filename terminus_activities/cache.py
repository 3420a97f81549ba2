"""Per-user in-memory cache of filtered activity lists."""

from __future__ import annotations

import copy
import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, Iterator, Optional

from .config import ACTIVITY_CACHE_TTL_SECONDS
from .models import Activity, CacheEntry

__all__ = ["ReadWriteLock", "ActivityCache"]

LOGGER = logging.getLogger(__name__)


class ReadWriteLock:
    """Many concurrent readers or a single writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve a write.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read called without a matching acquire")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write called without a matching acquire")
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    def snapshot(self) -> dict[str, int | bool]:
        """Return current lock state (used by tests and diagnostics)."""

        with self._cond:
            return {
                "readers": self._readers,
                "writer": self._writer,
                "writers_waiting": self._writers_waiting,
            }


class ActivityCache:
    """Map a user id to their latest filtered activities.

    Entries older than ``ttl_seconds`` read as a miss but stay in the store
    until the next write for that user replaces them. There is no size bound.
    """

    def __init__(
        self,
        ttl_seconds: float = ACTIVITY_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = ReadWriteLock()
        self._entries: Dict[str, CacheEntry] = {}

    def read(self, user_id: str) -> Optional[CacheEntry]:
        with self._lock.read_locked():
            entry = self._entries.get(user_id)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock(), self.ttl_seconds):
            LOGGER.debug("Cache entry for user=%s expired", user_id)
            return None
        return entry

    def write(self, user_id: str, activities: Iterable[Activity]) -> CacheEntry:
        entry = CacheEntry(
            user_id=user_id,
            activities=tuple(copy.deepcopy(list(activities))),
            fetched_at=self._clock(),
        )
        with self._lock.write_locked():
            self._entries[user_id] = entry
        LOGGER.debug("Cached %d activities for user=%s", len(entry.activities), user_id)
        return entry

    def peek(self, user_id: str) -> Optional[CacheEntry]:
        """Return the stored entry for ``user_id`` regardless of freshness."""

        with self._lock.read_locked():
            return self._entries.get(user_id)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)
