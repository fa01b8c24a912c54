from __future__ import annotations

import logging
import threading
from typing import Optional

from chanboard.thread import Thread

logger = logging.getLogger(__name__)


class ThreadCache:
    """
    In-memory store of threads keyed by thread number.

    Entries go in and come out as copies, so callers never hold a live alias
    of a cached thread; every change goes through insert/replace/remove.
    The lock covers single operations only. refresh() releases it while the
    thread talks to the API.
    """

    def __init__(self) -> None:
        self._threads: dict[int, Thread] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._threads)

    def __contains__(self, no: object) -> bool:
        with self._lock:
            return no in self._threads

    def contains(self, no: int) -> bool:
        return no in self

    def insert(self, thread: Thread) -> None:
        with self._lock:
            self._threads[thread.no] = thread.copy()

    def replace(self, thread: Thread) -> bool:
        """Overwrite an existing entry. Returns False (and stores nothing) if it was removed meanwhile."""
        with self._lock:
            if thread.no not in self._threads:
                return False
            self._threads[thread.no] = thread.copy()
            return True

    def get(self, no: int) -> Optional[Thread]:
        with self._lock:
            thread = self._threads.get(no)
            return thread.copy() if thread is not None else None

    def remove(self, no: int) -> Optional[Thread]:
        with self._lock:
            return self._threads.pop(no, None)

    def numbers(self) -> list[int]:
        with self._lock:
            return list(self._threads)

    def values(self) -> list[Thread]:
        """Snapshot of every cached thread."""
        with self._lock:
            return [t.copy() for t in self._threads.values()]

    def refresh(self, no: int) -> Optional[Thread]:
        """
        Update a cached thread against the API and store the result.

        Returns the updated snapshot, or None if the thread is not cached.
        Errors from Thread.update() propagate and leave the entry untouched.
        """
        thread = self.get(no)
        if thread is None:
            return None

        thread.update()
        if not self.replace(thread):
            logger.debug("Thread removed during refresh, not written back: no=%s", no)
        return thread
