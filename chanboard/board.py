from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from chanboard.exceptions import InvalidBoardName, UnexpectedResponse
from chanboard.http_client import HttpClient, format_http_date
from chanboard.models import Catalog, ThreadPayload
from chanboard.search import compile_query
from chanboard.thread import Thread
from chanboard.thread_cache import ThreadCache

logger = logging.getLogger(__name__)


class Board:
    """
    A board on the read-only API, with its own thread cache.

    Scope:
    - Catalog: https://a.4cdn.org/<board>/catalog.json (conditional GET)
    - Thread:  https://a.4cdn.org/<board>/thread/<no>.json

    catalog() seeds the cache with every listed thread. get_thread() and
    find_cached() lazily update the threads they return.

    Concurrency:
    - The client may be shared with other boards; it serializes its own requests.
    - Multi-step methods are not atomic. Each cache operation locks on its own,
      so another caller may interleave between steps.
    """

    def __init__(self, client: HttpClient, name: str):
        if not client.is_valid_board(name):
            raise InvalidBoardName(name)

        self.name = name
        self.client = client
        self.thread_cache = ThreadCache()

        self._catalog_lock = threading.Lock()
        self._catalog_last_modified: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"Board(name={self.name!r}, cached_threads={len(self.thread_cache)})"

    @property
    def catalog_url(self) -> str:
        return self.client.url(self.name, "catalog.json")

    def thread_url(self, no: int) -> str:
        return self.client.url(self.name, "thread", f"{no}.json")

    @property
    def catalog_last_modified(self) -> Optional[datetime]:
        """Local time of the last successful catalog fetch, None before the first."""
        with self._catalog_lock:
            return self._catalog_last_modified

    def catalog(self) -> Optional[Catalog]:
        """
        Fetch the board's catalog and update the thread cache.

        Returns the catalog if it changed since the last successful fetch,
        None if the server answered 304 Not Modified (cache untouched).

        Raises:
            UnexpectedResponse: any status other than 200/304
            requests.RequestException: transport failures
            pydantic.ValidationError: malformed catalog JSON
        """
        last_modified = self.catalog_last_modified
        since = format_http_date(last_modified) if last_modified else None

        url = self.catalog_url
        logger.info("Fetching catalog: board=%s url=%s since=%s", self.name, url, since)
        resp = self.client.get(url, if_modified_since=since)

        if resp.status_code == 304:
            logger.debug("Catalog not modified: board=%s", self.name)
            return None
        if resp.status_code != 200:
            raise UnexpectedResponse(resp.status_code, url)

        # Local clock, not the server's Last-Modified header.
        fetched_at = datetime.now(timezone.utc)

        # The endpoint returns a bare array of pages.
        catalog = Catalog.model_validate_json('{"pages":' + resp.text + "}")

        with self._catalog_lock:
            self._catalog_last_modified = fetched_at

        topics = catalog.topics()
        for topic in topics:
            cached = self.thread_cache.get(topic.no)
            if cached is not None:
                self.thread_cache.insert(cached.with_topic(topic))
            else:
                self.thread_cache.insert(Thread.from_topic(topic, self.name, self.client))

        logger.info(
            "Catalog updated: board=%s pages=%s topics=%s cached=%s",
            self.name,
            len(catalog.pages),
            len(topics),
            len(self.thread_cache),
        )
        return catalog

    def get_thread(self, no: int) -> Thread:
        """
        Get a thread by number.

        A cached thread is updated first. Otherwise the thread is fetched,
        added to the cache and returned.

        Raises:
            UnexpectedResponse: the thread fetch did not return 200 (or the update failed)
            requests.RequestException: transport failures
            pydantic.ValidationError: malformed thread JSON
        """
        if self.thread_cache.contains(no):
            thread = self.thread_cache.refresh(no)
            if thread is not None:
                return thread

        url = self.thread_url(no)
        logger.info("Fetching thread: board=%s no=%s url=%s", self.name, no, url)
        resp = self.client.get(url)
        if resp.status_code != 200:
            raise UnexpectedResponse(resp.status_code, url)

        fetched_at = datetime.now(timezone.utc)
        payload = ThreadPayload.model_validate_json(resp.text)
        thread = Thread.from_payload(payload, self.name, self.client, fetched_at=fetched_at)
        self.thread_cache.insert(thread)
        return thread.copy()

    def find_cached(self, query: str) -> list[Thread]:
        """
        Find cached threads whose OP name, comment, subject or filename matches
        the query (case-insensitive regex).

        Matching threads are updated before they are returned. Threads found
        to be expired are dropped from the result and removed from the cache.

        Raises:
            InvalidQuery: if the query does not compile
            UnexpectedResponse / requests.RequestException / pydantic.ValidationError:
                from a thread update; removals already made are kept
        """
        regex = compile_query(query)

        candidates = [t for t in self.thread_cache.values() if t.is_match(regex)]

        found: list[Thread] = []
        for thread in candidates:
            thread.update()
            if thread.expired:
                logger.info("Removing expired thread from cache: board=%s no=%s", self.name, thread.no)
                self.thread_cache.remove(thread.no)
                continue
            self.thread_cache.replace(thread)
            found.append(thread)

        logger.debug(
            "find_cached: board=%s query=%r candidates=%s found=%s",
            self.name,
            query,
            len(candidates),
            len(found),
        )
        return found
