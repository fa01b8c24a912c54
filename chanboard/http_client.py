from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import requests

if TYPE_CHECKING:
    from chanboard.settings import ChanSettings

logger = logging.getLogger(__name__)

# If-Modified-Since: Sat, 29 Oct 1994 19:43:31 GMT
IF_MODIFIED_SINCE_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"

RETRY_STATUSES = (429, 500, 502, 503, 504)


def format_http_date(dt: datetime) -> str:
    """Format a timestamp for the If-Modified-Since header (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(IF_MODIFIED_SINCE_FORMAT)


@dataclass(frozen=True)
class HttpConfig:
    timeout_sec: float
    delay_sec: float
    max_retries: int
    backoff_base_sec: float
    backoff_max_sec: float
    user_agent: str
    api_base_url: str = "https://a.4cdn.org"

    @staticmethod
    def from_settings(s: "ChanSettings") -> "HttpConfig":
        return HttpConfig(
            timeout_sec=s.request_timeout_sec,
            delay_sec=s.request_delay_sec,
            max_retries=s.max_retries,
            backoff_base_sec=s.backoff_base_sec,
            backoff_max_sec=s.backoff_max_sec,
            user_agent=s.user_agent,
            api_base_url=s.api_base_url,
        )


class HttpClient:
    """
    Thin HTTP client for the read-only board API:
    - Timeout
    - Rate limiting (minimum delay between requests, shared by every caller)
    - Retry with exponential backoff on network errors and 429/5xx
    - Conditional GET via If-Modified-Since

    Statuses such as 200, 304 and 404 are returned as-is; interpreting them
    is up to the caller. One client may be shared by many boards.
    """

    def __init__(self, config: HttpConfig, session: Optional[requests.Session] = None):
        self._cfg = config
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": self._cfg.user_agent,
                "Accept": "application/json",
            }
        )
        self._lock = threading.Lock()
        self._last_request_at: Optional[float] = None
        self._boards: Optional[frozenset[str]] = None

    @property
    def api_base_url(self) -> str:
        return self._cfg.api_base_url.rstrip("/")

    def url(self, *parts: object) -> str:
        return "/".join([self.api_base_url, *(str(p).strip("/") for p in parts)])

    def get(self, url: str, if_modified_since: Optional[str] = None) -> requests.Response:
        """
        GET an URL, optionally as a conditional request.

        Raises:
            requests.RequestException: network errors after retries
        """
        headers: dict[str, str] = {}
        if if_modified_since is not None:
            headers["If-Modified-Since"] = if_modified_since

        with self._lock:
            return self._get_with_retry(url, headers)

    def is_valid_board(self, name: str) -> bool:
        """Check a board name against the API's board list (fetched once per client)."""
        with self._lock:
            if self._boards is None:
                self._boards = self._fetch_boards()
            return name in self._boards

    def _fetch_boards(self) -> frozenset[str]:
        url = self.url("boards.json")
        logger.info("Fetching board list: url=%s", url)
        resp = self._get_with_retry(url, {})
        resp.raise_for_status()
        boards = frozenset(b["board"] for b in resp.json().get("boards", []))
        logger.debug("Known boards: %s", len(boards))
        return boards

    def _get_with_retry(self, url: str, headers: dict[str, str]) -> requests.Response:
        last_exc: Exception | None = None
        for attempt in range(self._cfg.max_retries + 1):
            self._rate_limit()
            try:
                resp = self._session.get(url, headers=headers, timeout=self._cfg.timeout_sec)
            except requests.RequestException as e:
                last_exc = e
                if attempt >= self._cfg.max_retries:
                    logger.error("HTTP GET failed after retries: url=%s err=%s", url, e)
                    raise
                sleep_sec = self._compute_backoff(attempt)
                logger.warning(
                    "HTTP GET failed (retrying): attempt=%s url=%s sleep=%.2fs err=%s",
                    attempt + 1,
                    url,
                    sleep_sec,
                    e,
                )
                time.sleep(sleep_sec)
                continue

            if resp.status_code in RETRY_STATUSES and attempt < self._cfg.max_retries:
                sleep_sec = self._compute_backoff(attempt)
                logger.warning(
                    "HTTP GET got status=%s (retrying): attempt=%s url=%s sleep=%.2fs",
                    resp.status_code,
                    attempt + 1,
                    url,
                    sleep_sec,
                )
                time.sleep(sleep_sec)
                continue

            resp.encoding = "utf-8"
            return resp

        # Should not reach here
        assert last_exc is not None
        raise last_exc

    def _rate_limit(self) -> None:
        # Minimum spacing between requests + small jitter
        if self._cfg.delay_sec > 0 and self._last_request_at is not None:
            elapsed = time.monotonic() - self._last_request_at
            wait = self._cfg.delay_sec - elapsed
            if wait > 0:
                time.sleep(wait + random.uniform(0.0, 0.25))
        self._last_request_at = time.monotonic()

    def _compute_backoff(self, attempt: int) -> float:
        # Exponential backoff with cap + jitter
        base = self._cfg.backoff_base_sec * (2**attempt)
        capped = min(base, self._cfg.backoff_max_sec)
        if capped <= 0:
            return 0.0
        return capped + random.uniform(0.0, 0.5)
