from __future__ import annotations

import json
from collections import deque
from typing import Any, Optional

import pytest
import requests

from chanboard.http_client import HttpClient, HttpConfig


def make_response(status: int, body: Any = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    if body is None:
        resp._content = b""
    elif isinstance(body, (bytes, str)):
        resp._content = body.encode("utf-8") if isinstance(body, str) else body
    else:
        resp._content = json.dumps(body).encode("utf-8")
    resp.encoding = "utf-8"
    return resp


def post(no: int, com: str = "", **fields: Any) -> dict[str, Any]:
    return {"no": no, "resto": 0, "name": "Anonymous", "com": com, **fields}


class FakeHttp(HttpClient):
    """Serves queued responses per URL and records every GET."""

    def __init__(self, boards: tuple[str, ...] = ("g", "po")):
        super().__init__(
            HttpConfig(
                timeout_sec=1.0,
                delay_sec=0.0,
                max_retries=0,
                backoff_base_sec=0.0,
                backoff_max_sec=0.0,
                user_agent="test",
            )
        )
        self.boards = set(boards)
        self.routes: dict[str, deque[requests.Response]] = {}
        self.calls: list[tuple[str, Optional[str]]] = []

    def queue(self, url: str, status: int, body: Any = None) -> None:
        self.routes.setdefault(url, deque()).append(make_response(status, body))

    def is_valid_board(self, name: str) -> bool:
        return name in self.boards

    def get(self, url: str, if_modified_since: Optional[str] = None) -> requests.Response:
        self.calls.append((url, if_modified_since))
        pending = self.routes.get(url)
        if not pending:
            raise AssertionError(f"unexpected GET {url}")
        return pending.popleft()


CATALOG_URL = "https://a.4cdn.org/g/catalog.json"


def thread_url(no: int) -> str:
    return f"https://a.4cdn.org/g/thread/{no}.json"


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def two_page_catalog() -> list[dict[str, Any]]:
    return [
        {"page": 1, "threads": [post(10, "hello world", sub="first")]},
        {"page": 2, "threads": [post(20, "goodbye", filename="cat")]},
    ]
