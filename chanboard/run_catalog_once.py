from __future__ import annotations

import json
import logging

from chanboard.board import Board
from chanboard.http_client import HttpClient, HttpConfig
from chanboard.settings import ChanSettings, load_settings
from chanboard.thread import Thread

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


def build_client(s: ChanSettings) -> HttpClient:
    return HttpClient(HttpConfig.from_settings(s))


def summarize(thread: Thread) -> dict:
    text = thread.topic.comment_text
    return {
        "board": thread.board,
        "no": thread.no,
        "url": thread.url,
        "subject": thread.topic.sub,
        "name": thread.topic.name,
        "replies": thread.topic.replies,
        "expired": thread.expired,
        "comment_preview": (text[:120] + "…") if len(text) > 120 else text,
    }


def main() -> None:
    s = load_settings()

    board = Board(build_client(s), s.board)

    catalog = board.catalog()
    if catalog is None:
        logger.info("Catalog not modified: board=%s", board.name)
    else:
        logger.info("Fetched catalog: pages=%s topics=%s", len(catalog.pages), len(catalog.topics()))

    if s.query:
        threads = board.find_cached(s.query)
        logger.info("Matched threads: query=%r count=%s", s.query, len(threads))
    else:
        threads = board.thread_cache.values()

    threads.sort(key=lambda t: t.no, reverse=True)
    sample = [summarize(t) for t in threads[: s.sample_size]]
    print(json.dumps(sample, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
