from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from chanboard.exceptions import UnexpectedResponse
from chanboard.http_client import HttpClient, format_http_date
from chanboard.models import Post, ThreadPayload

logger = logging.getLogger(__name__)


@dataclass
class Thread:
    """
    A thread: its topic (OP) plus replies, as last seen by this process.

    Threads seeded from a catalog carry the topic only; update() fetches the
    whole thread. Posts are immutable, so copy() is a full snapshot.
    """

    board: str
    topic: Post
    client: HttpClient = field(compare=False, repr=False)
    replies: tuple[Post, ...] = ()
    expired: bool = False
    # Local time of the last successful (200) thread fetch.
    last_modified: Optional[datetime] = None

    @classmethod
    def from_topic(cls, topic: Post, board_name: str, client: HttpClient) -> Thread:
        return cls(board=board_name, topic=topic, client=client)

    @classmethod
    def from_payload(
            cls,
            payload: ThreadPayload,
            board_name: str,
            client: HttpClient,
            fetched_at: Optional[datetime] = None,
    ) -> Thread:
        return cls(
            board=board_name,
            topic=payload.topic,
            client=client,
            replies=tuple(payload.replies),
            expired=bool(payload.topic.archived),
            last_modified=fetched_at or datetime.now(timezone.utc),
        )

    @property
    def no(self) -> int:
        return self.topic.no

    @property
    def posts(self) -> tuple[Post, ...]:
        return (self.topic, *self.replies)

    @property
    def api_url(self) -> str:
        return self.client.url(self.board, "thread", f"{self.no}.json")

    @property
    def url(self) -> str:
        return f"https://boards.4chan.org/{self.board}/thread/{self.no}"

    def copy(self) -> Thread:
        return dataclasses.replace(self)

    def with_topic(self, topic: Post) -> Thread:
        """Copy carrying a fresher catalog topic; replies and fetch state are kept."""
        return dataclasses.replace(self, topic=topic, expired=False)

    def is_match(self, regex: re.Pattern[str]) -> bool:
        return self.topic.is_match(regex)

    def update(self) -> None:
        """
        Re-synchronize with the API.

        - 200: topic and replies replaced, expired follows the OP's archived flag
        - 304: unchanged since the last fetch
        - 404: the thread is gone; marked expired

        Raises:
            UnexpectedResponse: any other status
            requests.RequestException: transport failures
            pydantic.ValidationError: malformed thread JSON
        """
        if self.expired:
            return

        since = format_http_date(self.last_modified) if self.last_modified else None
        url = self.api_url
        logger.info("Updating thread: board=%s no=%s since=%s", self.board, self.no, since)
        resp = self.client.get(url, if_modified_since=since)

        if resp.status_code == 200:
            fetched_at = datetime.now(timezone.utc)
            payload = ThreadPayload.model_validate_json(resp.text)
            self.topic = payload.topic
            self.replies = tuple(payload.replies)
            self.expired = bool(payload.topic.archived)
            self.last_modified = fetched_at
        elif resp.status_code == 304:
            logger.debug("Thread not modified: board=%s no=%s", self.board, self.no)
        elif resp.status_code == 404:
            logger.warning("Thread expired: board=%s no=%s", self.board, self.no)
            self.expired = True
        else:
            raise UnexpectedResponse(resp.status_code, url)
