"""Wire models for the board API.

The catalog endpoint returns a bare JSON array of pages; each page lists the
originating post ("topic") of every thread on it. The thread endpoint
returns ``{"posts": [op, *replies]}``. Unknown fields are ignored so that
API additions do not break parsing.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from chanboard.search import compile_query, html_to_text


class Post(BaseModel):
    """One post. In a catalog it is the topic (OP) of a thread, without replies."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    no: int = Field(gt=0)
    resto: int = 0
    now: Optional[str] = None
    time: Optional[int] = None

    name: Optional[str] = None
    trip: Optional[str] = None
    capcode: Optional[str] = None
    country: Optional[str] = None

    sub: Optional[str] = None
    com: Optional[str] = None

    # Attachment
    filename: Optional[str] = None
    ext: Optional[str] = None
    tim: Optional[int] = None
    fsize: Optional[int] = None
    md5: Optional[str] = None
    w: Optional[int] = None
    h: Optional[int] = None

    # Thread status (OP only)
    sticky: int = 0
    closed: int = 0
    archived: int = 0
    archived_on: Optional[int] = None
    replies: int = 0
    images: int = 0
    semantic_url: Optional[str] = None

    # Catalog only
    last_modified: Optional[int] = None
    last_replies: list[Post] = Field(default_factory=list)

    @property
    def is_topic(self) -> bool:
        return self.resto == 0

    @property
    def comment_text(self) -> str:
        return html_to_text(self.com)

    def is_match(self, regex: re.Pattern[str]) -> bool:
        """True if the regex matches the author name, comment, subject or filename."""
        fields = (self.name, self.comment_text, self.sub, self.filename)
        return any(regex.search(value or "") for value in fields)

    def image_url(self, board: str) -> Optional[str]:
        if self.tim is None or not self.ext:
            return None
        return f"https://i.4cdn.org/{board}/{self.tim}{self.ext}"


class Page(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    page: int
    # Pages list the topic of each thread rather than whole threads.
    topics: list[Post] = Field(default_factory=list, alias="threads")


class Catalog(BaseModel):
    """
    Snapshot of every live thread on a board, grouped into pages.

    Holds topics only. Use Board.get_thread or Board.find_cached for whole threads.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    pages: list[Page] = Field(default_factory=list)

    def topics(self) -> list[Post]:
        """All topics, page order preserved. Duplicates across pages are kept."""
        out: list[Post] = []
        for page in self.pages:
            out.extend(page.topics)
        return out

    def find(self, query: str) -> Optional[list[Post]]:
        """
        Topics matching the query, or None when nothing matches.

        Raises:
            InvalidQuery: if the query does not compile
        """
        regex = compile_query(query)
        topics = [t for t in self.topics() if t.is_match(regex)]
        if not topics:
            return None
        return topics


class ThreadPayload(BaseModel):
    """Full thread as served by /<board>/thread/<no>.json."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    posts: list[Post] = Field(min_length=1)

    @property
    def topic(self) -> Post:
        return self.posts[0]

    @property
    def replies(self) -> list[Post]:
        return self.posts[1:]
