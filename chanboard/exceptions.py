"""Errors raised by chanboard.

Everything the board layer detects itself derives from :class:`ChanError`.
Failures coming from collaborators are not wrapped: transport failures
surface as ``requests.RequestException`` and malformed payloads as
``pydantic.ValidationError``.

Hierarchy::

    ChanError
    +-- InvalidBoardName     (also a ValueError)
    +-- UnexpectedResponse   (alias: InvalidResponse)
    +-- InvalidQuery         (also a ValueError)
"""

from __future__ import annotations


class ChanError(Exception):
    """Base exception for all chanboard errors."""


class InvalidBoardName(ChanError, ValueError):
    """Raised when the transport client does not recognise a board name."""

    def __init__(self, name: str):
        super().__init__(f"Invalid board name: {name!r}")
        self.name = name


class UnexpectedResponse(ChanError):
    """Raised when the API answers with a status the operation cannot handle."""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"Unexpected response: status={status_code} url={url}")
        self.status_code = status_code
        self.url = url


InvalidResponse = UnexpectedResponse


class InvalidQuery(ChanError, ValueError):
    """Raised when a search query is not a valid regular expression."""

    def __init__(self, query: str, reason: str):
        super().__init__(f"Invalid query {query!r}: {reason}")
        self.query = query
