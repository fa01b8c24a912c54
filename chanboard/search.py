from __future__ import annotations

import re

from bs4 import BeautifulSoup

from chanboard.exceptions import InvalidQuery


def compile_query(query: str) -> re.Pattern[str]:
    """
    Build the matcher used by catalog and cache searches.

    Case-insensitive, Unicode-aware. The empty query matches everything.

    Raises:
        InvalidQuery: if the pattern does not compile
    """
    try:
        return re.compile(query, re.IGNORECASE | re.UNICODE)
    except re.error as e:
        raise InvalidQuery(query, str(e)) from e


def html_to_text(html: str | None) -> str:
    """
    Convert a post comment (HTML fragment) to plain text.

    Comments use <br> for line breaks, <a class="quotelink"> for replies and
    HTML entities for quoting (&gt;&gt;123).
    """
    if not html:
        return ""
    if "<" not in html and "&" not in html:
        return html

    soup = BeautifulSoup(html, "lxml")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    return soup.get_text()
