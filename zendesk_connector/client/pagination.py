"""Page cursor helpers.

Zendesk offset pagination advertises the next page as a full URL in the
``next_page`` field of every list response. The connector threads only the
``page`` query parameter of that URL between calls.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import parse_qs, urlparse

from zendesk_connector.errors import MalformedCursorError


def parse_next_page(next_page_url: Optional[str]) -> str:
    """Extract the page cursor from an upstream ``next_page`` URL.

    Returns "" when no next page is advertised. Raises MalformedCursorError
    when a URL is present but carries no ``page`` parameter.
    """
    if not next_page_url:
        return ""
    query = parse_qs(urlparse(next_page_url).query)
    values = query.get("page")
    if not values or not values[0]:
        raise MalformedCursorError(next_page_url)
    return values[0]


def convert_page_token(token: Optional[str]) -> int:
    """Convert a cursor into a page index; "" (first page) maps to 0."""
    if not token:
        return 0
    try:
        page = int(token)
    except ValueError:
        raise MalformedCursorError(token) from None
    if page < 0:
        raise MalformedCursorError(token, reason="negative page token")
    return page
