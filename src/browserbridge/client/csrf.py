"""Read the anti-forgery token a page publishes in ``<meta name="csrf-token">``."""

from __future__ import annotations

from html.parser import HTMLParser
from typing import Optional

CSRF_HEADER = "X-CSRF-TOKEN"


class _MetaTokenParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.token: Optional[str] = None

    def handle_starttag(self, tag: str, attrs: list[tuple[str, Optional[str]]]) -> None:
        if tag != "meta" or self.token is not None:
            return
        values = dict(attrs)
        if (values.get("name") or "").lower() == "csrf-token":
            self.token = values.get("content") or ""


def extract_csrf_token(html: str) -> Optional[str]:
    """Return the ``content`` of the page's ``csrf-token`` meta tag, or ``None``.

    Example::

        >>> extract_csrf_token('<meta name="csrf-token" content="abc123">')
        'abc123'
    """
    parser = _MetaTokenParser()
    parser.feed(html)
    parser.close()
    return parser.token
