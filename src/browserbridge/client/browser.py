"""The ``Browser.*`` facade used by web-side code.

Each method makes one bridge call with ``{"url": url}`` and reports
whether the host confirmed it with ``success: true``. Errors are not
swallowed: a rejected call raises
:class:`~browserbridge.exceptions.BridgeCallError`.
"""

from __future__ import annotations

from typing import Any

from browserbridge.client.async_client import AsyncBridgeClient
from browserbridge.client.sync_client import BridgeClient

OPEN = "Browser.Open"
OPEN_IN_APP = "Browser.OpenInApp"
OPEN_AUTH = "Browser.OpenAuth"


def _succeeded(data: dict[str, Any]) -> bool:
    return data.get("success") is True


class Browser:
    """Blocking facade over a :class:`BridgeClient`."""

    def __init__(self, client: BridgeClient) -> None:
        self._client = client

    def open(self, url: str) -> bool:
        """Open *url* in the system's default browser."""
        return _succeeded(self._client.call(OPEN, {"url": url}))

    def in_app(self, url: str) -> bool:
        """Open *url* in the embedded in-app browser overlay."""
        return _succeeded(self._client.call(OPEN_IN_APP, {"url": url}))

    def auth(self, url: str) -> bool:
        """Start an authentication session for *url*.

        Returns as soon as the host has started the session. The OAuth
        callback arrives later through the host's deep-link router.
        """
        return _succeeded(self._client.call(OPEN_AUTH, {"url": url}))


class AsyncBrowser:
    """Non-blocking facade over an :class:`AsyncBridgeClient`."""

    def __init__(self, client: AsyncBridgeClient) -> None:
        self._client = client

    async def open(self, url: str) -> bool:
        return _succeeded(await self._client.call(OPEN, {"url": url}))

    async def in_app(self, url: str) -> bool:
        return _succeeded(await self._client.call(OPEN_IN_APP, {"url": url}))

    async def auth(self, url: str) -> bool:
        return _succeeded(await self._client.call(OPEN_AUTH, {"url": url}))
