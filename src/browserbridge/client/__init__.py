"""Web-side bridge client for browserbridge.

Provides synchronous and asynchronous clients that wrap :mod:`httpx` and
speak the bridge call convention: a ``{"method", "params"}`` JSON document
POSTed to the host's call endpoint, answered by a
``{"status", "data" | "message"}`` envelope.

Classes:
    :class:`BridgeClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncBridgeClient` -- non-blocking client backed by
    :class:`httpx.AsyncClient`.
    :class:`Browser` / :class:`AsyncBrowser` -- the ``open`` / ``in_app`` /
    ``auth`` facade over the ``Browser.*`` namespace.

Example::

    from browserbridge.client import Browser, BridgeClient

    with BridgeClient(config) as client:
        Browser(client).auth("https://auth.example.com/authorize?...")
"""

from browserbridge.client.async_client import AsyncBridgeClient
from browserbridge.client.browser import AsyncBrowser, Browser
from browserbridge.client.csrf import extract_csrf_token
from browserbridge.client.sync_client import BridgeClient

__all__ = [
    "AsyncBridgeClient",
    "AsyncBrowser",
    "BridgeClient",
    "Browser",
    "extract_csrf_token",
]
