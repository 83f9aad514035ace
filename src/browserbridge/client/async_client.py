"""Asynchronous bridge client -- mirrors :class:`~browserbridge.client.sync_client.BridgeClient`.

The caller suspends on ``await client.call(...)`` while the request is in
flight; no thread is blocked. Failures propagate as exceptions from the
awaited call.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from browserbridge.client.response import build_request, unwrap_envelope
from browserbridge.client.sync_client import _headers
from browserbridge.exceptions import ConnectionError_
from browserbridge.models import ClientConfig
from browserbridge.output import debug


class AsyncBridgeClient:
    """Non-blocking client for bridge calls. Must be used as an async context manager.

    Example::

        async with AsyncBridgeClient(config) as client:
            data = await client.call("Browser.OpenAuth", {"url": auth_url})
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> AsyncBridgeClient:
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def call(self, method: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Invoke a host bridge function and return its ``data`` mapping.

        Behaves identically to :meth:`BridgeClient.call` but is non-blocking.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        request = build_request(method, params)
        debug(f"POST {self._config.endpoint} {request.method}")
        try:
            response = await self._client.post(
                self._config.endpoint,
                json=request.model_dump(mode="json"),
                headers=_headers(self._config),
            )
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Bridge call {request.method} failed: {exc}") from exc
        return unwrap_envelope(response)
