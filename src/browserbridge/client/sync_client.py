"""Synchronous bridge client backed by :class:`httpx.Client`.

:class:`BridgeClient` POSTs one :class:`~browserbridge.models.BridgeRequest`
per call to the host's fixed call endpoint and decodes the envelope. A failed
call surfaces immediately as a typed exception; nothing is retried.

See Also:
    :class:`~browserbridge.client.async_client.AsyncBridgeClient` for the
    non-blocking equivalent.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from browserbridge.client.csrf import CSRF_HEADER
from browserbridge.client.response import build_request, unwrap_envelope
from browserbridge.exceptions import ConnectionError_, InvalidParameters
from browserbridge.models import ClientConfig
from browserbridge.output import debug


class BridgeClient:
    """Blocking client for bridge calls. Must be used as a context manager.

    Args:
        config: Base URL, endpoint, transport timeout and CSRF token.
        transport: Optional custom :mod:`httpx` transport (tests pass an
            :class:`httpx.MockTransport`).

    Example::

        with BridgeClient(ClientConfig(base_url="http://127.0.0.1:8765")) as client:
            data = client.call("Browser.Open", {"url": "https://example.com"})
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> BridgeClient:
        self._client = httpx.Client(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def call(self, method: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Invoke a host bridge function and return its ``data`` mapping.

        Args:
            method: Namespaced function name, e.g. ``"Browser.Open"``.
            params: JSON-primitive parameters.

        Returns:
            The ``data`` of the ``ok`` envelope.

        Raises:
            InvalidParameters: If the call is malformed (no request is sent).
            BridgeCallError: If the host answers with an error envelope.
            ConnectionError_: On network / timeout errors.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        request = build_request(method, params)
        debug(f"POST {self._config.endpoint} {request.method}")
        try:
            response = self._client.post(
                self._config.endpoint,
                json=request.model_dump(mode="json"),
                headers=_headers(self._config),
            )
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Bridge call {request.method} failed: {exc}") from exc
        return unwrap_envelope(response)

    def deliver_deep_link(self, url: str, path: str = "/_native/deeplink") -> str:
        """Forward an OS deep link to the running host.

        This is what a desktop URL-scheme handler calls when the OAuth
        provider redirects to ``<scheme>://...``.

        Returns:
            Who handled the link: ``"auth_session"`` or ``"router"``.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"
        try:
            response = self._client.post(path, json={"url": url}, headers=_headers(self._config))
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Deep link delivery failed: {exc}") from exc
        if response.status_code == 422:
            raise InvalidParameters(f"Invalid deep link URL: {url}")
        return str(unwrap_envelope(response).get("handled_by", ""))


def _headers(config: ClientConfig) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
        CSRF_HEADER: config.csrf_token or "",
    }
