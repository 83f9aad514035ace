"""Envelope decoding -- maps an :class:`httpx.Response` to call data or an error.

Both clients funnel every reply through :func:`unwrap_envelope` so the
sync and async paths reject calls identically.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from browserbridge.exceptions import BridgeCallError, InvalidParameters
from browserbridge.models import BridgeRequest

DEFAULT_FAILURE_MESSAGE = "Native call failed"


def build_request(method: str, params: dict[str, Any] | None) -> BridgeRequest:
    """Validate a call locally before any network I/O.

    Raises:
        InvalidParameters: If *method* is not a ``Namespace.Method``
            identifier or a param value is not a JSON primitive.
    """
    try:
        return BridgeRequest(method=method, params=dict(params or {}))
    except ValidationError as exc:
        first = exc.errors()[0]
        raise InvalidParameters(f"Invalid bridge call: {first['msg']}") from exc


def unwrap_envelope(response: httpx.Response) -> dict[str, Any]:
    """Return the ``data`` of an ``ok`` envelope or raise for an ``error`` one.

    The HTTP status code is not consulted: the host reports call failures
    inside the envelope, and a CSRF rejection also carries one.

    Returns:
        The ``data`` mapping, or an empty dict when the host omitted it.

    Raises:
        BridgeCallError: If the body is not a JSON object, or ``status`` is
            ``"error"``. The message defaults to ``"Native call failed"``.
    """
    try:
        body = response.json()
    except ValueError as exc:
        raise BridgeCallError(
            f"Invalid bridge response (HTTP {response.status_code}): not JSON"
        ) from exc
    if not isinstance(body, dict):
        raise BridgeCallError(
            f"Invalid bridge response (HTTP {response.status_code}): expected an object"
        )

    if body.get("status") == "error":
        raise BridgeCallError(body.get("message") or DEFAULT_FAILURE_MESSAGE)

    data = body.get("data")
    return data if isinstance(data, dict) else {}
