"""Abstract base class for bridge functions and shared parameter checks.

To add a bridge function, subclass :class:`BridgeFunction`, implement
:meth:`~BridgeFunction.execute`, and register an instance with the
:class:`~browserbridge.dispatch.registry.FunctionRegistry`. Raise
:class:`~browserbridge.exceptions.InvalidParameters` for bad input and
:class:`~browserbridge.exceptions.ExecutionFailed` for platform failures;
the dispatcher turns both into error envelopes.
"""

from __future__ import annotations

import concurrent.futures
from abc import ABC, abstractmethod
from concurrent.futures import Future, InvalidStateError
from typing import Any, Callable
from urllib.parse import urlparse

from browserbridge.exceptions import InvalidParameters, PlatformError
from browserbridge.platform.base import LaunchCallback
from browserbridge.platform.ui_thread import UIThread


class BridgeFunction(ABC):
    """A function callable from the web layer through the bridge."""

    @abstractmethod
    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        """Run the function and return the ``data`` of the ok envelope.

        Args:
            params: The request's parameter mapping.

        Raises:
            InvalidParameters: If required parameters are missing or malformed.
            ExecutionFailed: If the platform could not carry out the call.
        """
        ...


def require_url(params: dict[str, Any]) -> str:
    """Return the ``url`` parameter after checking it parses as an absolute URL.

    Raises:
        InvalidParameters: ``"url is required"`` when absent, empty or not a
            string; ``"Invalid URL format"`` when it does not parse.
    """
    value = params.get("url")
    if not isinstance(value, str) or not value.strip():
        raise InvalidParameters("url is required")
    url = value.strip()
    if any(ch.isspace() for ch in url):
        raise InvalidParameters("Invalid URL format")
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise InvalidParameters("Invalid URL format") from exc
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        raise InvalidParameters("Invalid URL format")
    return url


def _settle(future: Future[bool], value: bool) -> None:
    try:
        future.set_result(value)
    except InvalidStateError:
        pass  # late or duplicate confirmation


def _fail(future: Future[bool], exc: BaseException) -> None:
    try:
        future.set_exception(exc)
    except InvalidStateError:
        pass


def await_confirmation(
    ui_thread: UIThread,
    timeout: float,
    action: Callable[[LaunchCallback], None],
    refused: str,
) -> bool:
    """Run *action* on the UI thread and wait a bounded time for it to confirm.

    *action* receives a callback to fire with ``True`` once the platform
    confirms, or ``False`` if it refuses. The calling worker blocks for at
    most *timeout* seconds; the UI thread is never blocked.

    Returns:
        ``True`` if confirmed in time, ``False`` if no confirmation arrived.

    Raises:
        PlatformError: With message *refused* when the platform refused.
        Exception: Whatever *action* raised on the UI thread.
    """
    confirmed: Future[bool] = Future()

    def _on_ui_thread() -> None:
        try:
            action(lambda ok: _settle(confirmed, bool(ok)))
        except Exception as exc:
            _fail(confirmed, exc)

    ui_thread.submit(_on_ui_thread)
    try:
        ok = confirmed.result(timeout=timeout)
    except concurrent.futures.TimeoutError:
        return False
    if not ok:
        raise PlatformError(refused)
    return True
