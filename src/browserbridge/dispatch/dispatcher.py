"""Dispatcher -- runs bridge functions and normalises their outcome.

:meth:`Dispatcher.dispatch` never raises: unknown methods, handler errors
and unexpected exceptions all come back as ``{"status": "error"}``
envelopes, so a misbehaving platform cannot take down the request loop.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

from pydantic import ValidationError

from browserbridge.dispatch.registry import FunctionRegistry
from browserbridge.exceptions import BridgeError, ExecutionFailed
from browserbridge.models import BridgeRequest, BridgeResponse
from browserbridge.output import debug, error


class Dispatcher:
    """Resolves requests against a :class:`FunctionRegistry` and runs them.

    Args:
        registry: Where bridge functions are looked up.
    """

    def __init__(self, registry: FunctionRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> FunctionRegistry:
        return self._registry

    def dispatch(self, request: BridgeRequest) -> BridgeResponse:
        """Invoke the function named by *request* and wrap the outcome.

        Returns:
            ``ok`` with the handler's mapping, or ``error`` with the message
            of the :class:`~browserbridge.exceptions.BridgeError` raised.
            Unknown methods are rejected without invoking anything; any other
            exception is reported as a generic execution failure.
        """
        function = self._registry.get(request.namespace, request.name)
        if function is None:
            debug(f"Unknown bridge method: {request.method}")
            return BridgeResponse.error(f"Unknown method: {request.method}")

        debug(f"Dispatching {request.method}")
        try:
            result = function.execute(dict(request.params))
            if not isinstance(result, Mapping):
                raise ExecutionFailed(
                    f"{request.method} returned {type(result).__name__}, expected a mapping"
                )
        except BridgeError as exc:
            debug(f"{request.method} failed: {exc}")
            return BridgeResponse.error(exc.message or f"{request.method} failed")
        except Exception as exc:
            error(f"Unexpected error in {request.method}: {exc!r}")
            return BridgeResponse.error(f"Execution failed: {request.method} raised an unexpected error")
        return BridgeResponse.ok(dict(result))

    def dispatch_raw(self, payload: Any) -> BridgeResponse:
        """Validate an untrusted decoded JSON body and dispatch it.

        A body that is not a valid request yields an error envelope instead
        of an exception.
        """
        if not isinstance(payload, dict):
            return BridgeResponse.error("Invalid request: expected a JSON object")
        try:
            request = BridgeRequest.model_validate(payload)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"]) or "body"
            return BridgeResponse.error(f"Invalid request: {location}: {first['msg']}")
        return self.dispatch(request)

    async def dispatch_async(self, request: BridgeRequest) -> BridgeResponse:
        """Run :meth:`dispatch` on a worker thread so the event loop keeps serving."""
        return await asyncio.to_thread(self.dispatch, request)

    async def dispatch_raw_async(self, payload: Any) -> BridgeResponse:
        return await asyncio.to_thread(self.dispatch_raw, payload)
