"""Function dispatch -- from a ``Namespace.Method`` request to a handler result.

:class:`FunctionRegistry` maps ``(namespace, method)`` keys to
:class:`~browserbridge.handlers.base.BridgeFunction` instances, validating
names when they are registered. :class:`Dispatcher` resolves a
:class:`~browserbridge.models.BridgeRequest` through the registry, runs the
handler, and normalises the outcome into a
:class:`~browserbridge.models.BridgeResponse`.
"""

from browserbridge.dispatch.dispatcher import Dispatcher
from browserbridge.dispatch.registry import FunctionRegistry

__all__ = ["Dispatcher", "FunctionRegistry"]
