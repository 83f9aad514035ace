"""Bridge functions -- the handlers the dispatcher invokes.

Every handler subclasses :class:`BridgeFunction` and is registered under a
``(namespace, method)`` key with
:class:`~browserbridge.dispatch.registry.FunctionRegistry`.
:func:`register_browser_functions` installs the ``Browser.*`` namespace.
"""

from browserbridge.handlers.base import BridgeFunction, require_url
from browserbridge.handlers.browser import (
    BROWSER_NAMESPACE,
    Open,
    OpenAuth,
    OpenInApp,
    register_browser_functions,
)

__all__ = [
    "BROWSER_NAMESPACE",
    "BridgeFunction",
    "Open",
    "OpenAuth",
    "OpenInApp",
    "register_browser_functions",
    "require_url",
]
