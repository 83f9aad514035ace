"""Typed registry of bridge functions keyed by ``(namespace, method)``.

Names are checked when a function is registered, so a typo in a handler
name fails at startup with :class:`~browserbridge.exceptions.RegistrationError`
rather than surfacing as an unknown-method reply at call time.
"""

from __future__ import annotations

import re
import threading
from typing import Optional

from browserbridge.exceptions import RegistrationError
from browserbridge.handlers.base import BridgeFunction
from browserbridge.models import METHOD_PATTERN

_PART = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

FunctionKey = tuple[str, str]


class FunctionRegistry:
    """Registry and lookup for bridge functions.

    Example::

        registry = FunctionRegistry()
        registry.register("Browser", "Open", Open(platform, ui_thread))
        registry.resolve("Browser.Open")
    """

    def __init__(self) -> None:
        self._functions: dict[FunctionKey, BridgeFunction] = {}
        self._lock = threading.Lock()

    def register(self, namespace: str, method: str, function: BridgeFunction) -> None:
        """Register *function* as ``namespace.method``.

        Raises:
            RegistrationError: If either part is not an identifier, the
                function is not a :class:`BridgeFunction`, or the name is
                already taken.
        """
        for label, part in (("namespace", namespace), ("method", method)):
            if not isinstance(part, str) or not _PART.match(part):
                raise RegistrationError(f"Invalid {label} name: {part!r}")
        if not isinstance(function, BridgeFunction):
            raise RegistrationError(
                f"{namespace}.{method} must be a BridgeFunction, got {type(function).__name__}"
            )
        key = (namespace, method)
        with self._lock:
            if key in self._functions:
                raise RegistrationError(f"{namespace}.{method} is already registered")
            self._functions[key] = function

    def unregister(self, namespace: str, method: str) -> None:
        with self._lock:
            self._functions.pop((namespace, method), None)

    def get(self, namespace: str, method: str) -> Optional[BridgeFunction]:
        with self._lock:
            return self._functions.get((namespace, method))

    def resolve(self, name: str) -> Optional[BridgeFunction]:
        """Look up a dotted ``Namespace.Method`` name; ``None`` if unknown or malformed."""
        match = METHOD_PATTERN.match(name.strip())
        if match is None:
            return None
        return self.get(match.group(1), match.group(2))

    def names(self) -> list[str]:
        """Sorted dotted names of all registered functions."""
        with self._lock:
            return sorted(f"{ns}.{method}" for ns, method in self._functions)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._functions)
