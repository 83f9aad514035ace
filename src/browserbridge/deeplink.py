"""Deep-link routing -- where callback URLs go once an auth session completes.

The bridge core only hands URLs off; what "resuming navigation" means is up
to the host. :class:`DeepLinkRouter` is the interface, and
:class:`RecordingDeepLinkRouter` the default used by ``browserbridge
serve``: it logs each URL, keeps a bounded history, and forwards to any
listeners registered with :meth:`~RecordingDeepLinkRouter.subscribe`.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Optional

from browserbridge.output import error, info


class DeepLinkRouter(ABC):
    """Consumes callback URLs and resumes app navigation."""

    @abstractmethod
    def handle(self, url: str) -> None:
        ...


class RecordingDeepLinkRouter(DeepLinkRouter):
    """Router that logs and remembers the URLs it receives.

    Args:
        history: Maximum number of URLs kept in :attr:`history`.
    """

    def __init__(self, history: int = 50) -> None:
        self._history: deque[str] = deque(maxlen=history)
        self._listeners: list[Callable[[str], None]] = []
        self._lock = threading.Lock()

    @property
    def history(self) -> list[str]:
        with self._lock:
            return list(self._history)

    @property
    def last(self) -> Optional[str]:
        with self._lock:
            return self._history[-1] if self._history else None

    def subscribe(self, listener: Callable[[str], None]) -> None:
        """Call *listener* with every URL routed from now on."""
        with self._lock:
            self._listeners.append(listener)

    def handle(self, url: str) -> None:
        info(f"Routing deep link: {url}")
        with self._lock:
            self._history.append(url)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(url)
            except Exception as exc:
                error(f"Deep link listener failed for {url}: {exc}")
