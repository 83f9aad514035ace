"""The designated UI thread.

Host shells allow presentation work on exactly one thread. :class:`UIThread`
models that thread as a single-worker executor: handlers running on a
request worker submit UI work to it and wait on the returned
:class:`concurrent.futures.Future` with a bounded timeout, so a UI callback
that never fires stalls the worker for at most that long and never the UI
thread itself.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class UIThread:
    """Single-threaded executor standing in for the platform's main thread."""

    def __init__(self, name: str = "browserbridge-ui") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._thread_ident: int | None = None
        self._executor.submit(self._record_ident).result()

    def _record_ident(self) -> None:
        self._thread_ident = threading.get_ident()

    def is_current(self) -> bool:
        """Return whether the caller is running on the UI thread."""
        return threading.get_ident() == self._thread_ident

    def submit(self, fn: Callable[..., T], *args: Any) -> Future[T]:
        """Schedule ``fn(*args)`` on the UI thread and return its future.

        When called from the UI thread itself, *fn* runs inline so UI work
        can never deadlock waiting on its own queue.
        """
        if self.is_current():
            future: Future[T] = Future()
            try:
                future.set_result(fn(*args))
            except BaseException as exc:
                future.set_exception(exc)
            return future
        return self._executor.submit(fn, *args)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
