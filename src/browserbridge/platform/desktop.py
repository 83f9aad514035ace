"""Desktop platform built on the standard :mod:`webbrowser` module.

A desktop host has a system browser but no embedded overlay and no native
authentication session API:

* ``Browser.Open`` launches the default browser through :mod:`webbrowser`.
* ``Browser.OpenInApp`` finds no view to anchor an overlay to, so the
  handler falls back to the system browser.
* ``Browser.OpenAuth`` opens the authorization URL in the system browser.
  The OS hands the provider's redirect (``<scheme>://...``) back to the
  host, which delivers it through ``POST /_native/deeplink``; the pending
  :class:`DesktopAuthSession` claims URLs with its callback scheme.
"""

from __future__ import annotations

import threading
import webbrowser
from typing import Any, Callable, Optional
from urllib.parse import urlparse

from browserbridge.exceptions import AuthSessionCancelled, PlatformError
from browserbridge.output import debug
from browserbridge.platform.base import (
    AuthCompletion,
    LaunchCallback,
    Platform,
    PlatformAuthSession,
)

_OPENABLE_SCHEMES = frozenset({"http", "https", "file", "mailto"})


class DesktopAuthSession(PlatformAuthSession):
    """Authentication session that waits for its callback URL to be delivered.

    Args:
        url: Authorization URL to open.
        callback_scheme: Scheme the provider redirects to.
        launcher: Opens a URL in the system browser and returns whether it
            succeeded.
        completion: Called exactly once when the session finishes.
    """

    def __init__(
        self,
        url: str,
        callback_scheme: str,
        launcher: Callable[[str], bool],
        completion: AuthCompletion,
    ) -> None:
        self.url = url
        self.callback_scheme = callback_scheme.lower()
        self._launcher = launcher
        self._completion = completion
        self._lock = threading.Lock()
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def start(self) -> bool:
        try:
            return bool(self._launcher(self.url))
        except PlatformError as exc:
            debug(f"Auth session launch failed: {exc}")
            return False

    def cancel(self) -> None:
        self._finish(None, AuthSessionCancelled("Authentication session cancelled"))

    def deliver(self, url: str) -> bool:
        if urlparse(url).scheme.lower() != self.callback_scheme:
            return False
        return self._finish(url, None)

    def _finish(self, url: Optional[str], error: Optional[BaseException]) -> bool:
        with self._lock:
            if self._finished:
                return False
            self._finished = True
        self._completion(url, error)
        return True


class DesktopPlatform(Platform):
    """:class:`~browserbridge.platform.base.Platform` for desktop hosts.

    Args:
        browser: Name of the :mod:`webbrowser` controller to use. ``None``
            selects the system default.
    """

    def __init__(self, browser: Optional[str] = None) -> None:
        self._browser_name = browser

    @property
    def name(self) -> str:
        return "desktop"

    def _controller(self) -> Optional[webbrowser.BaseBrowser]:
        try:
            return webbrowser.get(self._browser_name)
        except webbrowser.Error:
            return None

    def _launch(self, url: str) -> bool:
        controller = self._controller()
        if controller is None:
            raise PlatformError("No web browser is available")
        try:
            return bool(controller.open(url, new=2))
        except (webbrowser.Error, OSError) as exc:
            raise PlatformError(str(exc)) from exc

    def can_open_url(self, url: str) -> bool:
        if urlparse(url).scheme.lower() not in _OPENABLE_SCHEMES:
            return False
        return self._controller() is not None

    def open_url(self, url: str, on_complete: LaunchCallback) -> None:
        on_complete(self._launch(url))

    def topmost_view(self) -> Optional[Any]:
        # Desktop hosts present nothing the overlay could be anchored to.
        return None

    def present_in_app(self, url: str, anchor: Any, on_presented: LaunchCallback) -> None:
        raise PlatformError("Embedded browser overlays are not available on desktop")

    def foreground_window(self) -> Optional[Any]:
        return self._controller()

    def create_auth_session(
        self,
        url: str,
        callback_scheme: str,
        anchor: Any,
        completion: AuthCompletion,
    ) -> DesktopAuthSession:
        return DesktopAuthSession(url, callback_scheme, self._launch, completion)
