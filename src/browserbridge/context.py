"""Root context of a running host bridge.

:class:`BridgeContext` owns every long-lived object of the host side --
settings, platform, UI thread, deep-link router, auth session registry,
function registry and dispatcher -- and is what the server and the CLI hold
on to. Nothing in the core is a module-level singleton; tests build a
context around a fake platform.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from browserbridge.deeplink import DeepLinkRouter, RecordingDeepLinkRouter
from browserbridge.dispatch import Dispatcher, FunctionRegistry
from browserbridge.handlers import register_browser_functions
from browserbridge.models import BridgeSettings
from browserbridge.output import debug
from browserbridge.platform import DesktopPlatform, Platform, UIThread
from browserbridge.sessions import AuthSessionRegistry


class BridgeContext:
    """Wires the bridge core together.

    Args:
        settings: Validated host settings.
        platform: Platform implementation; defaults to
            :class:`~browserbridge.platform.desktop.DesktopPlatform`.
        router: Deep-link router; defaults to
            :class:`~browserbridge.deeplink.RecordingDeepLinkRouter`.
        ui_thread: UI thread; one is created when omitted.
    """

    def __init__(
        self,
        settings: Optional[BridgeSettings] = None,
        platform: Optional[Platform] = None,
        router: Optional[DeepLinkRouter] = None,
        ui_thread: Optional[UIThread] = None,
    ) -> None:
        self.settings = settings or BridgeSettings()
        self.platform = platform or DesktopPlatform()
        self.router = router or RecordingDeepLinkRouter()
        self.ui_thread = ui_thread or UIThread()
        self.sessions = AuthSessionRegistry(self.platform, self.router, self.settings)
        self.registry = FunctionRegistry()
        register_browser_functions(
            self.registry,
            self.platform,
            self.ui_thread,
            self.sessions,
            confirm_timeout=self.settings.confirm_timeout,
            in_app_enabled=self.settings.in_app_enabled,
        )
        self.dispatcher = Dispatcher(self.registry)
        self._closed = False

    def deliver_deep_link(self, url: str) -> str:
        """Route an incoming deep link the way the OS would.

        A URL the active auth session claims completes that session (which
        then routes it); anything else goes straight to the router.

        Returns:
            ``"auth_session"`` or ``"router"``, naming who handled it.
        """
        if self.sessions.deliver(url):
            return "auth_session"
        debug(f"Deep link not claimed by an auth session ({urlparse(url).scheme}://)")
        self.router.handle(url)
        return "router"

    def close(self) -> None:
        """Cancel any auth session and stop the UI thread. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self.sessions.cancel()
        self.ui_thread.shutdown(wait=True)

    def __enter__(self) -> BridgeContext:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
