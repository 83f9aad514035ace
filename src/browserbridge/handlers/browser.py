"""Functions related to opening URLs in browsers. Namespace: ``Browser.*``.

* ``Browser.Open`` -- system browser, bounded wait for confirmation.
* ``Browser.OpenInApp`` -- embedded overlay with a single fallback to the
  system browser.
* ``Browser.OpenAuth`` -- fire-and-forget hand-off to the
  :class:`~browserbridge.sessions.AuthSessionRegistry`.

All three take ``{"url": <string>}`` and return ``{"success": <bool>}``.
``success`` is ``False`` when the platform did not confirm within the
configured wait; the launch may still complete afterwards.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Optional

from browserbridge.exceptions import ExecutionFailed
from browserbridge.handlers.base import BridgeFunction, await_confirmation, require_url
from browserbridge.models import DEFAULT_CONFIRM_TIMEOUT
from browserbridge.output import error, info, success, warning
from browserbridge.platform.base import LaunchCallback, Platform
from browserbridge.platform.ui_thread import UIThread
from browserbridge.sessions import AuthSession, AuthSessionRegistry

if TYPE_CHECKING:
    from browserbridge.dispatch.registry import FunctionRegistry

BROWSER_NAMESPACE = "Browser"


def _open_system_browser(
    platform: Platform, ui_thread: UIThread, url: str, timeout: float
) -> bool:
    def _launch(confirm: LaunchCallback) -> None:
        if not platform.can_open_url(url):
            confirm(False)
            return
        platform.open_url(url, confirm)

    return await_confirmation(
        ui_thread, timeout, _launch, refused=f"No application can open {url}"
    )


class Open(BridgeFunction):
    """Open a URL in the system's default browser.

    Parameters:
        url: string -- the URL to open.

    Returns:
        success: boolean -- ``True`` once the platform confirmed the launch.
    """

    def __init__(
        self,
        platform: Platform,
        ui_thread: UIThread,
        confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
    ) -> None:
        self._platform = platform
        self._ui_thread = ui_thread
        self._timeout = confirm_timeout

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        url = require_url(params)
        info(f"Browser.Open called for URL: {url}")

        try:
            opened = _open_system_browser(self._platform, self._ui_thread, url, self._timeout)
        except Exception as exc:
            error(f"Error opening URL: {exc}")
            raise ExecutionFailed(f"Failed to open URL: {exc}") from exc

        if opened:
            success("Successfully opened URL in system browser")
        else:
            warning("System browser did not confirm the launch in time")
        return {"success": opened}


class OpenInApp(BridgeFunction):
    """Open a URL in an embedded in-app browser overlay.

    The overlay is presented over the topmost presented view. If it cannot
    be built or presented, the URL goes to the system browser instead, and
    only a failure of that fallback is reported as an error.

    Parameters:
        url: string -- the URL to open.

    Returns:
        success: boolean -- ``True`` once the overlay (or the fallback
        browser) was confirmed on screen.
    """

    def __init__(
        self,
        platform: Platform,
        ui_thread: UIThread,
        confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        overlay_enabled: bool = True,
    ) -> None:
        self._platform = platform
        self._ui_thread = ui_thread
        self._timeout = confirm_timeout
        self._overlay_enabled = overlay_enabled

    def _present_overlay(self, url: str) -> bool:
        def _present(confirm: LaunchCallback) -> None:
            anchor = self._platform.topmost_view()
            if anchor is None:
                raise ExecutionFailed("No view to present the in-app browser on")
            self._platform.present_in_app(url, anchor, confirm)

        return await_confirmation(
            self._ui_thread, self._timeout, _present, refused="In-app browser was not presented"
        )

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        url = require_url(params)
        info(f"Browser.OpenInApp called for URL: {url}")

        if self._overlay_enabled:
            try:
                presented = self._present_overlay(url)
            except Exception as exc:
                warning(f"In-app browser unavailable ({exc}), falling back to system browser")
            else:
                if presented:
                    success("Successfully opened URL in in-app browser")
                else:
                    warning("In-app browser did not confirm presentation in time")
                return {"success": presented}

        try:
            opened = _open_system_browser(self._platform, self._ui_thread, url, self._timeout)
        except Exception as exc:
            error(f"Fallback to system browser failed: {exc}")
            raise ExecutionFailed(f"Failed to open URL: {exc}") from exc

        if opened:
            success("Opened URL in system browser (fallback)")
        return {"success": opened}


class OpenAuth(BridgeFunction):
    """Open a URL in an authentication session.

    Fire-and-forget: the session is scheduled on the UI thread and the call
    returns immediately. The callback URL is routed later through the
    registry's deep-link router, never through this call's result.

    Parameters:
        url: string -- the authorization URL.

    Returns:
        success: boolean -- ``True`` once the session start was scheduled.
    """

    def __init__(self, sessions: AuthSessionRegistry, ui_thread: UIThread) -> None:
        self._sessions = sessions
        self._ui_thread = ui_thread

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        url = require_url(params)
        info(f"Browser.OpenAuth called for URL: {url}")

        try:
            scheduled = self._ui_thread.submit(self._sessions.start, url)
        except RuntimeError as exc:
            raise ExecutionFailed(f"Failed to open auth URL: {exc}") from exc
        scheduled.add_done_callback(_report_start_failure)
        return {"success": True}


def _report_start_failure(future: Future[Optional[AuthSession]]) -> None:
    exc = future.exception()
    if exc is not None:
        error(f"Auth session could not be started: {exc}")


def register_browser_functions(
    registry: FunctionRegistry,
    platform: Platform,
    ui_thread: UIThread,
    sessions: AuthSessionRegistry,
    confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
    in_app_enabled: bool = True,
) -> None:
    """Register ``Browser.Open``, ``Browser.OpenInApp`` and ``Browser.OpenAuth``.

    Args:
        registry: The :class:`~browserbridge.dispatch.registry.FunctionRegistry`
            to install into.
        platform: Platform the handlers drive.
        ui_thread: Thread on which platform calls run.
        sessions: Registry ``Browser.OpenAuth`` hands URLs to.
        confirm_timeout: Bounded wait for launch confirmations, in seconds.
        in_app_enabled: When ``False``, ``Browser.OpenInApp`` goes straight
            to the system browser.
    """
    registry.register(BROWSER_NAMESPACE, "Open", Open(platform, ui_thread, confirm_timeout))
    registry.register(
        BROWSER_NAMESPACE,
        "OpenInApp",
        OpenInApp(platform, ui_thread, confirm_timeout, overlay_enabled=in_app_enabled),
    )
    registry.register(BROWSER_NAMESPACE, "OpenAuth", OpenAuth(sessions, ui_thread))
