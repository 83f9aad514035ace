"""Abstract base classes for host platforms.

To support a new host shell, subclass :class:`Platform` and implement its
abstract methods; if the shell has a native authentication session API,
subclass :class:`PlatformAuthSession` as well.

Every method of :class:`Platform` is called on the
:class:`~browserbridge.platform.ui_thread.UIThread`. Launch methods report
their outcome through a callback, which the platform may fire later (and
from any thread) or never.

See Also:
    :class:`~browserbridge.platform.desktop.DesktopPlatform` for the
    reference implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

LaunchCallback = Callable[[bool], None]
"""Called with ``True`` once a launch or presentation is confirmed, ``False`` on refusal."""

AuthCompletion = Callable[[Optional[str], Optional[BaseException]], None]
"""Called once with ``(callback_url, None)`` on success or ``(None, error)`` otherwise."""


class PlatformAuthSession(ABC):
    """A platform-managed authentication browser flow.

    Created by :meth:`Platform.create_auth_session` with a completion
    callback. The session calls that callback at most once: with the
    callback URL when the provider redirects to the callback scheme, or
    with an error (an
    :class:`~browserbridge.exceptions.AuthSessionCancelled` when the user
    dismisses it).
    """

    @abstractmethod
    def start(self) -> bool:
        """Present the session. Returns ``False`` if it could not be started."""
        ...

    @abstractmethod
    def cancel(self) -> None:
        """Dismiss the session. Safe to call more than once."""
        ...

    def deliver(self, url: str) -> bool:
        """Offer an incoming deep link to the session.

        Platforms whose native session intercepts the redirect itself keep
        this default, which declines every URL.

        Returns:
            ``True`` if the session consumed *url* as its callback.
        """
        return False


class Platform(ABC):
    """Host platform operations used by the browser handlers and session registry."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short platform identifier used in logs (``"desktop"``, ``"ios"``...)."""
        ...

    @abstractmethod
    def can_open_url(self, url: str) -> bool:
        """Return whether some application can handle *url*."""
        ...

    @abstractmethod
    def open_url(self, url: str, on_complete: LaunchCallback) -> None:
        """Open *url* in the default browser application.

        Raises:
            PlatformError: If the OS call itself fails.
        """
        ...

    @abstractmethod
    def topmost_view(self) -> Optional[Any]:
        """Return the innermost presented view, or ``None`` if nothing is on screen."""
        ...

    @abstractmethod
    def present_in_app(self, url: str, anchor: Any, on_presented: LaunchCallback) -> None:
        """Present an embedded browser overlay for *url* over *anchor*.

        Raises:
            PlatformError: If the overlay cannot be constructed or presented.
        """
        ...

    @abstractmethod
    def foreground_window(self) -> Optional[Any]:
        """Return the active foreground window/scene, or ``None``."""
        ...

    @abstractmethod
    def create_auth_session(
        self,
        url: str,
        callback_scheme: str,
        anchor: Any,
        completion: AuthCompletion,
    ) -> PlatformAuthSession:
        """Build (but do not start) an authentication session."""
        ...
