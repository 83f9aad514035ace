"""Authentication session registry -- at most one live OAuth session per host.

:class:`AuthSessionRegistry` is owned by the
:class:`~browserbridge.context.BridgeContext` and injected into the
``Browser.OpenAuth`` handler. It is the only code that creates, cancels or
clears sessions, and every transition happens under its lock, so starting a
new session atomically cancels the previous one.

Lifecycle of an :class:`AuthSession`::

    IDLE -> STARTING -> ACTIVE -> COMPLETED   (callback URL routed)
                               -> CANCELLED   (user dismissed / superseded)
                               -> ERRORED     (platform failure)

The registry drops its reference when a session reaches a terminal state.
A completion callback from a session that is no longer the active one only
finalises that session's own state and never touches its successor.
"""

from __future__ import annotations

import itertools
import threading
from functools import partial
from typing import Optional

from browserbridge.deeplink import DeepLinkRouter
from browserbridge.exceptions import AuthSessionCancelled
from browserbridge.models import BridgeSettings, SessionState
from browserbridge.output import debug, error, info, warning
from browserbridge.platform.base import Platform, PlatformAuthSession

_session_ids = itertools.count(1)


class AuthSession:
    """Bookkeeping for one authentication flow.

    Args:
        url: Authorization URL the session was opened with.
        callback_scheme: Scheme the provider redirects back to.
    """

    def __init__(self, url: str, callback_scheme: str) -> None:
        self.id = next(_session_ids)
        self.url = url
        self.callback_scheme = callback_scheme
        self.state = SessionState.STARTING
        self.handle: Optional[PlatformAuthSession] = None
        self.callback_url: Optional[str] = None
        self.error: Optional[str] = None

    def __repr__(self) -> str:
        return f"AuthSession(id={self.id}, state={self.state.value}, url={self.url!r})"


class AuthSessionRegistry:
    """Starts authentication sessions and routes their callbacks.

    Args:
        platform: Supplies the foreground window and builds platform sessions.
        router: Receives callback URLs of completed sessions.
        settings: Source of the callback scheme.
    """

    def __init__(
        self,
        platform: Platform,
        router: DeepLinkRouter,
        settings: BridgeSettings,
    ) -> None:
        self._platform = platform
        self._router = router
        self._settings = settings
        self._lock = threading.RLock()
        self._active: Optional[AuthSession] = None

    @property
    def active(self) -> Optional[AuthSession]:
        """The session currently holding the presentation surface, if any."""
        with self._lock:
            return self._active

    @property
    def state(self) -> SessionState:
        """State of the active session, or ``IDLE`` when there is none."""
        with self._lock:
            return self._active.state if self._active else SessionState.IDLE

    def start(self, url: str) -> Optional[AuthSession]:
        """Start an authentication session for *url*, replacing any active one.

        Returns:
            The new session (possibly already ``ERRORED`` if the platform
            refused to start it), or ``None`` when there is no foreground
            window to present on.
        """
        with self._lock:
            self._cancel_active("superseded by a new auth session")

            scheme = self._settings.deeplink_scheme
            anchor = self._platform.foreground_window()
            if anchor is None:
                warning("No active window for auth session")
                return None

            session = AuthSession(url, scheme)
            completion = partial(self._on_complete, session)
            try:
                handle = self._platform.create_auth_session(url, scheme, anchor, completion)
            except Exception as exc:
                session.state = SessionState.ERRORED
                session.error = str(exc)
                error(f"Failed to create auth session: {exc}")
                return session

            session.handle = handle
            self._active = session

            try:
                started = handle.start()
            except Exception as exc:
                debug(f"Auth session {session.id} raised on start: {exc}")
                started = False

            if not started:
                error("Failed to start auth session")
                if session.state == SessionState.STARTING:
                    session.state = SessionState.ERRORED
                    session.error = "session did not start"
                if self._active is session:
                    self._active = None
                return session

            if session.state == SessionState.STARTING:
                session.state = SessionState.ACTIVE
            info(f"Auth session {session.id} started (callback scheme: {scheme})")
            return session

    def cancel(self) -> bool:
        """Cancel the active session. Returns ``False`` when there was none."""
        with self._lock:
            return self._cancel_active("cancelled by host")

    def deliver(self, url: str) -> bool:
        """Offer a deep link to the active session.

        Returns:
            ``True`` if the session claimed *url* as its callback, in which
            case it has already been routed.
        """
        with self._lock:
            session = self._active
        if session is None or session.handle is None:
            return False
        return session.handle.deliver(url)

    def _cancel_active(self, reason: str) -> bool:
        prior = self._active
        if prior is None:
            return False
        self._active = None
        if not prior.state.is_terminal:
            prior.state = SessionState.CANCELLED
        debug(f"Auth session {prior.id} {reason}")
        if prior.handle is not None:
            try:
                prior.handle.cancel()
            except Exception as exc:
                error(f"Failed to cancel auth session {prior.id}: {exc}")
        return True

    def _on_complete(
        self,
        session: AuthSession,
        callback_url: Optional[str],
        exc: Optional[BaseException],
    ) -> None:
        with self._lock:
            if session.state.is_terminal:
                debug(f"Ignoring completion of finished auth session {session.id}")
                return
            if self._active is not session:
                session.state = SessionState.CANCELLED
                debug(f"Ignoring completion of superseded auth session {session.id}")
                return
            self._active = None

            if exc is not None:
                if isinstance(exc, AuthSessionCancelled):
                    session.state = SessionState.CANCELLED
                    info("User cancelled authentication session")
                else:
                    session.state = SessionState.ERRORED
                    session.error = str(exc)
                    error(f"Auth session error: {exc}")
                return

            if callback_url is None:
                session.state = SessionState.ERRORED
                session.error = "completed without a callback URL"
                warning("Auth session completed without a callback URL")
                return

            session.state = SessionState.COMPLETED
            session.callback_url = callback_url

        info(f"Auth session completed with callback: {callback_url}")
        try:
            self._router.handle(callback_url)
        except Exception as router_exc:
            error(f"Deep link router failed for {callback_url}: {router_exc}")
