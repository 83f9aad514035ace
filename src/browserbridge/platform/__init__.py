"""Platform layer -- the SDK calls the bridge core delegates to.

:class:`Platform` is the interface every host shell implements: launching
the system browser, presenting an embedded overlay, looking up the
foreground window and topmost view, and creating authentication sessions.
:class:`UIThread` is the single thread on which those calls run.
:class:`DesktopPlatform` implements the interface on top of the standard
:mod:`webbrowser` module.
"""

from browserbridge.platform.base import (
    AuthCompletion,
    LaunchCallback,
    Platform,
    PlatformAuthSession,
)
from browserbridge.platform.desktop import DesktopAuthSession, DesktopPlatform
from browserbridge.platform.ui_thread import UIThread

__all__ = [
    "AuthCompletion",
    "DesktopAuthSession",
    "DesktopPlatform",
    "LaunchCallback",
    "Platform",
    "PlatformAuthSession",
    "UIThread",
]
