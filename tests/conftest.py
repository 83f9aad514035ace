"""Shared test fixtures for browserbridge.

Provides a scriptable fake platform, isolated config environments, a bridge
context wired around the fake, output state management, and a CLI runner.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import pytest

from browserbridge.context import BridgeContext
from browserbridge.deeplink import RecordingDeepLinkRouter
from browserbridge.exceptions import AuthSessionCancelled
from browserbridge.models import BridgeSettings
from browserbridge.output import OutputFormat, OutputManager, reset_output, set_output
from browserbridge.platform.base import (
    AuthCompletion,
    LaunchCallback,
    Platform,
    PlatformAuthSession,
)
from browserbridge.platform.ui_thread import UIThread


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake platform
# ---------------------------------------------------------------------------


class FakeAuthSession(PlatformAuthSession):
    """Auth session whose outcome the test drives by hand."""

    def __init__(
        self,
        platform: FakePlatform,
        url: str,
        callback_scheme: str,
        anchor: Any,
        completion: AuthCompletion,
    ) -> None:
        self.platform = platform
        self.url = url
        self.callback_scheme = callback_scheme
        self.anchor = anchor
        self.completion = completion
        self.started = False
        self.cancelled = False

    def start(self) -> bool:
        self.started = True
        if self.platform.auth_start_error is not None:
            raise self.platform.auth_start_error
        return self.platform.auth_start_result

    def cancel(self) -> None:
        self.cancelled = True
        self.completion(None, AuthSessionCancelled("cancelled"))

    def deliver(self, url: str) -> bool:
        if urlparse(url).scheme != self.callback_scheme:
            return False
        self.complete(url)
        return True

    # Test drivers

    def complete(self, callback_url: Optional[str]) -> None:
        self.completion(callback_url, None)

    def fail(self, exc: BaseException) -> None:
        self.completion(None, exc)


class FakePlatform(Platform):
    """Platform that records every call and confirms according to its knobs.

    ``launch_result`` / ``overlay_result`` of ``None`` mean the platform
    never fires the confirmation callback.
    """

    def __init__(self) -> None:
        self.openable = True
        self.launch_result: Optional[bool] = True
        self.open_error: Optional[Exception] = None
        self.view: Any = "topmost-view"
        self.overlay_result: Optional[bool] = True
        self.overlay_error: Optional[Exception] = None
        self.window: Any = "key-window"
        self.create_error: Optional[Exception] = None
        self.auth_start_result = True
        self.auth_start_error: Optional[Exception] = None

        self.opened: list[str] = []
        self.presented: list[tuple[str, Any]] = []
        self.sessions: list[FakeAuthSession] = []

    @property
    def name(self) -> str:
        return "fake"

    def can_open_url(self, url: str) -> bool:
        return self.openable

    def open_url(self, url: str, on_complete: LaunchCallback) -> None:
        if self.open_error is not None:
            raise self.open_error
        self.opened.append(url)
        if self.launch_result is not None:
            on_complete(self.launch_result)

    def topmost_view(self) -> Optional[Any]:
        return self.view

    def present_in_app(self, url: str, anchor: Any, on_presented: LaunchCallback) -> None:
        if self.overlay_error is not None:
            raise self.overlay_error
        self.presented.append((url, anchor))
        if self.overlay_result is not None:
            on_presented(self.overlay_result)

    def foreground_window(self) -> Optional[Any]:
        return self.window

    def create_auth_session(
        self,
        url: str,
        callback_scheme: str,
        anchor: Any,
        completion: AuthCompletion,
    ) -> FakeAuthSession:
        if self.create_error is not None:
            raise self.create_error
        session = FakeAuthSession(self, url, callback_scheme, anchor, completion)
        self.sessions.append(session)
        return session


@pytest.fixture
def fake_platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def ui_thread() -> UIThread:
    """A UI thread that is shut down after the test."""
    thread = UIThread(name="test-ui")
    yield thread
    thread.shutdown(wait=True)


@pytest.fixture
def flush_ui(ui_thread: UIThread):
    """Return a callable that blocks until the UI thread has drained its queue."""

    def _flush() -> None:
        ui_thread.submit(lambda: None).result(timeout=5)

    return _flush


@pytest.fixture
def router() -> RecordingDeepLinkRouter:
    return RecordingDeepLinkRouter()


@pytest.fixture
def settings() -> BridgeSettings:
    """Settings with a short confirmation wait so timeout tests stay fast."""
    return BridgeSettings(confirm_timeout=0.2)


@pytest.fixture
def context(
    settings: BridgeSettings,
    fake_platform: FakePlatform,
    router: RecordingDeepLinkRouter,
    ui_thread: UIThread,
) -> BridgeContext:
    """A bridge context around the fake platform, closed after the test."""
    ctx = BridgeContext(settings, platform=fake_platform, router=router, ui_thread=ui_thread)
    yield ctx
    ctx.close()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Forces XDG path resolution, points XDG_CONFIG_HOME and XDG_DATA_HOME
    at subdirectories of tmp_path so that tests never touch real user
    config, and clears every BROWSERBRIDGE_* environment variable.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("browserbridge.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "BROWSERBRIDGE_DEEPLINK_SCHEME",
        "BROWSERBRIDGE_HOST",
        "BROWSERBRIDGE_PORT",
        "BROWSERBRIDGE_CSRF_TOKEN",
        "BROWSERBRIDGE_CONFIRM_TIMEOUT",
        "BROWSERBRIDGE_URL",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless PLAIN output manager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
