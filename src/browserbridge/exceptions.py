"""Exception hierarchy for browserbridge.

All exceptions inherit from :class:`BrowserBridgeError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`browserbridge.exit_codes`. The top-level error handler in
:func:`browserbridge.app.main` catches ``BrowserBridgeError`` and exits with
the appropriate code.

The two :class:`BridgeError` variants are the error taxonomy of the bridge
protocol itself. Handlers raise them, and the dispatcher turns them into
``{"status": "error", "message": reason}`` envelopes.

Subclass hierarchy::

    BrowserBridgeError (exit 1)
    +-- BridgeError
    |   +-- InvalidParameters (exit 2)
    |   +-- ExecutionFailed   (exit 5)
    +-- BridgeCallError       (exit 5)
    +-- ConnectionError_      (exit 6)
    +-- ConfigError           (exit 1)
    +-- RegistrationError     (exit 1)
    +-- PlatformError         (exit 5)
        +-- AuthSessionCancelled
"""

from browserbridge.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_EXECUTION_FAILED,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_PARAMETERS,
)


class BrowserBridgeError(Exception):
    """Base exception for all browserbridge errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code

    @property
    def message(self) -> str:
        """The human-readable message the error was created with."""
        return str(self)


class BridgeError(BrowserBridgeError):
    """Base for errors raised by bridge functions.

    The dispatcher catches every ``BridgeError`` and reports its message as
    the ``message`` field of an error envelope.
    """

    exit_code = EXIT_EXECUTION_FAILED


class InvalidParameters(BridgeError):
    """The caller supplied missing or malformed input. Never retried."""

    exit_code = EXIT_INVALID_PARAMETERS


class ExecutionFailed(BridgeError):
    """The platform failed to launch or present what was asked for."""

    exit_code = EXIT_EXECUTION_FAILED


class BridgeCallError(BrowserBridgeError):
    """Raised by the bridge client when the host answers with ``status: "error"``."""

    exit_code = EXIT_EXECUTION_FAILED


class ConnectionError_(BrowserBridgeError):
    """Raised on network-level failures talking to the host bridge.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(BrowserBridgeError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class RegistrationError(BrowserBridgeError):
    """Raised when a bridge function is registered under an invalid or taken name."""

    exit_code = EXIT_GENERIC_FAILURE


class PlatformError(BrowserBridgeError):
    """Raised by a :class:`~browserbridge.platform.base.Platform` when an SDK call fails."""

    exit_code = EXIT_EXECUTION_FAILED


class AuthSessionCancelled(PlatformError):
    """Delivered to an auth session's completion callback when the user dismisses it."""
