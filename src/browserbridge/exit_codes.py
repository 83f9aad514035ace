"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~browserbridge.exceptions.BrowserBridgeError`
subclass. Shell wrappers can inspect the exit code of a ``browserbridge``
invocation to tell a rejected bridge call from a transport failure without
parsing stderr.

Example::

    $ browserbridge open https://example.com
    $ echo $?
    6   # EXIT_CONNECTION_ERROR -- the host bridge is not listening
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_PARAMETERS = 2
"""The bridge call was made with missing or malformed parameters."""

EXIT_EXECUTION_FAILED = 5
"""The host accepted the call but the platform failed to carry it out."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
