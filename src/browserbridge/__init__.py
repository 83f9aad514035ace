"""browserbridge -- open URLs from a web view through its native host.

A web application running inside a native shell asks the host to open a
URL in one of three presentation modes: the system browser, an embedded
in-app browser overlay, or an OAuth authentication session whose callback
is routed back into the app as a deep link.

The package holds both ends of the bridge::

    web side                       host side
    --------                       ---------
    client.Browser   --POST-->     server (FastAPI)
    client.BridgeClient            dispatch.Dispatcher -> handlers.Browser*
                                   sessions.AuthSessionRegistry -> deeplink

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic wire and configuration models.
    config: XDG-aware settings resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting and diagnostics with Rich support.
"""

__version__ = "0.1.0"
