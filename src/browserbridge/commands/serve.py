"""``browserbridge serve`` -- run the host bridge server."""

from __future__ import annotations

from typing import Optional

import typer

from browserbridge.output import error, info


def serve_command(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind."),
    port: Optional[int] = typer.Option(None, "--port", help="Port to bind."),
    deeplink_scheme: Optional[str] = typer.Option(
        None, "--deeplink-scheme", help="Callback scheme for OAuth redirects."
    ),
    csrf_token: Optional[str] = typer.Option(
        None, "--csrf-token", help="Require this token in X-CSRF-TOKEN."
    ),
    browser: Optional[str] = typer.Option(
        None, "--browser", help="webbrowser controller name (default: system browser)."
    ),
    no_in_app: bool = typer.Option(
        False, "--no-in-app", help="Send Browser.OpenInApp straight to the system browser."
    ),
) -> None:
    """Run the host bridge on ``http://HOST:PORT``.

    Settings are resolved from flags, ``BROWSERBRIDGE_*`` environment
    variables, the app ``.env`` file and ``config.json``, in that order.

    Example::

        browserbridge serve --port 8765 --deeplink-scheme myapp
    """
    import uvicorn

    from browserbridge.config import load_settings
    from browserbridge.context import BridgeContext
    from browserbridge.exceptions import ConfigError
    from browserbridge.platform import DesktopPlatform
    from browserbridge.server import create_app

    try:
        settings = load_settings(
            {
                "host": host,
                "port": port,
                "deeplink_scheme": deeplink_scheme,
                "csrf_token": csrf_token,
                "in_app_enabled": False if no_in_app else None,
            }
        )
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    context = BridgeContext(settings, platform=DesktopPlatform(browser))
    verbose = bool((ctx.obj or {}).get("verbose"))
    info(f"Serving bridge on http://{settings.host}:{settings.port}{settings.endpoint}")
    try:
        uvicorn.run(
            create_app(context),
            host=settings.host,
            port=settings.port,
            log_level="info" if verbose else "warning",
        )
    finally:
        context.close()
