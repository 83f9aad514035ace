"""Typer application factory and CLI entry point for browserbridge.

This module wires together the top-level Typer application and registers
the built-in sub-commands: ``serve`` runs the host bridge, ``call``,
``open``, ``in-app``, ``auth`` and ``deeplink`` talk to a running one, and
``config`` manages the persisted settings.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from browserbridge import __version__
from browserbridge.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="browserbridge",
    help="Open URLs from a web view through its native host bridge.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"browserbridge {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    url: Optional[str] = typer.Option(
        None, "--url", help="Base URL of the host bridge (default: from settings)."
    ),
    csrf_token: Optional[str] = typer.Option(
        None, "--csrf-token", help="Anti-forgery token sent with bridge calls."
    ),
    page: Optional[Path] = typer.Option(
        None,
        "--page",
        exists=True,
        dir_okay=False,
        readable=True,
        help="HTML page whose csrf-token meta tag supplies the token.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~browserbridge.output.OutputManager`
    from CLI flags and stores connection options in ``ctx.obj`` for the
    client commands.
    """
    from browserbridge.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["url"] = url
    ctx.obj["csrf_token"] = csrf_token
    ctx.obj["page"] = page
    ctx.obj["verbose"] = verbose


def _register_commands() -> None:
    from browserbridge.commands.call import (
        auth_command,
        call_command,
        deeplink_command,
        in_app_command,
        open_command,
    )
    from browserbridge.commands.config import config_app
    from browserbridge.commands.serve import serve_command

    app.command("serve")(serve_command)
    app.command("call")(call_command)
    app.command("open")(open_command)
    app.command("in-app")(in_app_command)
    app.command("auth")(auth_command)
    app.command("deeplink")(deeplink_command)
    app.add_typer(config_app, name="config", help="Settings management.")


_register_commands()


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from browserbridge.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``browserbridge`` console script.

    :class:`~browserbridge.exceptions.BrowserBridgeError` instances exit
    cleanly with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from browserbridge.exceptions import BrowserBridgeError
        from browserbridge.output import error

        if isinstance(exc, BrowserBridgeError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
