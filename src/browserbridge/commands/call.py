"""Client commands -- make bridge calls against a running host.

These commands are the CLI face of :mod:`browserbridge.client`: ``call``
invokes any registered function, ``open`` / ``in-app`` / ``auth`` go
through the :class:`~browserbridge.client.Browser` facade, and ``deeplink``
forwards an OS deep link to the host (register it as the desktop handler
for the callback scheme).
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer

from browserbridge.client import BridgeClient, Browser
from browserbridge.exceptions import BrowserBridgeError
from browserbridge.models import ClientConfig
from browserbridge.output import error, format_response, success, warning


def _client_config(ctx: typer.Context) -> ClientConfig:
    from browserbridge.config import load_client_config

    obj = ctx.obj or {}
    page = obj.get("page")
    page_html = page.read_text(encoding="utf-8") if page is not None else None
    return load_client_config(
        base_url=obj.get("url"),
        csrf_token=obj.get("csrf_token"),
        page_html=page_html,
    )


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Turn bridge errors into a clean message and the error's exit code."""
    try:
        yield
    except BrowserBridgeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def parse_params(pairs: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs into a params mapping.

    Values that decode as JSON scalars (``true``, ``42``, ``"quoted"``,
    ``null``) keep their JSON type; anything else is passed as a string.

    Raises:
        typer.BadParameter: If a pair has no ``=`` or an empty key.
    """
    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {pair!r}", param_hint="--param")
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        if isinstance(value, (dict, list)):
            value = raw
        params[key] = value
    return params


def call_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="Namespaced function, e.g. 'Browser.Open'."),
    param: Optional[list[str]] = typer.Option(
        None, "--param", "-p", help="Parameter as key=value (repeatable)."
    ),
) -> None:
    """Invoke a bridge function and print the data it returns.

    Example::

        browserbridge call Browser.Open -p url=https://example.com
    """
    params = parse_params(param or [])
    with _reported_errors(), BridgeClient(_client_config(ctx)) as client:
        data = client.call(method, params)
    format_response(data)


def _browser_command(ctx: typer.Context, action: str, url: str) -> None:
    with _reported_errors(), BridgeClient(_client_config(ctx)) as client:
        browser = Browser(client)
        opened = getattr(browser, action)(url)
    if opened:
        success(f"Host confirmed {url}")
    else:
        warning(f"Host did not confirm {url} in time")
    format_response({"success": opened})


def open_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="URL to open in the system browser."),
) -> None:
    """Open a URL in the host's system browser."""
    _browser_command(ctx, "open", url)


def in_app_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="URL to open in the in-app browser."),
) -> None:
    """Open a URL in the host's in-app browser overlay."""
    _browser_command(ctx, "in_app", url)


def auth_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Authorization URL of the OAuth provider."),
) -> None:
    """Start an OAuth authentication session on the host.

    Returns as soon as the session has been started; the provider's
    redirect is routed to the host's deep-link router.
    """
    _browser_command(ctx, "auth", url)


def deeplink_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Deep link received from the OS, e.g. 'native://auth?code=...'."),
) -> None:
    """Deliver a deep link to the running host."""
    with _reported_errors(), BridgeClient(_client_config(ctx)) as client:
        handled_by = client.deliver_deep_link(url)
    format_response({"handled_by": handled_by})
