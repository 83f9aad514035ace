"""Config commands -- view and modify the persisted bridge settings.

Provides the ``browserbridge config`` sub-command group for reading,
updating and resetting ``config.json``
(:class:`~browserbridge.models.BridgeSettings`).
"""

from __future__ import annotations

import typer

from browserbridge.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective settings after every override is applied.

    Example::

        browserbridge config show --json
    """
    from browserbridge.config import get_config_dir, load_settings
    from browserbridge.exceptions import ConfigError

    try:
        settings = load_settings()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(settings.model_dump(mode="json"))


@config_app.command("path")
def config_path() -> None:
    """Print where settings and the app ``.env`` file are read from."""
    from browserbridge.config import get_app_env_path, get_config_dir

    format_response(
        {
            "settings": str(get_config_dir() / "config.json"),
            "app_env": str(get_app_env_path()),
        }
    )


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Setting name, e.g. 'deeplink_scheme'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a value in ``config.json``.

    The value is validated against
    :class:`~browserbridge.models.BridgeSettings` before saving, which also
    coerces it to the field's type.

    Example::

        browserbridge config set deeplink_scheme myapp
        browserbridge config set confirm_timeout 3.5
    """
    from browserbridge.config import load_settings_file, save_settings
    from browserbridge.exceptions import ConfigError
    from browserbridge.models import BridgeSettings

    if key not in BridgeSettings.model_fields:
        error(f"Unknown setting: {key}")
        raise typer.Exit(code=2)

    try:
        data = load_settings_file()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data[key] = value

    try:
        settings = BridgeSettings.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_settings(settings)
    success(f"Set {key} = {getattr(settings, key)}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset ``config.json`` to defaults."""
    from browserbridge.config import save_settings
    from browserbridge.models import BridgeSettings

    if not force and not typer.confirm("Reset all settings to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_settings(BridgeSettings())
    success("Settings reset to defaults.")
