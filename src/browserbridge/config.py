"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for browserbridge:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.browserbridge/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **Settings file** -- A single :class:`~browserbridge.models.BridgeSettings`
  JSON file, read by :func:`load_settings_file` and written by
  :func:`save_settings`.
* **App environment file** -- ``<data_dir>/app/.env``, the key-value file the
  bundled web application ships with. Only ``NATIVEPHP_DEEPLINK_SCHEME`` is
  read from it. See :func:`read_env_file`.
* **Precedence resolution** -- :func:`load_settings` merges explicit
  overrides, environment variables, the app ``.env`` file and the settings
  file into the typed settings object the host runs with.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from dotenv import dotenv_values
from pydantic import ValidationError

from browserbridge.client.csrf import extract_csrf_token
from browserbridge.exceptions import ConfigError
from browserbridge.models import BridgeSettings, ClientConfig
from browserbridge.output import debug

_APP_NAME = "browserbridge"
_CONFIG_FILENAME = "config.json"
_APP_ENV_PATH = ("app", ".env")

DEEPLINK_ENV_KEY = "NATIVEPHP_DEEPLINK_SCHEME"

# Environment variable -> BridgeSettings field.
_ENV_OVERRIDES = {
    "BROWSERBRIDGE_DEEPLINK_SCHEME": "deeplink_scheme",
    "BROWSERBRIDGE_HOST": "host",
    "BROWSERBRIDGE_PORT": "port",
    "BROWSERBRIDGE_CSRF_TOKEN": "csrf_token",
    "BROWSERBRIDGE_CONFIRM_TIMEOUT": "confirm_timeout",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/browserbridge/`` (default
    ``~/.config/browserbridge/``). On macOS/Windows: ``~/.browserbridge/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (app bundle, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/browserbridge/`` (default
    ``~/.local/share/browserbridge/``). On macOS/Windows:
    ``~/.browserbridge/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_app_env_path() -> Path:
    """Path of the bundled web application's ``.env`` file (may not exist)."""
    return get_data_dir().joinpath(*_APP_ENV_PATH)


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up and the original left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Settings file ---


def _settings_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_settings_file() -> dict[str, Any]:
    """Load the raw settings dict from ``config.json``.

    Returns:
        The parsed JSON object, or an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = _settings_path()
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid settings file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid settings file at {path}: expected a JSON object")
    return data


def save_settings(settings: BridgeSettings) -> Path:
    """Persist *settings* atomically to ``config.json`` and return its path."""
    path = _settings_path()
    data = settings.model_dump(mode="json", exclude_none=True)
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


# --- App .env file ---


def read_env_file(path: Path) -> dict[str, str]:
    """Parse a ``KEY=VALUE`` environment file with python-dotenv.

    Keys declared without a value are dropped. A missing or unreadable
    file yields an empty dict.
    """
    if not path.is_file():
        return {}
    try:
        values = dotenv_values(path, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        debug(f"Could not read app env file {path}: {exc}")
        return {}
    return {key: value for key, value in values.items() if value is not None}


def resolve_deeplink_scheme(env_path: Optional[Path] = None) -> Optional[str]:
    """Return the deep-link scheme declared in the app ``.env`` file, if any.

    Args:
        env_path: File to read. Defaults to :func:`get_app_env_path`.

    Returns:
        The non-empty ``NATIVEPHP_DEEPLINK_SCHEME`` value, or ``None`` when the
        file is absent, unreadable, or lacks the key.
    """
    path = env_path if env_path is not None else get_app_env_path()
    if not path.is_file():
        debug(f"No app env file at {path}")
        return None
    value = read_env_file(path).get(DEEPLINK_ENV_KEY, "")
    if not value:
        debug(f"No {DEEPLINK_ENV_KEY} in {path}")
        return None
    debug(f"Found deeplink scheme in {path}: {value}")
    return value


# --- Precedence resolution ---


def load_settings(
    overrides: Optional[dict[str, Any]] = None,
    env_path: Optional[Path] = None,
) -> BridgeSettings:
    """Resolve host settings with the full precedence chain.

    Precedence (high to low):
        1. *overrides* (CLI flags); ``None`` values are ignored
        2. Environment variables (``BROWSERBRIDGE_DEEPLINK_SCHEME``, ...)
        3. App ``.env`` file (``NATIVEPHP_DEEPLINK_SCHEME`` only)
        4. ``config.json`` in the config directory
        5. Defaults

    Returns:
        A validated :class:`~browserbridge.models.BridgeSettings`.

    Raises:
        ConfigError: If the settings file is invalid or the merged values
            fail validation.
    """
    data = load_settings_file()

    scheme = resolve_deeplink_scheme(env_path)
    if scheme:
        data["deeplink_scheme"] = scheme

    for env_var, field in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[field] = value

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    try:
        return BridgeSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid bridge settings: {exc}") from exc


def load_client_config(
    base_url: Optional[str] = None,
    csrf_token: Optional[str] = None,
    page_html: Optional[str] = None,
) -> ClientConfig:
    """Build a :class:`~browserbridge.models.ClientConfig` for CLI calls.

    The base URL defaults to ``BROWSERBRIDGE_URL`` and then to the host and
    port the local server would bind with the current settings.

    The CSRF token is, in order: *csrf_token*, the ``csrf-token`` meta tag
    of *page_html* when the page publishes one, then the settings value.
    """
    settings = load_settings()
    url = base_url or os.environ.get("BROWSERBRIDGE_URL") or f"http://{settings.host}:{settings.port}"
    token = csrf_token
    if not token and page_html is not None:
        token = extract_csrf_token(page_html)
        if token is None:
            debug("Page has no csrf-token meta tag")
    return ClientConfig(
        base_url=url,
        endpoint=settings.endpoint,
        csrf_token=token or settings.csrf_token,
    )
