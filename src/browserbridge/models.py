"""Canonical Pydantic models shared across all browserbridge modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Wire models** -- the JSON documents exchanged between the web layer and
the host bridge:
    :class:`BridgeRequest`, :class:`BridgeResponse` and
    :class:`ResponseStatus`.

**Configuration models** -- serialised as JSON in the user's config
directory or built from environment variables:
    :class:`BridgeSettings` (host side) and :class:`ClientConfig`
    (web side).

:class:`SessionState` describes the lifecycle of an authentication session
and is shared by :mod:`browserbridge.sessions` and the CLI.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
import re
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_ENDPOINT = "/_native/api/call"
DEFAULT_DEEPLINK_SCHEME = "native"
DEFAULT_CONFIRM_TIMEOUT = 2.0
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8765

_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
METHOD_PATTERN = re.compile(rf"^({_IDENTIFIER})\.({_IDENTIFIER})$")

ParamValue = Union[bool, int, float, str, None]


# --- Wire models ---


class BridgeRequest(BaseModel):
    """A single call from the web layer into a host bridge function.

    Requests are immutable and built once per call. ``method`` is a dotted
    ``Namespace.Method`` identifier such as ``"Browser.OpenAuth"``;
    ``params`` maps parameter names to JSON primitives.

    Example::

        BridgeRequest(method="Browser.Open", params={"url": "https://example.com"})
    """

    model_config = ConfigDict(frozen=True)

    method: str = Field(description="Namespaced function name, e.g. 'Browser.Open'")
    params: dict[str, ParamValue] = Field(default_factory=dict)

    @field_validator("method")
    @classmethod
    def _check_method(cls, value: str) -> str:
        value = value.strip()
        if not METHOD_PATTERN.match(value):
            raise ValueError(
                f"method must look like 'Namespace.Method', got {value!r}"
            )
        return value

    @property
    def namespace(self) -> str:
        """The part of :attr:`method` before the dot (``"Browser"``)."""
        return self.method.split(".", 1)[0]

    @property
    def name(self) -> str:
        """The part of :attr:`method` after the dot (``"Open"``)."""
        return self.method.split(".", 1)[1]


class ResponseStatus(str, enum.Enum):
    """Outcome of a bridge call as reported in the ``status`` field."""

    OK = "ok"
    ERROR = "error"


class BridgeResponse(BaseModel):
    """Uniform envelope returned for every bridge call.

    ``data`` is present if and only if ``status`` is ``ok``; ``message`` is
    present if and only if ``status`` is ``error``. Use the :meth:`ok` and
    :meth:`error` constructors rather than building instances by hand, and
    :meth:`to_wire` to serialise without the absent field.
    """

    status: ResponseStatus
    data: Optional[dict[str, Any]] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def _check_shape(self) -> BridgeResponse:
        if self.status == ResponseStatus.OK:
            if self.data is None or self.message is not None:
                raise ValueError("an 'ok' response carries data and no message")
        else:
            if not self.message or self.data is not None:
                raise ValueError("an 'error' response carries a message and no data")
        return self

    @classmethod
    def ok(cls, data: dict[str, Any]) -> BridgeResponse:
        return cls(status=ResponseStatus.OK, data=dict(data))

    @classmethod
    def error(cls, message: str) -> BridgeResponse:
        return cls(status=ResponseStatus.ERROR, message=message)

    @property
    def is_ok(self) -> bool:
        return self.status == ResponseStatus.OK

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict sent over HTTP."""
        return self.model_dump(mode="json", exclude_none=True)


# --- Session state ---


class SessionState(str, enum.Enum):
    """Lifecycle of an authentication session.

    ``IDLE -> STARTING -> ACTIVE -> {COMPLETED, CANCELLED, ERRORED}``. A
    session superseded while ``STARTING`` or ``ACTIVE`` goes straight to
    ``CANCELLED``.
    """

    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.COMPLETED, SessionState.CANCELLED, SessionState.ERRORED)


# --- Configuration models ---


class BridgeSettings(BaseModel):
    """Host-side settings, persisted at ``~/.config/browserbridge/config.json``.

    Loaded once at startup by :func:`~browserbridge.config.load_settings`,
    which layers the app ``.env`` file and ``BROWSERBRIDGE_*`` environment
    variables over this file. See that function for the precedence chain.
    """

    deeplink_scheme: str = Field(
        default=DEFAULT_DEEPLINK_SCHEME,
        description="URL scheme the OAuth provider redirects back to",
    )
    host: str = Field(default=DEFAULT_HOST, description="Interface the bridge server binds")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    endpoint: str = Field(default=DEFAULT_ENDPOINT, description="Path of the call endpoint")
    confirm_timeout: float = Field(
        default=DEFAULT_CONFIRM_TIMEOUT,
        gt=0,
        description="Seconds to wait for the platform to confirm a launch",
    )
    csrf_token: Optional[str] = Field(
        default=None, description="When set, calls must present it in X-CSRF-TOKEN"
    )
    in_app_enabled: bool = Field(
        default=True, description="Try the embedded overlay before the system browser"
    )

    @field_validator("deeplink_scheme")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        value = value.strip().strip("\"'").rstrip(":/")
        if not re.match(r"^[A-Za-z][A-Za-z0-9+.\-]*$", value):
            raise ValueError(f"invalid URL scheme: {value!r}")
        return value

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("endpoint must start with '/'")
        return value


class ClientConfig(BaseModel):
    """Web-side settings used by :class:`~browserbridge.client.BridgeClient`."""

    base_url: str = Field(default=f"http://{DEFAULT_HOST}:{DEFAULT_PORT}")
    endpoint: str = Field(default=DEFAULT_ENDPOINT)
    timeout: float = Field(default=30.0, description="Transport timeout in seconds")
    verify_ssl: bool = Field(default=True)
    csrf_token: Optional[str] = Field(
        default=None, description="Anti-forgery token sent as X-CSRF-TOKEN"
    )
