"""FastAPI application exposing the bridge to the web layer.

Routes:

* ``POST {settings.endpoint}`` (default ``/_native/api/call``) -- the bridge
  call endpoint. Always answers with a JSON envelope; call failures are
  reported inside it with HTTP 200.
* ``POST /_native/deeplink`` -- delivers an OS deep link
  (``{"url": ...}``) to the active auth session or the deep-link router.
* ``GET /_native/health`` -- liveness probe listing registered functions.

Use :func:`create_app` with a :class:`~browserbridge.context.BridgeContext`;
the context is closed when the application shuts down.
"""

from __future__ import annotations

import hmac
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from browserbridge import __version__
from browserbridge.client.csrf import CSRF_HEADER
from browserbridge.context import BridgeContext
from browserbridge.exceptions import InvalidParameters
from browserbridge.handlers.base import require_url
from browserbridge.models import BridgeResponse
from browserbridge.output import info, warning

DEEPLINK_PATH = "/_native/deeplink"
HEALTH_PATH = "/_native/health"

# Laravel's CSRF-mismatch status.
CSRF_MISMATCH_STATUS = 419


class DeepLinkBody(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        try:
            return require_url({"url": value})
        except InvalidParameters as exc:
            raise ValueError(exc.message) from exc


def _envelope(response: BridgeResponse, status_code: int = 200) -> JSONResponse:
    return JSONResponse(response.to_wire(), status_code=status_code)


def _csrf_ok(context: BridgeContext, request: Request) -> bool:
    expected = context.settings.csrf_token
    if not expected:
        return True
    presented = request.headers.get(CSRF_HEADER, "")
    return hmac.compare_digest(presented.encode(), expected.encode())


def create_app(context: BridgeContext) -> FastAPI:
    """Build the bridge application around *context*."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        info(
            f"Bridge ready on {context.settings.endpoint} "
            f"({context.platform.name} platform, {len(context.registry)} functions)"
        )
        try:
            yield
        finally:
            context.close()

    app = FastAPI(title="browserbridge", version=__version__, lifespan=lifespan)
    app.state.context = context

    @app.post(context.settings.endpoint)
    async def call(request: Request) -> JSONResponse:
        if not _csrf_ok(context, request):
            warning("Rejected bridge call with a missing or invalid CSRF token")
            return _envelope(BridgeResponse.error("CSRF token mismatch"), CSRF_MISMATCH_STATUS)
        try:
            payload: Any = json.loads(await request.body())
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _envelope(BridgeResponse.error("Invalid request: body is not valid JSON"))
        response = await context.dispatcher.dispatch_raw_async(payload)
        return _envelope(response)

    @app.post(DEEPLINK_PATH)
    def deeplink(body: DeepLinkBody, request: Request) -> Any:
        if not _csrf_ok(context, request):
            return JSONResponse(
                BridgeResponse.error("CSRF token mismatch").to_wire(),
                status_code=CSRF_MISMATCH_STATUS,
            )
        handled_by = context.deliver_deep_link(body.url)
        return {"status": "ok", "data": {"handled_by": handled_by}}

    @app.get(HEALTH_PATH)
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "platform": context.platform.name,
            "functions": context.registry.names(),
            "auth_session": context.sessions.state.value,
        }

    return app
