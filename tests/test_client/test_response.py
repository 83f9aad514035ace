"""Tests for request building and envelope decoding."""

from __future__ import annotations

import httpx
import pytest

from browserbridge.client.response import (
    DEFAULT_FAILURE_MESSAGE,
    build_request,
    unwrap_envelope,
)
from browserbridge.exceptions import BridgeCallError, InvalidParameters


def _response(status_code: int = 200, **kwargs) -> httpx.Response:
    return httpx.Response(
        status_code,
        request=httpx.Request("POST", "http://bridge.test/_native/api/call"),
        **kwargs,
    )


class TestBuildRequest:
    def test_builds_request(self) -> None:
        request = build_request("Browser.Open", {"url": "https://example.com"})
        assert request.method == "Browser.Open"
        assert request.params == {"url": "https://example.com"}

    def test_none_params(self) -> None:
        assert build_request("Browser.Open", None).params == {}

    def test_bad_method(self) -> None:
        with pytest.raises(InvalidParameters, match="Namespace.Method"):
            build_request("Open", {})

    def test_non_primitive_param(self) -> None:
        with pytest.raises(InvalidParameters, match="Invalid bridge call"):
            build_request("Browser.Open", {"url": {"href": "https://example.com"}})


class TestUnwrapEnvelope:
    def test_ok_returns_data(self) -> None:
        response = _response(json={"status": "ok", "data": {"success": True}})
        assert unwrap_envelope(response) == {"success": True}

    def test_ok_without_data_returns_empty(self) -> None:
        assert unwrap_envelope(_response(json={"status": "ok"})) == {}

    def test_error_with_message(self) -> None:
        response = _response(json={"status": "error", "message": "Unknown method: Browser.DoesNotExist"})
        with pytest.raises(BridgeCallError, match="Unknown method: Browser.DoesNotExist"):
            unwrap_envelope(response)

    @pytest.mark.parametrize("body", [{"status": "error"}, {"status": "error", "message": ""}])
    def test_error_without_message_uses_default(self, body: dict) -> None:
        with pytest.raises(BridgeCallError) as exc_info:
            unwrap_envelope(_response(json=body))
        assert exc_info.value.message == DEFAULT_FAILURE_MESSAGE == "Native call failed"

    def test_non_json_body(self) -> None:
        response = _response(500, text="<html>Server Error</html>")
        with pytest.raises(BridgeCallError, match="HTTP 500"):
            unwrap_envelope(response)

    def test_non_object_body(self) -> None:
        with pytest.raises(BridgeCallError, match="expected an object"):
            unwrap_envelope(_response(json=["ok"]))
