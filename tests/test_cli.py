"""Tests for the browserbridge command-line interface."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest
import typer

from browserbridge import __version__
from browserbridge.app import app
from browserbridge.client import BridgeClient
from browserbridge.commands.call import parse_params
from browserbridge.config import get_config_dir, load_settings_file


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _ScriptedHost:
    """Answers CLI bridge calls with ``body`` and records each request."""

    def __init__(self) -> None:
        self.body: Any = {"status": "ok", "data": {"success": True}}
        self.status_code = 200
        self.error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_json(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def host(isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> _ScriptedHost:
    scripted = _ScriptedHost()
    transport = httpx.MockTransport(scripted.handler)
    monkeypatch.setattr(
        "browserbridge.commands.call.BridgeClient",
        lambda config: BridgeClient(config, transport=transport),
    )
    return scripted


# ---------------------------------------------------------------------------
# Root options
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"browserbridge {__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "serve" in result.output
        assert "open" in result.output


# ---------------------------------------------------------------------------
# Param parsing
# ---------------------------------------------------------------------------


class TestParseParams:
    def test_json_scalars_keep_type(self) -> None:
        assert parse_params(["flag=true", "count=3", "ratio=0.5", "none=null", 'quoted="7"']) == {
            "flag": True,
            "count": 3,
            "ratio": 0.5,
            "none": None,
            "quoted": "7",
        }

    def test_other_values_are_strings(self) -> None:
        assert parse_params(["url=https://example.com/?a=b", "empty=", "obj={}", "arr=[1]"]) == {
            "url": "https://example.com/?a=b",
            "empty": "",
            "obj": "{}",
            "arr": "[1]",
        }

    @pytest.mark.parametrize("pair", ["novalue", "=value", " =x"])
    def test_malformed_pair(self, pair: str) -> None:
        with pytest.raises(typer.BadParameter):
            parse_params([pair])


# ---------------------------------------------------------------------------
# Client commands
# ---------------------------------------------------------------------------


class TestCallCommand:
    def test_call_prints_data(self, cli_runner, host: _ScriptedHost) -> None:
        result = cli_runner.invoke(
            app, ["--json", "-q", "call", "Browser.Open", "-p", "url=https://example.com"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"success": True}
        assert host.last_json == {"method": "Browser.Open", "params": {"url": "https://example.com"}}
        assert host.requests[0].url == "http://127.0.0.1:8765/_native/api/call"

    def test_url_and_token_options(self, cli_runner, host: _ScriptedHost) -> None:
        result = cli_runner.invoke(
            app,
            ["--url", "http://bridge.test:9000", "--csrf-token", "tok", "-q", "call", "Browser.Open", "-p", "url=https://a.test"],
        )
        assert result.exit_code == 0, result.output
        request = host.requests[0]
        assert request.url == "http://bridge.test:9000/_native/api/call"
        assert request.headers["X-CSRF-TOKEN"] == "tok"

    def test_token_read_from_page(self, cli_runner, host: _ScriptedHost, tmp_path) -> None:
        page = tmp_path / "index.html"
        page.write_text('<html><head><meta name="csrf-token" content="page-tok"></head></html>')
        result = cli_runner.invoke(
            app, ["--page", str(page), "-q", "call", "Browser.Open", "-p", "url=https://a.test"]
        )
        assert result.exit_code == 0, result.output
        assert host.requests[0].headers["X-CSRF-TOKEN"] == "page-tok"

    def test_error_envelope_exits_with_execution_failure(self, cli_runner, host: _ScriptedHost) -> None:
        host.body = {"status": "error", "message": "Unknown method: Browser.DoesNotExist"}
        result = cli_runner.invoke(app, ["--no-color", "call", "Browser.DoesNotExist"])
        assert result.exit_code == 5
        assert "Unknown method: Browser.DoesNotExist" in result.output

    def test_connection_failure_exit_code(self, cli_runner, host: _ScriptedHost) -> None:
        host.error = httpx.ConnectError("connection refused")
        result = cli_runner.invoke(app, ["--no-color", "call", "Browser.Open", "-p", "url=https://a.test"])
        assert result.exit_code == 6
        assert "connection refused" in result.output

    def test_malformed_method_exit_code(self, cli_runner, host: _ScriptedHost) -> None:
        result = cli_runner.invoke(app, ["--no-color", "call", "Open"])
        assert result.exit_code == 2
        assert host.requests == []

    def test_bad_param_is_usage_error(self, cli_runner, host: _ScriptedHost) -> None:
        result = cli_runner.invoke(app, ["call", "Browser.Open", "-p", "url"])
        assert result.exit_code == 2
        assert host.requests == []


class TestBrowserCommands:
    @pytest.mark.parametrize(
        ("command", "method"),
        [("open", "Browser.Open"), ("in-app", "Browser.OpenInApp"), ("auth", "Browser.OpenAuth")],
    )
    def test_commands_call_browser_namespace(self, cli_runner, host: _ScriptedHost, command: str, method: str) -> None:
        result = cli_runner.invoke(app, ["--json", "-q", command, "https://example.com"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"success": True}
        assert host.last_json == {"method": method, "params": {"url": "https://example.com"}}

    def test_unconfirmed_launch_warns(self, cli_runner, host: _ScriptedHost) -> None:
        host.body = {"status": "ok", "data": {"success": False}}
        result = cli_runner.invoke(app, ["--json", "--no-color", "open", "https://example.com"])
        assert result.exit_code == 0
        assert "did not confirm" in result.output
        assert '"success": false' in result.output

    def test_rejected_url(self, cli_runner, host: _ScriptedHost) -> None:
        host.body = {"status": "error", "message": "Invalid URL format"}
        result = cli_runner.invoke(app, ["--no-color", "open", "not-a-url"])
        assert result.exit_code == 5
        assert "Invalid URL format" in result.output


class TestDeepLinkCommand:
    def test_delivers_link(self, cli_runner, host: _ScriptedHost) -> None:
        host.body = {"status": "ok", "data": {"handled_by": "auth_session"}}
        result = cli_runner.invoke(app, ["--json", "-q", "deeplink", "native://auth?code=abc"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"handled_by": "auth_session"}
        assert host.requests[0].url.path == "/_native/deeplink"
        assert host.last_json == {"url": "native://auth?code=abc"}

    def test_rejected_link(self, cli_runner, host: _ScriptedHost) -> None:
        host.status_code = 422
        host.body = {"detail": []}
        result = cli_runner.invoke(app, ["--no-color", "deeplink", "nonsense"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


class TestServeCommand:
    def test_runs_uvicorn_with_resolved_settings(
        self, cli_runner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        captured: dict[str, Any] = {}

        def _fake_run(application: Any, **kwargs: Any) -> None:
            captured["app"] = application
            captured.update(kwargs)

        monkeypatch.setattr("uvicorn.run", _fake_run)
        result = cli_runner.invoke(
            app, ["-q", "serve", "--port", "9999", "--deeplink-scheme", "myapp", "--no-in-app"]
        )

        assert result.exit_code == 0, result.output
        assert captured["host"] == "127.0.0.1"
        assert captured["port"] == 9999
        assert captured["log_level"] == "warning"
        context = captured["app"].state.context
        assert context.settings.deeplink_scheme == "myapp"
        assert context.settings.in_app_enabled is False
        assert context.platform.name == "desktop"

    def test_scheme_from_app_env(
        self, cli_runner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from browserbridge.config import get_app_env_path

        env_path = get_app_env_path()
        env_path.parent.mkdir(parents=True, exist_ok=True)
        env_path.write_text("NATIVEPHP_DEEPLINK_SCHEME=fromapp\n")

        captured: dict[str, Any] = {}
        monkeypatch.setattr("uvicorn.run", lambda application, **kw: captured.update(app=application))
        result = cli_runner.invoke(app, ["-q", "serve"])

        assert result.exit_code == 0, result.output
        assert captured["app"].state.context.settings.deeplink_scheme == "fromapp"

    def test_invalid_settings(
        self, cli_runner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("uvicorn.run", lambda application, **kw: None)
        result = cli_runner.invoke(app, ["--no-color", "serve", "--deeplink-scheme", "not a scheme"])
        assert result.exit_code == 1
        assert "Invalid bridge settings" in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_show_defaults(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "-q", "config", "show"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["deeplink_scheme"] == "native"
        assert data["endpoint"] == "/_native/api/call"

    def test_set_persists_and_coerces(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["-q", "config", "set", "confirm_timeout", "3.5"])
        assert result.exit_code == 0, result.output
        assert load_settings_file()["confirm_timeout"] == 3.5

    def test_set_scheme_is_normalised(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["-q", "config", "set", "deeplink_scheme", "myapp://"])
        assert result.exit_code == 0, result.output
        assert load_settings_file()["deeplink_scheme"] == "myapp"

    def test_set_unknown_key(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "set", "colour", "blue"])
        assert result.exit_code == 2
        assert "Unknown setting: colour" in result.output

    def test_set_invalid_value(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "set", "port", "high"])
        assert result.exit_code == 2
        assert not (get_config_dir() / "config.json").exists()

    def test_reset(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["-q", "config", "set", "port", "9000"])
        result = cli_runner.invoke(app, ["-q", "config", "reset", "--force"])
        assert result.exit_code == 0, result.output
        assert load_settings_file()["port"] == 8765

    def test_reset_declined(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["-q", "config", "set", "port", "9000"])
        result = cli_runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert load_settings_file()["port"] == 9000

    def test_path(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "-q", "config", "path"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["settings"].endswith("config.json")
        assert data["app_env"].endswith(".env")
