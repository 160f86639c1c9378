"""Tests for netstack.output."""

from __future__ import annotations

import json

import pytest

from netstack import output as output_module
from netstack.exceptions import NetworkError, ServerError, ValidationFailed
from netstack.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def piped(monkeypatch):
    monkeypatch.setattr("netstack.output._is_tty", lambda: False)


@pytest.fixture()
def terminal(monkeypatch):
    monkeypatch.setattr("netstack.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)


def plain(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, **kwargs)


def rich(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.RICH, no_color=False, **kwargs)


@pytest.mark.parametrize(
    ("is_tty", "no_color", "requested", "expected"),
    [
        (False, False, OutputFormat.AUTO, OutputFormat.PLAIN),
        (True, False, OutputFormat.AUTO, OutputFormat.RICH),
        (True, True, OutputFormat.AUTO, OutputFormat.PLAIN),
        (True, False, OutputFormat.JSON, OutputFormat.JSON),
    ],
)
def test_format_resolution(monkeypatch, is_tty, no_color, requested, expected) -> None:
    monkeypatch.setattr("netstack.output._is_tty", lambda: is_tty)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)
    assert OutputManager(format=requested, no_color=no_color).format == expected


@pytest.mark.parametrize(
    ("no_color", "term", "disabled"),
    [("", None, True), (None, "dumb", True), (None, "xterm-256color", False)],
)
def test_colour_environment(monkeypatch, no_color, term, disabled) -> None:
    for name, value in (("NO_COLOR", no_color), ("TERM", term)):
        if value is None:
            monkeypatch.delenv(name, raising=False)
        else:
            monkeypatch.setenv(name, value)
    assert _should_disable_color() is disabled


class TestLevels:
    @pytest.mark.parametrize("level", ["info", "success", "warning", "error"])
    def test_diagnostics_never_touch_stdout(self, capfd, piped, level):
        getattr(plain(), level)("retrying GET /users")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "retrying GET /users" in captured.err

    def test_quiet_hides_status_lines_only(self, capfd, piped):
        manager = plain(quiet=True)
        manager.info("Using profile 'api'")
        manager.success("Logged in")
        manager.warning("credential expires soon")
        manager.error("request failed")
        err = capfd.readouterr().err
        assert "profile" not in err
        assert "Logged in" not in err
        assert "Warning: credential expires soon" in err
        assert "Error: request failed" in err

    def test_debug_needs_verbose(self, capfd, piped):
        plain().debug("attempt 1")
        plain(verbose=True).debug("attempt 2")
        err = capfd.readouterr().err
        assert "attempt 1" not in err
        assert "[debug] attempt 2" in err

    @pytest.mark.parametrize("level", ["info", "success", "warning", "error", "debug"])
    def test_rich_mode_prints_brackets_verbatim(self, capfd, terminal, level):
        getattr(rich(verbose=True), level)("field [/name] is [bold]required")
        assert "field [/name] is [bold]required" in capfd.readouterr().err


class TestFailureReport:
    def test_message_only_without_verbose(self, capfd, piped):
        plain().failure(ServerError("HTTP/1.1 502 Bad Gateway\nVia: proxy\n\nupstream down"))
        err = capfd.readouterr().err
        assert "Error: HTTP/1.1 502 Bad Gateway" in err
        assert "upstream down" not in err

    def test_verbose_shows_response_dump(self, capfd, piped):
        plain(verbose=True).failure(ServerError("HTTP/1.1 502 Bad Gateway\nVia: proxy\n\nupstream down"))
        err = capfd.readouterr().err
        assert "[debug] server_error:" in err
        assert "Via: proxy" in err
        assert "upstream down" in err

    def test_verbose_shows_transport_cause(self, capfd, piped):
        plain(verbose=True).failure(NetworkError(ConnectionResetError("reset by peer")))
        assert "network_error: caused by ConnectionResetError: reset by peer" in capfd.readouterr().err

    def test_validation_message_with_closing_tag_in_rich_mode(self, capfd, terminal):
        rich().failure(ValidationFailed("field [/name] is required"))
        assert "Error: Validation failed: field [/name] is required" in capfd.readouterr().err


class TestResponseData:
    def test_json(self, capfd, piped):
        OutputManager(format=OutputFormat.JSON).format_response({"id": 7, "name": "alice"})
        assert json.loads(capfd.readouterr().out) == {"id": 7, "name": "alice"}

    @pytest.mark.parametrize(
        ("body", "lines"),
        [
            ({"id": 7, "name": "alice"}, ["id\t7", "name\talice"]),
            ([{"id": 1, "name": "a"}, {"id": 2, "name": "b"}], ["1\ta", "2\tb"]),
            (["a", "b"], ["a", "b"]),
            ("created", ["created"]),
        ],
    )
    def test_plain(self, capfd, piped, body, lines):
        plain().format_response(body)
        assert capfd.readouterr().out.splitlines() == lines

    def test_rich_text_body_is_not_markup(self, capfd, terminal):
        rich().format_response("[/closing] tag")
        assert "[/closing] tag" in capfd.readouterr().out

    def test_raw_text_passthrough(self, capfd, piped):
        plain().print_data("<html></html>")
        assert capfd.readouterr().out == "<html></html>\n"


class TestProfileTable:
    def test_json_records(self, capfd, piped):
        OutputManager(format=OutputFormat.JSON).print_table(["Name", "Base URL"], [["api", "https://api.example.com"]])
        assert json.loads(capfd.readouterr().out) == [{"Name": "api", "Base URL": "https://api.example.com"}]

    def test_plain_header_then_rows(self, capfd, piped):
        plain().print_table(["Name", "Auth"], [["api", "oauth2_refresh_token"], ["public", "-"]])
        assert capfd.readouterr().out.splitlines() == ["Name\tAuth", "api\toauth2_refresh_token", "public\t-"]


class TestInstalledManager:
    def test_default_created_once(self, piped):
        reset_output()
        manager = get_output()
        assert manager is get_output()
        assert not manager.is_verbose

    def test_helpers_follow_installed_manager(self, capfd, piped):
        set_output(plain(verbose=True))
        output_module.info("via helper")
        output_module.debug("debug helper")
        output_module.failure(ValidationFailed("bad input"))
        err = capfd.readouterr().err
        assert "via helper" in err
        assert "[debug] debug helper" in err
        assert "Error: Validation failed: bad input" in err
