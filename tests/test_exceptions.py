"""Tests for the exception taxonomy and its exit codes."""

from __future__ import annotations

import pytest

from netstack.exceptions import (
    ConfigError,
    DecodingError,
    InvalidURL,
    NetstackError,
    NetworkError,
    NoInternetConnection,
    RefreshFailed,
    ResponseCorrupted,
    ServerError,
    Unauthorized,
    UnsuccessfulRequest,
    ValidationFailed,
)
from netstack.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODING_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_URL,
    EXIT_SERVER_ERROR,
    EXIT_UNSUCCESSFUL_REQUEST,
    EXIT_VALIDATION_FAILED,
)


@pytest.mark.parametrize(
    "error, kind, exit_code",
    [
        (NoInternetConnection(), "no_internet_connection", EXIT_CONNECTION_ERROR),
        (NetworkError(), "network_error", EXIT_CONNECTION_ERROR),
        (RefreshFailed(), "refresh_failed", EXIT_AUTH_FAILURE),
        (ValidationFailed(), "validation_failed", EXIT_VALIDATION_FAILED),
        (ServerError(), "server_error", EXIT_SERVER_ERROR),
        (UnsuccessfulRequest(), "unsuccessful_request", EXIT_UNSUCCESSFUL_REQUEST),
        (Unauthorized(), "unauthorized", EXIT_AUTH_FAILURE),
        (DecodingError(), "decoding_error", EXIT_DECODING_ERROR),
        (ResponseCorrupted(), "response_corrupted", EXIT_CONNECTION_ERROR),
        (InvalidURL(""), "invalid_url", EXIT_INVALID_URL),
        (ConfigError("bad"), "config_error", EXIT_GENERIC_FAILURE),
    ],
)
def test_kind_and_exit_code(error: NetstackError, kind: str, exit_code: int) -> None:
    assert isinstance(error, NetstackError)
    assert error.kind == kind
    assert error.exit_code == exit_code


def test_unauthorized_is_an_unsuccessful_request() -> None:
    assert issubclass(Unauthorized, UnsuccessfulRequest)
    assert not issubclass(UnsuccessfulRequest, Unauthorized)


def test_exit_code_override() -> None:
    assert NetstackError("boom", exit_code=42).exit_code == 42
    assert NetstackError("boom").exit_code == EXIT_GENERIC_FAILURE


class TestPayloads:
    def test_validation_detail(self) -> None:
        error = ValidationFailed('{"field": "required"}')
        assert error.detail == '{"field": "required"}'
        assert str(error) == 'Validation failed: {"field": "required"}'

    def test_validation_without_detail(self) -> None:
        assert str(ValidationFailed()) == "Validation failed"

    def test_server_error_message_is_first_line_of_dump(self) -> None:
        dump = "HTTP/1.1 503 Service Unavailable\nRetry-After: 5\n\nbusy"
        error = ServerError(dump)
        assert error.diagnostic == dump
        assert str(error) == "HTTP/1.1 503 Service Unavailable"

    def test_unauthorized_keeps_diagnostic(self) -> None:
        error = Unauthorized("HTTP/1.1 401 Unauthorized\n")
        assert error.diagnostic.startswith("HTTP/1.1 401")
        assert str(error) == "HTTP/1.1 401 Unauthorized"

    def test_network_error_cause(self) -> None:
        cause = ConnectionResetError("reset by peer")
        error = NetworkError(cause)
        assert error.cause is cause
        assert "reset by peer" in str(error)
        assert NetworkError().cause is None

    def test_decoding_error_cause(self) -> None:
        cause = ValueError("expected int")
        assert DecodingError(cause).cause is cause

    def test_invalid_url_input(self) -> None:
        error = InvalidURL("http://[::1")
        assert error.input == "http://[::1"
        assert str(error) == "Invalid URL: 'http://[::1'"
