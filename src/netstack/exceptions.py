"""Exception hierarchy for netstack.

Every failure a request can end in is one of the classes below. All of them
inherit from :class:`NetstackError`, which carries a short ``kind`` tag and an
``exit_code`` from :mod:`netstack.exit_codes`. The CLI entry point catches
``NetstackError`` and exits with that code; library callers catch the narrower
subclasses.

Subclass hierarchy::

    NetstackError (exit 1)
    +-- NoInternetConnection (exit 6)
    +-- NetworkError         (exit 6)
    +-- RefreshFailed        (exit 3)
    +-- ValidationFailed     (exit 4)
    +-- ServerError          (exit 5)
    +-- UnsuccessfulRequest  (exit 8)
    |   +-- Unauthorized     (exit 3)
    +-- DecodingError        (exit 7)
    +-- ResponseCorrupted    (exit 6)
    +-- InvalidURL           (exit 9)
    +-- ConfigError          (exit 1)

The payload attributes (``detail``, ``diagnostic``, ``cause``, ``input``) exist
for logging and display. Control flow only ever looks at the class.
"""

from __future__ import annotations

from typing import Optional

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


class NetstackError(Exception):
    """Base exception for all netstack errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    kind: str = "error"
    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class NoInternetConnection(NetstackError):
    """Raised when the transport reports that the device is offline."""

    kind = "no_internet_connection"
    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, message: str = "No internet connection") -> None:
        super().__init__(message)


class NetworkError(NetstackError):
    """Raised when no HTTP response was received at all.

    ``cause`` holds the underlying transport exception, or ``None`` when the
    transport produced something that was not an HTTP response.
    """

    kind = "network_error"
    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        message = f"Network error: {cause}" if cause is not None else "Network error"
        super().__init__(message)


class RefreshFailed(NetstackError):
    """Raised when a fresh access credential could not be obtained."""

    kind = "refresh_failed"
    exit_code = EXIT_AUTH_FAILURE

    def __init__(self, message: str = "Credential refresh failed") -> None:
        super().__init__(message)


class ValidationFailed(NetstackError):
    """Raised for HTTP 400 and 422. ``detail`` is the response body as text."""

    kind = "validation_failed"
    exit_code = EXIT_VALIDATION_FAILED

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(f"Validation failed: {detail}" if detail else "Validation failed")


class ServerError(NetstackError):
    """Raised for HTTP 5xx. ``diagnostic`` is the rendered response dump."""

    kind = "server_error"
    exit_code = EXIT_SERVER_ERROR

    def __init__(self, diagnostic: Optional[str] = None) -> None:
        self.diagnostic = diagnostic
        super().__init__(_first_line(diagnostic) or "Server error")


class UnsuccessfulRequest(NetstackError):
    """Raised for any other non-2xx status."""

    kind = "unsuccessful_request"
    exit_code = EXIT_UNSUCCESSFUL_REQUEST

    def __init__(self, diagnostic: Optional[str] = None) -> None:
        self.diagnostic = diagnostic
        super().__init__(_first_line(diagnostic) or "Unsuccessful request")


class Unauthorized(UnsuccessfulRequest):
    """Raised when the server (or token endpoint) rejects the credential."""

    kind = "unauthorized"
    exit_code = EXIT_AUTH_FAILURE


class DecodingError(NetstackError):
    """Raised when a successful response body does not fit the requested shape."""

    kind = "decoding_error"
    exit_code = EXIT_DECODING_ERROR

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        message = f"Could not decode response: {cause}" if cause is not None else "Could not decode response"
        super().__init__(message)


class ResponseCorrupted(NetstackError):
    """Raised when the response could not be read off the wire."""

    kind = "response_corrupted"
    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, message: str = "Response could not be read") -> None:
        super().__init__(message)


class InvalidURL(NetstackError):
    """Raised when a value cannot be turned into a usable request URL."""

    kind = "invalid_url"
    exit_code = EXIT_INVALID_URL

    def __init__(self, input: object) -> None:  # noqa: A002
        self.input = input
        super().__init__(f"Invalid URL: {input!r}")


class ConfigError(NetstackError):
    """Raised for configuration problems (missing profiles, invalid JSON, bad credential sources)."""

    kind = "config_error"
    exit_code = EXIT_GENERIC_FAILURE


def _first_line(text: Optional[str]) -> str:
    if not text:
        return ""
    return text.splitlines()[0]
