"""Error classifier -- maps raw transport outcomes onto the error taxonomy.

Two pure functions cover the two ways a request can end:

- :func:`classify_response` -- the server answered. 2xx is success
  (``None``); everything else becomes a :class:`~netstack.exceptions.NetstackError`
  subclass chosen by status code.
- :func:`classify_transport_error` -- no HTTP response arrived at all.

Status precedence:

========  =======================================
Status    Outcome
========  =======================================
200-299   success
400, 422  :class:`ValidationFailed` (body text)
500-599   :class:`ServerError` (diagnostic dump)
401       :class:`Unauthorized` (diagnostic dump)
other     :class:`UnsuccessfulRequest` (diagnostic dump)
========  =======================================

``Unauthorized`` subclasses ``UnsuccessfulRequest``, so a 401 still matches
the "any other non-2xx" row for callers that catch the wider type.
"""

from __future__ import annotations

from typing import Optional

import httpx

from netstack.exceptions import (
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
from netstack.http.transport import AuthenticationRequiredError, NotConnectedError


def classify_response(response: httpx.Response) -> Optional[NetstackError]:
    """Return the error for *response*, or ``None`` if it is a success."""
    status = response.status_code
    if 200 <= status <= 299:
        return None
    if status in (400, 422):
        return ValidationFailed(_body_text(response.content))
    if 500 <= status <= 599:
        return ServerError(curl_output(response))
    if status == 401:
        return Unauthorized(curl_output(response))
    return UnsuccessfulRequest(curl_output(response))


def classify_transport_error(exc: BaseException) -> NetstackError:
    """Map a failure that produced no HTTP response to the taxonomy."""
    if isinstance(exc, NotConnectedError):
        return NoInternetConnection()
    if isinstance(exc, AuthenticationRequiredError):
        return RefreshFailed(f"Transport requires authentication: {exc}")
    if isinstance(exc, httpx.DecodingError):
        return ResponseCorrupted(f"Response could not be read: {exc}")
    return NetworkError(exc)


def curl_output(response: httpx.Response) -> str:
    """Render *response* the way ``curl -i`` would print it.

    The status line is always ``HTTP/1.1``, headers keep their original
    order and spelling, and the body follows a blank line only when it
    decodes as UTF-8.
    """
    reason = response.reason_phrase or httpx.codes.get_reason_phrase(response.status_code)
    lines = [f"HTTP/1.1 {response.status_code} {reason}".rstrip()]
    for name, value in response.headers.raw:
        lines.append(f"{name.decode('latin-1')}: {value.decode('latin-1')}")
    output = "\n".join(lines) + "\n"

    body = _body_text(response.content)
    if body is not None:
        output += "\n" + body + "\n"
    return output


def _body_text(content: bytes) -> Optional[str]:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return None
