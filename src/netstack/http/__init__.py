"""HTTP building blocks used by :class:`~netstack.client.AsyncClient`.

- :mod:`~netstack.http.request` -- the immutable :class:`OutboundRequest`.
- :mod:`~netstack.http.url` -- URL parsing and base-URL resolution.
- :mod:`~netstack.http.adapter` -- :func:`adapt`, the pure pre-send step.
- :mod:`~netstack.http.transport` -- the :class:`Transport` protocol and its httpx implementation.
- :mod:`~netstack.http.classifier` -- status codes and transport failures to typed errors.
- :mod:`~netstack.http.decoding` -- body decoding into the requested shape.
"""

from netstack.http.adapter import adapt
from netstack.http.classifier import classify_response, classify_transport_error, curl_output
from netstack.http.decoding import decode
from netstack.http.request import OutboundRequest
from netstack.http.transport import (
    AuthenticationRequiredError,
    HttpxTransport,
    NotConnectedError,
    Transport,
)
from netstack.http.url import as_url, based_at, parameter_encoded

__all__ = [
    "AuthenticationRequiredError",
    "HttpxTransport",
    "NotConnectedError",
    "OutboundRequest",
    "Transport",
    "adapt",
    "as_url",
    "based_at",
    "classify_response",
    "classify_transport_error",
    "curl_output",
    "decode",
    "parameter_encoded",
]
