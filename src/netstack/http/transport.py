"""Transport layer -- the single primitive that actually talks to the network.

A transport takes an adapted :class:`~netstack.http.request.OutboundRequest`
and either returns an :class:`httpx.Response` (any status code) or raises an
:class:`httpx.TransportError`. It never classifies status codes; that is the
classifier's job.

Two transport failures carry meaning beyond "could not reach the server":

- :class:`NotConnectedError` -- the device has no network at all.
- :class:`AuthenticationRequiredError` -- the transport itself demanded
  credentials (for example a proxy asking for authentication).

:class:`HttpxTransport` recognises the "network unreachable" family of OS
errors underneath :class:`httpx.ConnectError`, along with a resolver that
cannot be reached at all (``EAI_AGAIN``), and re-raises them as
:class:`NotConnectedError`. A host name the resolver reports as unknown
(``EAI_NONAME``) is not treated as offline, even though some platforms
report it that way when no network is configured. Test doubles can raise
either class directly from an :class:`httpx.MockTransport` handler.
"""

from __future__ import annotations

import errno
import socket
from typing import Optional, Protocol, runtime_checkable

import httpx

from netstack.http.request import OutboundRequest

_OFFLINE_ERRNOS = frozenset(
    code
    for code in (
        getattr(errno, "ENETUNREACH", None),
        getattr(errno, "ENETDOWN", None),
        getattr(errno, "EHOSTUNREACH", None),
    )
    if code is not None
)

_OFFLINE_RESOLVER_ERRORS = frozenset(
    code for code in (getattr(socket, "EAI_AGAIN", None),) if code is not None
)


class NotConnectedError(httpx.NetworkError):
    """The transport could not find any route to the network."""


class AuthenticationRequiredError(httpx.TransportError):
    """The transport refused to continue without authentication."""


@runtime_checkable
class Transport(Protocol):
    """Anything that can send an adapted request and return the raw response."""

    async def perform(self, request: OutboundRequest) -> httpx.Response:
        ...


class HttpxTransport:
    """Default :class:`Transport` backed by :class:`httpx.AsyncClient`.

    Args:
        timeout: Per-request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        transport: Optional lower-level httpx transport. Environments in mock
            mode pass an :class:`httpx.MockTransport` here.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            verify=verify_ssl,
            transport=transport,
            follow_redirects=True,
        )

    async def perform(self, request: OutboundRequest) -> httpx.Response:
        try:
            response = await self._client.send(request.to_httpx())
        except httpx.ConnectError as exc:
            if _is_offline(exc):
                raise NotConnectedError(str(exc), request=exc.request) from exc
            raise
        return response

    async def aclose(self) -> None:
        await self._client.aclose()


def _is_offline(exc: BaseException) -> bool:
    """Walk the exception chain looking for a "network unreachable" OS or resolver error."""
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            if current.errno in _OFFLINE_RESOLVER_ERRORS:
                return True
        elif isinstance(current, OSError) and current.errno in _OFFLINE_ERRNOS:
            return True
        current = current.__cause__ or current.__context__
    return False
