"""Asynchronous request executor.

:class:`AsyncClient` runs one logical request end to end:

1. **Acquire** -- for credential-protected environments, ask the
   :class:`~netstack.auth.refresher.CredentialRefresher` for a valid
   credential. This may wait on a refresh another request started.
2. **Adapt** -- resolve the URL against the base URL, default the content
   type, stamp a new ``X-Request-Id``, and attach ``Authorization: Bearer``.
3. **Perform** -- hand the request to the transport.
4. **Classify** -- map the response status (or the transport failure) onto
   the :mod:`netstack.exceptions` taxonomy.
5. **Decode** -- turn the body into the requested shape.

Only transport failures loop back to step 1, up to ``max_retries`` extra
attempts with exponential backoff. An HTTP error response is classified and
raised straight away: the server has answered, and asking again will not
change its mind.

Two response modes are offered: :meth:`AsyncClient.send` raises the typed
error, :meth:`AsyncClient.send_best_effort` returns ``None`` on any failure.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Union

import httpx

from netstack.auth.refresher import CredentialRefresher
from netstack.connectivity import ConnectivityObserver
from netstack.environment import APIEnvironment, ProtectedAPIEnvironment, build_environment
from netstack.exceptions import NetstackError, NetworkError, NoInternetConnection
from netstack.http.adapter import adapt
from netstack.http.classifier import classify_response, classify_transport_error
from netstack.http.decoding import Decoder, decode
from netstack.http.request import OutboundRequest
from netstack.http.transport import (
    AuthenticationRequiredError,
    HttpxTransport,
    NotConnectedError,
    Transport,
)
from netstack.keys import AUTHORIZATION, BEARER
from netstack.models import Credential, Profile, RequestConfig
from netstack.output import get_output
from netstack.routes import Route

RequestLike = Union[OutboundRequest, Route]

_TERMINAL_TRANSPORT_ERRORS = (NotConnectedError, AuthenticationRequiredError)


class AsyncClient:
    """Authenticated, retrying HTTP client.

    Use as an async context manager unless an explicit *transport* is
    passed; the context owns the default :class:`HttpxTransport`. A refresh
    still running on exit is cancelled unless the refresher was passed in.

    Args:
        environment: Where requests go and, if protected, how credentials
            are refreshed.
        config: Timeout, retry, and offline settings. Defaults to
            :class:`~netstack.models.RequestConfig`.
        transport: Transport override. When ``None`` an
            :class:`HttpxTransport` is created on enter, wrapping the
            environment's mock transport if it has one.
        decoder: Body decoder, ``decoder(content, shape) -> value``.
        connectivity: Optional reachability observer for fast offline
            failures.
        refresher: Refresher override. By default protected environments get
            their own :class:`CredentialRefresher`. Pass a shared instance to
            make several clients refresh through a single ticket. A passed-in
            refresher is left running when the client closes.

    Example::

        async with AsyncClient(environment) as client:
            objects = await client.send(OutboundRequest.build("GET", "/objects"), list[Item])
    """

    def __init__(
        self,
        environment: APIEnvironment,
        config: Optional[RequestConfig] = None,
        transport: Optional[Transport] = None,
        decoder: Decoder = decode,
        connectivity: Optional[ConnectivityObserver] = None,
        refresher: Optional[CredentialRefresher] = None,
    ) -> None:
        self._environment = environment
        self._config = config or RequestConfig()
        self._transport = transport
        self._owned_transport: Optional[HttpxTransport] = None
        self._decoder = decoder
        self._connectivity = connectivity
        self._owns_refresher = False
        if refresher is None and isinstance(environment, ProtectedAPIEnvironment):
            refresher = CredentialRefresher(environment)
            self._owns_refresher = True
        self._refresher = refresher

    @classmethod
    def from_profile(
        cls,
        profile: Profile,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        connectivity: Optional[ConnectivityObserver] = None,
    ) -> AsyncClient:
        """Build a client for *profile*; *transport* puts it in mock mode."""
        environment = build_environment(profile, transport=transport)
        return cls(environment, config=profile.request, connectivity=connectivity)

    @property
    def environment(self) -> APIEnvironment:
        return self._environment

    @property
    def refresher(self) -> Optional[CredentialRefresher]:
        return self._refresher

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        if self._transport is None:
            self._owned_transport = HttpxTransport(
                timeout=self._config.timeout,
                verify_ssl=self._config.verify_ssl,
                transport=self._environment.transport,
            )
            self._transport = self._owned_transport
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._refresher is not None and self._owns_refresher:
            await self._refresher.aclose()
        if self._owned_transport is not None:
            await self._owned_transport.aclose()
            if self._transport is self._owned_transport:
                self._transport = None
            self._owned_transport = None

    # ------------------------------------------------------------------ #
    # Response modes
    # ------------------------------------------------------------------ #

    async def send(
        self,
        request: RequestLike,
        response_as: Any,
        max_retries: Optional[int] = None,
    ) -> Any:
        """Run *request* and decode the body into *response_as*.

        Args:
            request: An :class:`OutboundRequest` or a :class:`Route`.
            response_as: The shape to decode into (see :func:`~netstack.http.decoding.decode`).
            max_retries: Extra attempts after a transport failure. Defaults
                to the client's ``RequestConfig.max_retries``.

        Raises:
            NetstackError: The classified failure. See :mod:`netstack.exceptions`.
        """
        return await self.execute(request, response_as, max_retries)

    async def send_best_effort(
        self,
        request: RequestLike,
        response_as: Any,
        max_retries: Optional[int] = None,
    ) -> Optional[Any]:
        """Like :meth:`send`, but return ``None`` instead of raising.

        Meant for optional data. Cancellation still propagates.
        """
        try:
            return await self.execute(request, response_as, max_retries)
        except NetstackError as exc:
            get_output().debug(f"Best-effort request dropped: {exc.kind}: {exc}")
            return None

    async def execute(
        self,
        request: RequestLike,
        response_as: Any,
        max_retries: Optional[int] = None,
    ) -> Any:
        response = await self.perform(request, max_retries)
        error = classify_response(response)
        if error is not None:
            raise error
        return self._decoder(response.content, response_as)

    # ------------------------------------------------------------------ #
    # Convenience verbs
    # ------------------------------------------------------------------ #

    async def get(self, path: str, response_as: Any = Any, **kwargs: Any) -> Any:
        return await self._verb("GET", path, response_as, **kwargs)

    async def post(self, path: str, response_as: Any = Any, **kwargs: Any) -> Any:
        return await self._verb("POST", path, response_as, **kwargs)

    async def put(self, path: str, response_as: Any = Any, **kwargs: Any) -> Any:
        return await self._verb("PUT", path, response_as, **kwargs)

    async def patch(self, path: str, response_as: Any = Any, **kwargs: Any) -> Any:
        return await self._verb("PATCH", path, response_as, **kwargs)

    async def delete(self, path: str, response_as: Any = Any, **kwargs: Any) -> Any:
        return await self._verb("DELETE", path, response_as, **kwargs)

    # ------------------------------------------------------------------ #
    # Attempt loop
    # ------------------------------------------------------------------ #

    async def perform(self, request: RequestLike, max_retries: Optional[int] = None) -> httpx.Response:
        """Run the acquire/adapt/send loop and return the raw response.

        The response is returned whatever its status code; only failures
        that produced no response at all are raised here.

        Raises:
            RefreshFailed: No valid credential could be obtained.
            Unauthorized: The refresh token was rejected.
            NoInternetConnection: The device is offline.
            NetworkError: Transport failures outlasted the retry budget, or
                the request ended without a response (a redirect loop, say).
            ResponseCorrupted: The response body could not be read.
            InvalidURL: The request URL could not be resolved.
        """
        raw = request.as_request() if isinstance(request, Route) else request
        retries = self._config.max_retries if max_retries is None else max(0, max_retries)
        transport = self._require_transport()
        output = get_output()

        for attempt in range(retries + 1):
            self._check_connectivity()
            credential = await self._acquire_credential()
            adapted = adapt(raw, self._environment.base_url)
            if credential is not None:
                adapted = adapted.with_header(AUTHORIZATION, f"{BEARER} {credential.token}")

            try:
                return await transport.perform(adapted)
            except httpx.RequestError as exc:
                error = classify_transport_error(exc)
                if not _is_retryable(exc) or attempt >= retries:
                    raise error from exc
                delay = self._config.backoff_factor * (2 ** attempt)
                output.debug(
                    f"Transport error: {exc!r}, retrying in {delay:g}s "
                    f"(attempt {attempt + 1}/{retries})"
                )
                if delay > 0:
                    await asyncio.sleep(delay)

        raise NetworkError()  # pragma: no cover

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _acquire_credential(self) -> Optional[Credential]:
        if self._refresher is None:
            return None
        return await self._refresher.acquire()

    def _check_connectivity(self) -> None:
        if (
            self._connectivity is not None
            and self._config.fail_fast_offline
            and self._connectivity.is_offline
        ):
            raise NoInternetConnection()

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise RuntimeError("Client not initialised -- use as async context manager")
        return self._transport

    async def _verb(
        self,
        method: str,
        path: str,
        response_as: Any,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Any = None,
        max_retries: Optional[int] = None,
    ) -> Any:
        url = httpx.URL(path, params=params) if params else path
        if json_body is not None:
            request = OutboundRequest.build(method, url, headers=headers, json_body=json_body)
        else:
            request = OutboundRequest.build(method, url, headers=headers)
        return await self.send(request, response_as, max_retries)


def _is_retryable(exc: httpx.RequestError) -> bool:
    # Connection-level failures only; redirect loops and unreadable bodies are terminal.
    return isinstance(exc, httpx.TransportError) and not isinstance(exc, _TERMINAL_TRANSPORT_ERRORS)
