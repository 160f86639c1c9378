"""Immutable outbound request value.

An :class:`OutboundRequest` is what a caller hands to
:class:`~netstack.client.AsyncClient` and what the adapter hands to the
transport. Every ``with_*`` method returns a new instance; nothing in the
request pipeline mutates the caller's request in place.

Header names compare case-insensitively, as HTTP requires, while the
original insertion order and spelling are preserved for the wire.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Union

import httpx

from netstack.keys import APPLICATION_JSON, CONTENT_TYPE

_NO_JSON = object()

HeaderItems = tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class OutboundRequest:
    """An HTTP request that has not been sent yet.

    Attributes:
        method: Upper-case HTTP method.
        url: Absolute URL, or a path that the adapter resolves against the
            environment's base URL.
        headers: Ordered ``(name, value)`` pairs.
        body: Raw request body, if any.
    """

    method: str
    url: str
    headers: HeaderItems = ()
    body: Optional[bytes] = None

    @classmethod
    def build(
        cls,
        method: str,
        url: Union[str, httpx.URL],
        headers: Optional[Mapping[str, str]] = None,
        json_body: Any = _NO_JSON,
        content: Union[str, bytes, None] = None,
    ) -> OutboundRequest:
        """Convenience constructor accepting a header mapping and a JSON body.

        When *json_body* is given the body is serialised with :func:`json.dumps`
        and ``Content-Type: application/json`` is set unless the caller
        supplied a content type already.
        """
        request = cls(
            method=method.upper(),
            url=str(url),
            headers=tuple((str(k), str(v)) for k, v in (headers or {}).items()),
        )
        if json_body is not _NO_JSON:
            request = request.with_body(json.dumps(json_body).encode("utf-8"))
            if not request.has_header(CONTENT_TYPE):
                request = request.with_header(CONTENT_TYPE, APPLICATION_JSON)
        elif content is not None:
            data = content.encode("utf-8") if isinstance(content, str) else content
            request = request.with_body(data)
        return request

    # ------------------------------------------------------------------ #
    # Header access
    # ------------------------------------------------------------------ #

    def header(self, name: str) -> Optional[str]:
        """Return the first value for *name* (case-insensitive), or ``None``."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    def has_header(self, name: str) -> bool:
        return self.header(name) is not None

    # ------------------------------------------------------------------ #
    # Copy-on-write helpers
    # ------------------------------------------------------------------ #

    def with_header(self, name: str, value: str) -> OutboundRequest:
        """Return a copy where *name* has exactly one value, *value*.

        Any existing values under the same name, in any letter case, are
        dropped.
        """
        lowered = name.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != lowered)
        return replace(self, headers=kept + ((name, value),))

    def without_header(self, name: str) -> OutboundRequest:
        lowered = name.lower()
        return replace(self, headers=tuple((k, v) for k, v in self.headers if k.lower() != lowered))

    def with_url(self, url: Union[str, httpx.URL]) -> OutboundRequest:
        return replace(self, url=str(url))

    def with_body(self, body: Optional[bytes]) -> OutboundRequest:
        return replace(self, body=body)

    # ------------------------------------------------------------------ #
    # Transport bridge
    # ------------------------------------------------------------------ #

    def to_httpx(self) -> httpx.Request:
        """Build the :class:`httpx.Request` the transport sends."""
        return httpx.Request(
            self.method,
            self.url,
            headers=list(self.headers),
            content=self.body,
        )
