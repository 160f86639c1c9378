"""Request adapter -- the last pure step before a request hits the transport.

:func:`adapt` resolves the request URL against the environment's base URL,
fills in the default JSON content type for ``POST`` bodies, and stamps a new
correlation id. It performs no I/O and never looks at credentials, so it can
be exercised directly in tests.
"""

from __future__ import annotations

import uuid
from typing import Optional

from netstack.exceptions import InvalidURL
from netstack.http.request import OutboundRequest
from netstack.http.url import URLInput, as_url, based_at
from netstack.keys import APPLICATION_JSON, CONTENT_TYPE, REQUEST_ID


def adapt(
    request: OutboundRequest,
    base_url: Optional[URLInput] = None,
    request_id: Optional[str] = None,
) -> OutboundRequest:
    """Return a send-ready copy of *request*.

    Args:
        request: The caller's request. It is not modified.
        base_url: Environment base URL used for scheme-less request URLs.
        request_id: Correlation id to stamp. A fresh UUID4 is generated when
            omitted, so every call (and therefore every retry) gets its own.

    Returns:
        A new :class:`OutboundRequest` with an absolute URL and an
        ``X-Request-Id`` header.

    Raises:
        InvalidURL: If the URL cannot be parsed, or is still not absolute
            after base-URL resolution.
    """
    base = as_url(base_url) if base_url else None
    url = based_at(as_url(request.url), base)
    if not url.scheme or not url.host:
        raise InvalidURL(request.url)

    adapted = request.with_url(url)
    if adapted.method == "POST" and not adapted.has_header(CONTENT_TYPE):
        adapted = adapted.with_header(CONTENT_TYPE, APPLICATION_JSON)
    return adapted.with_header(REQUEST_ID, request_id or str(uuid.uuid4()))
