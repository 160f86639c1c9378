"""Route definitions -- describing endpoints as values.

A :class:`Route` knows its HTTP method and path, and optionally some query
parameters and a JSON body. :meth:`Route.as_request` turns it into an
:class:`~netstack.http.request.OutboundRequest` with a relative URL, which the
client then resolves against the environment's base URL.

Example::

    class GetObjects(Route):
        method = HTTPMethod.GET
        path = "/objects"

    class PostObject(Route):
        method = HTTPMethod.POST
        path = "/object"

        def __init__(self, object_id: int) -> None:
            self.object_id = object_id

        def params(self) -> dict[str, Any]:
            return {"id": self.object_id}

    objects = await client.send(GetObjects(), list[MockObject])
"""

from __future__ import annotations

from typing import Any, Optional

from netstack.http.request import OutboundRequest
from netstack.http.url import as_url, parameter_encoded
from netstack.models import HTTPMethod

_NO_BODY = object()


class Route:
    """Base class for endpoint descriptions.

    Subclasses set :attr:`method` and :attr:`path` and may override
    :meth:`params`, :meth:`headers` and :meth:`json_body`.
    """

    method: HTTPMethod = HTTPMethod.GET
    path: str = "/"

    def params(self) -> Optional[dict[str, Any]]:
        return None

    def headers(self) -> Optional[dict[str, str]]:
        return None

    def json_body(self) -> Any:
        return _NO_BODY

    def as_request(self) -> OutboundRequest:
        """Build the request for this route.

        Raises:
            InvalidURL: If :attr:`path` cannot be parsed.
        """
        url = as_url(self.path)
        params = self.params()
        if params:
            url = parameter_encoded(url, params)

        body = self.json_body()
        if body is _NO_BODY:
            return OutboundRequest.build(self.method.value, url, headers=self.headers())
        return OutboundRequest.build(self.method.value, url, headers=self.headers(), json_body=body)
