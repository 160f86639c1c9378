"""URL helpers: parsing, base-URL resolution, and query encoding.

All helpers work on :class:`httpx.URL` values and never touch the network.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

import httpx

from netstack.exceptions import InvalidURL

URLInput = Union[str, httpx.URL]


def as_url(value: URLInput) -> httpx.URL:
    """Parse *value* into an :class:`httpx.URL`.

    Raises:
        InvalidURL: If *value* is empty or cannot be parsed.
    """
    if isinstance(value, httpx.URL):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidURL(value)
    try:
        return httpx.URL(value)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise InvalidURL(value) from exc


def based_at(url: httpx.URL, base: Optional[httpx.URL]) -> httpx.URL:
    """Resolve a scheme-less *url* against *base*.

    Scheme, host and port come from *base*; the base path is placed in front
    of the request path with exactly one ``/`` between them. The request's
    own query and fragment are kept. A URL that already has a scheme is
    returned unchanged, as is any URL when *base* is ``None``.

    Example::

        >>> str(based_at(httpx.URL("/objects"), httpx.URL("https://api.example.com/")))
        'https://api.example.com/objects'
    """
    if base is None or url.scheme:
        return url

    path = _join_paths(_path_only(base), _path_only(url))
    text = f"{base.scheme}://{base.netloc.decode('ascii')}{path}"
    if url.query:
        text += "?" + url.query.decode("ascii")
    if url.fragment:
        text += "#" + url.fragment
    return httpx.URL(text)


def parameter_encoded(url: httpx.URL, params: Mapping[str, Any]) -> httpx.URL:
    """Return *url* with its query replaced by *params*.

    Values are rendered with :func:`str`, so numbers and booleans can be
    passed directly.
    """
    return url.copy_with(params={name: str(value) for name, value in params.items()})


def _path_only(url: httpx.URL) -> str:
    # raw_path keeps percent-encoding but also carries the query string.
    return url.raw_path.split(b"?", 1)[0].decode("ascii")


def _join_paths(base_path: str, path: str) -> str:
    if not path:
        return base_path or "/"
    return base_path.rstrip("/") + "/" + path.lstrip("/")
