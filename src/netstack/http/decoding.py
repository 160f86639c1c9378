"""Response body decoding.

:func:`decode` turns a successful response body into the shape the caller
asked for. JSON bodies are validated with a pydantic
:class:`~pydantic.TypeAdapter`, so the shape can be a pydantic model, a
dataclass, a ``TypedDict``, a builtin container such as ``list[int]``, or
:data:`typing.Any` for "whatever the JSON says". Two shapes bypass JSON
entirely: ``bytes`` returns the body untouched and ``str`` returns it as
UTF-8 text.

Any other callable with the same signature can be passed to
:class:`~netstack.client.AsyncClient` as its ``decoder``.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from pydantic import TypeAdapter, ValidationError

from netstack.exceptions import DecodingError

T = TypeVar("T")

Decoder = Callable[[bytes, Any], Any]


def decode(content: bytes, shape: Any) -> Any:
    """Decode *content* into *shape*.

    Raises:
        DecodingError: If the body is not valid JSON for *shape*, or not
            valid UTF-8 when *shape* is ``str``.
    """
    if shape is bytes:
        return content
    if shape is str:
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodingError(exc) from exc
    try:
        return TypeAdapter(shape).validate_json(content)
    except ValidationError as exc:
        raise DecodingError(exc) from exc
