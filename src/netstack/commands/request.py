"""Request command -- send one request through :class:`~netstack.client.AsyncClient`.

The active profile supplies the base URL, the auth settings and the retry
policy; the command only assembles the :class:`~netstack.http.OutboundRequest`
and prints the decoded response.

Example::

    netstack request GET /objects
    netstack request POST /object --data '{"id": 1}' --header X-Trace:abc
    netstack request GET /objects --param page=2 --retries 0 --best-effort
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import httpx
import typer

from netstack.output import error, format_response, get_output, info


def request_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="HTTP method, e.g. GET or POST."),
    path: str = typer.Argument(help="Path relative to the profile's base URL, or an absolute URL."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON request body."),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Extra header as Name:Value. Repeatable."
    ),
    param: Optional[list[str]] = typer.Option(
        None, "--param", help="Query parameter as key=value. Repeatable."
    ),
    retries: Optional[int] = typer.Option(
        None, "--retries", min=0, help="Extra attempts after a transport failure."
    ),
    best_effort: bool = typer.Option(
        False, "--best-effort", help="Print nothing and exit 0 instead of failing."
    ),
) -> None:
    """Send a request using the active profile.

    Raises:
        typer.Exit: With code 2 on malformed ``--data``, ``--header`` or
            ``--param`` values.
        NetstackError: Any classified request failure, unless
            ``--best-effort`` is set.
    """
    from netstack.client import AsyncClient
    from netstack.config import resolve_config
    from netstack.http.request import OutboundRequest
    from netstack.models import Profile

    ctx.ensure_object(dict)
    _, profile = resolve_config(
        cli_profile=ctx.obj.get("profile"),
        cli_base_url=ctx.obj.get("base_url"),
    )
    if profile is None:
        profile = Profile(name="default")
        info("No profile configured; sending without a base URL or credentials.")

    headers = _parse_pairs(header or [], ":", "--header")
    params = _parse_pairs(param or [], "=", "--param")

    url: Any = path
    if params:
        url = httpx.URL(path, params=params)

    if data is not None:
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as exc:
            error(f"--data is not valid JSON: {exc}")
            raise typer.Exit(code=2) from None
        outbound = OutboundRequest.build(method, url, headers=headers, json_body=payload)
    else:
        outbound = OutboundRequest.build(method, url, headers=headers)

    async def _run() -> Optional[bytes]:
        async with AsyncClient.from_profile(profile) as client:
            if best_effort:
                return await client.send_best_effort(outbound, bytes, max_retries=retries)
            return await client.send(outbound, bytes, max_retries=retries)

    body = asyncio.run(_run())
    if not body:
        get_output().debug("No response body")
        return
    _print_body(body)


def _print_body(body: bytes) -> None:
    """Pretty-print JSON bodies; fall back to text, then to a byte count."""
    try:
        format_response(json.loads(body))
        return
    except ValueError:
        pass
    try:
        get_output().print_data(body.decode("utf-8"))
    except UnicodeDecodeError:
        info(f"<{len(body)} bytes of binary data>")


def _parse_pairs(items: list[str], separator: str, option: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition(separator)
        if not sep or not key.strip():
            error(f"Invalid {option} value {item!r}; expected name{separator}value")
            raise typer.Exit(code=2)
        pairs[key.strip()] = value.strip()
    return pairs
