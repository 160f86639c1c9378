"""HTTP client module for netstack.

Provides :class:`AsyncClient`, which wraps a transport with bearer credential
injection, single-flight credential refresh, retry with exponential backoff
for transport failures, status classification, and response decoding.

Example::

    from netstack.client import AsyncClient

    async with AsyncClient.from_profile(profile) as client:
        objects = await client.get("/objects", list[dict])
"""

from netstack.client.async_client import AsyncClient

__all__ = ["AsyncClient"]
