"""Network reachability observer.

:class:`ConnectivityObserver` publishes the current :class:`Reachability`
value. It can be fed by hand (:meth:`~ConnectivityObserver.update`), or it can
run its own monitor task that periodically opens a TCP connection to a known
host.

The client never needs an observer to behave correctly. When one is attached
and the profile sets ``fail_fast_offline``, a request made while the observer
reports :attr:`Reachability.UNREACHABLE` fails with
:class:`~netstack.exceptions.NoInternetConnection` without touching the
transport.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import AsyncIterator, Optional

from netstack.models import ConnectivityConfig

logger = logging.getLogger(__name__)


class Reachability(str, enum.Enum):
    UNKNOWN = "unknown"
    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"


class ConnectivityObserver:
    """Holds the latest reachability state and notifies waiters of changes.

    Args:
        config: Host, port and timing used by :meth:`start`. Defaults to
            :class:`~netstack.models.ConnectivityConfig`.
    """

    def __init__(self, config: Optional[ConnectivityConfig] = None) -> None:
        self._config = config or ConnectivityConfig()
        self._state = Reachability.UNKNOWN
        self._changed = asyncio.Condition()
        self._monitor: Optional[asyncio.Task[None]] = None

    @property
    def current(self) -> Reachability:
        return self._state

    @property
    def is_offline(self) -> bool:
        return self._state == Reachability.UNREACHABLE

    async def update(self, state: Reachability) -> None:
        """Publish *state*. Waiters are woken only when the value changes."""
        async with self._changed:
            if state == self._state:
                return
            logger.info("Reachability changed: %s -> %s", self._state.value, state.value)
            self._state = state
            self._changed.notify_all()

    async def wait_for_change(self) -> Reachability:
        """Suspend until the state changes, then return the new state."""
        async with self._changed:
            previous = self._state
            await self._changed.wait_for(lambda: self._state != previous)
            return self._state

    async def watch(self) -> AsyncIterator[Reachability]:
        """Yield the current state, then every subsequent change."""
        yield self._state
        while True:
            yield await self.wait_for_change()

    # ------------------------------------------------------------------ #
    # Reachability monitor
    # ------------------------------------------------------------------ #

    async def check(self) -> Reachability:
        """Try one TCP connection to the configured host and publish the result."""
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self._config.host, self._config.port),
                timeout=self._config.timeout_seconds,
            )
        except (OSError, asyncio.TimeoutError) as exc:
            logger.debug("Reachability check to %s:%s failed: %s", self._config.host, self._config.port, exc)
            state = Reachability.UNREACHABLE
        else:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
            state = Reachability.REACHABLE
        await self.update(state)
        return state

    def start(self) -> None:
        """Start checking every ``interval_seconds`` in a background task."""
        if self._monitor is None or self._monitor.done():
            self._monitor = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        monitor = self._monitor
        self._monitor = None
        if monitor is not None and not monitor.done():
            monitor.cancel()
            try:
                await monitor
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        while True:
            await self.check()
            await asyncio.sleep(self._config.interval_seconds)
