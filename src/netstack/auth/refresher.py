"""Single-flight credential refresher.

:class:`CredentialRefresher` hands out the current access credential and
makes sure that, however many requests discover at the same moment that it
has expired, only one refresh exchange runs.

The refresher is a two-state machine:

``IDLE``
    No refresh is running. The next caller that finds the credential missing
    or expired becomes the *initiator*: it creates a ticket and starts the
    refresh.
``REFRESHING``
    A ticket is outstanding. Callers that need a credential become *joiners*
    and wait on that same ticket.

A ticket is an :class:`asyncio.Future`. The refresh exchange runs in its own
task and resolves the ticket exactly once, with either the new
:class:`~netstack.models.Credential` or the failure, so every caller that
waited on it sees the same outcome. The state is then reset to ``IDLE``; a
failed ticket does not stop the next caller from starting a new one.

Reads and writes of the held credential and the ticket happen only while
holding the refresher's :class:`asyncio.Lock`, and the lock is never held
across an ``await`` of the exchange itself. Waiters use
:func:`asyncio.shield`, so cancelling one waiting request abandons only that
request's wait. The refresh task and the other waiters carry on.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from netstack.exceptions import NetstackError, RefreshFailed, Unauthorized
from netstack.models import Credential

if TYPE_CHECKING:
    from netstack.environment import ProtectedAPIEnvironment

logger = logging.getLogger(__name__)


class RefresherState(str, enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass
class RefreshStats:
    """Counters describing how :meth:`CredentialRefresher.acquire` calls were served.

    Attributes:
        valid: Calls answered immediately from a non-expired credential.
        refreshes: Calls that started a refresh (one per ticket).
        queued: Calls that joined a refresh another caller had started.
    """

    valid: int = 0
    refreshes: int = 0
    queued: int = 0


def mask_token(token: Optional[str], keep: int = 4) -> str:
    """Return *token* with everything past the first *keep* characters hidden."""
    if not token:
        return "<none>"
    return token[:keep] + "****"


class CredentialRefresher:
    """Provide a valid credential, running at most one refresh at a time.

    Args:
        environment: The credential-protected environment that supplies the
            initial credential, the expiry check, the refresh token, and the
            refresh exchange.

    Example::

        refresher = CredentialRefresher(environment)
        credential = await refresher.acquire()
        headers = {"Authorization": f"Bearer {credential.token}"}
    """

    def __init__(self, environment: ProtectedAPIEnvironment) -> None:
        self._environment = environment
        self._credential: Optional[Credential] = environment.initial_credential()
        self._lock = asyncio.Lock()
        self._ticket: Optional[asyncio.Future[Credential]] = None
        self._refresh_task: Optional[asyncio.Task[None]] = None
        self.stats = RefreshStats()

    @property
    def state(self) -> RefresherState:
        return RefresherState.IDLE if self._ticket is None else RefresherState.REFRESHING

    @property
    def credential(self) -> Optional[Credential]:
        """The credential currently held, expired or not."""
        return self._credential

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def acquire(self) -> Credential:
        """Return a non-expired credential, refreshing it if necessary.

        A valid credential is returned without suspending. Otherwise the
        caller either starts a refresh or joins the one already running, and
        waits for its outcome.

        Raises:
            RefreshFailed: No refresh token was available, or the exchange
                failed.
            Unauthorized: The token endpoint rejected the refresh token.
        """
        async with self._lock:
            credential = self._credential
            if credential is not None and not self._environment.is_expired(credential):
                self.stats.valid += 1
                return credential
            ticket = self._join_or_start()
        return await asyncio.shield(ticket)

    async def force_refresh(self) -> Credential:
        """Discard the held credential and wait for a new one.

        If a refresh is already running this joins it instead of starting a
        second one.
        """
        async with self._lock:
            if self._ticket is None:
                self._credential = None
            ticket = self._join_or_start()
        return await asyncio.shield(ticket)

    async def aclose(self) -> None:
        """Cancel a pending refresh, if any, and wait for it to wind down."""
        task = self._refresh_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _join_or_start(self) -> asyncio.Future[Credential]:
        # Caller holds self._lock.
        if self._ticket is not None:
            self.stats.queued += 1
            logger.debug("Joining in-flight credential refresh")
            return self._ticket

        loop = asyncio.get_running_loop()
        ticket: asyncio.Future[Credential] = loop.create_future()
        ticket.add_done_callback(_retrieve_outcome)
        self._ticket = ticket
        self.stats.refreshes += 1
        self._refresh_task = loop.create_task(self._run_refresh(ticket))
        logger.debug("Starting credential refresh")
        return ticket

    async def _run_refresh(self, ticket: asyncio.Future[Credential]) -> None:
        outcome: Credential | NetstackError
        try:
            outcome = await self._exchange()
        except (RefreshFailed, Unauthorized) as exc:
            outcome = exc
        except asyncio.CancelledError:
            async with self._lock:
                self._ticket = None
            ticket.cancel()
            raise
        except Exception as exc:
            # Any other failure still has to reach every joiner.
            outcome = RefreshFailed(f"Credential refresh failed: {exc}")
            outcome.__cause__ = exc

        async with self._lock:
            if isinstance(outcome, Credential):
                self._credential = outcome
                ticket.set_result(outcome)
                logger.info("Credential refreshed (%s)", mask_token(outcome.token))
            else:
                self._credential = None
                ticket.set_exception(outcome)
                logger.warning("Credential refresh failed: %s", outcome)
            self._ticket = None

    async def _exchange(self) -> Credential:
        refresh_token = self._environment.refresh_token
        if not refresh_token:
            raise RefreshFailed("No refresh token available")
        credential = await self._environment.refresh(refresh_token)
        if self._environment.is_expired(credential):
            raise RefreshFailed("Token endpoint issued a credential that is already expired")
        return credential


def _retrieve_outcome(ticket: asyncio.Future[Credential]) -> None:
    # A ticket whose joiners were all cancelled would otherwise log
    # "Future exception was never retrieved".
    if not ticket.cancelled():
        ticket.exception()
