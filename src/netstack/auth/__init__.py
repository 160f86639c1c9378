"""Credential handling for netstack.

- :class:`CredentialRefresher` -- hands out the current access credential and
  runs at most one refresh at a time, sharing its outcome with every waiter.
- :class:`CredentialStore` -- persistent, per-profile credential storage on
  disk.
- :func:`resolve_source` -- reads the secret a profile's ``env:``, ``file:``
  or ``store:`` source names.

Typical usage::

    from netstack.auth import CredentialRefresher

    refresher = CredentialRefresher(environment)
    credential = await refresher.acquire()
"""

from netstack.auth.credential_store import CredentialEntry, CredentialStore
from netstack.auth.refresher import CredentialRefresher, RefresherState, RefreshStats, mask_token
from netstack.auth.sources import resolve_source

__all__ = [
    "CredentialEntry",
    "CredentialRefresher",
    "CredentialStore",
    "RefreshStats",
    "RefresherState",
    "mask_token",
    "resolve_source",
]
