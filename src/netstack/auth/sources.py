"""Secrets named by a profile's ``*_source`` fields.

A profile never holds a secret directly. Its ``auth`` section names where to
find one instead:

``env:VAR``
    The value of environment variable ``VAR``.
``file:PATH``
    The contents of ``PATH`` (``~`` expanded), surrounding whitespace
    stripped.
``store:PROFILE``
    The refresh token saved in ``PROFILE``'s :class:`CredentialStore` entry.

Sources are read lazily from inside a refresh, so none of them may block on
user input.
"""

from __future__ import annotations

import os
from pathlib import Path

from netstack.auth.credential_store import CredentialStore
from netstack.exceptions import ConfigError


def _from_env(name: str) -> str:
    value = os.environ.get(name)
    if value is None:
        raise ConfigError(f"Environment variable '{name}' is not set")
    return value


def _from_file(location: str) -> str:
    path = Path(location).expanduser()
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError as exc:
        raise ConfigError(f"Credential file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc


def _from_store(profile_name: str) -> str:
    entry = CredentialStore(profile_name).load()
    if entry is None or not entry.refresh_token:
        raise ConfigError(f"No refresh token in store for profile '{profile_name}'")
    return entry.refresh_token


_RESOLVERS = {"env": _from_env, "file": _from_file, "store": _from_store}


def resolve_source(source: str) -> str:
    """Return the secret *source* points at.

    Raises:
        ConfigError: The scheme is unknown or the secret is missing.
    """
    scheme, sep, target = source.partition(":")
    resolver = _RESOLVERS.get(scheme)
    if not sep or resolver is None:
        raise ConfigError(f"Unknown credential source format: {source}")
    return resolver(target)
