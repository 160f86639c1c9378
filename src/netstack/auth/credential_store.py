"""Persistent per-profile credential store.

Stores the latest access token, its expiry, and the current refresh token in
``$XDG_DATA_HOME/netstack/credentials/<profile>.json``. Files are written
atomically with ``0o600`` permissions so secrets are never world-readable,
even momentarily.

The store is written by :class:`~netstack.environment.OAuth2Environment`
after each successful refresh (when the profile sets ``persist``), and read
back as the initial credential on the next run.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from netstack.config import _atomic_write, get_data_dir
from netstack.models import Credential


class CredentialEntry(BaseModel):
    """A stored credential.

    Attributes:
        access_token: The bearer token last issued by the token endpoint.
        expires_at: UTC expiry of ``access_token``; ``None`` if unknown.
        issued_at: When ``access_token`` was issued, if known. Kept so the
            expiry margin still fits a short-lived token after a restart.
        refresh_token: Refresh token to use for the next exchange. Token
            endpoints that rotate refresh tokens overwrite it on every refresh.
        updated_at: When this entry was written.
    """

    access_token: str = ""
    expires_at: Optional[datetime] = None
    issued_at: Optional[datetime] = None
    refresh_token: Optional[str] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_credential(self) -> Optional[Credential]:
        if not self.access_token:
            return None
        return Credential(
            token=self.access_token, expires_at=self.expires_at, issued_at=self.issued_at
        )


def _credentials_dir() -> Path:
    path = get_data_dir() / "credentials"
    path.mkdir(parents=True, exist_ok=True)
    return path


class CredentialStore:
    """Read/write the stored credential for a single profile.

    Args:
        profile_name: The profile identifier used to derive the file name.

    Example::

        store = CredentialStore("my-api")
        store.save(CredentialEntry(access_token="tok", refresh_token="rt"))
        assert store.load().refresh_token == "rt"
    """

    def __init__(self, profile_name: str) -> None:
        self._profile_name = profile_name
        self._path = _credentials_dir() / f"{profile_name}.json"

    @property
    def path(self) -> Path:
        return self._path

    def save(self, entry: CredentialEntry) -> None:
        """Persist *entry* atomically with ``0o600`` permissions."""
        text = json.dumps(entry.model_dump(mode="json"), indent=2) + "\n"
        _atomic_write(self._path, text, mode=0o600)

    def load(self) -> Optional[CredentialEntry]:
        """Return the stored entry, or ``None`` if missing or unreadable."""
        if not self._path.is_file():
            return None
        try:
            return CredentialEntry.model_validate(json.loads(self._path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, ValueError, OSError):
            return None

    def store_credential(self, credential: Credential, refresh_token: Optional[str]) -> None:
        """Record a freshly issued credential, keeping the old refresh token if none is given."""
        previous = self.load()
        if refresh_token is None and previous is not None:
            refresh_token = previous.refresh_token
        self.save(
            CredentialEntry(
                access_token=credential.token,
                expires_at=credential.expires_at,
                issued_at=credential.issued_at,
                refresh_token=refresh_token,
            )
        )

    def clear(self) -> None:
        if self._path.is_file():
            self._path.unlink()
