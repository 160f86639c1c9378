"""Pydantic models shared across netstack.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`AuthConfig`, :class:`RequestConfig`, :class:`ConnectivityConfig`,
    :class:`GlobalConfig`, and :class:`Profile`.

**Runtime models** -- values that flow through a request:
    :class:`HTTPMethod` and :class:`Credential`.

All models use Pydantic v2. ``Profile`` and ``AuthConfig`` accept unknown keys
(``extra="allow"``) so that hand-edited profile files keep their extra fields
across a load/save cycle.
"""

from __future__ import annotations

import enum
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Auth Config ---


class AuthConfig(BaseModel):
    """Credential-refresh settings embedded in a :class:`Profile`.

    A profile with an ``auth`` section is *credential-protected*: every
    request carries a bearer token, and an expired token is exchanged for a
    new one at ``token_url`` using the refresh token resolved from
    ``refresh_token_source``.

    Example::

        AuthConfig(
            token_url="https://auth.example.com/oauth/token",
            client_id_source="env:MY_CLIENT_ID",
            refresh_token_source="store:my-api",
        )
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(
        default="oauth2_refresh_token",
        description="Refresh strategy. Only oauth2_refresh_token is built in",
    )
    token_url: Optional[str] = Field(
        default=None, description="OAuth2 token endpoint for the refresh_token grant"
    )
    client_id_source: Optional[str] = None
    client_secret_source: Optional[str] = None
    refresh_token_source: Optional[str] = Field(
        default=None,
        description="Credential source for the refresh token: env:VAR, file:/path, store:PROFILE",
    )
    access_token_source: Optional[str] = Field(
        default=None, description="Optional source for an initial access token"
    )
    scopes: list[str] = Field(default_factory=list)
    expiry_margin_seconds: int = Field(
        default=30,
        description="Treat a token as expired this many seconds before its real expiry",
    )
    persist: bool = Field(
        default=False, description="Persist refreshed credentials to the credential store"
    )


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every call made with a profile."""

    timeout: float = Field(default=10.0, description="Per-request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(
        default=3, ge=0, description="Extra attempts after a transport failure"
    )
    backoff_factor: float = Field(
        default=0.5,
        ge=0,
        description="Sleep backoff_factor * 2**attempt seconds between attempts",
    )
    fail_fast_offline: bool = Field(
        default=False,
        description="Skip the transport call when the connectivity observer reports offline",
    )


class ConnectivityConfig(BaseModel):
    """Reachability check settings stored in :class:`GlobalConfig`."""

    host: str = Field(default="1.1.1.1", description="Host contacted to check reachability")
    port: int = Field(default=443, description="TCP port contacted to check reachability")
    interval_seconds: float = Field(default=10.0, description="Seconds between reachability checks")
    timeout_seconds: float = Field(default=3.0, description="Connect timeout for a reachability check")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/netstack/config.json``.

    Loaded and saved by :func:`~netstack.config.load_global_config` and
    :func:`~netstack.config.save_global_config`. See
    :func:`~netstack.config.resolve_config` for how it combines with
    environment variables and CLI flags.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    connectivity: ConnectivityConfig = Field(default_factory=ConnectivityConfig)


class Profile(BaseModel):
    """One API target, stored as JSON under the ``profiles/`` config directory.

    A profile without ``auth`` describes an unauthenticated environment:
    requests go out without an ``Authorization`` header and no refresh is
    ever attempted.

    See Also:
        :func:`~netstack.config.load_profile`: Deserialise a profile by name.
        :func:`~netstack.environment.build_environment`: Turn a profile into
        a runtime environment.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    base_url: Optional[str] = Field(
        default=None, description="Base URL that relative request paths are resolved against"
    )
    auth: Optional[AuthConfig] = None
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Runtime Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods a :class:`~netstack.routes.Route` can declare."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class Credential(BaseModel):
    """A bearer access token and the moment it stops being valid.

    Credentials are immutable: a refresh produces a new instance rather than
    updating an existing one. ``expires_at=None`` means the token carries no
    expiry information and is treated as valid until the server says
    otherwise.

    ``issued_at`` is known for tokens built with :meth:`from_expires_in`. It
    caps the expiry margin at half the token's lifetime, so a short-lived
    token is still usable for a while after it is issued.
    """

    model_config = ConfigDict(frozen=True)

    token: str
    expires_at: Optional[datetime] = None
    issued_at: Optional[datetime] = None

    @classmethod
    def from_expires_in(cls, token: str, expires_in: Optional[float]) -> Credential:
        """Build a credential from an OAuth2-style ``expires_in`` lifetime."""
        if expires_in is None:
            return cls(token=token)
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(seconds=float(expires_in))
        return cls(token=token, expires_at=expires_at, issued_at=issued_at)

    def is_expired(self, margin_seconds: float = 0, now: Optional[datetime] = None) -> bool:
        """Return ``True`` if the token expires within *margin_seconds* of *now*."""
        if not self.token:
            return True
        if self.expires_at is None:
            return False
        current = now or datetime.now(timezone.utc)
        expires_at = _as_utc(self.expires_at)
        if self.issued_at is not None:
            lifetime = (expires_at - _as_utc(self.issued_at)).total_seconds()
            margin_seconds = min(margin_seconds, max(lifetime, 0) / 2)
        return current + timedelta(seconds=margin_seconds) >= expires_at


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value
