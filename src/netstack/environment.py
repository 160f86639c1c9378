"""API environments -- where requests go and how they are authorised.

An environment tells :class:`~netstack.client.AsyncClient` three things:

1. The base URL that relative request paths resolve against.
2. Optionally, a replacement httpx transport (mock mode, used by tests and
   offline demos).
3. For credential-protected APIs, how to tell whether a credential has
   expired and how to exchange a refresh token for a new one.

Classes:
    :class:`APIEnvironment` -- unauthenticated environment.
    :class:`MockAPIEnvironment` -- unauthenticated environment with a
    mandatory substitute transport.
    :class:`ProtectedAPIEnvironment` -- abstract base for credential-protected
    environments.
    :class:`OAuth2Environment` -- protected environment that refreshes via
    the OAuth2 ``refresh_token`` grant, configured from a
    :class:`~netstack.models.Profile`.

:func:`build_environment` picks the right class for a profile.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from netstack.auth.credential_store import CredentialStore
from netstack.auth.refresher import mask_token
from netstack.auth.sources import resolve_source
from netstack.exceptions import ConfigError, RefreshFailed, Unauthorized
from netstack.http.classifier import curl_output
from netstack.http.url import URLInput, as_url
from netstack.keys import ACCEPT, APPLICATION_JSON
from netstack.models import AuthConfig, Credential, Profile

logger = logging.getLogger(__name__)


class APIEnvironment:
    """An API target that needs no credentials.

    Args:
        base_url: Base URL for relative request paths, or ``None`` if every
            request carries an absolute URL.
        transport: Optional httpx transport replacing the network.
    """

    def __init__(
        self,
        base_url: Optional[URLInput] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = as_url(base_url) if base_url else None
        self._transport = transport

    @property
    def base_url(self) -> Optional[httpx.URL]:
        return self._base_url

    @property
    def transport(self) -> Optional[httpx.AsyncBaseTransport]:
        return self._transport


class MockAPIEnvironment(APIEnvironment):
    """Unauthenticated environment whose requests never leave the process.

    Example::

        env = MockAPIEnvironment(
            httpx.MockTransport(lambda request: httpx.Response(200, json=[])),
            base_url="https://api.example.com",
        )
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        base_url: Optional[URLInput] = None,
    ) -> None:
        super().__init__(base_url=base_url, transport=transport)


class ProtectedAPIEnvironment(APIEnvironment, ABC):
    """Base class for environments whose requests carry a bearer credential.

    Subclasses provide :attr:`refresh_token` and :meth:`refresh`. They may
    override :meth:`initial_credential` to seed the refresher with a token
    that is already known, and :meth:`is_expired` to change the expiry rule.

    Args:
        base_url: Base URL for relative request paths.
        transport: Optional httpx transport replacing the network.
        expiry_margin_seconds: A credential counts as expired this many
            seconds before its real expiry.
    """

    def __init__(
        self,
        base_url: Optional[URLInput] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        expiry_margin_seconds: float = 30,
    ) -> None:
        super().__init__(base_url=base_url, transport=transport)
        self.expiry_margin_seconds = expiry_margin_seconds

    def initial_credential(self) -> Optional[Credential]:
        """Return the credential to start with, or ``None`` to refresh on first use."""
        return None

    def is_expired(self, credential: Credential) -> bool:
        return credential.is_expired(margin_seconds=self.expiry_margin_seconds)

    @property
    @abstractmethod
    def refresh_token(self) -> Optional[str]:
        """The refresh token to exchange, or ``None`` when none is available."""
        ...

    @abstractmethod
    async def refresh(self, refresh_token: str) -> Credential:
        """Exchange *refresh_token* for a new access credential.

        Raises:
            RefreshFailed: The exchange failed.
            Unauthorized: The token endpoint rejected *refresh_token*.
        """
        ...


class OAuth2Environment(ProtectedAPIEnvironment):
    """Protected environment that refreshes through the OAuth2 ``refresh_token`` grant.

    The refresh token comes from the credential store (when the profile
    persists credentials and one has been stored) or from
    ``auth.refresh_token_source``. Rotated refresh tokens returned by the
    token endpoint replace the current one.

    Args:
        profile: Profile with an ``auth`` section.
        transport: Optional httpx transport used for both API requests and the
            token exchange.
        store: Credential store override. Defaults to the profile's store
            when ``auth.persist`` is set, otherwise no persistence.
    """

    def __init__(
        self,
        profile: Profile,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        store: Optional[CredentialStore] = None,
    ) -> None:
        if profile.auth is None:
            raise ConfigError(f"Profile '{profile.name}' has no auth section")
        super().__init__(
            base_url=profile.base_url,
            transport=transport,
            expiry_margin_seconds=profile.auth.expiry_margin_seconds,
        )
        self._profile = profile
        self._auth: AuthConfig = profile.auth
        self._timeout = profile.request.timeout
        self._verify_ssl = profile.request.verify_ssl
        if store is None and self._auth.persist:
            store = CredentialStore(profile.name)
        self._store = store
        self._refresh_token: Optional[str] = None

    def initial_credential(self) -> Optional[Credential]:
        if self._store is not None:
            entry = self._store.load()
            if entry is not None and entry.to_credential() is not None:
                return entry.to_credential()
        if self._auth.access_token_source:
            try:
                return Credential(token=resolve_source(self._auth.access_token_source))
            except ConfigError as exc:
                logger.warning("Ignoring access_token_source: %s", exc)
        return None

    @property
    def refresh_token(self) -> Optional[str]:
        if self._refresh_token:
            return self._refresh_token
        if self._store is not None:
            entry = self._store.load()
            if entry is not None and entry.refresh_token:
                self._refresh_token = entry.refresh_token
                return self._refresh_token
        if self._auth.refresh_token_source:
            try:
                self._refresh_token = resolve_source(self._auth.refresh_token_source)
            except ConfigError as exc:
                logger.warning("Refresh token unavailable: %s", exc)
                return None
        return self._refresh_token

    async def refresh(self, refresh_token: str) -> Credential:
        """POST the ``refresh_token`` grant to ``auth.token_url``.

        Raises:
            Unauthorized: On HTTP 401 / 403 from the token endpoint.
            RefreshFailed: On any other failure, including a response without
                an ``access_token``.
        """
        token_data = await self._fetch_token(refresh_token)

        credential = Credential.from_expires_in(
            token_data["access_token"], token_data.get("expires_in")
        )
        rotated = token_data.get("refresh_token")
        if rotated:
            self._refresh_token = rotated
        else:
            self._refresh_token = refresh_token

        if self._store is not None:
            self._store.store_credential(credential, self._refresh_token)
        logger.debug(
            "Token endpoint issued %s for profile %s",
            mask_token(credential.token),
            self._profile.name,
        )
        return credential

    async def _fetch_token(self, refresh_token: str) -> dict[str, Any]:
        if not self._auth.token_url:
            raise RefreshFailed("token_url is required for the oauth2_refresh_token auth type")

        data: dict[str, str] = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        try:
            if self._auth.client_id_source:
                data["client_id"] = resolve_source(self._auth.client_id_source)
            if self._auth.client_secret_source:
                data["client_secret"] = resolve_source(self._auth.client_secret_source)
        except ConfigError as exc:
            raise RefreshFailed(f"Cannot resolve client credentials: {exc}") from exc
        if self._auth.scopes:
            data["scope"] = " ".join(self._auth.scopes)

        async with httpx.AsyncClient(
            timeout=self._timeout,
            verify=self._verify_ssl,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(
                    self._auth.token_url,
                    data=data,
                    headers={ACCEPT: APPLICATION_JSON},
                )
                response.raise_for_status()
                token_data = response.json()
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code in (401, 403):
                    raise Unauthorized(curl_output(exc.response)) from exc
                raise RefreshFailed(
                    f"Token request failed with status {exc.response.status_code}: "
                    f"{exc.response.text}"
                ) from exc
            except httpx.HTTPError as exc:
                raise RefreshFailed(f"Token request failed: {exc}") from exc
            except ValueError as exc:
                raise RefreshFailed(f"Token response is not JSON: {exc}") from exc

        if not isinstance(token_data, dict) or "access_token" not in token_data:
            raise RefreshFailed("Token response missing 'access_token' field")
        return token_data


def build_environment(
    profile: Profile,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> APIEnvironment:
    """Return the environment described by *profile*.

    Raises:
        ConfigError: If the profile's auth type is not supported.
    """
    if profile.auth is None:
        return APIEnvironment(base_url=profile.base_url, transport=transport)
    if profile.auth.type == "oauth2_refresh_token":
        return OAuth2Environment(profile, transport=transport)
    raise ConfigError(
        f"Unsupported auth type '{profile.auth.type}' in profile '{profile.name}'. "
        "Supported types: oauth2_refresh_token"
    )
