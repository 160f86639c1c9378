"""Auth commands -- inspect and refresh credentials.

Provides the ``netstack auth`` sub-command group.

Typical workflow::

    netstack auth status myapi    # what is stored, and is it still valid?
    netstack auth refresh myapi   # exchange the refresh token now
    netstack auth clear myapi     # forget stored credentials
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from netstack.output import error, format_response, info, success


auth_app = typer.Typer(no_args_is_help=True)


def _resolve_profile(ctx: typer.Context, profile_name: Optional[str]):  # noqa: ANN202
    from netstack.config import load_profile, resolve_config

    if profile_name:
        return load_profile(profile_name)
    ctx.ensure_object(dict)
    _, profile = resolve_config(cli_profile=ctx.obj.get("profile"))
    if profile is None:
        error("No profile selected. Pass a profile name or use --profile.")
        raise typer.Exit(code=2)
    return profile


@auth_app.command("status")
def auth_status(
    ctx: typer.Context,
    profile_name: Optional[str] = typer.Argument(None, help="Profile name."),
) -> None:
    """Show the stored credential for a profile, with the token masked."""
    from netstack.auth.credential_store import CredentialStore
    from netstack.auth.refresher import mask_token

    profile = _resolve_profile(ctx, profile_name)
    if profile.auth is None:
        info(f"Profile '{profile.name}' does not use authentication.")
        return

    entry = CredentialStore(profile.name).load()
    credential = entry.to_credential() if entry is not None else None
    format_response(
        {
            "profile": profile.name,
            "type": profile.auth.type,
            "token_url": profile.auth.token_url,
            "persist": profile.auth.persist,
            "access_token": mask_token(credential.token if credential else None),
            "expires_at": credential.expires_at.isoformat() if credential and credential.expires_at else None,
            "expired": credential.is_expired(profile.auth.expiry_margin_seconds) if credential else None,
            "refresh_token": mask_token(entry.refresh_token if entry else None),
        }
    )


@auth_app.command("refresh")
def auth_refresh(
    ctx: typer.Context,
    profile_name: Optional[str] = typer.Argument(None, help="Profile name."),
) -> None:
    """Exchange the refresh token for a new access token now.

    Raises:
        RefreshFailed: The exchange failed or no refresh token is available.
        Unauthorized: The token endpoint rejected the refresh token.
    """
    from netstack.auth.refresher import CredentialRefresher, mask_token
    from netstack.environment import ProtectedAPIEnvironment, build_environment

    profile = _resolve_profile(ctx, profile_name)
    environment = build_environment(profile)
    if not isinstance(environment, ProtectedAPIEnvironment):
        error(f"Profile '{profile.name}' does not use authentication.")
        raise typer.Exit(code=2)

    async def _run():  # noqa: ANN202
        refresher = CredentialRefresher(environment)
        try:
            return await refresher.force_refresh()
        finally:
            await refresher.aclose()

    credential = asyncio.run(_run())
    expiry = credential.expires_at.isoformat() if credential.expires_at else "no expiry"
    success(f"Refreshed credential for '{profile.name}': {mask_token(credential.token)} ({expiry})")
    if not profile.auth.persist:
        info("The profile does not persist credentials; the new token was not stored.")


@auth_app.command("clear")
def auth_clear(
    ctx: typer.Context,
    profile_name: Optional[str] = typer.Argument(None, help="Profile name."),
) -> None:
    """Delete stored credentials for a profile."""
    from netstack.auth.credential_store import CredentialStore

    profile = _resolve_profile(ctx, profile_name)
    CredentialStore(profile.name).clear()
    success(f"Stored credentials for '{profile.name}' removed.")
