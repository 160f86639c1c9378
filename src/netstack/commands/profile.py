"""Profile commands -- create and inspect API targets.

Provides the ``netstack profile`` sub-command group. A profile names a base
URL and, optionally, the OAuth2 refresh settings used for credential-protected
APIs.

Typical workflow::

    netstack profile add myapi --base-url https://api.example.com \\
        --token-url https://auth.example.com/token --refresh-token-source env:MYAPI_RT
    netstack profile list
    netstack profile show myapi
"""

from __future__ import annotations

from typing import Optional

import typer

from netstack.output import error, format_response, get_output, info, print_table, success


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name."),
    base_url: str = typer.Option(..., "--base-url", help="Base URL for relative paths."),
    token_url: Optional[str] = typer.Option(
        None, "--token-url", help="OAuth2 token endpoint. Enables bearer auth."
    ),
    refresh_token_source: Optional[str] = typer.Option(
        None,
        "--refresh-token-source",
        help="Refresh token source: env:VAR, file:/path, store:PROFILE.",
    ),
    client_id_source: Optional[str] = typer.Option(None, "--client-id-source"),
    client_secret_source: Optional[str] = typer.Option(None, "--client-secret-source"),
    scope: Optional[list[str]] = typer.Option(None, "--scope", help="OAuth2 scope. Repeatable."),
    persist: bool = typer.Option(
        False, "--persist", help="Keep refreshed credentials in the credential store."
    ),
    timeout: float = typer.Option(10.0, "--timeout", help="Request timeout in seconds."),
    max_retries: int = typer.Option(3, "--max-retries", min=0),
    set_default: bool = typer.Option(False, "--default", help="Make this the default profile."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing profile."),
) -> None:
    """Create a profile.

    Raises:
        typer.Exit: With code 2 if the profile exists and ``--force`` was not
            given, or the base URL is invalid.
    """
    from netstack.config import load_global_config, profile_exists, save_global_config, save_profile
    from netstack.exceptions import InvalidURL
    from netstack.http.url import as_url
    from netstack.models import AuthConfig, Profile, RequestConfig

    if profile_exists(name) and not force:
        error(f"Profile '{name}' already exists. Use --force to overwrite.")
        raise typer.Exit(code=2)

    try:
        as_url(base_url)
    except InvalidURL as exc:
        error(str(exc))
        raise typer.Exit(code=2) from None

    auth = None
    if token_url:
        auth = AuthConfig(
            token_url=token_url,
            refresh_token_source=refresh_token_source,
            client_id_source=client_id_source,
            client_secret_source=client_secret_source,
            scopes=scope or [],
            persist=persist,
        )

    profile = Profile(
        name=name,
        base_url=base_url,
        auth=auth,
        request=RequestConfig(timeout=timeout, max_retries=max_retries),
    )
    save_profile(profile)

    if set_default:
        config = load_global_config()
        config.default_profile = name
        save_global_config(config)
        info(f"Default profile set to '{name}'.")

    success(f"Profile '{name}' saved.")


@profile_app.command("list")
def profile_list() -> None:
    """List all profiles."""
    from netstack.config import list_profiles, load_global_config, load_profile

    names = list_profiles()
    if not names:
        info("No profiles configured. Create one with: netstack profile add NAME --base-url URL")
        return

    default = load_global_config().default_profile
    rows = []
    for name in names:
        profile = load_profile(name)
        rows.append(
            [
                name + (" *" if name == default else ""),
                profile.base_url or "",
                profile.auth.type if profile.auth else "none",
            ]
        )
    print_table(["Name", "Base URL", "Auth"], rows, title="Profiles")


@profile_app.command("show")
def profile_show(name: str = typer.Argument(help="Profile name.")) -> None:
    """Show a profile's settings."""
    from netstack.config import load_profile

    profile = load_profile(name)
    format_response(profile.model_dump(mode="json"))


@profile_app.command("remove")
def profile_remove(
    name: str = typer.Argument(help="Profile name."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete a profile and its stored credentials."""
    from netstack.auth.credential_store import CredentialStore
    from netstack.config import delete_profile, load_global_config, save_global_config

    if not yes and not typer.confirm(f"Remove profile '{name}'?"):
        get_output().info("Aborted.")
        raise typer.Exit()

    delete_profile(name)
    CredentialStore(name).clear()

    config = load_global_config()
    if config.default_profile == name:
        config.default_profile = None
        save_global_config(config)

    success(f"Profile '{name}' removed.")
