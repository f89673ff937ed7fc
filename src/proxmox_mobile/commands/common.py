"""Shared plumbing for CLI commands.

Resolves the profile from the CLI context, establishes a session, runs the
async command body and turns client errors into exit codes.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import typer
from rich.console import Console

from proxmox_mobile.client.base import ProxmoxClient
from proxmox_mobile.client.exceptions import (
    ConfigurationError,
    ForbiddenError,
    InvalidCredentialsError,
    ProxmoxError,
    UnauthenticatedError,
)
from proxmox_mobile.client.models import Credentials
from proxmox_mobile.config import ConfigManager, FileCredentialStore, ProfileConfig

logger = logging.getLogger(__name__)
console = Console(stderr=True)

AUTH_ERRORS = (InvalidCredentialsError, ForbiddenError, UnauthenticatedError)


def get_output_format(ctx: typer.Context) -> str:
    return getattr(ctx.obj, "output_format", "table")


def load_profile(ctx: typer.Context) -> tuple[str, ProfileConfig]:
    """Resolve the selected or active profile.

    Raises:
        ConfigurationError: If configuration is missing or invalid
    """
    profile_name: Optional[str] = getattr(ctx.obj, "profile", None)
    _, profile, name = ConfigManager().get_profile_or_active(profile_name)
    logger.debug(f"Using profile '{name}' ({profile.host}:{profile.port})")
    return name, profile


def resolve_credentials(name: str, profile: ProfileConfig) -> Credentials:
    """Use saved credentials for the profile, or prompt for the password."""
    saved = FileCredentialStore(name).load()
    if saved is not None:
        logger.debug(f"Using saved credentials for profile '{name}'")
        return saved

    password = typer.prompt(f"Password for {profile.username}@{profile.realm}", hide_input=True)
    return profile.to_credentials(password)


async def connect(name: str, profile: ProfileConfig, credentials: Credentials) -> ProxmoxClient:
    """Create a client for the profile and log in.

    Saved credentials for the profile are forgotten when the server
    rejects them.

    Raises:
        ProxmoxError: If authentication fails
    """
    client = ProxmoxClient(profile.to_target())
    result = await client.login(credentials)
    if result.is_err:
        error = result.unwrap_err()
        if isinstance(error, InvalidCredentialsError):
            FileCredentialStore(name).clear()
        raise error
    return client


def handle_error(e: ProxmoxError) -> None:
    """Print a client error and exit with the matching code."""
    if isinstance(e, ConfigurationError):
        console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(3)
    if isinstance(e, AUTH_ERRORS):
        console.print(f"[red]Authentication Error:[/red] {e}")
        raise typer.Exit(2)
    console.print(f"[red]Error:[/red] {e}")
    raise typer.Exit(1)


def run_with_client(
    ctx: typer.Context,
    action: Callable[[ProxmoxClient], Awaitable[None]],
) -> None:
    """Log in with the active profile and run an async command body.

    Args:
        ctx: Typer context with CLIContext object
        action: Coroutine function receiving the logged-in client
    """
    try:
        name, profile = load_profile(ctx)
        credentials = resolve_credentials(name, profile)

        async def _main() -> None:
            client = await connect(name, profile, credentials)
            await action(client)

        asyncio.run(_main())
    except ProxmoxError as e:
        handle_error(e)
