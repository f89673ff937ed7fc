"""Main CLI application entry point.

This module defines the main Typer application with global options, the
session commands (login, logout, version) and registers all subcommands.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from proxmox_mobile import __version__
from proxmox_mobile.client.base import ProxmoxClient
from proxmox_mobile.client.exceptions import (
    ConfigurationError,
    ForbiddenError,
    InvalidCredentialsError,
    ProxmoxError,
    UnauthenticatedError,
)
from proxmox_mobile.commands import access as access_commands
from proxmox_mobile.commands import config as config_commands
from proxmox_mobile.commands import guest as guest_commands
from proxmox_mobile.commands import node as node_commands
from proxmox_mobile.commands import storage as storage_commands
from proxmox_mobile.commands import task as task_commands
from proxmox_mobile.commands.common import (
    connect,
    get_output_format,
    handle_error,
    load_profile,
    resolve_credentials,
)
from proxmox_mobile.config import FileCredentialStore
from proxmox_mobile.utils.formatters import output_data

install_rich_traceback(show_locals=False)

console = Console()

app = typer.Typer(
    name="proxmox-mobile",
    help="Command-line client for Proxmox VE hosts and clusters",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.add_typer(config_commands.app, name="config", help="Manage connection profiles")
app.add_typer(node_commands.app, name="node", help="Cluster node information")
app.add_typer(guest_commands.vm_app, name="vm", help="QEMU virtual machine management")
app.add_typer(guest_commands.ct_app, name="ct", help="LXC container management")
app.add_typer(storage_commands.app, name="storage", help="Storage and backup volumes")
app.add_typer(task_commands.app, name="task", help="Node task history")
app.add_typer(access_commands.user_app, name="user", help="User management")
app.add_typer(access_commands.cluster_app, name="cluster", help="Cluster status and resources")


class CLIContext:
    """Shared context for CLI commands."""

    def __init__(
        self,
        profile: Optional[str] = None,
        output_format: str = "table",
        verbose: int = 0,
        quiet: bool = False,
        log_file: Optional[Path] = None,
    ):
        self.profile = profile
        self.output_format = output_format
        self.verbose = verbose
        self.quiet = quiet
        self.log_file = log_file


@app.callback()
def main_callback(
    ctx: typer.Context,
    profile: Optional[str] = typer.Option(
        None,
        "--profile",
        "-p",
        help="Profile to use (overrides active profile)",
        envvar="PROXMOX_MOBILE_PROFILE",
    ),
    output_format: str = typer.Option(
        "table",
        "--output-format",
        "-o",
        help="Output format: table, json, yaml, plain",
        envvar="PROXMOX_MOBILE_OUTPUT_FORMAT",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv for more detail)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-essential output",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Write logs to file",
        exists=False,
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        is_eager=True,
    ),
) -> None:
    """proxmox-mobile - Manage Proxmox VE from the command line.

    Examples:
        proxmox-mobile --profile lab node list
        proxmox-mobile --output-format json vm list pve
        proxmox-mobile -vv login
    """
    if version:
        console.print(f"proxmox-mobile version {__version__}")
        raise typer.Exit(0)

    if quiet:
        log_level = logging.ERROR
    elif verbose == 0:
        log_level = logging.WARNING
    elif verbose == 1:
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG

    handlers: list[logging.Handler] = []

    if not quiet:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=verbose >= 2,
            show_path=verbose >= 3,
            rich_tracebacks=True,
        )
        console_handler.setLevel(log_level)
        handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if log_file else log_level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(__name__)
    logger.debug(f"proxmox-mobile v{__version__}")
    logger.debug(f"Output format: {output_format}")
    if profile:
        logger.debug(f"Profile: {profile}")

    ctx.obj = CLIContext(
        profile=profile,
        output_format=output_format,
        verbose=verbose,
        quiet=quiet,
        log_file=log_file,
    )


@app.command("login")
def login(
    ctx: typer.Context,
    save_credentials: bool = typer.Option(
        False,
        "--save-credentials",
        help="Store the password for this profile in the credentials file",
    ),
) -> None:
    """Check that the active profile can log in.

    Examples:
        proxmox-mobile login
        proxmox-mobile --profile lab login --save-credentials
    """
    try:
        name, profile = load_profile(ctx)
        credentials = resolve_credentials(name, profile)

        client = asyncio.run(connect(name, profile, credentials))
        session = client.session
        console.print(f"[green]Logged in as {session.username}[/green]")

        if save_credentials:
            FileCredentialStore(name).save(credentials)
            console.print(f"[dim]Credentials saved for profile '{name}'[/dim]")
    except ProxmoxError as e:
        handle_error(e)


@app.command("logout")
def logout(ctx: typer.Context) -> None:
    """Forget saved credentials for the active profile."""
    try:
        name, _ = load_profile(ctx)
    except ProxmoxError as e:
        handle_error(e)
        return

    FileCredentialStore(name).clear()
    console.print(f"[green]Cleared saved credentials for profile '{name}'[/green]")


@app.command("version")
def server_version(ctx: typer.Context) -> None:
    """Show the API version reported by the server (no login needed)."""
    output_format = get_output_format(ctx)
    try:
        _, profile = load_profile(ctx)
        info = asyncio.run(ProxmoxClient(profile.to_target()).get_version())
    except ProxmoxError as e:
        handle_error(e)
        return

    output_data(info, output_format, title="Server Version")


def main() -> None:
    """Main entry point with error handling.

    Wraps the Typer app so that errors escaping a command map to exit codes:
    1 for client errors, 2 for authentication, 3 for configuration and 130
    when interrupted.
    """
    try:
        app()
    except (InvalidCredentialsError, ForbiddenError, UnauthenticatedError) as e:
        console.print(f"[bold red]Authentication Error:[/bold red] {e}")
        console.print("\n[yellow]Tip:[/yellow] Check the profile with 'proxmox-mobile config show'")
        sys.exit(2)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        console.print("\n[yellow]Tip:[/yellow] Create a profile with 'proxmox-mobile config init'")
        sys.exit(3)
    except ProxmoxError as e:
        console.print(f"[bold red]Proxmox Error:[/bold red] {e}")
        if e.__cause__:
            console.print(f"[dim]Caused by: {e.__cause__}[/dim]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[bold red]Unexpected Error:[/bold red] {e}")
        console.print("\n[dim]This is a bug. Please report it with the --verbose flag output.[/dim]")
        sys.exit(1)


if __name__ == "__main__":
    main()
