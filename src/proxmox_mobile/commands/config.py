"""Configuration management commands.

This module provides commands for managing server profiles: creating,
listing, switching and removing them.
"""

import typer
from rich.console import Console
from rich.table import Table

from proxmox_mobile.client.exceptions import ConfigurationError
from proxmox_mobile.config import ConfigManager, FileCredentialStore, ProfileConfig
from proxmox_mobile.utils.formatters import format_key_value_output

app = typer.Typer(
    help="Manage CLI configuration and profiles",
    no_args_is_help=True,
)
console = Console()


@app.command("init")
def init_config(
    profile: str = typer.Option(
        "default",
        "--profile",
        "-p",
        help="Profile name to create or update",
    ),
    host: str = typer.Option(
        ...,
        "--host",
        "-H",
        help="Proxmox VE host (e.g., pve.local or 192.168.1.10)",
        prompt="Proxmox VE host",
    ),
    port: int = typer.Option(8006, "--port", help="API port"),
    username: str = typer.Option(
        ...,
        "--username",
        "-u",
        help="Login name without realm",
        prompt="Username",
    ),
    realm: str = typer.Option("pam", "--realm", "-r", help="Authentication realm (pam, pve, ...)"),
    use_https: bool = typer.Option(True, "--https/--http", help="Use https"),
    verify_tls: bool = typer.Option(
        True,
        "--verify-tls/--no-verify-tls",
        help="Verify TLS certificates (disabling is INSECURE)",
    ),
    timeout: int = typer.Option(30, "--timeout", "-t", help="Request timeout in seconds"),
    set_active: bool = typer.Option(
        True,
        "--set-active/--no-set-active",
        help="Set this profile as active",
    ),
) -> None:
    """Initialize or update a configuration profile.

    Examples:
        # Interactive setup
        proxmox-mobile config init

        # Non-interactive setup for a lab host with a self-signed certificate
        proxmox-mobile config init --host pve.local --username root --no-verify-tls
    """
    config_mgr = ConfigManager()

    try:
        config = config_mgr.load_or_default()
        profile_config = ProfileConfig(
            host=host,
            port=port,
            username=username,
            realm=realm,
            use_https=use_https,
            verify_tls=verify_tls,
            timeout=timeout,
        )
    except (ConfigurationError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(3)

    is_update = profile in config.profiles
    config = config_mgr.add_profile(config, profile, profile_config, set_active=set_active)

    try:
        config_mgr.save(config)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(3)

    if is_update:
        console.print(f"[green]Profile '{profile}' updated successfully![/green]")
    else:
        console.print(f"[green]Profile '{profile}' created successfully![/green]")

    if config.active_profile == profile:
        console.print(f"[dim]Active profile set to: {profile}[/dim]")

    console.print(f"\n[dim]Configuration saved to: {config_mgr.config_file}[/dim]")

    if not verify_tls:
        console.print(
            "\n[yellow]Warning:[/yellow] TLS verification is disabled. Any certificate "
            "and any hostname will be accepted for this profile."
        )


@app.command("list")
def list_profiles() -> None:
    """List all configured profiles.

    Examples:
        proxmox-mobile config list
    """
    config_mgr = ConfigManager()

    try:
        config = config_mgr.load()
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(3)

    if not config.profiles:
        console.print("[yellow]No profiles configured.[/yellow]")
        console.print("\nRun 'proxmox-mobile config init' to create your first profile.")
        return

    table = Table(title="Proxmox Profiles", show_header=True, header_style="bold magenta")
    table.add_column("Profile", style="cyan", no_wrap=True)
    table.add_column("Endpoint", style="green")
    table.add_column("User", style="white")
    table.add_column("TLS", style="yellow")
    table.add_column("Active", style="bold green")

    for name, profile in config.profiles.items():
        scheme = "https" if profile.use_https else "http"
        table.add_row(
            name,
            f"{scheme}://{profile.host}:{profile.port}",
            f"{profile.username}@{profile.realm}",
            "verify" if profile.verify_tls else "[red]insecure[/red]",
            "✓" if name == config.active_profile else "",
        )

    console.print(table)


@app.command("show")
def show_config(
    profile: str = typer.Option(
        None,
        "--profile",
        "-p",
        help="Profile to show (defaults to active profile)",
    ),
) -> None:
    """Show configuration details for a profile.

    Examples:
        proxmox-mobile config show
        proxmox-mobile config show --profile lab
    """
    config_mgr = ConfigManager()

    try:
        config, profile_config, profile_name = config_mgr.get_profile_or_active(profile)
        has_saved = FileCredentialStore(profile_name, config_mgr.config_dir).load() is not None
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(3)

    details = {"profile": profile_name, **profile_config.model_dump()}
    details["active"] = profile_name == config.active_profile
    details["saved_credentials"] = has_saved
    format_key_value_output(details, title=f"Profile: {profile_name}")


@app.command("use", no_args_is_help=True)
def use_profile(
    profile: str = typer.Argument(..., help="Profile to make active"),
) -> None:
    """Switch the active profile.

    Examples:
        proxmox-mobile config use lab
    """
    config_mgr = ConfigManager()

    try:
        config = config_mgr.load()
        config.get_profile(profile)
        config.active_profile = profile
        config_mgr.save(config)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(3)

    console.print(f"[green]Active profile set to: {profile}[/green]")


@app.command("remove", no_args_is_help=True)
def remove_profile(
    profile: str = typer.Argument(..., help="Profile to remove"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove a profile and its saved credentials.

    Examples:
        proxmox-mobile config remove lab --yes
    """
    config_mgr = ConfigManager()

    try:
        config = config_mgr.load()
        config.get_profile(profile)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(3)

    if not yes and not typer.confirm(f"Remove profile '{profile}'?"):
        raise typer.Exit(0)

    try:
        config = config_mgr.remove_profile(config, profile)
        config_mgr.save(config)
        FileCredentialStore(profile, config_mgr.config_dir).clear()
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(3)

    console.print(f"[green]Profile '{profile}' removed[/green]")
