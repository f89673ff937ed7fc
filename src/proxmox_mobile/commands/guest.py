"""Virtual machine and container commands.

Both guest types share the same commands; vm_app targets QEMU guests and
ct_app targets LXC containers.
"""

import typer
from rich.console import Console

from proxmox_mobile.client.base import ProxmoxClient
from proxmox_mobile.client.models import GuestAction, GuestType
from proxmox_mobile.commands.common import get_output_format, run_with_client
from proxmox_mobile.utils.formatters import output_data

console = Console()

GUEST_COLUMNS = [
    {"key": "vmid", "header": "ID", "style": "cyan bold"},
    {"key": "name", "header": "Name"},
    {"key": "status", "header": "Status", "format": "status"},
    {"key": "cpu", "header": "CPU", "format": "cpu"},
    {"key": "mem", "header": "Memory", "format": "bytes"},
    {"key": "maxmem", "header": "Max Memory", "format": "bytes"},
    {"key": "uptime", "header": "Uptime", "format": "uptime"},
]


def _list_guests(ctx: typer.Context, guest_type: GuestType, node: str) -> None:
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        if guest_type is GuestType.QEMU:
            guests = await client.get_virtual_machines(node)
            label = "Virtual Machines"
        else:
            guests = await client.get_containers(node)
            label = "Containers"

        if not guests:
            console.print(f"[yellow]No {label.lower()} found on {node}[/yellow]")
            return

        guests = sorted(guests, key=lambda g: g.vmid)
        output_data(guests, output_format, table_columns=GUEST_COLUMNS, title=f"{label} on {node}")

    run_with_client(ctx, _run)


def _guest_status(ctx: typer.Context, guest_type: GuestType, node: str, vmid: int) -> None:
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        if guest_type is GuestType.QEMU:
            guest = await client.get_vm_status(node, vmid)
        else:
            guest = await client.get_container_status(node, vmid)
        output_data(guest, output_format, title=f"{guest_type.value}/{vmid}")

    run_with_client(ctx, _run)


def _guest_action(
    ctx: typer.Context,
    guest_type: GuestType,
    node: str,
    vmid: int,
    action: GuestAction,
) -> None:
    async def _run(client: ProxmoxClient) -> None:
        upid = await client.perform_action(node, vmid, action, guest_type)
        console.print(f"[green]{action.value} requested for {guest_type.value}/{vmid}[/green]")
        if upid:
            console.print(f"[dim]Task: {upid}[/dim]")

    run_with_client(ctx, _run)


def _build_app(guest_type: GuestType, help_text: str) -> typer.Typer:
    app = typer.Typer(help=help_text, no_args_is_help=True)
    noun = "VM" if guest_type is GuestType.QEMU else "container"

    @app.command("list", no_args_is_help=True)
    def list_command(
        ctx: typer.Context,
        node: str = typer.Argument(..., help="Node name"),
    ) -> None:
        """List guests on a node."""
        _list_guests(ctx, guest_type, node)

    @app.command("status", no_args_is_help=True)
    def status_command(
        ctx: typer.Context,
        node: str = typer.Argument(..., help="Node name"),
        vmid: int = typer.Argument(..., help=f"{noun} id"),
    ) -> None:
        """Show current status of a guest."""
        _guest_status(ctx, guest_type, node, vmid)

    @app.command("action", no_args_is_help=True)
    def action_command(
        ctx: typer.Context,
        node: str = typer.Argument(..., help="Node name"),
        vmid: int = typer.Argument(..., help=f"{noun} id"),
        action: GuestAction = typer.Argument(..., help="Power action"),
    ) -> None:
        """Start, stop, shut down, reset, suspend or resume a guest.

        Examples:
            proxmox-mobile vm action pve 100 start
            proxmox-mobile ct action pve 200 shutdown
        """
        _guest_action(ctx, guest_type, node, vmid, action)

    return app


vm_app = _build_app(GuestType.QEMU, "QEMU virtual machine management")
ct_app = _build_app(GuestType.LXC, "LXC container management")
