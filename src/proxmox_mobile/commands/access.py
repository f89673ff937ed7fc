"""User and cluster commands."""

from typing import Optional

import typer
from rich.console import Console

from proxmox_mobile.client.base import ProxmoxClient
from proxmox_mobile.commands.common import get_output_format, run_with_client
from proxmox_mobile.utils.formatters import output_data

user_app = typer.Typer(
    help="User management",
    no_args_is_help=True,
)
cluster_app = typer.Typer(
    help="Cluster status and resources",
    no_args_is_help=True,
)
console = Console()


@user_app.command("list")
def list_users(ctx: typer.Context) -> None:
    """List users.

    Examples:
        proxmox-mobile user list
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        users = await client.get_users()
        table_columns = [
            {"key": "userid", "header": "User", "style": "cyan bold"},
            {"key": "enable", "header": "Enabled", "format": "boolean"},
            {"key": "firstname", "header": "First Name"},
            {"key": "lastname", "header": "Last Name"},
            {"key": "email", "header": "Email"},
            {"key": "expire", "header": "Expires", "format": "timestamp"},
        ]
        output_data(users, output_format, table_columns=table_columns, title="Users")

    run_with_client(ctx, _run)


@cluster_app.command("status")
def cluster_status(ctx: typer.Context) -> None:
    """Show cluster membership and quorum.

    Examples:
        proxmox-mobile cluster status
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        entries = await client.get_cluster_status()
        table_columns = [
            {"key": "name", "header": "Name", "style": "cyan bold"},
            {"key": "type", "header": "Type"},
            {"key": "ip", "header": "IP"},
            {"key": "online", "header": "Online", "format": "boolean"},
            {"key": "quorate", "header": "Quorate"},
        ]
        output_data(entries, output_format, table_columns=table_columns, title="Cluster")

    run_with_client(ctx, _run)


@cluster_app.command("resources")
def cluster_resources(
    ctx: typer.Context,
    resource_type: Optional[str] = typer.Option(
        None, "--type", help="Only list vm, storage, node or sdn resources"
    ),
) -> None:
    """List resources across the cluster.

    Examples:
        proxmox-mobile cluster resources --type vm
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        resources = await client.get_cluster_resources(resource_type)
        table_columns = [
            {"key": "id", "header": "ID", "style": "cyan bold"},
            {"key": "type", "header": "Type"},
            {"key": "node", "header": "Node"},
            {"key": "name", "header": "Name"},
            {"key": "status", "header": "Status", "format": "status"},
            {"key": "mem", "header": "Memory", "format": "bytes"},
        ]
        output_data(resources, output_format, table_columns=table_columns, title="Cluster Resources")

    run_with_client(ctx, _run)
