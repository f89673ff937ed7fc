"""Storage commands."""

from typing import Optional

import typer
from rich.console import Console

from proxmox_mobile.client.base import ProxmoxClient
from proxmox_mobile.commands.common import get_output_format, run_with_client
from proxmox_mobile.utils.formatters import output_data

app = typer.Typer(
    help="Storage and backup volumes",
    no_args_is_help=True,
)
console = Console()


@app.command("list", no_args_is_help=True)
def list_storages(
    ctx: typer.Context,
    node: str = typer.Argument(..., help="Node name"),
) -> None:
    """List storages available on a node.

    Examples:
        proxmox-mobile storage list pve
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        storages = await client.get_storages(node)

        if not storages:
            console.print(f"[yellow]No storages found on {node}[/yellow]")
            return

        table_columns = [
            {"key": "storage", "header": "Storage", "style": "cyan bold"},
            {"key": "type", "header": "Type"},
            {"key": "content", "header": "Content"},
            {"key": "active", "header": "Active", "format": "boolean"},
            {"key": "shared", "header": "Shared", "format": "boolean"},
            {"key": "used", "header": "Used", "format": "bytes"},
            {"key": "total", "header": "Total", "format": "bytes"},
        ]
        output_data(storages, output_format, table_columns=table_columns, title=f"Storage on {node}")

    run_with_client(ctx, _run)


@app.command("content", no_args_is_help=True)
def storage_content(
    ctx: typer.Context,
    node: str = typer.Argument(..., help="Node name"),
    storage: str = typer.Argument(..., help="Storage id"),
    content: Optional[str] = typer.Option(
        None, "--content", "-c", help="Only show this content type (backup, iso, images, ...)"
    ),
) -> None:
    """List volumes on a storage.

    Examples:
        proxmox-mobile storage content pve local --content backup
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        volumes = await client.get_storage_content(node, storage, content=content)

        if not volumes:
            console.print(f"[yellow]No content found on {storage}[/yellow]")
            return

        table_columns = [
            {"key": "volid", "header": "Volume", "style": "cyan"},
            {"key": "content", "header": "Content"},
            {"key": "format", "header": "Format"},
            {"key": "size", "header": "Size", "format": "bytes"},
            {"key": "ctime", "header": "Created", "format": "timestamp"},
            {"key": "notes", "header": "Notes"},
        ]
        output_data(volumes, output_format, table_columns=table_columns, title=f"{storage} on {node}")

    run_with_client(ctx, _run)
