"""Task commands."""

import typer
from rich.console import Console

from proxmox_mobile.client.base import ProxmoxClient
from proxmox_mobile.commands.common import get_output_format, run_with_client
from proxmox_mobile.utils.formatters import output_data

app = typer.Typer(
    help="Node task history",
    no_args_is_help=True,
)
console = Console()


@app.command("list", no_args_is_help=True)
def list_tasks(
    ctx: typer.Context,
    node: str = typer.Argument(..., help="Node name"),
    limit: int = typer.Option(50, "--limit", "-n", help="Number of tasks to show"),
    start: int = typer.Option(0, "--start", help="Offset of the first task"),
) -> None:
    """List recent tasks on a node.

    Examples:
        proxmox-mobile task list pve --limit 100
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        tasks = await client.get_tasks(node, limit=limit, start=start)

        if not tasks:
            console.print(f"[yellow]No tasks found on {node}[/yellow]")
            return

        table_columns = [
            {"key": "starttime", "header": "Started", "format": "timestamp"},
            {"key": "type", "header": "Type", "style": "cyan"},
            {"key": "id", "header": "ID"},
            {"key": "user", "header": "User"},
            {"key": "status", "header": "Status"},
        ]
        output_data(tasks, output_format, table_columns=table_columns, title=f"Tasks on {node}")

    run_with_client(ctx, _run)


@app.command("status", no_args_is_help=True)
def task_status(
    ctx: typer.Context,
    node: str = typer.Argument(..., help="Node name"),
    upid: str = typer.Argument(..., help="Task UPID"),
) -> None:
    """Show status of a task.

    Examples:
        proxmox-mobile task status pve 'UPID:pve:000A1B2C:...'
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        task = await client.get_task_status(node, upid)
        output_data(task, output_format, title="Task Status")

    run_with_client(ctx, _run)
