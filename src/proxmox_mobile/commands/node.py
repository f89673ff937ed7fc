"""Node commands.

Listing nodes, showing node status and resource usage history.
"""

import typer
from rich.console import Console

from proxmox_mobile.client.base import ProxmoxClient
from proxmox_mobile.client.models import Timeframe
from proxmox_mobile.commands.common import get_output_format, run_with_client
from proxmox_mobile.utils.formatters import (
    format_bytes,
    format_cpu,
    format_percentage,
    output_data,
)

app = typer.Typer(
    help="Cluster node information",
    no_args_is_help=True,
)
console = Console()


@app.command("list")
def list_nodes(ctx: typer.Context) -> None:
    """List cluster nodes.

    Examples:
        proxmox-mobile node list
        proxmox-mobile --output-format json node list
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        nodes = await client.get_nodes()

        if not nodes:
            console.print("[yellow]No nodes found[/yellow]")
            return

        table_columns = [
            {"key": "node", "header": "Node", "style": "cyan bold"},
            {"key": "status", "header": "Status", "format": "status"},
            {"key": "cpu", "header": "CPU", "format": "cpu"},
            {"key": "mem", "header": "Memory", "format": "bytes"},
            {"key": "maxmem", "header": "Total Memory", "format": "bytes"},
            {"key": "uptime", "header": "Uptime", "format": "uptime"},
        ]
        output_data(nodes, output_format, table_columns=table_columns, title="Nodes")

    run_with_client(ctx, _run)


@app.command("status", no_args_is_help=True)
def node_status(
    ctx: typer.Context,
    node: str = typer.Argument(..., help="Node name"),
) -> None:
    """Show detailed status of a node.

    Examples:
        proxmox-mobile node status pve
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        status = await client.get_node_status(node)

        if output_format != "table":
            output_data(status, output_format)
            return

        memory = status.memory
        summary = {
            "node": node,
            "pve_version": status.pveversion,
            "kernel": status.kversion,
            "cpu": format_cpu(status.cpu),
            "load_average": ", ".join(str(v) for v in status.loadavg or []) or None,
            "uptime": status.uptime,
        }
        if memory is not None:
            summary["memory"] = (
                f"{format_bytes(memory.used)} / {format_bytes(memory.total)} "
                f"({format_percentage(memory.used, memory.total)})"
            )
        if status.rootfs is not None:
            summary["root_fs"] = (
                f"{format_bytes(status.rootfs.used)} / {format_bytes(status.rootfs.total)}"
            )
        output_data(summary, output_format, title=f"Node Status: {node}")

    run_with_client(ctx, _run)


@app.command("rrd", no_args_is_help=True)
def node_rrd(
    ctx: typer.Context,
    node: str = typer.Argument(..., help="Node name"),
    timeframe: Timeframe = typer.Option(Timeframe.HOUR, "--timeframe", "-t", help="Time window"),
) -> None:
    """Show resource usage history of a node.

    Examples:
        proxmox-mobile node rrd pve --timeframe day
    """
    output_format = get_output_format(ctx)

    async def _run(client: ProxmoxClient) -> None:
        points = await client.get_node_rrd_data(node, timeframe)
        table_columns = [
            {"key": "time", "header": "Time", "format": "timestamp"},
            {"key": "cpu", "header": "CPU", "format": "cpu"},
            {"key": "memused", "header": "Memory", "format": "bytes"},
            {"key": "netin", "header": "Net In"},
            {"key": "netout", "header": "Net Out"},
        ]
        output_data(points, output_format, table_columns=table_columns, title=f"{node} ({timeframe.value})")

    run_with_client(ctx, _run)
