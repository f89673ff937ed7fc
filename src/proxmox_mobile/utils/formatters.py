"""Output formatting utilities for proxmox-mobile.

This module provides consistent formatting functions for displaying API
results in table, JSON, YAML and plain text formats across all commands.
"""

import json
from typing import Any

import yaml
from pydantic import BaseModel
from rich.console import Console
from rich.json import JSON
from rich.table import Table

from proxmox_mobile.utils.datetime import format_timestamp, format_uptime

console = Console()


def to_plain(data: Any) -> Any:
    """Convert models (or lists of models) into plain dicts and lists."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", exclude_none=True)
    if isinstance(data, (list, tuple)):
        return [to_plain(item) for item in data]
    if isinstance(data, dict):
        return {key: to_plain(value) for key, value in data.items()}
    return data


def format_bytes(bytes_value: int | None) -> str:
    """Format bytes into human-readable format.

    Args:
        bytes_value: Size in bytes

    Returns:
        Human-readable string (e.g., "1.50 GiB")
    """
    if bytes_value is None:
        return "N/A"

    if bytes_value == 0:
        return "0 B"

    units = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]
    unit_index = 0
    size = float(bytes_value)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.2f} {units[unit_index]}"


def format_percentage(numerator: float | None, denominator: float | None) -> str:
    """Format a percentage from numerator and denominator (e.g. "75.5%")."""
    if numerator is None or denominator is None or denominator == 0:
        return "N/A"

    percentage = (numerator / denominator) * 100
    return f"{percentage:.1f}%"


def format_cpu(fraction: float | None) -> str:
    """Format a 0-1 CPU utilisation as a percentage."""
    if fraction is None:
        return "N/A"
    return f"{fraction * 100:.1f}%"


def get_status_color(status: str) -> str:
    """Get Rich color for a status string.

    Args:
        status: Status string (e.g., "running", "stopped", "online")

    Returns:
        Rich color name
    """
    status_lower = status.lower()

    if status_lower in ["running", "online", "active", "ok", "available"]:
        return "green"

    if status_lower in ["paused", "suspended", "prelaunch", "unknown"]:
        return "yellow"

    if status_lower in ["stopped", "offline", "error", "failed", "unavailable"]:
        return "red"

    return "blue"


def _format_cell(value: Any, fmt: str | None) -> str:
    if fmt == "bytes":
        return format_bytes(value)
    if fmt == "cpu":
        return format_cpu(value)
    if fmt == "uptime":
        return format_uptime(value)
    if fmt == "timestamp":
        return format_timestamp(value)
    if fmt == "status" and value is not None:
        color = get_status_color(str(value))
        return f"[{color}]{value}[/{color}]"
    if fmt == "boolean":
        return "[green]Yes[/green]" if value else "[red]No[/red]"
    if value is None:
        return "[dim]N/A[/dim]"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def format_table_output(
    data: list[dict[str, Any]],
    columns: list[dict[str, str]],
    title: str | None = None,
) -> None:
    """Format and display data as a Rich table.

    Args:
        data: List of dictionaries to display
        columns: Column definitions with 'key', 'header', and optional
            'style' and 'format' (bytes, cpu, uptime, timestamp, status, boolean)
        title: Optional table title
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")

    for col in columns:
        table.add_column(
            col["header"],
            style=col.get("style", ""),
            no_wrap=col.get("no_wrap", False),
        )

    for item in data:
        table.add_row(*[_format_cell(item.get(col["key"]), col.get("format")) for col in columns])

    console.print(table)


def format_key_value_output(
    data: dict[str, Any],
    title: str | None = None,
) -> None:
    """Format and display data as a key-value table."""
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Property", style="cyan bold")
    table.add_column("Value", style="green")

    for key, value in data.items():
        display_key = key.replace("_", " ").title()

        if isinstance(value, bool):
            display_value = "[green]Yes[/green]" if value else "[red]No[/red]"
        elif key == "uptime":
            display_value = format_uptime(value)
        elif isinstance(value, (dict, list)):
            display_value = json.dumps(value, indent=2)
        elif value is None:
            display_value = "[dim]N/A[/dim]"
        else:
            display_value = str(value)

        table.add_row(display_key, display_value)

    console.print(table)


def format_json_output(data: Any) -> None:
    """Format and display data as JSON."""
    console.print(JSON(json.dumps(data, indent=2, default=str)))


def format_yaml_output(data: Any) -> None:
    """Format and display data as YAML."""
    console.print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="")


def format_plain_output(
    data: list[dict[str, Any]],
    columns: list[str],
    delimiter: str = "\t",
) -> None:
    """Format and display data as plain text (TSV by default)."""
    print(delimiter.join(columns))

    for item in data:
        values = []
        for col in columns:
            value = item.get(col, "")
            if isinstance(value, (dict, list)):
                value = json.dumps(value)
            elif value is None:
                value = ""
            values.append(str(value))

        print(delimiter.join(values))


def output_data(
    data: Any,
    output_format: str = "table",
    table_columns: list[dict[str, str]] | None = None,
    title: str | None = None,
) -> None:
    """Universal output function that handles all formats.

    Args:
        data: Model, list of models, dict or list of dicts
        output_format: Output format (table, json, yaml, plain)
        table_columns: Column definitions for table and plain formats
        title: Optional title for table output
    """
    data = to_plain(data)

    if output_format == "json":
        format_json_output(data)
    elif output_format == "yaml":
        format_yaml_output(data)
    elif output_format == "plain":
        if isinstance(data, list) and table_columns:
            format_plain_output(data, [col["key"] for col in table_columns])
        elif isinstance(data, dict):
            for key, value in data.items():
                print(f"{key}={value}")
        else:
            print(str(data))
    else:
        if isinstance(data, list) and table_columns:
            format_table_output(data, table_columns, title)
        elif isinstance(data, dict):
            format_key_value_output(data, title)
        else:
            console.print(data)
