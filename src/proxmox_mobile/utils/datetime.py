"""Date and time formatting utilities.

The Proxmox VE API reports times as Unix epoch seconds and durations as
plain second counts.
"""

from datetime import datetime, timezone
from typing import Any, Optional


def parse_epoch(value: Any) -> Optional[datetime]:
    """Parse a Unix timestamp (seconds) into an aware UTC datetime.

    Examples:
        >>> parse_epoch(1705315200)
        datetime.datetime(2024, 1, 15, 10, 40, tzinfo=datetime.timezone.utc)

        >>> parse_epoch(None) is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (ValueError, TypeError, OSError, OverflowError):
        return None


def format_timestamp(value: Any) -> str:
    """Format an epoch timestamp as 'YYYY-MM-DD HH:MM:SS UTC'."""
    dt = parse_epoch(value)
    if dt is None:
        return "N/A"
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_uptime(seconds: Optional[float]) -> str:
    """Format uptime in seconds to human-readable format.

    Examples:
        >>> format_uptime(918)
        '15m 18s'

        >>> format_uptime(3665)
        '1h 1m'

        >>> format_uptime(90061)
        '1d 1h 1m'

        >>> format_uptime(None)
        'N/A'
    """
    if seconds is None:
        return "N/A"

    try:
        seconds = int(seconds)
    except (ValueError, TypeError):
        return "N/A"

    if seconds < 0:
        return "N/A"

    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0 or days > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours > 0 or days > 0:
        parts.append(f"{minutes}m")

    # Only show seconds if less than 1 hour
    if days == 0 and hours == 0:
        parts.append(f"{secs}s")

    return " ".join(parts)
