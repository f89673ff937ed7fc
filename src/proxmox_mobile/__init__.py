"""Proxmox VE management client.

Session-authenticated async API client with a small command-line front end.
"""

__version__ = "1.0.0"
