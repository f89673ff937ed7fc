"""Command groups of the proxmox-mobile CLI."""
