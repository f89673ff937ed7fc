"""Entry point for running proxmox-mobile as a module.

This allows the CLI to be run with:
    python -m proxmox_mobile
"""

from proxmox_mobile.cli import main

if __name__ == "__main__":
    main()
