"""Pytest configuration and fixtures for proxmox-mobile tests.

This module provides common fixtures for testing the client and CLI,
including connection targets, sessions, configuration and sample payloads.
"""

from pathlib import Path

import pytest

from proxmox_mobile.client.base import ProxmoxClient
from proxmox_mobile.client.models import ConnectionTarget, Credentials, Session
from proxmox_mobile.config import Config, ConfigManager, ProfileConfig

BASE_URL = "https://pve.example.com:8006/api2/json"
TICKET_URL = f"{BASE_URL}/access/ticket"

MOCK_TICKET = "PVE:root@pam:65A1B2C3::c2lnbmF0dXJl"
MOCK_CSRF = "65A1B2C3:dG9rZW4"


@pytest.fixture
def target() -> ConnectionTarget:
    """Connection target used by most tests.

    Returns:
        ConnectionTarget for https://pve.example.com:8006
    """
    return ConnectionTarget(host="pve.example.com", port=8006)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="root", password="secret", realm="pam")


@pytest.fixture
def session() -> Session:
    """An already established session."""
    return Session(
        auth_ticket=MOCK_TICKET,
        anti_forgery_token=MOCK_CSRF,
        username="root@pam",
    )


@pytest.fixture
def client(target: ConnectionTarget, session: Session) -> ProxmoxClient:
    """Client bound to an established session.

    Args:
        target: Connection target fixture
        session: Session fixture

    Returns:
        ProxmoxClient that can call authenticated operations
    """
    return ProxmoxClient(target, session)


@pytest.fixture
def anonymous_client(target: ConnectionTarget) -> ProxmoxClient:
    """Client without a session."""
    return ProxmoxClient(target)


@pytest.fixture
def mock_config_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point the default configuration directory at a temporary path.

    Args:
        tmp_path: Pytest temporary directory fixture
        monkeypatch: Pytest monkeypatch fixture

    Returns:
        Path to temporary config directory (not yet created)
    """
    config_dir = tmp_path / ".proxmox-mobile"
    monkeypatch.setenv("PROXMOX_MOBILE_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture
def mock_profile_config() -> ProfileConfig:
    return ProfileConfig(host="pve.example.com", username="root", realm="pam")


@pytest.fixture
def mock_config(mock_profile_config: ProfileConfig) -> Config:
    return Config(
        active_profile="default",
        profiles={"default": mock_profile_config},
    )


@pytest.fixture
def mock_config_manager(mock_config_dir: Path, mock_config: Config) -> ConfigManager:
    """ConfigManager with the default profile already saved.

    Args:
        mock_config_dir: Mock config directory fixture
        mock_config: Mock config fixture

    Returns:
        ConfigManager instance using temporary directory
    """
    manager = ConfigManager()
    manager.save(mock_config)
    return manager


# Sample API payloads
MOCK_LOGIN_DATA = {
    "ticket": MOCK_TICKET,
    "CSRFPreventionToken": MOCK_CSRF,
    "username": "root@pam",
    "cap": {"vms": {"VM.PowerMgmt": 1}},
}

MOCK_NODE_LIST = [
    {
        "node": "pve",
        "status": "online",
        "cpu": 0.0421,
        "maxcpu": 8,
        "mem": 4294967296,
        "maxmem": 17179869184,
        "uptime": 93784,
        "level": "",
    },
    {
        "node": "pve2",
        "status": "offline",
    },
]

MOCK_NODE_STATUS = {
    "cpu": 0.05,
    "uptime": 93784,
    "loadavg": ["0.12", "0.20", "0.25"],
    "kversion": "Linux 6.8.12-4-pve",
    "pveversion": "pve-manager/8.3.0/c1689ccb1065a83b",
    "memory": {"total": 17179869184, "used": 4294967296, "free": 12884901888},
    "rootfs": {"total": 101203873792, "used": 10120387379, "avail": 91083486413, "free": 91083486413},
    "swap": {"total": 8589934592, "used": 0, "free": 8589934592},
}

MOCK_VM_LIST = [
    {
        "vmid": 100,
        "name": "web",
        "status": "running",
        "cpu": 0.013,
        "cpus": 2,
        "mem": 1073741824,
        "maxmem": 2147483648,
        "uptime": 3600,
    },
]

MOCK_CONTAINER_LIST = [
    {
        "vmid": 200,
        "name": "dns",
        "status": "stopped",
        "maxmem": 536870912,
        "template": 0,
    },
]

MOCK_STORAGE_LIST = [
    {
        "storage": "local",
        "type": "dir",
        "content": "iso,vztmpl,backup",
        "active": 1,
        "shared": 0,
        "enabled": 1,
        "used": 10120387379,
        "total": 101203873792,
        "avail": 91083486413,
    },
]

MOCK_BACKUP_LIST = [
    {
        "volid": "local:backup/vzdump-qemu-100-2024_01_15-10_40_00.vma.zst",
        "content": "backup",
        "format": "vma.zst",
        "size": 734003200,
        "ctime": 1705315200,
        "vmid": 100,
        "notes": "nightly",
    },
]

MOCK_TASK_LIST = [
    {
        "upid": "UPID:pve:000A1B2C:0B2C3D4E:65A1B2C3:qmstart:100:root@pam:",
        "node": "pve",
        "type": "qmstart",
        "id": "100",
        "user": "root@pam",
        "status": "OK",
        "starttime": 1705315200,
        "endtime": 1705315203,
    },
]

MOCK_UPID = "UPID:pve:000A1B2C:0B2C3D4E:65A1B2C3:qmstop:100:root@pam:"


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration between tests."""
    import logging

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(logging.WARNING)

    yield

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
