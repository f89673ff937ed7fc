"""Pydantic models for the Proxmox VE API.

This module contains the connection records (target, credentials, session),
the resource entities returned by the API, and the request bodies sent to it.
Resource entities are immutable transit records: most fields are optional
because the server omits them for stopped guests, templates and offline nodes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

DEFAULT_PORT = 8006
DEFAULT_REALM = "pam"
DEFAULT_TIMEOUT = 30.0


class GuestType(str, Enum):
    """Guest flavour, matching the API path segment."""

    QEMU = "qemu"
    LXC = "lxc"


class GuestAction(str, Enum):
    """Power actions accepted by the status/{action} endpoint."""

    START = "start"
    STOP = "stop"
    SHUTDOWN = "shutdown"
    RESET = "reset"
    RESUME = "resume"
    SUSPEND = "suspend"


class Timeframe(str, Enum):
    """RRD time windows."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def _split_list(value: Any) -> Any:
    """Split the API's comma separated list encoding."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


# Connection records


class ConnectionTarget(BaseModel):
    """One management endpoint.

    Attributes:
        host: Hostname or IP address
        port: API port
        use_https: Use https instead of http
        verify_tls: Verify the server certificate and hostname. Setting this
            to False accepts ANY certificate and ANY hostname (insecure).
        timeout: Connect/read/write timeout in seconds
    """

    host: str = Field(..., description="Hostname or IP address")
    port: int = Field(DEFAULT_PORT, ge=1, le=65535, description="API port")
    use_https: bool = Field(True, description="Use https")
    verify_tls: bool = Field(True, description="Verify server certificate and hostname")
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0, description="Timeout in seconds")

    class Config:
        """Pydantic configuration."""
        frozen = True

    @field_validator("host")
    @classmethod
    def strip_host(cls, v: str) -> str:
        """Drop surrounding whitespace; emptiness is checked at login time."""
        return v.strip()


class Credentials(BaseModel):
    """Login credentials."""

    username: str = Field(..., description="User name without realm")
    password: Optional[str] = Field(None, repr=False, description="Password")
    realm: str = Field(DEFAULT_REALM, description="Authentication realm")

    class Config:
        """Pydantic configuration."""
        frozen = True


class Session(BaseModel):
    """Bearer material obtained from a successful login.

    Expiry is enforced by the server only.
    """

    auth_ticket: str = Field(..., repr=False, description="PVEAuthCookie ticket")
    anti_forgery_token: Optional[str] = Field(
        None, repr=False, description="CSRFPreventionToken"
    )
    username: str = Field(..., description="User id echoed by the server (user@realm)")
    issued_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the session was obtained",
    )

    class Config:
        """Pydantic configuration."""
        frozen = True


class LoginData(BaseModel):
    """Payload of the access/ticket response."""

    ticket: str = Field(..., description="Authentication ticket")
    csrf_token: Optional[str] = Field(None, alias="CSRFPreventionToken")
    username: str = Field(..., description="Authenticated user id")

    class Config:
        """Pydantic configuration."""
        extra = "allow"
        populate_by_name = True


# Resource entities


class ApiModel(BaseModel):
    """Base for resource entities returned by the API."""

    class Config:
        """Pydantic configuration."""
        frozen = True
        extra = "allow"


class VersionInfo(ApiModel):
    """API version information."""

    version: str = Field(..., description="Product version")
    release: Optional[str] = Field(None, description="Release")
    repoid: Optional[str] = Field(None, description="Repository id")


class Node(ApiModel):
    """Cluster node as listed by /nodes."""

    node: str = Field(..., description="Node name")
    status: Optional[str] = Field(None, description="online, offline or unknown")
    cpu: Optional[float] = Field(None, description="CPU utilisation (0-1)")
    level: Optional[str] = Field(None, description="Support level")
    maxcpu: Optional[int] = Field(None, description="Number of CPUs")
    mem: Optional[int] = Field(None, description="Used memory in bytes")
    maxmem: Optional[int] = Field(None, description="Total memory in bytes")
    disk: Optional[int] = Field(None, description="Used root disk in bytes")
    maxdisk: Optional[int] = Field(None, description="Root disk size in bytes")
    ssl_fingerprint: Optional[str] = Field(None, description="Certificate fingerprint")
    uptime: Optional[int] = Field(None, description="Uptime in seconds")


class RootFS(ApiModel):
    """Root filesystem usage."""

    avail: Optional[int] = None
    total: Optional[int] = None
    used: Optional[int] = None
    free: Optional[int] = None


class Swap(ApiModel):
    """Swap usage."""

    free: Optional[int] = None
    total: Optional[int] = None
    used: Optional[int] = None


class MemoryInfo(ApiModel):
    """Memory usage."""

    free: Optional[int] = None
    total: Optional[int] = None
    used: Optional[int] = None


class NodeStatus(ApiModel):
    """Detailed node status."""

    node: Optional[str] = Field(None, description="Node name")
    status: Optional[str] = Field(None, description="Node status")
    cpu: Optional[float] = Field(None, description="CPU utilisation (0-1)")
    maxcpu: Optional[int] = Field(None, description="Number of CPUs")
    mem: Optional[int] = Field(None, description="Used memory in bytes")
    maxmem: Optional[int] = Field(None, description="Total memory in bytes")
    memory: Optional[MemoryInfo] = Field(None, description="Memory usage")
    uptime: Optional[int] = Field(None, description="Uptime in seconds")
    loadavg: Optional[List[float]] = Field(None, description="1/5/15 minute load")
    kversion: Optional[str] = Field(None, description="Kernel version")
    pveversion: Optional[str] = Field(None, description="Product version")
    rootfs: Optional[RootFS] = Field(None, description="Root filesystem usage")
    swap: Optional[Swap] = Field(None, description="Swap usage")
    idle: Optional[float] = Field(None, description="Idle time")


class VirtualMachine(ApiModel):
    """QEMU virtual machine."""

    vmid: int = Field(..., description="Guest id")
    name: Optional[str] = Field(None, description="Guest name")
    status: str = Field(..., description="running, stopped, ...")
    cpu: Optional[float] = Field(None, description="CPU utilisation (0-1)")
    maxcpu: Optional[int] = Field(None, description="Assigned CPUs")
    cpus: Optional[int] = Field(None, description="Assigned CPUs")
    mem: Optional[int] = Field(None, description="Used memory in bytes")
    maxmem: Optional[int] = Field(None, description="Memory limit in bytes")
    disk: Optional[int] = Field(None, description="Used disk in bytes")
    maxdisk: Optional[int] = Field(None, description="Disk size in bytes")
    diskread: Optional[int] = Field(None, description="Bytes read")
    diskwrite: Optional[int] = Field(None, description="Bytes written")
    netin: Optional[int] = Field(None, description="Bytes received")
    netout: Optional[int] = Field(None, description="Bytes sent")
    uptime: Optional[int] = Field(None, description="Uptime in seconds")
    template: bool = Field(False, description="Guest is a template")
    qmpstatus: Optional[str] = Field(None, description="QMP status")
    running_machine: Optional[str] = Field(None, description="Running machine type")
    running_qemu: Optional[str] = Field(None, description="Running QEMU version")
    tags: Optional[str] = Field(None, description="Semicolon separated tags")


class Container(ApiModel):
    """LXC container."""

    vmid: int = Field(..., description="Guest id")
    name: Optional[str] = Field(None, description="Container hostname")
    status: str = Field(..., description="running, stopped, ...")
    cpu: Optional[float] = Field(None, description="CPU utilisation (0-1)")
    maxcpu: Optional[int] = Field(None, description="Assigned CPUs")
    cpus: Optional[int] = Field(None, description="Assigned CPUs")
    mem: Optional[int] = Field(None, description="Used memory in bytes")
    maxmem: Optional[int] = Field(None, description="Memory limit in bytes")
    disk: Optional[int] = Field(None, description="Used disk in bytes")
    maxdisk: Optional[int] = Field(None, description="Disk size in bytes")
    diskread: Optional[int] = Field(None, description="Bytes read")
    diskwrite: Optional[int] = Field(None, description="Bytes written")
    netin: Optional[int] = Field(None, description="Bytes received")
    netout: Optional[int] = Field(None, description="Bytes sent")
    uptime: Optional[int] = Field(None, description="Uptime in seconds")
    template: bool = Field(False, description="Guest is a template")
    tags: Optional[str] = Field(None, description="Semicolon separated tags")


class Storage(ApiModel):
    """Storage as seen from one node."""

    storage: str = Field(..., description="Storage id")
    type: Optional[str] = Field(None, description="Storage type (dir, lvmthin, ...)")
    content: List[str] = Field(default_factory=list, description="Allowed content types")
    nodes: Optional[List[str]] = Field(None, description="Nodes with access")
    shared: bool = Field(False, description="Shared between nodes")
    active: bool = Field(False, description="Storage is active")
    enabled: Optional[bool] = Field(None, description="Storage is enabled")
    avail: Optional[int] = Field(None, description="Available bytes")
    used: Optional[int] = Field(None, description="Used bytes")
    total: Optional[int] = Field(None, description="Total bytes")

    @field_validator("content", "nodes", mode="before")
    @classmethod
    def split_lists(cls, v: Any) -> Any:
        return _split_list(v)


class StorageContent(ApiModel):
    """Volume stored on a storage (backup archive, disk image, ISO, ...)."""

    volid: str = Field(..., description="Volume id (storage:path)")
    content: Optional[str] = Field(None, description="Content type")
    format: Optional[str] = Field(None, description="Volume format")
    size: Optional[int] = Field(None, description="Size in bytes")
    used: Optional[int] = Field(None, description="Used bytes")
    ctime: Optional[int] = Field(None, description="Creation time (epoch)")
    vmid: Optional[int] = Field(None, description="Owning guest")
    notes: Optional[str] = Field(None, description="Notes")
    protected: Optional[bool] = Field(None, description="Protected from removal")


# Storage content listing is where backups live
Backup = StorageContent


class NetworkInterface(ApiModel):
    """Host network interface."""

    iface: str = Field(..., description="Interface name")
    type: Optional[str] = Field(None, description="bridge, eth, bond, ...")
    method: Optional[str] = Field(None, description="IPv4 method")
    address: Optional[str] = Field(None, description="IPv4 address")
    netmask: Optional[str] = Field(None, description="IPv4 netmask")
    gateway: Optional[str] = Field(None, description="IPv4 gateway")
    cidr: Optional[str] = Field(None, description="IPv4 CIDR")
    active: bool = Field(False, description="Interface is up")
    autostart: bool = Field(False, description="Brought up at boot")
    exists: bool = Field(False, description="Interface exists on the host")
    families: List[str] = Field(default_factory=list, description="Address families")
    bridge_ports: Optional[str] = Field(None, description="Bridge ports")
    comments: Optional[str] = Field(None, description="Comments")


class User(ApiModel):
    """Access control user."""

    userid: Optional[str] = Field(None, description="User id (user@realm)")
    enable: bool = Field(True, description="Account enabled")
    expire: Optional[int] = Field(None, description="Expiry (epoch, 0 = never)")
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    comment: Optional[str] = None
    groups: Optional[List[str]] = Field(None, description="Group memberships")

    @field_validator("groups", mode="before")
    @classmethod
    def split_groups(cls, v: Any) -> Any:
        return _split_list(v)


class Task(ApiModel):
    """Node task."""

    upid: str = Field(..., description="Unique process id")
    node: Optional[str] = Field(None, description="Node running the task")
    pid: Optional[int] = None
    pstart: Optional[int] = None
    type: Optional[str] = Field(None, description="Task type (qmstart, vzdump, ...)")
    id: Optional[str] = Field(None, description="Task subject (usually a vmid)")
    user: Optional[str] = Field(None, description="Initiating user")
    status: Optional[str] = Field(None, description="running, stopped or exit status")
    exitstatus: Optional[str] = Field(None, description="Exit status when stopped")
    starttime: Optional[int] = Field(None, description="Start time (epoch)")
    endtime: Optional[int] = Field(None, description="End time (epoch)")
    saved: Optional[bool] = None


class ClusterNode(ApiModel):
    """Entry of /cluster/status (type 'cluster' or 'node')."""

    type: str = Field(..., description="cluster or node")
    name: str = Field(..., description="Cluster or node name")
    id: Optional[str] = None
    nodeid: Optional[int] = None
    ip: Optional[str] = None
    local: Optional[bool] = None
    online: Optional[bool] = None
    level: Optional[str] = None
    quorate: Optional[bool] = None
    nodes: Optional[int] = None
    version: Optional[int] = None
    votes: Optional[int] = None


class ClusterResource(ApiModel):
    """Entry of /cluster/resources."""

    id: str = Field(..., description="Resource id (qemu/100, node/pve, ...)")
    type: str = Field(..., description="node, qemu, lxc, storage, pool, sdn")
    node: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    vmid: Optional[int] = None
    storage: Optional[str] = None
    cpu: Optional[float] = None
    maxcpu: Optional[float] = None
    mem: Optional[int] = None
    maxmem: Optional[int] = None
    disk: Optional[int] = None
    maxdisk: Optional[int] = None
    uptime: Optional[int] = None
    template: Optional[bool] = None


class Snapshot(ApiModel):
    """Guest snapshot."""

    name: str = Field(..., description="Snapshot name ('current' for the live state)")
    description: Optional[str] = None
    snaptime: Optional[int] = Field(None, description="Creation time (epoch)")
    parent: Optional[str] = None
    vmstate: Optional[bool] = Field(None, description="Includes RAM state")


class VncTicket(ApiModel):
    """Console ticket issued by vncproxy."""

    port: int = Field(..., description="Port for the vncwebsocket call")
    ticket: str = Field(..., repr=False, description="VNC ticket")
    user: Optional[str] = None
    upid: Optional[str] = None
    cert: Optional[str] = Field(None, repr=False)


# Request bodies


class RequestBody(BaseModel):
    """Base for JSON request bodies.

    Optional fields left at None are omitted from the payload.
    """

    class Config:
        """Pydantic configuration."""
        frozen = True

    def to_payload(self) -> Dict[str, Any]:
        """Serialise to a JSON-ready dict."""
        return self.model_dump(mode="json", exclude_none=True)


class LoginRequest(RequestBody):
    """Body of POST access/ticket."""

    username: str
    password: str = Field(..., repr=False)
    realm: str = DEFAULT_REALM


class VMCreateRequest(RequestBody):
    """Body of POST nodes/{node}/qemu."""

    vmid: int = Field(..., gt=0)
    name: str
    cores: int = 1
    memory: int = 512
    ostype: str = "l26"
    scsi0: str = "local-lvm:32"
    net0: str = "virtio,bridge=vmbr0"


class ContainerCreateRequest(RequestBody):
    """Body of POST nodes/{node}/lxc."""

    vmid: int = Field(..., gt=0)
    hostname: str
    ostemplate: str
    cores: int = 1
    memory: int = 512
    rootfs: str = "local-lvm:8"
    net0: str = "name=eth0,bridge=vmbr0,ip=dhcp"
    password: Optional[str] = Field(None, repr=False)


class UserCreateRequest(RequestBody):
    """Body of POST access/users."""

    userid: str
    password: Optional[str] = Field(None, repr=False)
    comment: Optional[str] = None
    email: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    expire: Optional[int] = None
    enable: Optional[bool] = None
    groups: Optional[List[str]] = None

    @field_serializer("groups")
    def join_groups(self, v: Optional[List[str]]) -> Optional[str]:
        return ",".join(v) if v is not None else None


class UserUpdateRequest(RequestBody):
    """Body of PUT access/users/{userid}."""

    comment: Optional[str] = None
    email: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    expire: Optional[int] = None
    enable: Optional[bool] = None
    groups: Optional[List[str]] = None

    @field_serializer("groups")
    def join_groups(self, v: Optional[List[str]]) -> Optional[str]:
        return ",".join(v) if v is not None else None


class BackupCreateRequest(RequestBody):
    """Body of POST nodes/{node}/qemu/{vmid}/backup."""

    storage: str
    compress: str = "lz4"
    mode: str = "snapshot"
    notes: Optional[str] = None


class SnapshotCreateRequest(RequestBody):
    """Body of POST nodes/{node}/qemu/{vmid}/snapshot."""

    snapname: str
    description: Optional[str] = None
    vmstate: Optional[bool] = None
