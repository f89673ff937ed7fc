"""Typed Proxmox VE API client.

This module provides the async client for the Proxmox VE REST API. It binds a
Transport to one connection target and at most one session, validates inputs
locally, and decodes every response into typed models.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar, Union
from urllib.parse import quote

from proxmox_mobile.client.auth import SessionAuthenticator
from proxmox_mobile.client.envelope import classify_status, decode_envelope
from proxmox_mobile.client.exceptions import InvalidInputError, UnauthenticatedError
from proxmox_mobile.client.models import (
    BackupCreateRequest,
    ClusterNode,
    ClusterResource,
    ConnectionTarget,
    Container,
    ContainerCreateRequest,
    Credentials,
    GuestAction,
    GuestType,
    NetworkInterface,
    Node,
    NodeStatus,
    Session,
    Snapshot,
    SnapshotCreateRequest,
    Storage,
    StorageContent,
    Task,
    Timeframe,
    User,
    UserCreateRequest,
    UserUpdateRequest,
    VersionInfo,
    VirtualMachine,
    VMCreateRequest,
    VncTicket,
)
from proxmox_mobile.client.result import Result
from proxmox_mobile.client.transport import Transport

logger = logging.getLogger(__name__)

E = TypeVar("E")

CLUSTER_RESOURCE_TYPES = ("vm", "storage", "node", "sdn")


def _segment(value: Any, name: str) -> str:
    """Validate and percent-encode one path segment."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{name} cannot be empty")
    return quote(value, safe="")


def _vmid(value: Any) -> str:
    """Validate a numeric guest id."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(f"vmid must be a positive integer, got {value!r}")
    return str(value)


def _choice(enum_cls: Type[E], value: Any, name: str) -> E:
    """Coerce a value into an enumeration member."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInputError(f"Invalid {name} {value!r}; expected one of: {allowed}") from None


def _path(*segments: str) -> str:
    return "/".join(segments)


class ProxmoxClient:
    """Async client for the Proxmox VE API.

    The client owns its transport. Logging in or out swaps in a new
    immutable Transport; requests already in flight keep the one they
    started with, so several operations may safely run concurrently.

    Attributes:
        target: Connection target this client is bound to
    """

    def __init__(
        self,
        target: ConnectionTarget,
        session: Optional[Session] = None,
        authenticator: Optional[SessionAuthenticator] = None,
    ):
        """Initialize client.

        Args:
            target: Connection target
            session: Existing session, or None to start logged out
            authenticator: Authenticator used by login()
        """
        self._target = target
        self._authenticator = authenticator or SessionAuthenticator()
        self._transport = Transport(target, session)

    @property
    def target(self) -> ConnectionTarget:
        return self._target

    @property
    def session(self) -> Optional[Session]:
        return self._transport.session

    @property
    def is_authenticated(self) -> bool:
        return self._transport.session is not None

    # Session lifecycle

    async def login(self, credentials: Credentials) -> Result[Session]:
        """Authenticate and bind the new session to this client.

        The previous session is discarded whether or not the login succeeds.

        Args:
            credentials: Username, password and realm

        Returns:
            Ok(Session) or Err(ProxmoxError)
        """
        result = await self._authenticator.authenticate(self._target, credentials)
        self._transport = Transport(self._target, result.unwrap() if result.is_ok else None)
        return result

    def logout(self) -> None:
        """Drop the current session."""
        logger.debug(f"Logging out from {self._target.host}")
        self._transport = Transport(self._target)

    def with_session(self, session: Optional[Session]) -> "ProxmoxClient":
        """Return a new client for the same target bound to another session."""
        return ProxmoxClient(self._target, session, authenticator=self._authenticator)

    # Request plumbing

    async def request(
        self,
        method: str,
        endpoint: str,
        payload_type: Any = Any,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        """Send a request and decode the response envelope.

        Args:
            method: HTTP method
            endpoint: API endpoint below api2/json/
            payload_type: Declared type of the envelope's 'data'
            params: Query parameters
            json: JSON request body
            authenticated: Whether the endpoint needs a session

        Returns:
            Decoded payload

        Raises:
            UnauthenticatedError: If a session is needed and none is bound
            NetworkError: For transport failures
            ProxmoxError: Status classification or decode failures
        """
        transport = self._transport
        if authenticated and transport.session is None:
            raise UnauthenticatedError(
                f"Not logged in: {method} {endpoint} requires a session",
                endpoint=endpoint,
            )

        response = await transport.request(method, endpoint, params=params, json=json)
        classify_status(response, endpoint)
        return decode_envelope(response, payload_type, endpoint)

    async def get(
        self,
        endpoint: str,
        payload_type: Any = Any,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return await self.request("GET", endpoint, payload_type, params=params)

    async def post(
        self,
        endpoint: str,
        payload_type: Any = Any,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return await self.request("POST", endpoint, payload_type, json=json)

    async def put(
        self,
        endpoint: str,
        payload_type: Any = Any,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return await self.request("PUT", endpoint, payload_type, json=json)

    async def delete(self, endpoint: str, payload_type: Any = Any) -> Any:
        return await self.request("DELETE", endpoint, payload_type)

    # Version

    async def get_version(self) -> VersionInfo:
        """Get the API version. Does not require a session."""
        return await self.request("GET", "version", VersionInfo, authenticated=False)

    # Nodes

    async def get_nodes(self) -> List[Node]:
        """List cluster nodes."""
        return await self.get("nodes", List[Node])

    async def get_node_status(self, node: str) -> NodeStatus:
        """Get detailed status of a node.

        Args:
            node: Node name

        Returns:
            Node status with memory, rootfs, swap and load information
        """
        return await self.get(_path("nodes", _segment(node, "node"), "status"), NodeStatus)

    async def get_node_rrd_data(
        self,
        node: str,
        timeframe: Union[Timeframe, str] = Timeframe.HOUR,
    ) -> List[Dict[str, Any]]:
        """Get resource usage history of a node.

        Args:
            node: Node name
            timeframe: hour, day, week, month or year

        Returns:
            List of data points
        """
        endpoint = _path("nodes", _segment(node, "node"), "rrddata")
        tf = _choice(Timeframe, timeframe, "timeframe")
        return await self.get(endpoint, List[Dict[str, Any]], params={"timeframe": tf.value})

    # Guests (shared by VMs and containers)

    def _guest_path(self, guest_type: GuestType, node: str, vmid: Optional[int] = None) -> str:
        segments = ["nodes", _segment(node, "node"), guest_type.value]
        if vmid is not None:
            segments.append(_vmid(vmid))
        return _path(*segments)

    async def perform_action(
        self,
        node: str,
        vmid: int,
        action: Union[GuestAction, str],
        guest_type: Union[GuestType, str] = GuestType.QEMU,
    ) -> Optional[str]:
        """Run a power action on a VM or container.

        Args:
            node: Node name
            vmid: Guest id
            action: start, stop, shutdown, reset, resume or suspend
            guest_type: qemu (default) or lxc

        Returns:
            UPID of the task started by the server

        Raises:
            InvalidInputError: If the action or guest type is not recognised
        """
        kind = _choice(GuestType, guest_type, "guest type")
        verb = _choice(GuestAction, action, "action")
        if kind is GuestType.LXC and verb is GuestAction.RESET:
            raise InvalidInputError("Containers do not support the reset action")

        endpoint = _path(self._guest_path(kind, node, vmid), "status", verb.value)
        logger.debug(f"Performing {verb.value} on {kind.value}/{vmid} at {node}")
        return await self.post(endpoint, Optional[str])

    async def _guest_rrd_data(
        self,
        guest_type: GuestType,
        node: str,
        vmid: int,
        timeframe: Union[Timeframe, str],
    ) -> List[Dict[str, Any]]:
        endpoint = _path(self._guest_path(guest_type, node, vmid), "rrddata")
        tf = _choice(Timeframe, timeframe, "timeframe")
        return await self.get(endpoint, List[Dict[str, Any]], params={"timeframe": tf.value})

    # Virtual machines

    async def get_virtual_machines(self, node: str) -> List[VirtualMachine]:
        """List QEMU virtual machines on a node."""
        return await self.get(self._guest_path(GuestType.QEMU, node), List[VirtualMachine])

    async def get_vm_status(self, node: str, vmid: int) -> VirtualMachine:
        """Get current status of a virtual machine."""
        endpoint = _path(self._guest_path(GuestType.QEMU, node, vmid), "status", "current")
        return await self.get(endpoint, VirtualMachine)

    async def create_vm(self, node: str, request: VMCreateRequest) -> Optional[str]:
        """Create a virtual machine.

        Args:
            node: Node name
            request: VM configuration

        Returns:
            UPID of the creation task
        """
        return await self.post(
            self._guest_path(GuestType.QEMU, node), Optional[str], json=request.to_payload()
        )

    async def delete_vm(self, node: str, vmid: int) -> Optional[str]:
        """Destroy a virtual machine."""
        return await self.delete(self._guest_path(GuestType.QEMU, node, vmid), Optional[str])

    async def get_vm_rrd_data(
        self,
        node: str,
        vmid: int,
        timeframe: Union[Timeframe, str] = Timeframe.HOUR,
    ) -> List[Dict[str, Any]]:
        """Get resource usage history of a virtual machine."""
        return await self._guest_rrd_data(GuestType.QEMU, node, vmid, timeframe)

    # Containers

    async def get_containers(self, node: str) -> List[Container]:
        """List LXC containers on a node."""
        return await self.get(self._guest_path(GuestType.LXC, node), List[Container])

    async def get_container_status(self, node: str, vmid: int) -> Container:
        """Get current status of a container."""
        endpoint = _path(self._guest_path(GuestType.LXC, node, vmid), "status", "current")
        return await self.get(endpoint, Container)

    async def create_container(self, node: str, request: ContainerCreateRequest) -> Optional[str]:
        """Create a container from a template."""
        return await self.post(
            self._guest_path(GuestType.LXC, node), Optional[str], json=request.to_payload()
        )

    async def delete_container(self, node: str, vmid: int) -> Optional[str]:
        """Destroy a container."""
        return await self.delete(self._guest_path(GuestType.LXC, node, vmid), Optional[str])

    async def get_container_rrd_data(
        self,
        node: str,
        vmid: int,
        timeframe: Union[Timeframe, str] = Timeframe.HOUR,
    ) -> List[Dict[str, Any]]:
        """Get resource usage history of a container."""
        return await self._guest_rrd_data(GuestType.LXC, node, vmid, timeframe)

    # Storage

    def _storage_path(self, node: str, storage: Optional[str] = None) -> str:
        segments = ["nodes", _segment(node, "node"), "storage"]
        if storage is not None:
            segments.append(_segment(storage, "storage"))
        return _path(*segments)

    async def get_storages(self, node: str) -> List[Storage]:
        """List storages available on a node."""
        return await self.get(self._storage_path(node), List[Storage])

    async def get_storage_content(
        self,
        node: str,
        storage: str,
        content: Optional[str] = None,
    ) -> List[StorageContent]:
        """List volumes on a storage.

        Args:
            node: Node name
            storage: Storage id
            content: Only list this content type (e.g. 'backup', 'iso')

        Returns:
            Volumes on the storage
        """
        params = {"content": content} if content else None
        return await self.get(
            _path(self._storage_path(node, storage), "content"),
            List[StorageContent],
            params=params,
        )

    async def get_storage_rrd_data(
        self,
        node: str,
        storage: str,
        timeframe: Union[Timeframe, str] = Timeframe.HOUR,
    ) -> List[Dict[str, Any]]:
        """Get usage history of a storage."""
        tf = _choice(Timeframe, timeframe, "timeframe")
        return await self.get(
            _path(self._storage_path(node, storage), "rrddata"),
            List[Dict[str, Any]],
            params={"timeframe": tf.value},
        )

    async def browse_storage(self, node: str, storage: str, path: str = "/") -> List[Dict[str, Any]]:
        """List files below a path on a storage."""
        if not path:
            raise InvalidInputError("path cannot be empty")
        return await self.get(
            _path(self._storage_path(node, storage), "browse"),
            List[Dict[str, Any]],
            params={"path": path},
        )

    # Network

    async def get_network_interfaces(self, node: str) -> List[NetworkInterface]:
        """List network interfaces of a node."""
        return await self.get(_path("nodes", _segment(node, "node"), "network"), List[NetworkInterface])

    async def get_network_interface(self, node: str, iface: str) -> NetworkInterface:
        """Get one network interface of a node."""
        endpoint = _path("nodes", _segment(node, "node"), "network", _segment(iface, "iface"))
        return await self.get(endpoint, NetworkInterface)

    # Users

    async def get_users(self) -> List[User]:
        """List users."""
        return await self.get("access/users", List[User])

    async def get_user(self, userid: str) -> User:
        """Get one user.

        The server does not echo the id in this response, so it is filled in
        from the argument.
        """
        user = await self.get(_path("access/users", _segment(userid, "userid")), User)
        if user.userid is None:
            user = user.model_copy(update={"userid": userid})
        return user

    async def create_user(self, request: UserCreateRequest) -> None:
        """Create a user."""
        _segment(request.userid, "userid")
        await self.post("access/users", Optional[Any], json=request.to_payload())

    async def update_user(self, userid: str, request: UserUpdateRequest) -> None:
        """Update a user's properties."""
        endpoint = _path("access/users", _segment(userid, "userid"))
        await self.put(endpoint, Optional[Any], json=request.to_payload())

    async def delete_user(self, userid: str) -> None:
        """Delete a user."""
        await self.delete(_path("access/users", _segment(userid, "userid")), Optional[Any])

    # Tasks

    async def get_tasks(self, node: str, limit: int = 50, start: int = 0) -> List[Task]:
        """List recent tasks of a node.

        Args:
            node: Node name
            limit: Page size
            start: Offset of the first task

        Returns:
            Tasks, newest first
        """
        if limit <= 0:
            raise InvalidInputError(f"limit must be positive, got {limit}")
        if start < 0:
            raise InvalidInputError(f"start cannot be negative, got {start}")
        return await self.get(
            _path("nodes", _segment(node, "node"), "tasks"),
            List[Task],
            params={"limit": limit, "start": start},
        )

    async def get_task_status(self, node: str, upid: str) -> Task:
        """Get status of a task."""
        endpoint = _path("nodes", _segment(node, "node"), "tasks", _segment(upid, "upid"), "status")
        return await self.get(endpoint, Task)

    async def delete_task(self, node: str, upid: str) -> None:
        """Stop a running task."""
        endpoint = _path("nodes", _segment(node, "node"), "tasks", _segment(upid, "upid"))
        await self.delete(endpoint, Optional[Any])

    # Backups

    async def create_backup(self, node: str, vmid: int, request: BackupCreateRequest) -> Optional[str]:
        """Back up a virtual machine.

        Returns:
            UPID of the backup task
        """
        _segment(request.storage, "storage")
        endpoint = _path(self._guest_path(GuestType.QEMU, node, vmid), "backup")
        return await self.post(endpoint, Optional[str], json=request.to_payload())

    async def delete_backup(self, node: str, storage: str, volume: str) -> Optional[str]:
        """Delete a backup volume.

        Args:
            node: Node name
            storage: Storage id
            volume: Volume id (e.g. 'local:backup/vzdump-qemu-100.vma.zst')
        """
        endpoint = _path(self._storage_path(node, storage), "content", _segment(volume, "volume"))
        return await self.delete(endpoint, Optional[str])

    # Cluster

    async def get_cluster_status(self) -> List[ClusterNode]:
        """Get cluster membership and quorum information."""
        return await self.get("cluster/status", List[ClusterNode])

    async def get_cluster_resources(self, resource_type: Optional[str] = None) -> List[ClusterResource]:
        """List resources across the cluster.

        Args:
            resource_type: Only list 'vm', 'storage', 'node' or 'sdn'
        """
        params = None
        if resource_type is not None:
            if resource_type not in CLUSTER_RESOURCE_TYPES:
                raise InvalidInputError(
                    f"Invalid resource type {resource_type!r}; "
                    f"expected one of: {', '.join(CLUSTER_RESOURCE_TYPES)}"
                )
            params = {"type": resource_type}
        return await self.get("cluster/resources", List[ClusterResource], params=params)

    # System

    async def get_system_version(self, node: str) -> Dict[str, Any]:
        return await self.get(_path("nodes", _segment(node, "node"), "system", "version"), Dict[str, Any])

    async def get_system_dns(self, node: str) -> Dict[str, Any]:
        return await self.get(_path("nodes", _segment(node, "node"), "system", "dns"), Dict[str, Any])

    async def get_system_time(self, node: str) -> Dict[str, Any]:
        return await self.get(_path("nodes", _segment(node, "node"), "system", "time"), Dict[str, Any])

    # Firewall

    async def get_firewall_rules(self, node: str) -> List[Dict[str, Any]]:
        return await self.get(_path("nodes", _segment(node, "node"), "firewall", "rules"), List[Dict[str, Any]])

    async def get_firewall_aliases(self, node: str) -> List[Dict[str, Any]]:
        return await self.get(_path("nodes", _segment(node, "node"), "firewall", "aliases"), List[Dict[str, Any]])

    # High availability

    async def get_ha_status(self) -> List[Dict[str, Any]]:
        return await self.get("cluster/ha/status/current", List[Dict[str, Any]])

    async def get_ha_resources(self) -> List[Dict[str, Any]]:
        return await self.get("cluster/ha/resources", List[Dict[str, Any]])

    # Replication

    async def get_replication_jobs(self, node: str) -> List[Dict[str, Any]]:
        return await self.get(_path("nodes", _segment(node, "node"), "replication"), List[Dict[str, Any]])

    # Snapshots

    async def get_vm_snapshots(self, node: str, vmid: int) -> List[Snapshot]:
        """List snapshots of a virtual machine."""
        return await self.get(_path(self._guest_path(GuestType.QEMU, node, vmid), "snapshot"), List[Snapshot])

    async def create_vm_snapshot(self, node: str, vmid: int, request: SnapshotCreateRequest) -> Optional[str]:
        """Snapshot a virtual machine.

        Returns:
            UPID of the snapshot task
        """
        _segment(request.snapname, "snapname")
        endpoint = _path(self._guest_path(GuestType.QEMU, node, vmid), "snapshot")
        return await self.post(endpoint, Optional[str], json=request.to_payload())

    async def delete_vm_snapshot(self, node: str, vmid: int, snapname: str) -> Optional[str]:
        """Delete a snapshot of a virtual machine."""
        endpoint = _path(
            self._guest_path(GuestType.QEMU, node, vmid), "snapshot", _segment(snapname, "snapname")
        )
        return await self.delete(endpoint, Optional[str])

    # Console

    async def create_vnc_proxy(self, node: str, vmid: int) -> VncTicket:
        """Issue a VNC ticket and port for a virtual machine's console."""
        endpoint = _path(self._guest_path(GuestType.QEMU, node, vmid), "vncproxy")
        return await self.post(endpoint, VncTicket, json={"websocket": True})

    async def get_vnc_websocket(self, node: str, vmid: int, port: int, vncticket: str) -> Dict[str, Any]:
        """Validate a VNC ticket for the websocket endpoint.

        Args:
            node: Node name
            vmid: Guest id
            port: Port returned by create_vnc_proxy()
            vncticket: Ticket returned by create_vnc_proxy()
        """
        if not vncticket:
            raise InvalidInputError("vncticket cannot be empty")
        endpoint = _path(self._guest_path(GuestType.QEMU, node, vmid), "vncwebsocket")
        return await self.get(
            endpoint,
            Dict[str, Any],
            params={"port": port, "vncticket": vncticket},
        )
