"""Client for the ScyllaDB REST API of the local node."""
import asyncio
import time
from typing import Any, List, Optional

import httpx

from scylla_status.config import Settings
from scylla_status.scylla.models import NodeState, NodeStatus, NodeStatusInfo


class ScyllaAPIError(Exception):
    """ScyllaDB REST API answered with an error or an unexpected payload."""

    def __init__(self, path: str, message: str, status_code: Optional[int] = None):
        self.path = path
        self.status_code = status_code
        super().__init__(f"scylla api {path}: {message}")


class ScyllaClient:
    """Async client bound to a single ScyllaDB node.

    Requests are never routed to peers. Use as an async context manager so the
    underlying connection pool is closed on every exit path:

        async with ScyllaClient.for_localhost(settings) as scylla:
            host_id = await scylla.get_local_host_id()
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 10000,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.host = host
        self.port = port
        self._client = httpx.AsyncClient(
            base_url=f"http://{host}:{port}",
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def for_localhost(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ScyllaClient":
        return cls(
            host=settings.SCYLLA_API_HOST,
            port=settings.SCYLLA_API_PORT,
            timeout=settings.PROBE_TIMEOUT,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ScyllaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _get_json(self, path: str) -> Any:
        response = await self._client.get(path)
        if response.status_code != 200:
            raise ScyllaAPIError(path, f"unexpected status {response.status_code}: {response.text[:200]}", response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise ScyllaAPIError(path, f"invalid json: {e}", response.status_code) from e

    async def _get_list(self, path: str) -> list:
        data = await self._get_json(path)
        if not isinstance(data, list):
            raise ScyllaAPIError(path, f"expected a list, got {type(data).__name__}")
        return data

    async def ping(self) -> float:
        """Check the API answers. Returns the round trip time in seconds."""
        start = time.monotonic()
        await self._get_json("/storage_service/scylla_release_version")
        return time.monotonic() - start

    async def status(self) -> List[NodeStatusInfo]:
        """Status and state of every node known to the local node."""
        host_ids, live, down, joining, leaving, moving = await asyncio.gather(
            self._get_list("/storage_service/host_id"),
            self._get_list("/gossiper/endpoint/live/"),
            self._get_list("/gossiper/endpoint/down/"),
            self._get_list("/storage_service/nodes/joining"),
            self._get_list("/storage_service/nodes/leaving"),
            self._get_list("/storage_service/nodes/moving"),
        )
        live, down = set(live), set(down)
        joining, leaving, moving = set(joining), set(leaving), set(moving)

        statuses = []
        for entry in host_ids:
            try:
                addr, host_id = entry["key"], entry["value"]
            except (KeyError, TypeError) as e:
                raise ScyllaAPIError("/storage_service/host_id", f"malformed entry {entry!r}") from e

            # Endpoints missing from both gossiper lists are treated as down.
            status = NodeStatus.UP if addr in live and addr not in down else NodeStatus.DOWN

            if addr in joining:
                state = NodeState.JOINING
            elif addr in leaving:
                state = NodeState.LEAVING
            elif addr in moving:
                state = NodeState.MOVING
            else:
                state = NodeState.NORMAL

            statuses.append(NodeStatusInfo(addr=addr, host_id=host_id, status=status, state=state))

        return statuses

    async def get_local_host_id(self) -> str:
        """Host ID of the local node."""
        host_id = await self._get_json("/storage_service/hostid/local")
        if not isinstance(host_id, str) or not host_id:
            raise ScyllaAPIError("/storage_service/hostid/local", f"unexpected host id {host_id!r}")
        return host_id

    async def is_native_transport_enabled(self) -> bool:
        """Whether the CQL native transport is running on the local node."""
        enabled = await self._get_json("/storage_service/native_transport")
        if not isinstance(enabled, bool):
            raise ScyllaAPIError("/storage_service/native_transport", f"unexpected value {enabled!r}")
        return enabled
