"""Readiness and liveness decisions for a single ScyllaDB node."""
import asyncio
import logging
import os
import time
from typing import Awaitable, Callable, List, Sequence, TypeVar

from fastapi import status

from scylla_status.scylla import ScyllaClient
from scylla_status.utils.errors import new_aggregate
from scylla_status.utils.naming import NODE_MAINTENANCE_LABEL

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 60.0


class Deadline:
    """Shared time budget for every outbound call of one probe invocation."""

    def __init__(self, timeout: float):
        self._expires_at = time.monotonic() + timeout

    def remaining(self) -> float:
        return max(self._expires_at - time.monotonic(), 0.0)

    async def run(self, aw: Awaitable[T]) -> T:
        return await asyncio.wait_for(aw, timeout=self.remaining())


class Prober:
    """Answers /readyz and /healthz for the node fronted by one member Service.

    Both probes share the same precondition chain: required paths, then the
    maintenance label, then the ScyllaDB API of the local node. The first step
    that fails decides the outcome.
    """

    def __init__(
        self,
        namespace: str,
        service_name: str,
        service_lister,
        await_paths: Sequence[str],
        client_factory: Callable[[], ScyllaClient],
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.namespace = namespace
        self.service_name = service_name
        self.service_lister = service_lister
        self.await_paths: List[str] = list(await_paths)
        self.client_factory = client_factory
        self.timeout = timeout

    @property
    def service_ref(self) -> str:
        return f"{self.namespace}/{self.service_name}"

    def is_node_under_maintenance(self) -> bool:
        svc = self.service_lister.get(self.namespace, self.service_name)
        return NODE_MAINTENANCE_LABEL in (svc.metadata.labels or {})

    def await_paths_exist(self) -> bool:
        """Whether every required path exists.

        Missing paths are expected while provisioning is in progress. Any other
        stat failure is collected and raised together as an AggregateError.
        """
        errs = []
        ready = True
        for path in self.await_paths:
            try:
                os.stat(path)
            except FileNotFoundError:
                ready = False
            except OSError as e:
                errs.append(OSError(e.errno, f"can't stat path {path!r}: {e.strerror}", path))

        err = new_aggregate(errs)
        if err is not None:
            raise err

        return ready

    async def readyz(self) -> int:
        deadline = Deadline(self.timeout)

        try:
            paths_exist = await deadline.run(asyncio.to_thread(self.await_paths_exist))
        except Exception as e:
            logger.error(f"readyz probe: can't check required paths' existence: {e!r}")
            return status.HTTP_500_INTERNAL_SERVER_ERROR

        if not paths_exist:
            logger.debug(f"readyz probe: node is awaiting required paths' existence, await_paths={self.await_paths}")
            return status.HTTP_503_SERVICE_UNAVAILABLE

        try:
            under_maintenance = await deadline.run(asyncio.to_thread(self.is_node_under_maintenance))
        except Exception as e:
            logger.error(f"readyz probe: can't look up service maintenance label, service={self.service_ref}: {e!r}")
            return status.HTTP_500_INTERNAL_SERVER_ERROR

        if under_maintenance:
            # A node under maintenance must not receive traffic.
            logger.debug(f"readyz probe: node is under maintenance, service={self.service_ref}")
            return status.HTTP_503_SERVICE_UNAVAILABLE

        try:
            scylla = self.client_factory()
        except Exception as e:
            logger.error(f"readyz probe: can't get scylla client, service={self.service_ref}: {e!r}")
            return status.HTTP_500_INTERNAL_SERVER_ERROR

        async with scylla:
            try:
                node_statuses = await deadline.run(scylla.status())
            except Exception as e:
                logger.warning(f"readyz probe: can't get scylla node status, service={self.service_ref}: {e!r}")
                return status.HTTP_500_INTERNAL_SERVER_ERROR

            try:
                host_id = await deadline.run(scylla.get_local_host_id())
            except Exception as e:
                logger.warning(f"readyz probe: can't get host id, service={self.service_ref}: {e!r}")
                return status.HTTP_500_INTERNAL_SERVER_ERROR

            for node in node_statuses:
                logger.debug(f"readyz probe: node state, node={node.addr} status={node.status.value} state={node.state.value}")

                if node.host_id != host_id or not node.is_un():
                    continue

                try:
                    transport_enabled = await deadline.run(scylla.is_native_transport_enabled())
                except Exception as e:
                    logger.warning(
                        f"readyz probe: can't get scylla native transport, service={self.service_ref} node={node.addr}: {e!r}"
                    )
                    return status.HTTP_503_SERVICE_UNAVAILABLE

                logger.debug(f"readyz probe: node state, node={node.addr} native_transport_enabled={transport_enabled}")
                if transport_enabled:
                    return status.HTTP_200_OK

        logger.debug(f"readyz probe: node is not ready, service={self.service_ref}")
        return status.HTTP_503_SERVICE_UNAVAILABLE

    async def healthz(self) -> int:
        deadline = Deadline(self.timeout)

        try:
            paths_exist = await deadline.run(asyncio.to_thread(self.await_paths_exist))
        except Exception as e:
            logger.error(f"healthz probe: can't check required paths' existence: {e!r}")
            return status.HTTP_500_INTERNAL_SERVER_ERROR

        if not paths_exist:
            # Restarting a node that is still being provisioned would not help it.
            logger.debug(f"healthz probe: node is awaiting required paths' existence, await_paths={self.await_paths}")
            return status.HTTP_200_OK

        try:
            under_maintenance = await deadline.run(asyncio.to_thread(self.is_node_under_maintenance))
        except Exception as e:
            logger.error(f"healthz probe: can't look up service maintenance label, service={self.service_ref}: {e!r}")
            return status.HTTP_500_INTERNAL_SERVER_ERROR

        if under_maintenance:
            logger.debug(f"healthz probe: node is under maintenance, service={self.service_ref}")
            return status.HTTP_200_OK

        try:
            scylla = self.client_factory()
        except Exception as e:
            logger.error(f"healthz probe: can't get scylla client, service={self.service_ref}: {e!r}")
            return status.HTTP_500_INTERNAL_SERVER_ERROR

        async with scylla:
            try:
                await deadline.run(scylla.ping())
            except Exception as e:
                logger.warning(f"healthz probe: can't connect to scylla api, service={self.service_ref}: {e!r}")
                return status.HTTP_503_SERVICE_UNAVAILABLE

        return status.HTTP_200_OK
