"""Kubernetes utility functions."""
import logging
import os
from typing import Callable, Generic, Optional, TypeVar

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

logger = logging.getLogger(__name__)

T = TypeVar("T")


def load_cluster_config(kubeconfig_path: Optional[str] = None) -> None:
    """Load cluster credentials for the kubernetes client.

    In-cluster service account credentials are preferred; a kubeconfig file is
    used when running outside of a Pod or when a path is given explicitly.
    """
    if not kubeconfig_path:
        try:
            config.load_incluster_config()
            logger.debug("Loaded in-cluster kubernetes config")
            return
        except ConfigException:
            logger.debug("Not running in a cluster, falling back to kubeconfig")

    config.load_kube_config(config_file=os.path.expanduser(kubeconfig_path) if kubeconfig_path else None)


class ApiLister(Generic[T]):
    """Live ``get(namespace, name)`` backed by a ``read_namespaced_*`` API call."""

    def __init__(self, read: Callable[..., T], request_timeout: float = 10.0):
        self._read = read
        self.request_timeout = request_timeout

    def get(self, namespace: str, name: str) -> T:
        return self._read(name=name, namespace=namespace, _request_timeout=self.request_timeout)


def service_lister(request_timeout: float = 10.0) -> ApiLister[client.V1Service]:
    """Lister reading Services through the CoreV1 API. Config must already be loaded."""
    return ApiLister(client.CoreV1Api().read_namespaced_service, request_timeout)


def pod_lister(request_timeout: float = 10.0) -> ApiLister[client.V1Pod]:
    return ApiLister(client.CoreV1Api().read_namespaced_pod, request_timeout)


def get_controller_of(obj) -> Optional[client.V1OwnerReference]:
    """Owner reference marked as the managing controller, if any."""
    for ref in obj.metadata.owner_references or []:
        if ref.controller:
            return ref
    return None


def is_controlled_by(obj, owner) -> bool:
    """Whether ``owner`` is the controller of ``obj``, compared by UID.

    Names are not enough: a recreated owner keeps its name but gets a new UID.
    """
    ref = get_controller_of(obj)
    return ref is not None and ref.uid == owner.metadata.uid


def _container_status(pod: client.V1Pod, container_name: str) -> Optional[client.V1ContainerStatus]:
    if pod.status is None:
        return None
    for status in pod.status.container_statuses or []:
        if status.name == container_name:
            return status
    return None


def is_container_ready(pod: client.V1Pod, container_name: str) -> bool:
    status = _container_status(pod, container_name)
    return status is not None and bool(status.ready)


def is_container_running(pod: client.V1Pod, container_name: str) -> bool:
    status = _container_status(pod, container_name)
    return status is not None and status.state is not None and status.state.running is not None
