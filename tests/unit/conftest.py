"""Shared builders for cluster objects used across unit tests."""
from typing import Dict, List, Optional

import pytest
from kubernetes.client import (
    V1Container,
    V1ContainerState,
    V1ContainerStateRunning,
    V1ContainerStateWaiting,
    V1ContainerStatus,
    V1LabelSelector,
    V1ObjectMeta,
    V1OwnerReference,
    V1Pod,
    V1PodSpec,
    V1PodStatus,
    V1PodTemplateSpec,
    V1Service,
    V1StatefulSet,
    V1StatefulSetSpec,
    V1StatefulSetStatus,
)
from kubernetes.client.rest import ApiException

from scylla_status.models import ScyllaDBDatacenter
from scylla_status.utils import naming

NAMESPACE = "scylla"
SCYLLA_IMAGE = "docker.io/scylladb/scylla:6.2.0"


class FakeLister:
    """Namespaced objects answering `get` like a live read, 404 ApiException included."""

    def __init__(self, kind: str, objects: Optional[List] = None):
        self.kind = kind
        self.objects = {}
        for obj in objects or []:
            self.add(obj)

    def add(self, obj) -> None:
        self.objects[(obj.metadata.namespace, obj.metadata.name)] = obj

    def get(self, namespace: str, name: str):
        try:
            return self.objects[(namespace, name)]
        except KeyError:
            raise ApiException(status=404, reason=f'{self.kind} "{namespace}/{name}" not found') from None


@pytest.fixture
def make_lister():
    return FakeLister


@pytest.fixture
def make_sdc():
    def _make(racks: Optional[List[Dict]] = None, generation: int = 1, **spec) -> ScyllaDBDatacenter:
        if racks is None:
            racks = [{"name": "a", "nodes": 3}, {"name": "b", "nodes": 3}]
        return ScyllaDBDatacenter.from_api(
            {
                "apiVersion": "scylla.scylladb.com/v1alpha1",
                "kind": "ScyllaDBDatacenter",
                "metadata": {
                    "name": "basic",
                    "namespace": NAMESPACE,
                    "uid": "sdc-uid",
                    "generation": generation,
                    "resourceVersion": "100",
                },
                "spec": {
                    "clusterName": "basic",
                    "datacenterName": "dc1",
                    "scyllaDB": {"image": SCYLLA_IMAGE},
                    "racks": racks,
                    **spec,
                },
            }
        )

    return _make


@pytest.fixture
def make_sts():
    def _make(
        name: str,
        replicas: int = 3,
        ready: int = 3,
        available: int = 3,
        updated: int = 3,
        current: int = 3,
        generation: int = 2,
        observed_generation: int = 2,
        uid: str = "sts-uid",
    ) -> V1StatefulSet:
        return V1StatefulSet(
            metadata=V1ObjectMeta(name=name, namespace=NAMESPACE, uid=uid, generation=generation),
            spec=V1StatefulSetSpec(
                replicas=replicas,
                selector=V1LabelSelector(match_labels={"app": "scylla"}),
                service_name=name,
                template=V1PodTemplateSpec(),
            ),
            status=V1StatefulSetStatus(
                replicas=replicas,
                ready_replicas=ready,
                available_replicas=available,
                updated_replicas=updated,
                current_replicas=current,
                observed_generation=observed_generation,
            ),
        )

    return _make


def _container_status(name: str, ready: bool, running: bool) -> V1ContainerStatus:
    if running:
        state = V1ContainerState(running=V1ContainerStateRunning())
    else:
        state = V1ContainerState(waiting=V1ContainerStateWaiting(reason="PodInitializing"))
    return V1ContainerStatus(name=name, image="img", image_id="", ready=ready, restart_count=0, state=state)


@pytest.fixture
def make_pod():
    def _make(
        name: str,
        owner_uid: Optional[str] = "sts-uid",
        image: str = SCYLLA_IMAGE,
        prewarmed: bool = True,
    ) -> V1Pod:
        owner_references = None
        if owner_uid is not None:
            owner_references = [
                V1OwnerReference(
                    api_version="apps/v1",
                    kind="StatefulSet",
                    name=name.rsplit("-", 1)[0],
                    uid=owner_uid,
                    controller=True,
                )
            ]
        return V1Pod(
            metadata=V1ObjectMeta(name=name, namespace=NAMESPACE, owner_references=owner_references),
            spec=V1PodSpec(
                containers=[
                    V1Container(name=naming.SCYLLA_CONTAINER_NAME, image=image),
                    V1Container(name=naming.SCYLLADB_IGNITION_CONTAINER_NAME, image="operator"),
                ]
            ),
            status=V1PodStatus(
                container_statuses=[
                    _container_status(naming.SCYLLA_CONTAINER_NAME, ready=False, running=True),
                    _container_status(naming.SCYLLADB_IGNITION_CONTAINER_NAME, ready=prewarmed, running=True),
                    _container_status(naming.DELAYED_VOLUME_MOUNT_CONTAINER_NAME, ready=False, running=prewarmed),
                ]
            ),
        )

    return _make


@pytest.fixture
def make_service():
    def _make(name: str, labels: Optional[Dict[str, str]] = None) -> V1Service:
        return V1Service(metadata=V1ObjectMeta(name=name, namespace=NAMESPACE, labels=labels))

    return _make
