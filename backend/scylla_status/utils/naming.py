"""Object names, labels and image helpers shared with the operator."""
from typing import List, Optional

from kubernetes.client import V1Container, V1Service

from scylla_status.models.datacenter import RackSpec, ScyllaDBDatacenter
from scylla_status.utils.errors import ImageVersionError, RackNodeCountError

# Labels
NODE_MAINTENANCE_LABEL = "scylla/node-maintenance"

# Container names
SCYLLA_CONTAINER_NAME = "scylla"
SCYLLADB_IGNITION_CONTAINER_NAME = "scylladb-ignition"
DELAYED_VOLUME_MOUNT_CONTAINER_NAME = "delayed-volume-mount"


def gossip_datacenter_name(sdc: ScyllaDBDatacenter) -> str:
    """Datacenter name as seen by ScyllaDB gossip."""
    return sdc.spec.datacenter_name or sdc.metadata.name


def stateful_set_name_for_rack(rack: RackSpec, sdc: ScyllaDBDatacenter) -> str:
    return f"{sdc.metadata.name}-{gossip_datacenter_name(sdc)}-{rack.name}"


def member_service_name(rack: RackSpec, sdc: ScyllaDBDatacenter, ordinal: int) -> str:
    return f"{stateful_set_name_for_rack(rack, sdc)}-{ordinal}"


def pod_name_from_service(svc: V1Service) -> str:
    # Member services share the name of the Pod they front.
    return svc.metadata.name


def first_member_name(sts_name: str) -> str:
    return f"{sts_name}-0"


def image_to_version(image: str) -> str:
    """Extract the version tag from an image reference.

    ``docker.io/scylladb/scylla:6.2.0`` -> ``6.2.0``. A digest suffix is ignored and a
    registry port is not mistaken for a tag.
    """
    name = image.split("@", 1)[0]
    last_slash = name.rfind("/")
    last_colon = name.rfind(":")
    if last_colon <= last_slash:
        raise ImageVersionError(f"invalid image {image!r}: missing version tag")

    tag = name[last_colon + 1:]
    if not tag:
        raise ImageVersionError(f"invalid image {image!r}: empty version tag")
    return tag


def scylla_version(containers: Optional[List[V1Container]]) -> str:
    """Version of the ScyllaDB container image among a Pod's containers."""
    for container in containers or []:
        if container.name == SCYLLA_CONTAINER_NAME:
            return image_to_version(container.image or "")
    raise ImageVersionError(f"container {SCYLLA_CONTAINER_NAME!r} not found")


def get_rack_node_count(sdc: ScyllaDBDatacenter, rack_name: str) -> int:
    """Node count of a rack, falling back to the datacenter's rack template."""
    for rack in sdc.spec.racks:
        if rack.name != rack_name:
            continue
        if rack.nodes is not None:
            return rack.nodes
        if sdc.spec.rack_template is not None and sdc.spec.rack_template.nodes is not None:
            return sdc.spec.rack_template.nodes
        raise RackNodeCountError(f"rack {rack_name!r} of {sdc.ref} has no node count defined")

    raise RackNodeCountError(f"rack {rack_name!r} not found in {sdc.ref}")
