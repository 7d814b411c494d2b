"""Observed status of a ScyllaDBDatacenter, recomputed from its workload objects."""
import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from kubernetes.client import V1Service, V1StatefulSet

from scylla_status.client.datacenters import DatacenterClient
from scylla_status.models import (
    Condition,
    RackSpec,
    RackStatus,
    ScyllaDBDatacenter,
    ScyllaDBDatacenterStatus,
    set_status_condition,
)
from scylla_status.models.conditions import utcnow
from scylla_status.utils import naming
from scylla_status.utils.errors import ForeignPodError
from scylla_status.utils.kubernetes import is_container_ready, is_container_running, is_controlled_by, pod_lister

logger = logging.getLogger(__name__)

PREWARMED_CONDITION = "Prewarmed"

AS_EXPECTED_REASON = "AsExpected"
NOT_ALL_NODES_PREWARMED_REASON = "NotAllNodesPrewarmed"
NODE_LOOKUP_FAILED_REASON = "NodeLookupFailed"


def update_aggregated_status_fields(status: ScyllaDBDatacenterStatus) -> None:
    """Recompute datacenter-wide counts as the sum over racks."""
    status.nodes = sum(rack.nodes for rack in status.racks)
    status.ready_nodes = sum(rack.ready_nodes for rack in status.racks)
    status.available_nodes = sum(rack.available_nodes for rack in status.racks)


class StatusController:
    """Computes and persists ScyllaDBDatacenter status.

    Calls for one datacenter must be serialized by the caller. Status calculation
    never raises; only the final write can fail.
    """

    def __init__(
        self,
        datacenter_client: DatacenterClient,
        pod_lister,
        now: Callable[[], datetime] = utcnow,
    ):
        self.datacenter_client = datacenter_client
        self.pod_lister = pod_lister
        self.now = now

    def get_scylla_version(self, sts: V1StatefulSet) -> str:
        """ScyllaDB version running in the first member of the StatefulSet."""
        first_member = self.pod_lister.get(sts.metadata.namespace, naming.first_member_name(sts.metadata.name))

        if not is_controlled_by(first_member, sts):
            raise ForeignPodError(
                f"pod {first_member.metadata.namespace}/{first_member.metadata.name} is not controlled by "
                f"statefulset {sts.metadata.namespace}/{sts.metadata.name} (uid {sts.metadata.uid})"
            )

        return naming.scylla_version(first_member.spec.containers if first_member.spec else None)

    def calculate_rack_status(
        self,
        sdc: ScyllaDBDatacenter,
        rack: RackSpec,
        sts: Optional[V1StatefulSet],
    ) -> RackStatus:
        """Status of one rack. ``sts`` is None when the StatefulSet wasn't observed yet."""
        status = RackStatus(name=rack.name, stale=True)

        if sts is None:
            return status

        sts_status = sts.status
        status.nodes = (sts.spec.replicas if sts.spec else None) or 0
        if sts_status is not None:
            status.ready_nodes = sts_status.ready_replicas or 0
            status.available_nodes = sts_status.available_replicas or 0
            status.updated_nodes = sts_status.updated_replicas or 0
            status.current_nodes = sts_status.current_replicas or 0
            status.stale = (sts_status.observed_generation or 0) < (sts.metadata.generation or 0)

        image = sdc.spec.scylla_db.image
        try:
            status.updated_version = naming.image_to_version(image)
        except ValueError as e:
            logger.error(f"Can't get version of image {image!r}: {e}")

        if status.nodes == 0:
            # Nothing runs, so the current version trivially follows the desired one.
            status.current_version = status.updated_version
        else:
            try:
                status.current_version = self.get_scylla_version(sts)
            except Exception as e:
                logger.error(f"Can't get scylla version of rack {rack.name!r} in {sdc.ref}: {e}")

        return status

    def calculate_status(
        self,
        sdc: ScyllaDBDatacenter,
        stateful_set_map: Dict[str, V1StatefulSet],
    ) -> ScyllaDBDatacenterStatus:
        """Status of the datacenter from a point-in-time view of its StatefulSets.

        This must always succeed. Objects that are missing or can't be inspected are
        reflected in the values themselves, e.g. an empty version or a stale rack.
        """
        status = sdc.status.model_copy(deep=True)
        status.observed_generation = sdc.metadata.generation

        status.racks = [
            self.calculate_rack_status(sdc, rack, stateful_set_map.get(naming.stateful_set_name_for_rack(rack, sdc)))
            for rack in sdc.spec.racks
        ]

        update_aggregated_status_fields(status)

        return status

    def _prewarmed_condition(
        self,
        sdc: ScyllaDBDatacenter,
        services: Dict[str, V1Service],
    ) -> Condition:
        generation = sdc.metadata.generation
        not_ready = []

        for rack in sdc.spec.racks:
            try:
                node_count = naming.get_rack_node_count(sdc, rack.name)
            except ValueError as e:
                logger.error(f"Can't get rack node count, datacenter={sdc.ref} rack={rack.name}: {e}")
                return self._lookup_failed(generation, f"Can't get node count of rack {rack.name!r}.")

            for ordinal in range(node_count):
                svc_name = naming.member_service_name(rack, sdc, ordinal)
                svc = services.get(svc_name)
                if svc is None:
                    logger.error(f"Service does not exist, datacenter={sdc.ref} rack={rack.name} service={svc_name}")
                    return self._lookup_failed(generation, f"Service {svc_name!r} does not exist.")

                pod_name = naming.pod_name_from_service(svc)
                try:
                    pod = self.pod_lister.get(sdc.metadata.namespace, pod_name)
                except Exception as e:
                    logger.error(f"Can't get Pod, datacenter={sdc.ref} rack={rack.name} pod={pod_name}: {e}")
                    return self._lookup_failed(generation, f"Can't get Pod {pod_name!r}.")

                if not (
                    is_container_ready(pod, naming.SCYLLADB_IGNITION_CONTAINER_NAME)
                    and is_container_running(pod, naming.DELAYED_VOLUME_MOUNT_CONTAINER_NAME)
                ):
                    not_ready.append(pod_name)

        if not_ready:
            return Condition(
                type=PREWARMED_CONDITION,
                status="False",
                reason=NOT_ALL_NODES_PREWARMED_REASON,
                message=f"Not all nodes are prewarmed yet: {', '.join(not_ready)}.",
                observed_generation=generation,
            )

        return Condition(
            type=PREWARMED_CONDITION,
            status="True",
            reason=AS_EXPECTED_REASON,
            message="",
            observed_generation=generation,
        )

    @staticmethod
    def _lookup_failed(generation: int, message: str) -> Condition:
        return Condition(
            type=PREWARMED_CONDITION,
            status="False",
            reason=NODE_LOOKUP_FAILED_REASON,
            message=message,
            observed_generation=generation,
        )

    def set_prewarmed_status_condition(
        self,
        sdc: ScyllaDBDatacenter,
        status: ScyllaDBDatacenterStatus,
        services: Dict[str, V1Service],
    ) -> None:
        """Set the Prewarmed condition: every node's bootstrap containers are up."""
        set_status_condition(status.conditions, self._prewarmed_condition(sdc, services), now=self.now)

    def update_status(
        self,
        current_sdc: ScyllaDBDatacenter,
        status: ScyllaDBDatacenterStatus,
    ) -> Optional[ScyllaDBDatacenter]:
        """Persist ``status`` unless it equals the stored one. Returns the updated object."""
        if current_sdc.status == status:
            return None

        sdc = current_sdc.model_copy(deep=True)
        sdc.status = status.model_copy(deep=True)

        # Live updates to the status always have to show in the aggregated fields.
        update_aggregated_status_fields(sdc.status)

        logger.debug(f"Updating status, datacenter={sdc.ref}")
        updated = self.datacenter_client.update_status(sdc)
        logger.debug(f"Status updated, datacenter={sdc.ref}")

        return updated

    def sync_status(
        self,
        sdc: ScyllaDBDatacenter,
        stateful_set_map: Dict[str, V1StatefulSet],
        services: Dict[str, V1Service],
    ) -> Optional[ScyllaDBDatacenter]:
        """One status pass: calculate, derive conditions, write on change."""
        status = self.calculate_status(sdc, stateful_set_map)
        self.set_prewarmed_status_condition(sdc, status, services)
        return self.update_status(sdc, status)


def new_status_controller(request_timeout: float = 10.0) -> StatusController:
    """StatusController reading Pods and writing status through the API server.

    Cluster config must already be loaded, see ``load_cluster_config``.
    """
    return StatusController(
        datacenter_client=DatacenterClient(request_timeout=request_timeout),
        pod_lister=pod_lister(request_timeout),
    )
