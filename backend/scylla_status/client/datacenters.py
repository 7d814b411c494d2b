"""ScyllaDBDatacenter API client."""
import logging
from typing import Optional

from kubernetes import client

from scylla_status.models import ScyllaDBDatacenter

logger = logging.getLogger(__name__)

GROUP = "scylla.scylladb.com"
VERSION = "v1alpha1"
PLURAL = "scylladbdatacenters"


class DatacenterClient:
    """Writes the status subresource of ScyllaDBDatacenters."""

    def __init__(self, api: Optional[client.CustomObjectsApi] = None, request_timeout: float = 10.0):
        self.api = api or client.CustomObjectsApi()
        self.request_timeout = request_timeout

    def update_status(self, sdc: ScyllaDBDatacenter) -> ScyllaDBDatacenter:
        """Replace the status subresource.

        The body carries the resource version it was read at, so a concurrent
        change makes the API server reject the write with a 409 ApiException.
        """
        obj = self.api.replace_namespaced_custom_object_status(
            group=GROUP,
            version=VERSION,
            namespace=sdc.metadata.namespace,
            plural=PLURAL,
            name=sdc.metadata.name,
            body=sdc.to_api(),
            _request_timeout=self.request_timeout,
        )
        return ScyllaDBDatacenter.from_api(obj)
