"""Dependencies for the probe endpoints."""
from functools import lru_cache
import logging

from scylla_status.config import settings
from scylla_status.probeserver.prober import Prober
from scylla_status.scylla import ScyllaClient
from scylla_status.utils.kubernetes import load_cluster_config, service_lister

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_prober() -> Prober:
    """Build the node's Prober once, from settings."""
    load_cluster_config(settings.KUBECONFIG_PATH)
    logger.info(f"Probing node behind service {settings.NAMESPACE}/{settings.SERVICE_NAME}")

    return Prober(
        namespace=settings.NAMESPACE,
        service_name=settings.SERVICE_NAME,
        service_lister=service_lister(settings.KUBE_REQUEST_TIMEOUT),
        await_paths=settings.AWAIT_PATHS,
        client_factory=lambda: ScyllaClient.for_localhost(settings),
        timeout=settings.PROBE_TIMEOUT,
    )
