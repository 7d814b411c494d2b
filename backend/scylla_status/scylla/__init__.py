"""ScyllaDB REST API client."""
from scylla_status.scylla.client import ScyllaAPIError, ScyllaClient
from scylla_status.scylla.models import NodeState, NodeStatus, NodeStatusInfo

__all__ = ["ScyllaAPIError", "ScyllaClient", "NodeState", "NodeStatus", "NodeStatusInfo"]
