"""Custom resource models."""
from scylla_status.models.datacenter import (
    Condition,
    ObjectMeta,
    RackSpec,
    RackStatus,
    RackTemplate,
    ScyllaDB,
    ScyllaDBDatacenter,
    ScyllaDBDatacenterSpec,
    ScyllaDBDatacenterStatus,
)
from scylla_status.models.conditions import set_status_condition, find_status_condition

__all__ = [
    "Condition",
    "ObjectMeta",
    "RackSpec",
    "RackStatus",
    "RackTemplate",
    "ScyllaDB",
    "ScyllaDBDatacenter",
    "ScyllaDBDatacenterSpec",
    "ScyllaDBDatacenterStatus",
    "set_status_condition",
    "find_status_condition",
]
