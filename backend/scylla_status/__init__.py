"""ScyllaDB node probes and datacenter status reconciliation."""

__version__ = "1.0.0"
