"""ScyllaDB node membership model."""
from enum import Enum

from pydantic import BaseModel


class NodeStatus(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


class NodeState(str, Enum):
    NORMAL = "NORMAL"
    JOINING = "JOINING"
    LEAVING = "LEAVING"
    MOVING = "MOVING"


class NodeStatusInfo(BaseModel):
    """One peer as seen in the local node's view of the cluster."""

    addr: str
    host_id: str
    status: NodeStatus
    state: NodeState

    def is_un(self) -> bool:
        """Whether the node is Up and Normal, i.e. fully joined and not transitioning."""
        return self.status == NodeStatus.UP and self.state == NodeState.NORMAL
