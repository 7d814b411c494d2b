"""ScyllaDBDatacenter custom resource model."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _KubeModel(BaseModel):
    """Base for custom resource fragments.

    Fields use the camelCase names of the API; unknown fields are kept so an object
    read from the API server round-trips unchanged on update.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class ObjectMeta(_KubeModel):
    name: str
    namespace: str = "default"
    uid: Optional[str] = None
    generation: int = 0
    resource_version: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)


class ScyllaDB(_KubeModel):
    image: str


class RackTemplate(_KubeModel):
    nodes: Optional[int] = None


class RackSpec(_KubeModel):
    name: str
    nodes: Optional[int] = None


class ScyllaDBDatacenterSpec(_KubeModel):
    cluster_name: str
    datacenter_name: Optional[str] = None
    scylla_db: ScyllaDB = Field(alias="scyllaDB")
    rack_template: Optional[RackTemplate] = None
    racks: List[RackSpec] = Field(default_factory=list)


class Condition(_KubeModel):
    """Observed fact about a datacenter, in the shape of metav1.Condition."""

    type: str
    status: str  # "True", "False" or "Unknown"
    reason: str
    message: str = ""
    observed_generation: Optional[int] = None
    last_transition_time: Optional[datetime] = None


class RackStatus(_KubeModel):
    name: str = ""
    nodes: int = 0
    current_nodes: int = 0
    updated_nodes: int = 0
    ready_nodes: int = 0
    available_nodes: int = 0
    current_version: str = ""
    updated_version: str = ""
    stale: bool = True


class ScyllaDBDatacenterStatus(_KubeModel):
    observed_generation: Optional[int] = None
    nodes: int = 0
    ready_nodes: int = 0
    available_nodes: int = 0
    racks: List[RackStatus] = Field(default_factory=list)
    conditions: List[Condition] = Field(default_factory=list)


class ScyllaDBDatacenter(_KubeModel):
    api_version: str = "scylla.scylladb.com/v1alpha1"
    kind: str = "ScyllaDBDatacenter"
    metadata: ObjectMeta
    spec: ScyllaDBDatacenterSpec
    status: ScyllaDBDatacenterStatus = Field(default_factory=ScyllaDBDatacenterStatus)

    @classmethod
    def from_api(cls, obj: Dict[str, Any]) -> "ScyllaDBDatacenter":
        """Build from the dict returned by CustomObjectsApi."""
        return cls.model_validate(obj)

    def to_api(self) -> Dict[str, Any]:
        """Serialize to the JSON body expected by CustomObjectsApi."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def ref(self) -> str:
        return f"{self.metadata.namespace}/{self.metadata.name}"
